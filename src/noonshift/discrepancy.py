"""
Noon discrepancy model.

Closed-form comparison of two rotating reference frames sharing a center:
the orbital (ecliptic) frame, where solar noon follows the orbital angle, and
the equatorial frame, tilted by the obliquity, where clock noon advances
uniformly. A clock-noon direction is taken to be the orbital direction rotated
about the tilt axis and flattened back onto the orbital plane; the angle
between the two directions is the discrepancy.

Model frame: the orbit lies in the x-y plane and the tilt axis is Y.
Scene frame (used by ``sun_position``): the orbit lies in the x-z plane.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Union

import numpy as np
import pandas as pd

from .config import config


@dataclass(frozen=True)
class Discrepancy:
    """
    Discrepancy between solar noon and clock noon for a single day.

    Attributes
    ----------
    angle_deg : float
        Unsigned angle between the two noon directions [deg], in [0, 180]
    minutes : float
        Same angle expressed as minutes of time, in [0, 720]
    """
    angle_deg: float
    minutes: float


@dataclass(frozen=True)
class DiscrepancySample:
    """One point of the per-year discrepancy series."""
    day: int
    orbital_angle: float    # radians
    minutes: float


def degrees_to_minutes(angle_deg):
    """Convert an angle [deg] to minutes of time (360 deg = 1440 min)."""
    return angle_deg / 360.0 * config.MINUTES_PER_REVOLUTION


def minutes_to_degrees(minutes):
    """Convert minutes of time to an angle [deg] (1440 min = 360 deg)."""
    return minutes / config.MINUTES_PER_REVOLUTION * 360.0


def orbital_angle(day: Union[int, float, np.ndarray], num_days: int):
    """
    Position in orbit of a given day.

    Parameters:
        day: Day index (any real value, periodic in num_days)
        num_days: Number of days in the model year (>= 1)

    Returns:
        Orbital angle t = (day / num_days) * 2*pi [rad]
    """
    _check_num_days(num_days)
    return (day / num_days) * 2 * np.pi


def tilt_matrix(obliquity_deg: float) -> np.ndarray:
    """Rotation about the model-frame Y axis by the obliquity."""
    eps = np.deg2rad(obliquity_deg)
    return np.array([
        [np.cos(eps),  0, np.sin(eps)],
        [0,            1, 0          ],
        [-np.sin(eps), 0, np.cos(eps)]
    ])


def project_to_reference_plane(point, obliquity_deg: float) -> np.ndarray:
    """
    Rotate a model-frame point by the obliquity and flatten it onto the
    orbital (x-y) plane.

    Parameters:
        point: 3-vector, or array of shape (n, 3)
        obliquity_deg: Obliquity [deg]

    Returns:
        New array of the same shape with the z component set to zero
    """
    point = np.asarray(point, dtype=float)
    projected = point @ tilt_matrix(obliquity_deg).T
    projected[..., 2] = 0.0
    return projected


def _angle_between(p1: np.ndarray, p2: np.ndarray) -> np.ndarray:
    # atan2 form stays accurate near 0 and pi, unlike arccos of the dot product
    cross = np.cross(p1, p2)
    return np.arctan2(np.linalg.norm(cross, axis=-1), np.sum(p1 * p2, axis=-1))


def _orbital_points(t) -> np.ndarray:
    t = np.asarray(t, dtype=float)
    return np.stack([np.cos(t), np.sin(t), np.zeros_like(t)], axis=-1)


def compute_discrepancy(obliquity_deg: float, day: Union[int, float],
                        num_days: int) -> Discrepancy:
    """
    Angular and time discrepancy between solar noon and clock noon.

    Parameters:
        obliquity_deg: Obliquity [deg]
        day: Day index; any integer is accepted, the angle is periodic
        num_days: Number of days in the model year (>= 1)

    Returns:
        Discrepancy with the unsigned angle [deg] and minutes of time

    Raises:
        ValueError: If num_days < 1
    """
    t = orbital_angle(day, num_days)
    p1 = _orbital_points(t)
    p2 = project_to_reference_plane(p1, obliquity_deg)
    angle_rad = float(_angle_between(p1, p2))
    return Discrepancy(
        angle_deg=math.degrees(angle_rad),
        minutes=angle_rad / (2 * math.pi) * config.MINUTES_PER_REVOLUTION,
    )


class DiscrepancySeries(Sequence):
    """
    Discrepancy for every day of a model year.

    Immutable and eagerly computed; supports ``len()``, indexing (returning
    ``DiscrepancySample``) and iteration. The underlying columns are exposed
    as read-only numpy arrays.

    Attributes:
        obliquity_deg: Obliquity the series was computed for [deg]
        num_days: Number of samples
    """

    def __init__(self, obliquity_deg: float, days: np.ndarray,
                 orbital_angles: np.ndarray, minutes: np.ndarray):
        if not (len(days) == len(orbital_angles) == len(minutes)):
            raise ValueError("Series columns must have equal length")
        self._obliquity_deg = float(obliquity_deg)
        self._days = np.asarray(days, dtype=int)
        self._orbital_angles = np.asarray(orbital_angles, dtype=float)
        self._minutes = np.asarray(minutes, dtype=float)
        for array in (self._days, self._orbital_angles, self._minutes):
            array.flags.writeable = False

    @property
    def obliquity_deg(self) -> float:
        return self._obliquity_deg

    @property
    def num_days(self) -> int:
        return len(self._days)

    @property
    def days(self) -> np.ndarray:
        """Day indices (read-only)"""
        return self._days

    @property
    def orbital_angles(self) -> np.ndarray:
        """Orbital angle of each day [rad] (read-only)"""
        return self._orbital_angles

    @property
    def minutes(self) -> np.ndarray:
        """Discrepancy of each day [min] (read-only)"""
        return self._minutes

    def peak(self) -> DiscrepancySample:
        """Sample with the largest discrepancy."""
        return self[int(np.argmax(self._minutes))]

    def to_dataframe(self) -> pd.DataFrame:
        """
        Export the series to a pandas DataFrame.

        Returns:
            DataFrame with columns 'day', 'orbital_angle' and 'minutes'
        """
        return pd.DataFrame({
            'day': self._days,
            'orbital_angle': self._orbital_angles,
            'minutes': self._minutes,
        })

    def __len__(self):
        return len(self._days)

    def __getitem__(self, key):
        if isinstance(key, slice):
            return [self[i] for i in range(*key.indices(len(self)))]
        return DiscrepancySample(
            day=int(self._days[key]),
            orbital_angle=float(self._orbital_angles[key]),
            minutes=float(self._minutes[key]),
        )

    def __repr__(self):
        return (f"DiscrepancySeries(obliquity_deg={self.obliquity_deg}, "
                f"num_days={self.num_days}, "
                f"max_minutes={float(np.max(self._minutes)):.4f})")


def compute_discrepancy_series(obliquity_deg: float,
                               num_days: int) -> DiscrepancySeries:
    """
    Discrepancy for days 0..num_days-1, in order.

    Parameters:
        obliquity_deg: Obliquity [deg]
        num_days: Number of days in the model year (>= 1)

    Returns:
        DiscrepancySeries of exactly num_days samples
    """
    _check_num_days(num_days)
    days = np.arange(int(num_days))
    t = orbital_angle(days, num_days)
    p1 = _orbital_points(t)
    p2 = project_to_reference_plane(p1, obliquity_deg)
    angle_rad = _angle_between(p1, p2)
    minutes = angle_rad / (2 * np.pi) * config.MINUTES_PER_REVOLUTION
    return DiscrepancySeries(obliquity_deg, days, t, minutes)


def sun_position(day: Union[int, float], num_days: int,
                 radius: float = 1.0) -> np.ndarray:
    """
    Scene-frame position of the sun on the orbital circle.

    Parameters:
        day: Current day (0 to num_days-1)
        num_days: Number of days in the model year
        radius: Radius of the orbital circle (default: 1.0)

    Returns:
        Position in the x-z plane, radius * (cos t, 0, sin t)
    """
    t = orbital_angle(day, num_days)
    return radius * np.array([np.cos(t), 0.0, np.sin(t)])


def _check_num_days(num_days):
    if num_days < 1:
        raise ValueError(f"num_days must be at least 1, got {num_days}")
