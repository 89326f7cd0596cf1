"""
Scene state controller.

``ObliquityController`` owns the three model parameters (obliquity, number of
days, current day) and every scene object derived from them. Each setter
recomputes exactly the state that depends on the parameter it changes, in a
fixed order, before returning:

=====================  ====================================================
call                   recomputed
=====================  ====================================================
``set_obliquity``      tilt transform, mismatch arc, chart series, readout
``set_day_count``      clamp current day, reference lines, sun and planet,
                       mismatch arc, chart series, readout
``set_current_day``    sun and planet, mismatch arc, chart highlight,
                       readout
=====================  ====================================================

Reference lines are drawn in the untilted frame; the equatorial set sits in
the tilted group, so an obliquity change only moves the group transform.
"""

import logging
import math
from dataclasses import dataclass
from numbers import Real
from typing import Callable, List, Optional

import numpy as np

from .chart import ChartAdapter
from .config import config
from .discrepancy import (DiscrepancySeries, compute_discrepancy,
                          compute_discrepancy_series, orbital_angle,
                          project_to_reference_plane, sun_position)
from .scene import (TILTED, WORLD, Arrow, Disc, Polyline, Renderer, Sphere,
                    circle_points, rotation_z, segment)
from .utils import Timer, clamp, is_integer, validation_error, wrap_angle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiscrepancyReadout:
    """Numeric display values for the current day."""
    day: int
    angle_deg: float
    minutes: float

    @property
    def angle_text(self) -> str:
        return f"{self.angle_deg:.2f}°"

    @property
    def minutes_text(self) -> str:
        return f"{self.minutes:.2f} minutes"


def _is_finite_day(day) -> bool:
    return is_integer(day) or (isinstance(day, Real) and math.isfinite(day))


def reference_line_step(num_days: int) -> int:
    """Draw every n-th reference line so each set stays near MAX_REFERENCE_LINES."""
    if num_days > config.LINE_THINNING_THRESHOLD:
        return math.ceil(num_days / config.MAX_REFERENCE_LINES)
    return 1


class ObliquityController:
    """
    Owns the model parameters and keeps scene, chart and readout in sync.

    Parameters
    ----------
    renderer : Renderer
        Rendering capability that receives all scene geometry
    chart : ChartAdapter
        Adapter receiving the per-day discrepancy series
    obliquity_deg : float, optional
        Initial obliquity [deg] (default: config.DEFAULT_OBLIQUITY_DEG)
    num_days : int, optional
        Initial number of days, >= 2 (default: config.DEFAULT_NUM_DAYS)
    current_day : int, optional
        Initial day, clamped into [0, num_days - 1] (default: 0)

    Raises
    ------
    TypeError
        If num_days is not an integer
    ValueError
        If num_days < 2 or obliquity_deg is not finite

    Notes
    -----
    Out-of-range days are clamped and non-finite days ignored, never
    rejected. After construction, invalid day counts and non-finite
    obliquities go through ``validation_error``: they raise when
    ``config.STRICT_VALIDATION`` is set and otherwise warn; in both cases the
    previous state is kept.
    """

    def __init__(self, renderer: Renderer, chart: ChartAdapter,
                 obliquity_deg: Optional[float] = None,
                 num_days: Optional[int] = None,
                 current_day: int = 0):
        if obliquity_deg is None:
            obliquity_deg = config.DEFAULT_OBLIQUITY_DEG
        if num_days is None:
            num_days = config.DEFAULT_NUM_DAYS
        if not is_integer(num_days):
            raise TypeError(f"Day count must be an integer, got {num_days!r}")
        if num_days < 2:
            raise ValueError(f"Day count must be at least 2, got {num_days}")
        if not math.isfinite(obliquity_deg):
            raise ValueError(f"Obliquity must be finite, got {obliquity_deg}")

        self._renderer = renderer
        self._chart = chart
        self._obliquity = float(obliquity_deg)
        self._num_days = int(num_days)
        if not _is_finite_day(current_day):
            current_day = 0
        self._current_day = clamp(int(current_day), 0, self._num_days - 1)

        self._static_handles: List[int] = []
        self._line_handles: List[int] = []
        self._sun_handle: Optional[int] = None
        self._planet_handle: Optional[int] = None
        self._mismatch_handles: List[int] = []
        self._series: Optional[DiscrepancySeries] = None
        self._readout: Optional[DiscrepancyReadout] = None
        self._readout_listeners: List[Callable[[DiscrepancyReadout], None]] = []

        self._build_static_geometry()
        self._apply_tilt()
        self._rebuild_reference_lines()
        self._rebuild_sun()
        self._rebuild_mismatch()
        self._publish_series()
        self._chart.highlight_day(self._current_day)
        self._refresh_readout()

    # ========== PROPERTY ACCESS ==========
    @property
    def obliquity(self) -> float:
        """Obliquity [deg]"""
        return self._obliquity

    @property
    def num_days(self) -> int:
        return self._num_days

    @property
    def current_day(self) -> int:
        return self._current_day

    @property
    def series(self) -> DiscrepancySeries:
        """Discrepancy series for the current obliquity and day count."""
        return self._series

    @property
    def readout(self) -> DiscrepancyReadout:
        return self._readout

    @property
    def renderer(self) -> Renderer:
        return self._renderer

    @property
    def chart(self) -> ChartAdapter:
        return self._chart

    @property
    def reference_line_count(self) -> int:
        """Number of live reference lines (both sets)."""
        return len(self._line_handles)

    def on_readout(self, callback: Callable[[DiscrepancyReadout], None]):
        """Register a numeric-display listener, called after every readout refresh."""
        self._readout_listeners.append(callback)
        return callback

    # ========== PARAMETER UPDATES ==========
    def set_obliquity(self, obliquity_deg: float) -> None:
        """
        Change the obliquity [deg].

        No-op for a value equal to the current one. Reference lines and the
        sun marker are left alone.
        """
        if obliquity_deg == self._obliquity:
            return
        if not math.isfinite(obliquity_deg):
            validation_error(f"Obliquity must be finite, got {obliquity_deg}")
            return

        logger.debug("Obliquity %s -> %s deg", self._obliquity, obliquity_deg)
        self._obliquity = float(obliquity_deg)
        self._apply_tilt()
        self._rebuild_mismatch()
        self._publish_series()
        self._refresh_readout()

    def set_day_count(self, num_days: int) -> None:
        """
        Change the number of days in the model year.

        Raises
        ------
        TypeError
            If num_days is not an integer (strict validation only)
        ValueError
            If num_days < 2 (strict validation only)
        """
        if not is_integer(num_days):
            validation_error(f"Day count must be an integer, got {num_days!r}",
                             TypeError)
            return
        if num_days < 2:
            validation_error(f"Day count must be at least 2, got {num_days}")
            return
        num_days = int(num_days)
        if num_days == self._num_days:
            return

        logger.debug("Day count %d -> %d", self._num_days, num_days)
        self._num_days = num_days
        if self._current_day > num_days - 1:
            logger.debug("Current day %d clamped to %d",
                         self._current_day, num_days - 1)
            self._current_day = num_days - 1
        self._rebuild_reference_lines()
        self._rebuild_sun()
        self._rebuild_mismatch()
        self._publish_series()
        self._chart.highlight_day(self._current_day)
        self._refresh_readout()

    def set_current_day(self, day: int) -> None:
        """
        Select a day. Values outside [0, num_days - 1] are clamped; NaN and
        infinities are ignored and the current day is kept.

        Only day-specific state is rebuilt: sun marker, planet shading,
        mismatch arc, chart highlight and readout.
        """
        if not _is_finite_day(day):
            logger.debug("Ignoring non-finite day %r", day)
            return
        requested = int(day)
        day = clamp(requested, 0, self._num_days - 1)
        if day != requested:
            logger.debug("Requested day %d clamped to %d", requested, day)
        if day == self._current_day:
            return

        self._current_day = day
        self._rebuild_sun()
        self._rebuild_mismatch()
        self._chart.highlight_day(day)
        self._refresh_readout()

    def reset_camera(self) -> None:
        """Restore the default viewpoint; no model impact."""
        self._renderer.reset_camera()

    # ========== DERIVED STATE ==========
    def _build_static_geometry(self):
        segments = config.CIRCLE_SEGMENTS
        add = self._renderer.add
        self._static_handles = [
            add(Polyline(circle_points(config.ECLIPTIC_RADIUS, segments),
                         config.ECLIPTIC_COLOR, width=4, name='Ecliptic'), WORLD),
            add(Disc(config.EQUATORIAL_RADIUS, config.EQUATORIAL_FILL_COLOR,
                     segments=segments, name='Equatorial plane'), TILTED),
            add(Polyline(circle_points(config.EQUATORIAL_RADIUS, segments),
                         config.EQUATORIAL_COLOR, width=4, name='Equator'), TILTED),
            # perpendicular to the equatorial plane, so it tilts with the group
            add(Arrow((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), config.AXIS_LENGTH,
                      config.PLANET_COLOR, name='Rotation axis'), TILTED),
        ]

    def _tilt(self) -> np.ndarray:
        return rotation_z(np.deg2rad(self._obliquity))

    def _apply_tilt(self):
        self._renderer.set_group_transform(TILTED, self._tilt())

    def _rebuild_reference_lines(self):
        for handle in self._line_handles:
            self._renderer.dispose(handle)
        self._line_handles = []

        n = self._num_days
        opacity = config.REFERENCE_LINE_OPACITY
        for day in range(0, n, reference_line_step(n)):
            solar = Polyline(segment(sun_position(day, n, config.ECLIPTIC_RADIUS)),
                             config.ECLIPTIC_LINE_COLOR, width=1, opacity=opacity)
            clock = Polyline(segment(sun_position(day, n, config.EQUATORIAL_RADIUS)),
                             config.EQUATORIAL_LINE_COLOR, width=1, opacity=opacity)
            self._line_handles.append(self._renderer.add(solar, WORLD))
            self._line_handles.append(self._renderer.add(clock, TILTED))
        logger.debug("Built %d reference lines for %d days",
                     len(self._line_handles), n)

    def _rebuild_sun(self):
        for handle in (self._sun_handle, self._planet_handle):
            if handle is not None:
                self._renderer.dispose(handle)
        self._sun_handle = self._planet_handle = None

        position = tuple(sun_position(self._current_day, self._num_days,
                                      config.ECLIPTIC_RADIUS))
        self._sun_handle = self._renderer.add(
            Sphere(position, config.BODY_RADIUS, config.SUN_COLOR,
                   name='Sun'), WORLD)
        # day side faces the sun
        self._planet_handle = self._renderer.add(
            Sphere((0.0, 0.0, 0.0), config.BODY_RADIUS, config.PLANET_COLOR,
                   name='Planet', light_direction=position,
                   night_color=config.PLANET_NIGHT_COLOR), WORLD)

    def _rebuild_mismatch(self):
        for handle in self._mismatch_handles:
            self._renderer.dispose(handle)
        self._mismatch_handles = []

        day, n = self._current_day, self._num_days
        t = orbital_angle(day, n)
        solar_noon = sun_position(day, n, config.ECLIPTIC_RADIUS)
        clock_noon = self._tilt() @ sun_position(day, n, config.EQUATORIAL_RADIUS)

        # the scene's x-z plane is the model's x-y plane
        projected = project_to_reference_plane([np.cos(t), np.sin(t), 0.0],
                                               self._obliquity)
        start = math.atan2(solar_noon[2], solar_noon[0])
        sweep = wrap_angle(math.atan2(projected[1], projected[0]) - start)
        arc_angles = start + sweep * np.linspace(0.0, 1.0, config.ARC_STEPS + 1)
        arc = config.EQUATORIAL_RADIUS * np.column_stack(
            [np.cos(arc_angles), np.zeros_like(arc_angles), np.sin(arc_angles)])

        add = self._renderer.add
        self._mismatch_handles = [
            add(Polyline(segment(solar_noon), config.SOLAR_NOON_COLOR, width=4,
                         name='Solar noon'), WORLD),
            add(Polyline(segment(clock_noon), config.CLOCK_NOON_COLOR, width=4,
                         name='Clock noon'), WORLD),
            add(Polyline(arc, config.ARC_COLOR, width=10, name='Discrepancy'),
                WORLD),
        ]

    def _publish_series(self):
        with Timer("Discrepancy series", verbose=False):
            self._series = compute_discrepancy_series(self._obliquity,
                                                      self._num_days)
        self._chart.publish_series(self._series)

    def _refresh_readout(self):
        result = compute_discrepancy(self._obliquity, self._current_day,
                                     self._num_days)
        self._readout = DiscrepancyReadout(self._current_day, result.angle_deg,
                                           result.minutes)
        for listener in self._readout_listeners:
            listener(self._readout)

    def __repr__(self):
        return (f"ObliquityController(obliquity={self._obliquity}, "
                f"num_days={self._num_days}, current_day={self._current_day})")
