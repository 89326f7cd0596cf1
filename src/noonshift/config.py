"""
Global Configuration for Noonshift Package
==========================================

This module provides package-wide configuration settings that users can modify
to control model defaults, scene geometry, animation timing and validation
behavior.

Examples
--------
View current configuration:

>>> import noonshift
>>> print(noonshift.config)

Modify settings:

>>> noonshift.config.ORBIT_DURATION_MS = 8000  # Slower animation
>>> noonshift.config.MAX_REFERENCE_LINES = 64  # Denser reference lines

Reset to defaults:

>>> noonshift.config.reset()

Temporarily modify settings:

>>> with noonshift.temp_config(STRICT_VALIDATION=False):
...     # Invalid day counts only warn inside this block
...     controller.set_day_count(1)

Notes
-----
These settings affect package-wide behavior. Values that shape geometry are
read when geometry is built, so a change shows up on the next rebuild.
"""

from dataclasses import dataclass
from contextlib import contextmanager
from typing import Tuple


@dataclass
class NoonshiftConfig:
    """
    Global configuration for Noonshift package.

    Attributes
    ----------
    DEFAULT_OBLIQUITY_DEG : float
        Obliquity used when none is given [deg].
        Default: 23.4 (Earth)
    DEFAULT_NUM_DAYS : int
        Number of days in the model year used when none is given.
        Default: 16
    MINUTES_PER_REVOLUTION : float
        Minutes of time in one full turn (360 deg).
        Default: 1440.0
    ORBIT_DURATION_MS : float
        Wall-clock duration of one animated orbit [ms], independent of
        the number of days.
        Default: 4000.0
    LINE_THINNING_THRESHOLD : int
        Day counts above this draw only a subset of reference lines.
        Default: 100
    MAX_REFERENCE_LINES : int
        Target number of reference lines per set once thinning applies.
        Default: 32
    ECLIPTIC_RADIUS : float
        Radius of the orbital (solar noon) circle in scene units.
        Default: 2.0
    EQUATORIAL_RADIUS : float
        Radius of the equatorial (clock noon) circle in scene units.
        Default: 1.0
    BODY_RADIUS : float
        Radius of the planet and sun spheres in scene units.
        Default: 0.1
    AXIS_LENGTH : float
        Length of the rotation axis arrow in scene units.
        Default: 1.5
    CIRCLE_SEGMENTS : int
        Number of segments used for circles and discs.
        Default: 64
    ARC_STEPS : int
        Number of segments of the mismatch arc.
        Default: 50
    EQUALITY_ATOL : float
        Absolute tolerance for floating-point comparisons of model values.
        Default: 1e-9
    STRICT_VALIDATION : bool
        If True, validation failures raise exceptions.
        If False, validation failures issue warnings and the update is
        dropped.
        Default: True
    DEFAULT_CAMERA_EYE : tuple of float
        Default camera eye position (top-down view).
        Default: (0.0, 2.5, 0.0)
    """

    # Model defaults
    DEFAULT_OBLIQUITY_DEG: float = 23.4
    DEFAULT_NUM_DAYS: int = 16
    MINUTES_PER_REVOLUTION: float = 24 * 60.0

    # Animation
    ORBIT_DURATION_MS: float = 4000.0

    # Reference-line thinning
    LINE_THINNING_THRESHOLD: int = 100
    MAX_REFERENCE_LINES: int = 32

    # Scene geometry
    ECLIPTIC_RADIUS: float = 2.0
    EQUATORIAL_RADIUS: float = 1.0
    BODY_RADIUS: float = 0.1
    AXIS_LENGTH: float = 1.5
    CIRCLE_SEGMENTS: int = 64
    ARC_STEPS: int = 50

    # Colors
    ECLIPTIC_COLOR: str = '#000000'
    EQUATORIAL_COLOR: str = '#666666'
    EQUATORIAL_FILL_COLOR: str = '#ffffff'
    ECLIPTIC_LINE_COLOR: str = '#cccccc'
    EQUATORIAL_LINE_COLOR: str = '#aaaaaa'
    REFERENCE_LINE_OPACITY: float = 0.3
    PLANET_COLOR: str = '#4d9fff'
    PLANET_NIGHT_COLOR: str = '#0b2447'
    SUN_COLOR: str = '#ffcc33'
    SOLAR_NOON_COLOR: str = '#ff8800'
    CLOCK_NOON_COLOR: str = '#0088ff'
    ARC_COLOR: str = '#ff0000'
    CHART_COLOR: str = 'rgb(75, 192, 192)'

    # Camera
    DEFAULT_CAMERA_EYE: Tuple[float, float, float] = (0.0, 2.5, 0.0)
    DEFAULT_CAMERA_UP: Tuple[float, float, float] = (0.0, 0.0, -1.0)

    # Numerical tolerance
    EQUALITY_ATOL: float = 1e-9

    # Validation behavior
    STRICT_VALIDATION: bool = True

    def reset(self):
        """
        Reset all configuration values to package defaults.

        Examples
        --------
        >>> import noonshift
        >>> noonshift.config.ORBIT_DURATION_MS = 1000.0  # Modify
        >>> noonshift.config.reset()  # Back to defaults
        >>> noonshift.config.ORBIT_DURATION_MS
        4000.0
        """
        defaults = NoonshiftConfig()
        for key in self.__dataclass_fields__:
            setattr(self, key, getattr(defaults, key))

    def __repr__(self):
        """Return formatted string showing all configuration values."""
        lines = ["NoonshiftConfig:"]
        lines.append("  Model:")
        lines.append(f"    DEFAULT_OBLIQUITY_DEG = {self.DEFAULT_OBLIQUITY_DEG}")
        lines.append(f"    DEFAULT_NUM_DAYS = {self.DEFAULT_NUM_DAYS}")
        lines.append(f"    MINUTES_PER_REVOLUTION = {self.MINUTES_PER_REVOLUTION}")
        lines.append("  Animation:")
        lines.append(f"    ORBIT_DURATION_MS = {self.ORBIT_DURATION_MS}")
        lines.append("  Reference Lines:")
        lines.append(f"    LINE_THINNING_THRESHOLD = {self.LINE_THINNING_THRESHOLD}")
        lines.append(f"    MAX_REFERENCE_LINES = {self.MAX_REFERENCE_LINES}")
        lines.append("  Geometry:")
        lines.append(f"    ECLIPTIC_RADIUS = {self.ECLIPTIC_RADIUS}")
        lines.append(f"    EQUATORIAL_RADIUS = {self.EQUATORIAL_RADIUS}")
        lines.append(f"    BODY_RADIUS = {self.BODY_RADIUS}")
        lines.append(f"    AXIS_LENGTH = {self.AXIS_LENGTH}")
        lines.append(f"    CIRCLE_SEGMENTS = {self.CIRCLE_SEGMENTS}")
        lines.append(f"    ARC_STEPS = {self.ARC_STEPS}")
        lines.append("  Camera:")
        lines.append(f"    DEFAULT_CAMERA_EYE = {self.DEFAULT_CAMERA_EYE}")
        lines.append(f"    DEFAULT_CAMERA_UP = {self.DEFAULT_CAMERA_UP}")
        lines.append("  Behavior:")
        lines.append(f"    EQUALITY_ATOL = {self.EQUALITY_ATOL}")
        lines.append(f"    STRICT_VALIDATION = {self.STRICT_VALIDATION}")
        return "\n".join(lines)


# Global configuration instance
config = NoonshiftConfig()


@contextmanager
def temp_config(**kwargs):
    """
    Context manager for temporarily modifying configuration values.

    Configuration is automatically restored when the context exits,
    even if an exception occurs.

    Parameters
    ----------
    **kwargs
        Configuration attributes to temporarily modify.

    Examples
    --------
    >>> import noonshift
    >>> with noonshift.temp_config(ORBIT_DURATION_MS=1000.0):
    ...     driver = AnimationDriver(controller, scheduler)
    >>> # Original config restored here
    >>> noonshift.config.ORBIT_DURATION_MS
    4000.0

    Raises
    ------
    AttributeError
        If an invalid configuration attribute is specified.
    """
    old_values = {}
    for key, value in kwargs.items():
        if not hasattr(config, key):
            raise AttributeError(
                f"NoonshiftConfig has no attribute '{key}'. "
                f"Valid attributes: {list(config.__dataclass_fields__.keys())}"
            )
        old_values[key] = getattr(config, key)
        setattr(config, key, value)

    try:
        yield config
    finally:
        for key, value in old_values.items():
            setattr(config, key, value)
