"""
Utility functions and classes for the Noonshift package.
"""

import logging
import math
import warnings
from numbers import Integral
from time import perf_counter
from typing import Type
from .config import config

logger = logging.getLogger(__name__)


class Timer:
    """
    Context manager for timing code execution.

    The elapsed time is always logged at DEBUG level on the
    ``noonshift.utils`` logger, and printed as well when ``verbose``.

    Examples
    --------
    >>> from noonshift.utils import Timer
    >>> with Timer("Series"):
    ...     series = compute_discrepancy_series(23.4, 365)
    Series: 0.000123 s

    >>> with Timer(verbose=False) as t:
    ...     # ... code ...
    >>> print(f"Took {t.elapsed:.6f} seconds")
    """
    def __init__(self, name="Operation", verbose=True):
        """
        Parameters
        ----------
        name : str, optional
            Name to display when timing completes (default: "Operation")
        verbose : bool, optional
            Whether to print timing automatically (default: True)
        """
        self.name = name
        self.verbose = verbose
        self.elapsed = None

    def __enter__(self):
        self.start = perf_counter()
        return self

    def __exit__(self, *args):
        self.end = perf_counter()
        self.elapsed = self.end - self.start
        logger.debug("%s: %.6f s", self.name, self.elapsed)
        if self.verbose:
            print(f"{self.name}: {self.elapsed:.6f} s")


def validation_error(message: str, error_class: Type[Exception] = ValueError):
    """
    Raise error or warn based on config.STRICT_VALIDATION.

    This function provides consistent validation behavior across the package.
    When STRICT_VALIDATION is True (default), raises the specified exception.
    When False, issues a UserWarning instead and the caller is expected to
    drop the rejected update.

    Parameters
    ----------
    message : str
        Validation error message
    error_class : Type[Exception], optional
        Exception class to raise if STRICT_VALIDATION is True.
        Default: ValueError

    Raises
    ------
    Exception (of type error_class)
        If config.STRICT_VALIDATION is True

    Warns
    -----
    UserWarning
        If config.STRICT_VALIDATION is False

    Examples
    --------
    >>> from noonshift.utils import validation_error
    >>> from noonshift import config
    >>> config.STRICT_VALIDATION = True
    >>> validation_error("Invalid day count")  # Raises ValueError
    >>> validation_error("Day count must be an integer", TypeError)  # Raises TypeError

    >>> config.STRICT_VALIDATION = False
    >>> validation_error("Invalid day count")  # Issues warning
    """
    if config.STRICT_VALIDATION:
        raise error_class(message)
    else:
        warnings.warn(message, UserWarning, stacklevel=3)


def is_integer(value) -> bool:
    """True for plain and numpy integers, False for bools and everything else."""
    return isinstance(value, Integral) and not isinstance(value, bool)


def wrap_angle(angle: float) -> float:
    """Wrap an angle in radians into [-pi, pi)."""
    return (angle + math.pi) % (2 * math.pi) - math.pi


def clamp(value: int, low: int, high: int) -> int:
    """Clamp ``value`` into the closed range [low, high]."""
    return max(low, min(value, high))
