"""Polycascade exception hierarchy.

All library-specific exceptions inherit from :class:`CascadeError`,
enabling callers to catch the broad base class or narrow subtypes.
"""

from __future__ import annotations


class CascadeError(Exception):
    """Base exception for all polycascade errors."""


class InvalidParameters(CascadeError):
    """Process parameters outside the range where the model is defined."""


class DivergedError(CascadeError):
    """Fixed-point iteration failed to meet its tolerance.

    Attributes:
        iterations: Number of map evaluations performed before giving up.
        last_value: Last finite iterate, or None if none was produced.
    """

    def __init__(
        self,
        message: str,
        iterations: int = 0,
        last_value: float | None = None,
    ):
        super().__init__(message)
        self.iterations = iterations
        self.last_value = last_value


class ConfigurationError(CascadeError):
    """Configuration file errors (missing file, bad YAML, invalid values)."""


__all__ = [
    "CascadeError",
    "InvalidParameters",
    "DivergedError",
    "ConfigurationError",
]
