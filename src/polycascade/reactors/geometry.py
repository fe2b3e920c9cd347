"""Shared vessel geometry for a cascade of identical CSTRs."""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from typing import Any

from polycascade.exceptions import InvalidParameters
from polycascade.utils.config import PhysicalConstants

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlantGeometry:
    """Closed-form design quantities common to every reactor of the cascade.

    Attributes:
        feed_rate: Volumetric feed rate (m^3/h).
        rate_constant: First-order reaction rate constant (1/h).
        residence_time: Residence time per stage (h).
        volume: Single reactor volume (m^3).
        diameter: Vessel diameter (m).
        height: Vessel height (m).
        surface: Heat-exchange (wall) surface area (m^2).
    """

    feed_rate: float
    rate_constant: float
    residence_time: float
    volume: float
    diameter: float
    height: float
    surface: float

    @classmethod
    def derive(
        cls,
        n_reactors: int,
        feed: float,
        constants: PhysicalConstants,
    ) -> PlantGeometry:
        """Derive the geometry from the cascade size and feed concentration.

        Args:
            n_reactors: Number of reactors in the cascade (>= 1).
            feed: Feed concentration (mass fraction, 0 < feed <= 1).
            constants: Physical constants of the process.

        Returns:
            Geometry shared by all stages.

        Raises:
            InvalidParameters: If the inputs are so extreme that a derived
                quantity is not a finite positive number.
        """
        cv = constants.conversion
        try:
            feed_rate = constants.product_rate / (constants.density * cv * feed)
            rate_constant = (1.0 / (1 - cv) - 1) / constants.reference_residence_time
            residence_time = (1.0 / rate_constant) * ((1 - cv) ** (-1.0 / n_reactors) - 1)
            volume = feed_rate * residence_time
            diameter = (volume / (constants.aspect_ratio * 2 * math.pi)) ** (1 / 3.0) * 2
            height = diameter * constants.aspect_ratio
            surface = diameter * math.pi * height
        except (OverflowError, ZeroDivisionError) as exc:
            raise InvalidParameters(f"Cannot size reactors for N={n_reactors}, feed={feed}: {exc}") from exc

        geometry = cls(
            feed_rate=feed_rate,
            rate_constant=rate_constant,
            residence_time=residence_time,
            volume=volume,
            diameter=diameter,
            height=height,
            surface=surface,
        )
        for name, value in geometry.to_dict().items():
            if not (math.isfinite(value) and value > 0):
                raise InvalidParameters(
                    f"Cannot size reactors for N={n_reactors}, feed={feed}: {name} is {value!r}"
                )

        logger.info(
            f"Derived geometry for N={n_reactors}, feed={feed}: "
            f"V={volume:.3f} m3, D={diameter:.3f} m, H={height:.3f} m, A={surface:.3f} m2"
        )
        return geometry

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


__all__ = ["PlantGeometry"]
