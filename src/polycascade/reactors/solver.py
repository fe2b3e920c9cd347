"""Self-consistent agitation power of a single polymerization CSTR."""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from typing import Any

from polycascade.exceptions import InvalidParameters
from polycascade.reactors.geometry import PlantGeometry
from polycascade.utils.config import PhysicalConstants, SolverSettings
from polycascade.utils.numerical import successive_substitution

logger = logging.getLogger(__name__)

# Viscosity correlation: mu = ML^1.7 * (1 - x)^2.5 * exp(21 * gamma_0) * 1e-3
VISCOSITY_LENGTH_EXPONENT = 1.7
VISCOSITY_CONVERSION_EXPONENT = 2.5
VISCOSITY_FEED_FACTOR = 21.0
VISCOSITY_SCALE = 1e-3

# Power number correlation: Np = 14.6 * Re^-0.28
POWER_NUMBER_COEFFICIENT = 14.6
POWER_NUMBER_EXPONENT = -0.28


@dataclass(frozen=True)
class OperatingPoint:
    """One evaluation of the stirring power map.

    Attributes:
        stir_energy: Assumed stirring power fed into the heat balance (W).
        heat_of_reaction: Heat released by polymerization (W).
        heat_transfer_coefficient: Required wall coefficient h (W/(m^2*K)).
        viscosity: Reaction mass viscosity (Pa*s).
        prandtl: Prandtl number (-).
        nusselt: Nusselt number (-).
        reynolds: Impeller Reynolds number (-).
        revolution_speed: Impeller speed (1/s).
        power_number: Power number (-).
        power: Power dissipated by the impeller at this speed (W).
    """

    stir_energy: float
    heat_of_reaction: float
    heat_transfer_coefficient: float
    viscosity: float
    prandtl: float
    nusselt: float
    reynolds: float
    revolution_speed: float
    power_number: float
    power: float


@dataclass(frozen=True)
class ReactorResult:
    """Converged operating point of one stage."""

    reynolds: float
    revolution_speed: float
    power: float
    stir_energy: float
    iterations: int

    @property
    def diverged(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        return {**asdict(self), "diverged": False}


class ReactorSolver:
    """Fixed-point solver coupling heat removal, viscosity and agitation power.

    The wall heat-transfer coefficient needed to remove the reaction heat
    plus the stirring power fixes the Nusselt number. Through the
    Nusselt-Reynolds-Prandtl correlation Nu = 0.5 Re^(2/3) Pr^(1/3) this
    fixes the impeller Reynolds number, hence speed and power draw. The
    power draw is fed back as stirring power until it stops changing.

    Attributes:
        geometry: Shared vessel geometry.
        feed: Cascade feed concentration gamma_0.
        coolant: Coolant temperature T2 (K).
        constants: Physical constants.
        settings: Tolerance and iteration bound.
    """

    def __init__(
        self,
        geometry: PlantGeometry,
        feed: float,
        coolant: float,
        constants: PhysicalConstants | None = None,
        settings: SolverSettings | None = None,
    ):
        self.geometry = geometry
        self.feed = feed
        self.coolant = coolant
        self.constants = constants or PhysicalConstants()
        self.settings = settings or SolverSettings()

        if not self.coolant < self.constants.reactor_temperature:
            raise InvalidParameters(
                f"Coolant temperature {coolant} K must be below the reactor "
                f"temperature {self.constants.reactor_temperature} K"
            )

    def _check_concentrations(self, gamma_in: float, gamma_out: float) -> None:
        if not 0 < gamma_out < gamma_in <= self.feed:
            raise InvalidParameters(
                f"Stage concentrations must satisfy 0 < gamma_out < gamma_in <= gamma_0, "
                f"got gamma_out={gamma_out}, gamma_in={gamma_in}, gamma_0={self.feed}"
            )

    def evaluate(self, gamma_in: float, gamma_out: float, stir_energy: float) -> OperatingPoint:
        """Apply the stirring power map once.

        Args:
            gamma_in: Inlet concentration of the stage.
            gamma_out: Outlet concentration of the stage.
            stir_energy: Assumed stirring power (W).

        Returns:
            Operating point whose ``power`` is the next estimate.

        Raises:
            InvalidParameters: If the concentrations are out of range or the
                heat balance gives a non-positive transfer coefficient.
            OverflowError: If the power estimate has run away.
        """
        self._check_concentrations(gamma_in, gamma_out)
        c = self.constants
        geo = self.geometry

        # heat transfer rate
        heat_of_reaction = (
            c.heat_of_polymerization * (geo.feed_rate * c.density * (gamma_in - gamma_out) / 3.6) / c.molar_mass
        )
        heat = heat_of_reaction + stir_energy
        h = heat / geo.surface / (c.reactor_temperature - self.coolant)
        if not h > 0:
            raise InvalidParameters(f"Heat-transfer coefficient must be positive, got h={h:.6g}")

        viscosity = (
            c.polymer_length**VISCOSITY_LENGTH_EXPONENT
            * (1 - gamma_out / self.feed) ** VISCOSITY_CONVERSION_EXPONENT
            * math.exp(VISCOSITY_FEED_FACTOR * self.feed)
            * VISCOSITY_SCALE
        )

        # dimensionless numbers
        prandtl = viscosity * c.specific_heat / c.thermal_conductivity
        nusselt = h * geo.diameter / c.thermal_conductivity
        reynolds = (2 * nusselt / prandtl ** (1 / 3.0)) ** 1.5

        # power consumption
        radius = geo.diameter / 2
        revolution_speed = reynolds * viscosity / c.density / radius**2
        power_number = POWER_NUMBER_COEFFICIENT * reynolds**POWER_NUMBER_EXPONENT
        power = power_number * c.density * revolution_speed**3 * radius**5

        return OperatingPoint(
            stir_energy=stir_energy,
            heat_of_reaction=heat_of_reaction,
            heat_transfer_coefficient=h,
            viscosity=viscosity,
            prandtl=prandtl,
            nusselt=nusselt,
            reynolds=reynolds,
            revolution_speed=revolution_speed,
            power_number=power_number,
            power=power,
        )

    def solve(self, gamma_in: float, gamma_out: float, stir_energy: float = 0.0) -> ReactorResult:
        """Find the self-consistent operating point of one stage.

        Args:
            gamma_in: Inlet concentration, 0 < gamma_out < gamma_in <= gamma_0.
            gamma_out: Outlet concentration.
            stir_energy: Initial stirring power estimate (W).

        Returns:
            Converged Reynolds number, revolution speed and power.

        Raises:
            InvalidParameters: If the concentrations are out of range.
            DivergedError: If the iteration does not settle within
                ``settings.max_iterations`` evaluations.
        """
        self._check_concentrations(gamma_in, gamma_out)

        assumed, _, iterations = successive_substitution(
            lambda p: self.evaluate(gamma_in, gamma_out, p).power,
            stir_energy,
            tol=self.settings.accuracy,
            max_iter=self.settings.max_iterations,
        )
        point = self.evaluate(gamma_in, gamma_out, assumed)

        logger.debug(
            f"Solved stage gamma {gamma_in:.4g}->{gamma_out:.4g}: "
            f"Re={point.reynolds:.4g}, n={point.revolution_speed:.4g} rps, "
            f"P={point.power:.4g} W in {iterations} iterations",
            extra={"iterations": iterations, "power": point.power},
        )
        return ReactorResult(
            reynolds=point.reynolds,
            revolution_speed=point.revolution_speed,
            power=point.power,
            stir_energy=assumed,
            iterations=iterations,
        )


__all__ = ["OperatingPoint", "ReactorResult", "ReactorSolver"]
