"""Cascade of N identical CSTRs polymerizing a feed to a target conversion."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Union

import numpy as np
from pydantic import ValidationError

from polycascade.exceptions import DivergedError, InvalidParameters
from polycascade.reactors.geometry import PlantGeometry
from polycascade.reactors.solver import ReactorResult, ReactorSolver
from polycascade.utils.config import PhysicalConstants, ProcessParameters, SolverSettings
from polycascade.utils.logging import StageLogger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StageSpec:
    """Inlet and outlet feed concentration of one stage (0-based index)."""

    index: int
    gamma_in: float
    gamma_out: float


@dataclass(frozen=True)
class DivergedStage:
    """Marker for a stage whose fixed-point iteration did not settle."""

    index: int
    iterations: int
    reason: str

    @property
    def diverged(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "iterations": self.iterations,
            "reason": self.reason,
            "diverged": True,
        }


StageOutcome = Union[ReactorResult, DivergedStage]


@dataclass(frozen=True)
class PlantResult:
    """Per-stage outcomes in stage order."""

    stages: tuple[StageOutcome, ...]

    @property
    def diverged(self) -> bool:
        return any(stage.diverged for stage in self.stages)

    @property
    def total_power(self) -> float:
        """Sum of stage powers in stage order, or infinity if any stage diverged."""
        if self.diverged:
            return math.inf
        total = 0.0
        for stage in self.stages:
            total += stage.power  # type: ignore[union-attr]
        return total

    def __len__(self) -> int:
        return len(self.stages)


class Plant:
    """Design of an N-reactor polymerization cascade.

    Geometry is derived once from the process parameters; every stage uses
    the same vessel and differs only in its feed concentration, which falls
    geometrically so that the last outlet meets the target conversion.

    Attributes:
        params: Validated process parameters.
        constants: Physical constants.
        settings: Solver tolerance and iteration bound.
        geometry: Shared vessel geometry.
        solver: Per-stage fixed-point solver.
        result: Outcome of the last ``compute_all`` call, or None.
    """

    def __init__(
        self,
        n_reactors: int,
        feed: float,
        coolant: float,
        constants: PhysicalConstants | None = None,
        settings: SolverSettings | None = None,
    ):
        """Validate the process parameters and derive the plant geometry.

        Args:
            n_reactors: Number of reactors N (>= 1).
            feed: Feed concentration gamma_0 (0 < gamma_0 <= 1).
            coolant: Coolant temperature T2 (K), below the reactor temperature.
            constants: Physical constants. Defaults to the butadiene process.
            settings: Solver settings. Defaults to 1e-3 W within 10 000 iterations.

        Raises:
            InvalidParameters: If any parameter is outside its valid range.
        """
        if isinstance(n_reactors, bool) or not isinstance(n_reactors, int):
            raise InvalidParameters(f"Number of reactors must be an integer, got {n_reactors!r}")
        try:
            self.params = ProcessParameters(n_reactors=n_reactors, feed=feed, coolant=coolant)
        except ValidationError as exc:
            raise InvalidParameters(f"Invalid process parameters: {exc}") from exc

        self.constants = constants or PhysicalConstants()
        self.settings = settings or SolverSettings()
        if not self.params.coolant < self.constants.reactor_temperature:
            raise InvalidParameters(
                f"Coolant temperature {coolant} K must be below the reactor "
                f"temperature {self.constants.reactor_temperature} K"
            )

        self.geometry = PlantGeometry.derive(self.params.n_reactors, self.params.feed, self.constants)
        self.solver = ReactorSolver(
            self.geometry,
            feed=self.params.feed,
            coolant=self.params.coolant,
            constants=self.constants,
            settings=self.settings,
        )
        self.result: PlantResult | None = None

    @property
    def n_reactors(self) -> int:
        return self.params.n_reactors

    @property
    def feed(self) -> float:
        return self.params.feed

    @property
    def coolant(self) -> float:
        return self.params.coolant

    def stages(self) -> list[StageSpec]:
        """Concentration chain of the cascade.

        Returns:
            N stage specs where stage i+1 starts from the outlet of stage i
            and the last outlet equals gamma_0 * (1 - conversion).
        """
        n = self.params.n_reactors
        ratio = (1 - self.constants.conversion) ** (1.0 / n)
        # n + 1 boundary concentrations shared between neighbouring stages
        boundaries = self.params.feed * ratio ** np.arange(n + 1, dtype=float)
        return [
            StageSpec(index=i, gamma_in=float(boundaries[i]), gamma_out=float(boundaries[i + 1]))
            for i in range(n)
        ]

    def compute_all(self) -> PlantResult:
        """Solve every stage in order.

        A stage that fails to converge is recorded as :class:`DivergedStage`
        and the remaining stages are still solved. Calling again recomputes
        and replaces ``result``.

        Returns:
            Stage outcomes in stage order.
        """
        outcomes: list[StageOutcome] = []
        for stage in self.stages():
            stage_log = StageLogger(logger, stage.index + 1)
            try:
                outcome: StageOutcome = self.solver.solve(stage.gamma_in, stage.gamma_out, 0.0)
            except DivergedError as exc:
                stage_log.warning(
                    f"Reactor #{stage.index + 1} diverged: {exc}",
                    extra={"iterations": exc.iterations, "power": exc.last_value},
                )
                outcome = DivergedStage(index=stage.index, iterations=exc.iterations, reason=str(exc))
            else:
                stage_log.info(
                    f"Reactor #{stage.index + 1}: Re={outcome.reynolds:.4g}, "
                    f"n={outcome.revolution_speed:.4g} rps, P={outcome.power:.4g} W",
                    extra={"iterations": outcome.iterations, "power": outcome.power},
                )
            outcomes.append(outcome)

        self.result = PlantResult(stages=tuple(outcomes))
        if self.result.diverged:
            logger.warning("Total power is infinite: at least one stage diverged")
        else:
            logger.info(f"Total power: {self.result.total_power:.4g} W")
        return self.result

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"n_reactors={self.n_reactors}, "
            f"feed={self.feed}, "
            f"coolant={self.coolant})"
        )


__all__ = ["StageSpec", "DivergedStage", "PlantResult", "Plant"]
