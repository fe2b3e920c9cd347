"""polycascade: agitation power sizing for cascades of polymerization CSTRs."""

from __future__ import annotations

__version__ = "1.0.0"

from polycascade.exceptions import (
    CascadeError,
    ConfigurationError,
    DivergedError,
    InvalidParameters,
)
from polycascade.reactors import (
    DivergedStage,
    OperatingPoint,
    Plant,
    PlantGeometry,
    PlantResult,
    ReactorResult,
    ReactorSolver,
    StageSpec,
)
from polycascade.report import render_text, to_dict
from polycascade.utils import (
    CascadeConfig,
    JSONFormatter,
    PhysicalConstants,
    ProcessParameters,
    RunTracer,
    SolverSettings,
    load_config,
    setup_logging,
)

__all__ = [
    # Version
    "__version__",
    # Exceptions
    "CascadeError",
    "InvalidParameters",
    "DivergedError",
    "ConfigurationError",
    # Plant and solver
    "Plant",
    "PlantGeometry",
    "PlantResult",
    "StageSpec",
    "DivergedStage",
    "ReactorSolver",
    "ReactorResult",
    "OperatingPoint",
    # Reporting
    "render_text",
    "to_dict",
    # Configuration
    "CascadeConfig",
    "PhysicalConstants",
    "ProcessParameters",
    "SolverSettings",
    "load_config",
    # Logging
    "JSONFormatter",
    "RunTracer",
    "setup_logging",
]
