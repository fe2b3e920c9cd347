"""Configuration, logging and numerical utilities."""

from __future__ import annotations

from polycascade.utils.config import (
    CascadeConfig,
    LoggingConfig,
    PhysicalConstants,
    ProcessParameters,
    SolverSettings,
    load_config,
    merge_configs,
    save_config,
)
from polycascade.utils.logging import JSONFormatter, RunTracer, StageLogger, TextFormatter, setup_logging
from polycascade.utils.numerical import successive_substitution

__all__ = [
    "CascadeConfig",
    "LoggingConfig",
    "PhysicalConstants",
    "ProcessParameters",
    "SolverSettings",
    "load_config",
    "merge_configs",
    "save_config",
    "JSONFormatter",
    "RunTracer",
    "StageLogger",
    "TextFormatter",
    "setup_logging",
    "successive_substitution",
]
