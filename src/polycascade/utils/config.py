"""Configuration management for polycascade."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from polycascade import __version__
from polycascade.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class PhysicalConstants(BaseModel):
    """Process-wide physical constants for the butadiene polymerization plant."""

    model_config = ConfigDict(frozen=True)

    product_rate: float = Field(default=63.0 * 1000 / 24, gt=0, description="Product flow rate (kg/h)")
    polymer_length: float = Field(default=50.0, gt=0, description="Polymer chain length (-)")
    reference_residence_time: float = Field(
        default=5.0, gt=0, description="Residence time of a single-reactor plant (h)"
    )
    density: float = Field(default=850.0, gt=0, description="Density (kg/m^3)")
    aspect_ratio: float = Field(default=1.3, gt=0, description="Height/diameter of reactor (-)")
    heat_of_polymerization: float = Field(default=72.8 * 1000, gt=0, description="Heat of polymerization (J/mol)")
    conversion: float = Field(default=0.6, gt=0, lt=1, description="Target overall conversion (-)")
    reactor_temperature: float = Field(default=273.0 + 50, gt=0, description="Reactor temperature T1 (K)")
    thermal_conductivity: float = Field(default=0.128, gt=0, description="Thermal conductivity (W/(m*K))")
    specific_heat: float = Field(default=1.68 * 1000, gt=0, description="Specific heat of toluene (J/(kg*K))")
    molar_mass: float = Field(default=54.0, gt=0, description="Molecular weight of butadiene (g/mol)")


class SolverSettings(BaseModel):
    """Settings for the per-reactor fixed-point iteration."""

    model_config = ConfigDict(frozen=True)

    accuracy: float = Field(default=0.001, gt=0, description="Stirring power tolerance (W)")
    max_iterations: int = Field(default=10_000, ge=1, description="Iteration bound before divergence")


class ProcessParameters(BaseModel):
    """The three scalar inputs of a plant design run."""

    model_config = ConfigDict(frozen=True)

    n_reactors: int = Field(..., ge=1, description="Number of reactors in the cascade")
    feed: float = Field(..., gt=0, le=1, allow_inf_nan=False, description="Feed concentration (mass fraction)")
    coolant: int | float = Field(..., description="Coolant temperature T2 (K)")


class LoggingConfig(BaseModel):
    """Configuration for structured logging."""

    level: str = Field(default="WARNING", description="Log level")
    format: str = Field(default="text", description="Log format ('text' or 'json')")
    log_file: str | None = Field(None, description="Log file path")
    module_levels: dict[str, str] = Field(
        default_factory=dict,
        description="Per-module log levels",
    )


class CascadeConfig(BaseModel):
    """Top-level configuration file contents."""

    constants: PhysicalConstants = Field(default_factory=PhysicalConstants)
    solver: SolverSettings = Field(default_factory=SolverSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# ${VAR} or ${VAR:default}
ENV_PATTERN = re.compile(r"\$\{(\w+)(?::([^}]*))?\}")


def _expand_env_vars(text: str, source: Path) -> str:
    """Substitute ``${VAR}``/``${VAR:default}`` references in config text.

    Raises:
        ConfigurationError: If a variable without default is not set.
    """

    def _replace(match: re.Match[str]) -> str:
        name, default = match.group(1), match.group(2)
        value = os.environ.get(name, default)
        if value is None:
            line = text.count("\n", 0, match.start()) + 1
            raise ConfigurationError(f"{source}:{line}: environment variable {name} is not set and has no default")
        return value

    return ENV_PATTERN.sub(_replace, text)


def load_config(path: str | Path) -> CascadeConfig:
    """Load configuration from YAML file with env var interpolation.

    Sections and keys absent from the file keep their defaults, so a file
    may override a single constant.

    Args:
        path: Path to YAML config file.

    Returns:
        Parsed configuration object.

    Raises:
        ConfigurationError: If the file is missing, is not valid YAML,
            references an unset environment variable, names an unknown key
            or holds an out-of-range value.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        data = yaml.safe_load(_expand_env_vars(path.read_text(), path))
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Invalid config structure: expected a mapping, got {type(data).__name__}")

    merged = merge_configs(CascadeConfig().model_dump(), data)
    try:
        config = CascadeConfig(**merged)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid config structure: {exc}") from exc

    logger.info(f"Loaded config from {path}")
    return config


def save_config(config: CascadeConfig, path: str | Path, overrides_only: bool = False) -> None:
    """Save configuration to YAML file.

    Args:
        config: Configuration object.
        path: Output path.
        overrides_only: Write only values that differ from the defaults, so
            the file reads as a partial overlay for ``load_config``.

    Raises:
        ConfigurationError: If the file cannot be written.
    """
    path = Path(path)
    data = config.model_dump(exclude_defaults=overrides_only)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            f.write(f"# polycascade {__version__} configuration\n")
            if data:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
    except OSError as exc:
        raise ConfigurationError(f"Failed to save config to {path}: {exc}") from exc

    logger.info(f"Saved config to {path}")


def merge_configs(base: dict[str, Any], override: dict[str, Any], _prefix: str = "") -> dict[str, Any]:
    """Layer a partial configuration over a complete one.

    Nested sections are merged key by key. Keys absent from ``base`` are
    rejected, so a misspelt constant fails loudly instead of being ignored.
    A section whose default is empty (e.g. ``logging.module_levels``) takes
    the override as a whole.

    Args:
        base: Complete configuration, typically ``CascadeConfig().model_dump()``.
        override: Values read from a file (takes precedence).

    Returns:
        New merged configuration dictionary.

    Raises:
        ConfigurationError: If ``override`` names a key unknown to ``base``.
    """
    merged = dict(base)
    for key, value in override.items():
        dotted = f"{_prefix}{key}"
        if key not in merged:
            raise ConfigurationError(f"Unknown config key '{dotted}'")
        current = merged[key]
        if isinstance(current, dict) and current and isinstance(value, dict):
            merged[key] = merge_configs(current, value, f"{dotted}.")
        else:
            merged[key] = value
    return merged


__all__ = [
    "PhysicalConstants",
    "SolverSettings",
    "ProcessParameters",
    "LoggingConfig",
    "CascadeConfig",
    "load_config",
    "save_config",
    "merge_configs",
]
