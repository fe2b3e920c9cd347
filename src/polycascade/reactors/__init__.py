"""Cascade geometry, per-reactor solver and plant orchestration."""

from __future__ import annotations

from polycascade.reactors.geometry import PlantGeometry
from polycascade.reactors.plant import DivergedStage, Plant, PlantResult, StageSpec
from polycascade.reactors.solver import OperatingPoint, ReactorResult, ReactorSolver

__all__ = [
    "PlantGeometry",
    "Plant",
    "PlantResult",
    "StageSpec",
    "DivergedStage",
    "ReactorSolver",
    "ReactorResult",
    "OperatingPoint",
]
