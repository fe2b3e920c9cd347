"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import logging

import pytest

from polycascade.reactors.plant import Plant
from polycascade.utils.config import PhysicalConstants, SolverSettings


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Drop handlers installed by setup_logging so they do not outlive capsys."""
    yield
    pkg_logger = logging.getLogger("polycascade")
    for handler in list(pkg_logger.handlers):
        pkg_logger.removeHandler(handler)
        handler.close()
    pkg_logger.setLevel(logging.NOTSET)


@pytest.fixture
def constants() -> PhysicalConstants:
    """Default butadiene process constants."""
    return PhysicalConstants()


@pytest.fixture
def settings() -> SolverSettings:
    return SolverSettings()


@pytest.fixture
def converging_params() -> tuple[int, float, int]:
    """Dilute feed with a cold coolant: stirring power is small next to reaction heat."""
    return 1, 0.01, 273


@pytest.fixture
def diverging_params() -> tuple[int, float, int]:
    """Viscous feed with a 10 K driving force: no self-consistent stirring power exists."""
    return 1, 0.3, 313


@pytest.fixture
def converging_plant(converging_params) -> Plant:
    return Plant(*converging_params)


@pytest.fixture
def diverging_plant(diverging_params) -> Plant:
    return Plant(*diverging_params)
