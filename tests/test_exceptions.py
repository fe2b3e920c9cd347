"""Tests for the polycascade exception hierarchy."""

from __future__ import annotations

import pytest

from polycascade.exceptions import (
    CascadeError,
    ConfigurationError,
    DivergedError,
    InvalidParameters,
)

# ── Inheritance chain ────────────────────────────────────────────────


class TestInheritance:
    """All custom exceptions inherit from CascadeError."""

    @pytest.mark.parametrize("exc_cls", [InvalidParameters, DivergedError, ConfigurationError])
    def test_subclass_of_base(self, exc_cls: type) -> None:
        assert issubclass(exc_cls, CascadeError)

    def test_base_not_subclass_of_subtypes(self) -> None:
        assert not issubclass(CascadeError, DivergedError)

    def test_diverged_is_not_invalid_parameters(self) -> None:
        assert not issubclass(DivergedError, InvalidParameters)


# ── Error payload ────────────────────────────────────────────────────


class TestDivergedError:
    def test_defaults(self) -> None:
        exc = DivergedError("no fixed point")
        assert str(exc) == "no fixed point"
        assert exc.iterations == 0
        assert exc.last_value is None

    def test_carries_iteration_state(self) -> None:
        exc = DivergedError("overflow", iterations=3, last_value=4.2e154)
        assert exc.iterations == 3
        assert exc.last_value == 4.2e154

    def test_catch_base_catches_subtype(self) -> None:
        with pytest.raises(CascadeError):
            raise DivergedError("solver blew up")


# ── Integration: code paths raise the right types ───────────────────


class TestCodePaths:
    def test_plant_rejects_zero_reactors(self) -> None:
        from polycascade.reactors.plant import Plant

        with pytest.raises(InvalidParameters):
            Plant(0, 0.3, 313)

    def test_missing_config_raises_configuration_error(self) -> None:
        from polycascade.utils.config import load_config

        with pytest.raises(ConfigurationError, match="not found"):
            load_config("/nonexistent/path/cascade.yaml")
