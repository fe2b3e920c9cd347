"""Tests for cascade orchestration."""

from __future__ import annotations

import logging
import math
from unittest.mock import patch

import pytest

from polycascade.exceptions import DivergedError, InvalidParameters
from polycascade.reactors.plant import DivergedStage, Plant, PlantResult, StageSpec
from polycascade.reactors.solver import ReactorResult
from polycascade.utils.config import PhysicalConstants, SolverSettings

# ── construction ─────────────────────────────────────────────────────


class TestConstruction:
    @pytest.mark.parametrize(
        "n, feed, coolant",
        [
            (0, 0.3, 313),
            (-2, 0.3, 313),
            (1.5, 0.3, 313),
            ("3", 0.3, 313),
            (True, 0.3, 313),
            (1, 0.0, 313),
            (1, -0.1, 313),
            (1, 1.5, 313),
            (1, float("nan"), 313),
            (1, 1e-310, 273),
            (1, 0.3, 323),
            (1, 0.3, 400),
        ],
    )
    def test_invalid_parameters(self, n, feed, coolant):
        with pytest.raises(InvalidParameters):
            Plant(n, feed, coolant)

    @pytest.mark.parametrize("coolant", [323, 400, float("nan")])
    def test_coolant_checked_before_geometry(self, coolant):
        with patch("polycascade.reactors.plant.PlantGeometry.derive") as derive:
            with pytest.raises(InvalidParameters, match="Coolant temperature"):
                Plant(1, 0.3, coolant)
        derive.assert_not_called()

    def test_coolant_limit_follows_constants(self):
        plant = Plant(1, 0.01, 330, constants=PhysicalConstants(reactor_temperature=350))
        assert plant.coolant == 330

    def test_feed_of_one_is_allowed(self):
        plant = Plant(2, 1.0, 300)
        assert plant.feed == 1.0

    def test_parameters_exposed(self):
        plant = Plant(3, 0.3, 313)
        assert (plant.n_reactors, plant.feed, plant.coolant) == (3, 0.3, 313)
        assert isinstance(plant.coolant, int)
        assert plant.result is None

    def test_geometry_shared_with_solver(self):
        plant = Plant(4, 0.2, 300)
        assert plant.solver.geometry is plant.geometry

    def test_repr(self):
        assert repr(Plant(2, 0.3, 313)) == "Plant(n_reactors=2, feed=0.3, coolant=313)"


# ── stage chain ──────────────────────────────────────────────────────


class TestStages:
    @pytest.mark.parametrize("n", [1, 2, 5, 12])
    def test_chain_has_no_gaps(self, n):
        stages = Plant(n, 0.3, 313).stages()
        assert len(stages) == n
        assert [s.index for s in stages] == list(range(n))
        for upstream, downstream in zip(stages, stages[1:]):
            assert upstream.gamma_out == downstream.gamma_in

    @pytest.mark.parametrize("n", [1, 3, 7])
    def test_endpoints(self, n):
        stages = Plant(n, 0.3, 313).stages()
        assert stages[0].gamma_in == 0.3
        assert stages[-1].gamma_out == pytest.approx(0.3 * 0.4)

    def test_constant_ratio(self):
        stages = Plant(4, 0.25, 300).stages()
        for stage in stages:
            assert stage.gamma_out / stage.gamma_in == pytest.approx(0.4**0.25)

    def test_conversion_from_constants(self):
        plant = Plant(3, 0.2, 300, constants=PhysicalConstants(conversion=0.5))
        assert plant.stages()[-1].gamma_out == pytest.approx(0.1)

    def test_stage_spec_frozen(self):
        stage = StageSpec(index=0, gamma_in=0.3, gamma_out=0.12)
        with pytest.raises(AttributeError):
            stage.gamma_out = 0.1  # type: ignore[misc]


# ── compute_all ──────────────────────────────────────────────────────


class TestComputeAll:
    def test_single_reactor_runs_one_solve(self, converging_plant):
        with patch.object(converging_plant.solver, "solve", wraps=converging_plant.solver.solve) as spy:
            result = converging_plant.compute_all()
        assert spy.call_count == 1
        gamma_in, gamma_out, stir_energy = spy.call_args.args
        assert (gamma_in, stir_energy) == (0.01, 0.0)
        assert gamma_out == pytest.approx(0.004)
        assert len(result) == 1

    @pytest.mark.parametrize("n", [1, 2, 3])
    def test_converges_and_sums_in_stage_order(self, n):
        plant = Plant(n, 0.01, 273)
        result = plant.compute_all()
        assert plant.result is result
        assert not result.diverged
        assert len(result.stages) == n
        expected = 0.0
        for stage in result.stages:
            assert isinstance(stage, ReactorResult)
            assert stage.reynolds > 0
            assert stage.revolution_speed > 0
            assert stage.power > 0
            expected += stage.power
        assert result.total_power == expected

    def test_solves_each_stage_with_zero_initial_energy(self):
        plant = Plant(3, 0.01, 273)
        with patch.object(plant.solver, "solve", wraps=plant.solver.solve) as spy:
            plant.compute_all()
        stages = plant.stages()
        assert spy.call_count == 3
        for stage, call in zip(stages, spy.call_args_list):
            assert call.args == (stage.gamma_in, stage.gamma_out, 0.0)

    def test_idempotent(self, converging_plant):
        first = converging_plant.compute_all()
        second = converging_plant.compute_all()
        assert first == second
        assert converging_plant.result is second

    def test_divergent_scenario(self, diverging_plant):
        result = diverging_plant.compute_all()
        assert result.diverged
        assert math.isinf(result.total_power)
        stage = result.stages[0]
        assert isinstance(stage, DivergedStage)
        assert stage.index == 0
        assert stage.iterations >= 1

    def test_divergence_logged(self, diverging_plant, caplog):
        with caplog.at_level(logging.WARNING, logger="polycascade"):
            diverging_plant.compute_all()
        assert "Reactor #1 diverged" in caplog.text

    def test_stage_fields_on_records(self, caplog):
        plant = Plant(2, 0.01, 273)
        with caplog.at_level(logging.INFO, logger="polycascade.reactors.plant"):
            result = plant.compute_all()
        stage_records = [r for r in caplog.records if hasattr(r, "stage")]
        assert [r.stage for r in stage_records] == [1, 2]
        for record, stage in zip(stage_records, result.stages):
            assert record.iterations == stage.iterations
            assert record.power == stage.power

    def test_divergent_stage_does_not_stop_others(self):
        plant = Plant(3, 0.01, 273)
        real_solve = plant.solver.solve
        calls = []

        def flaky(gamma_in, gamma_out, stir_energy):
            calls.append(gamma_in)
            if len(calls) == 2:
                raise DivergedError("stuck", iterations=10_000, last_value=1.0)
            return real_solve(gamma_in, gamma_out, stir_energy)

        with patch.object(plant.solver, "solve", side_effect=flaky):
            result = plant.compute_all()

        assert len(calls) == 3
        assert [stage.diverged for stage in result.stages] == [False, True, False]
        assert result.stages[1].iterations == 10_000
        assert math.isinf(result.total_power)

    def test_iteration_bound_from_settings(self):
        plant = Plant(2, 0.01, 273, settings=SolverSettings(max_iterations=1))
        result = plant.compute_all()
        assert all(stage.diverged for stage in result.stages)


# ── PlantResult ──────────────────────────────────────────────────────


class TestPlantResult:
    def test_total_power_of_converged_stages(self):
        stages = (
            ReactorResult(reynolds=1.0, revolution_speed=0.1, power=2.5, stir_energy=2.5, iterations=3),
            ReactorResult(reynolds=2.0, revolution_speed=0.2, power=1.25, stir_energy=1.25, iterations=4),
        )
        result = PlantResult(stages=stages)
        assert not result.diverged
        assert result.total_power == 3.75

    def test_any_divergence_makes_total_infinite(self):
        stages = (
            ReactorResult(reynolds=1.0, revolution_speed=0.1, power=2.5, stir_energy=2.5, iterations=3),
            DivergedStage(index=1, iterations=5, reason="overflow"),
        )
        result = PlantResult(stages=stages)
        assert result.diverged
        assert result.total_power == math.inf

    def test_diverged_stage_to_dict(self):
        data = DivergedStage(index=1, iterations=5, reason="overflow").to_dict()
        assert data == {"index": 1, "iterations": 5, "reason": "overflow", "diverged": True}
