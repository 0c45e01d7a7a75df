"""Test the evolutionary scheduler."""

import numpy as np
import pytest

from pumpq_engine.core.schemas import OptimizerOptions
from pumpq_engine.core.validate import InputValidationError
from pumpq_engine.model.objective import evaluate_candidate
from pumpq_engine.model.solve import describe_optimizer, optimize_pump_schedule


@pytest.fixture
def station_request():
    """Three pumps, time-of-use tariff, peaked demand (plain dict input)."""
    return {
        "demand": [160.0] * 6 + [300.0] * 4 + [260.0] * 7 + [340.0] * 5 + [160.0] * 2,
        "tariffs": [68.0] * 6 + [110.0] * 12 + [150.0] * 4 + [68.0] * 2,
        "reservoir_level_pct": 55.0,
        "pumps": [
            {"pump_id": f"P{i}", "power_kw": 110.0, "efficiency_kwh_per_m3": 0.42, "max_flow_m3_h": 150.0}
            for i in range(1, 4)
        ],
        "constraints": {
            "min_reservoir_pct": 20.0,
            "max_reservoir_pct": 95.0,
            "min_power_factor": 0.9,
            "max_active_pumps": 3,
        },
    }


@pytest.fixture
def small_options():
    """Fast search settings."""
    return OptimizerOptions(population_size=20, generations=10)


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
def test_schedule_shape_and_range(station_request, small_options, seed):
    """Every returned schedule has 24 entries in [0, max_active_pumps]."""
    schedule = optimize_pump_schedule(station_request, small_options, np.random.default_rng(seed))

    assert len(schedule.planning) == 24
    assert all(0 <= n <= 3 for n in schedule.planning), f"Out of range: {schedule.planning}"
    assert len(schedule.reservoir_levels) == 25
    assert all(0 <= level <= 100 for level in schedule.reservoir_levels)


def test_best_fitness_never_worsens(station_request):
    """Truncation selection keeps the best candidate across generations."""
    options = OptimizerOptions(population_size=30, generations=25)
    schedule = optimize_pump_schedule(station_request, options, np.random.default_rng(11))

    history = schedule.fitness_history
    assert len(history) == options.generations + 1
    assert all(b <= a for a, b in zip(history, history[1:])), f"Fitness increased: {history}"
    assert schedule.fitness == history[-1]


def test_result_matches_reevaluation(station_request, small_options):
    """Reported cost and fitness are those of the returned planning."""
    from pumpq_engine.core.schemas import ScheduleRequest

    schedule = optimize_pump_schedule(station_request, small_options, np.random.default_rng(5))
    candidate = evaluate_candidate(schedule.planning, ScheduleRequest.model_validate(station_request))

    assert schedule.cost == candidate.cost
    assert schedule.fitness == pytest.approx(candidate.fitness)
    assert schedule.power_factor == candidate.power_factor
    assert schedule.savings == schedule.uniform_cost - schedule.cost


def test_seed_reproducibility(station_request, small_options):
    """Same seed, same schedule."""
    first = optimize_pump_schedule(station_request, small_options, np.random.default_rng(99))
    second = optimize_pump_schedule(station_request, small_options, np.random.default_rng(99))

    assert first.planning == second.planning
    assert first.fitness_history == second.fitness_history


def test_zero_generations_returns_best_initial(station_request):
    """With no generations the best random candidate is returned."""
    options = OptimizerOptions(population_size=10, generations=0)
    schedule = optimize_pump_schedule(station_request, options, np.random.default_rng(3))

    assert len(schedule.fitness_history) == 1
    assert len(schedule.planning) == 24


def test_flat_tariff_schedule_not_above_baseline():
    """With one pump matching constant demand, no schedule costs more than the baseline."""
    request = {
        "demand": [100.0] * 24,
        "tariffs": [80.0] * 24,
        "reservoir_level_pct": 50.0,
        "pumps": [{"pump_id": "P1", "power_kw": 55.0, "efficiency_kwh_per_m3": 0.5, "max_flow_m3_h": 100.0}],
        "constraints": {
            "min_reservoir_pct": 10.0,
            "max_reservoir_pct": 90.0,
            "min_power_factor": 0.85,
            "max_active_pumps": 1,
        },
    }
    schedule = optimize_pump_schedule(
        request, OptimizerOptions(population_size=20, generations=15), np.random.default_rng(0)
    )

    assert schedule.cost <= schedule.uniform_cost
    assert schedule.savings >= 0


def test_options_accept_dict(station_request):
    """Options can be passed as a plain dict."""
    schedule = optimize_pump_schedule(
        station_request, {"population_size": 8, "generations": 2}, np.random.default_rng(1)
    )
    assert len(schedule.fitness_history) == 3


@pytest.mark.parametrize(
    "field,value",
    [
        ("demand", [100.0] * 23),
        ("tariffs", [50.0] * 25),
        ("tariffs", [-1.0] + [50.0] * 23),
        ("pumps", []),
        ("reservoir_level_pct", 120.0),
        ("tariffs", [float("inf")] + [50.0] * 23),
        ("demand", [100.0] * 23 + [float("nan")]),
        ("reservoir_level_pct", float("nan")),
    ],
)
def test_invalid_request_rejected(station_request, field, value):
    """Malformed inputs raise InputValidationError instead of being padded or truncated."""
    station_request[field] = value

    with pytest.raises(InputValidationError):
        optimize_pump_schedule(station_request, {"population_size": 4, "generations": 1})


def test_inverted_reservoir_band_rejected(station_request):
    """min_reservoir_pct must be below max_reservoir_pct."""
    station_request["constraints"]["min_reservoir_pct"] = 95.0

    with pytest.raises(InputValidationError):
        optimize_pump_schedule(station_request)


def test_invalid_options_rejected(station_request):
    """Rates outside [0, 1] are rejected."""
    with pytest.raises(InputValidationError):
        optimize_pump_schedule(station_request, {"mutation_rate": 1.5})


def test_describe_optimizer_defaults():
    """Descriptor reports the documented defaults."""
    descriptor = describe_optimizer()

    assert descriptor.parameters["population_size"] == 50
    assert descriptor.parameters["generations"] == 20
    assert descriptor.parameters["crossover_rate"] == 0.9
    assert descriptor.parameters["mutation_rate"] == 0.1
    assert descriptor.parameters["elite_count"] == 5


def test_infinite_pump_flow_rejected(station_request):
    """Pump ratings must be finite."""
    station_request["pumps"][0]["max_flow_m3_h"] = float("inf")

    with pytest.raises(InputValidationError):
        optimize_pump_schedule(station_request, {"population_size": 4, "generations": 1})
