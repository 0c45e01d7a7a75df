"""Test the heuristic cost / stability sampler."""

import numpy as np
import pytest

from pumpq_engine.core.schemas import ParetoOptions, ScheduleRequest
from pumpq_engine.model.pareto import evaluate_tradeoff, generate_pareto_front, off_peak_schedule


@pytest.fixture
def split_tariff_request():
    """Cheap first half of the day, expensive second half."""
    return ScheduleRequest(
        demand=[100.0] * 24,
        tariffs=[50.0] * 12 + [150.0] * 12,
        reservoir_level_pct=50.0,
        pumps=[
            {"pump_id": f"P{i}", "power_kw": 55.0, "efficiency_kwh_per_m3": 0.5, "max_flow_m3_h": 100.0}
            for i in range(1, 4)
        ],
        constraints={"max_active_pumps": 3},
    )


def test_front_sorted_by_cost(split_tariff_request):
    """Samples come back in ascending cost order."""
    front = generate_pareto_front(split_tariff_request, ParetoOptions(points=20), np.random.default_rng(0))

    assert len(front) == 20
    costs = [p.cost for p in front]
    assert costs == sorted(costs)


def test_off_peak_hours_run_all_pumps(split_tariff_request):
    """Hours below the tariff threshold always get the maximum pump count."""
    front = generate_pareto_front(split_tariff_request, ParetoOptions(points=10), np.random.default_rng(1))

    for sample in front:
        assert len(sample.schedule) == 24
        assert sample.schedule[:12] == [3] * 12
        assert set(sample.schedule[12:]) <= {2, 3}


def test_threshold_is_configurable(split_tariff_request):
    """Raising the threshold above every tariff makes every hour off-peak."""
    front = generate_pareto_front(
        split_tariff_request,
        ParetoOptions(points=5, off_peak_tariff_threshold=200.0),
        np.random.default_rng(2),
    )

    assert all(sample.schedule == [3] * 24 for sample in front)


def test_tradeoff_evaluation(split_tariff_request):
    """Full-capacity cost and summed absolute level changes."""
    cost, stability = evaluate_tradeoff([3] * 24, split_tariff_request)

    # 300 m³/h * 0.5 kWh/m³ * (12 * 50 + 12 * 150)
    assert cost == 360000
    # +20 points every hour
    assert stability == pytest.approx(480.0)


def test_stability_counts_falls_and_rises(split_tariff_request):
    """Stability adds absolute changes in both directions."""
    _, stability = evaluate_tradeoff([0] * 12 + [2] * 12, split_tariff_request)

    assert stability == pytest.approx(12 * 10 + 12 * 10)


def test_ratio_zero_drops_a_pump_on_peak(split_tariff_request):
    """With ratio 0 almost every peak hour runs one pump fewer."""
    schedule = off_peak_schedule(split_tariff_request, 0.0, 100.0, np.random.default_rng(3))

    assert schedule[:12] == [3] * 12
    assert schedule[12:].count(2) >= 11
