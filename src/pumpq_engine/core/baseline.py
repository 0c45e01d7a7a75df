"""Baseline schedule and reservoir simulation for comparison.

Baseline: every hour's raw demand is pumped in that same hour at that hour's
tariff, with no pump-count decision and no storage shifting.
"""

import numpy as np

from pumpq_engine.core.constants import (
    HOURS_PER_DAY,
    MAX_LEVEL_PCT,
    MIN_LEVEL_PCT,
    RESERVOIR_CAPACITY_M3,
)
from pumpq_engine.core.metrics import round_half_up
from pumpq_engine.core.schemas import ScheduleRequest
from pumpq_engine.core.validate import validate_chromosome


def compute_uniform_cost(request: ScheduleRequest) -> float:
    """Compute the cost of serving demand hour by hour.

    Args:
        request: Scheduling request with demand, tariffs and pumps

    Returns:
        Baseline energy cost, rounded to whole currency units
    """
    demand = np.asarray(request.demand, dtype=float)
    tariffs = np.asarray(request.tariffs, dtype=float)

    energy_kwh = demand * request.mean_efficiency
    return float(round_half_up(float((energy_kwh * tariffs).sum())))


def level_change(production_m3: float, demand_m3: float) -> float:
    """Reservoir level change in percentage points for one hour."""
    return (production_m3 - demand_m3) / RESERVOIR_CAPACITY_M3 * 100


def simulate_reservoir(planning: list[int], request: ScheduleRequest) -> list[float]:
    """Simulate the reported reservoir trajectory for a schedule.

    Production is the full capacity of the active pumps. Each reported
    level is clamped to [0, 100]; the running level is not.

    Args:
        planning: Active pump count per hour
        request: Scheduling request

    Returns:
        25 levels: the starting level followed by one level per hour
    """
    planning = validate_chromosome(planning, request.constraints.max_active_pumps)

    levels = [request.reservoir_level_pct]
    current = request.reservoir_level_pct

    for hour in range(HOURS_PER_DAY):
        production = planning[hour] * request.unit_flow
        current += level_change(production, request.demand[hour])
        levels.append(max(MIN_LEVEL_PCT, min(MAX_LEVEL_PCT, current)))

    return levels
