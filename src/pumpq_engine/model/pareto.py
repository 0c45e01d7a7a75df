"""Heuristic cost vs reservoir-stability trade-off sampling.

Independent of the evolutionary search: schedules are generated by an
off-peak bias rule, not optimized, and are meant for visualization.
"""

from typing import Optional

import numpy as np

from pumpq_engine.core.baseline import level_change
from pumpq_engine.core.constants import HOURS_PER_DAY
from pumpq_engine.core.metrics import round_half_up
from pumpq_engine.core.schemas import ParetoOptions, ParetoSample, ScheduleRequest
from pumpq_engine.core.validate import coerce, validate_chromosome


def off_peak_schedule(
    request: ScheduleRequest,
    ratio: float,
    off_peak_threshold: float,
    rng: np.random.Generator,
) -> list[int]:
    """Build a schedule that runs every pump in off-peak hours.

    Off-peak hours (tariff below the threshold) get the maximum pump count.
    Other hours drop one pump when a uniform draw exceeds ``ratio``.
    """
    max_pumps = request.constraints.max_active_pumps
    schedule = []

    for hour in range(HOURS_PER_DAY):
        if request.tariffs[hour] < off_peak_threshold:
            schedule.append(max_pumps)
        else:
            schedule.append(max_pumps - 1 if rng.random() > ratio else max_pumps)

    return schedule


def evaluate_tradeoff(schedule: list[int], request: ScheduleRequest) -> tuple[float, float]:
    """Cost and stability of a schedule at full pump capacity.

    Stability is the sum of absolute hour-to-hour level changes.

    Returns:
        (cost rounded to whole units, stability rounded to 1 decimal)
    """
    schedule = validate_chromosome(schedule, request.constraints.max_active_pumps)
    efficiency = request.mean_efficiency

    total_cost = 0.0
    variation = 0.0

    for hour in range(HOURS_PER_DAY):
        production = schedule[hour] * request.unit_flow
        total_cost += production * efficiency * request.tariffs[hour]
        variation += abs(level_change(production, request.demand[hour]))

    return float(round_half_up(total_cost)), round_half_up(variation, 1)


def generate_pareto_front(
    request: ScheduleRequest | dict,
    options: Optional[ParetoOptions | dict] = None,
    rng: Optional[np.random.Generator] = None,
) -> list[ParetoSample]:
    """Sample schedules across a sweep of off-peak bias ratios.

    Args:
        request: Scheduling request
        options: Sampling parameters (defaults when omitted)
        rng: Random source

    Returns:
        Samples sorted by ascending cost
    """
    request = coerce(ScheduleRequest, request)
    options = coerce(ParetoOptions, options or {})
    rng = rng if rng is not None else np.random.default_rng()

    front = []
    for i in range(options.points):
        ratio = options.min_ratio + (i / options.points) * options.ratio_span
        schedule = off_peak_schedule(request, ratio, options.off_peak_tariff_threshold, rng)
        cost, stability = evaluate_tradeoff(schedule, request)
        front.append(ParetoSample(cost=cost, stability=stability, schedule=schedule))

    return sorted(front, key=lambda s: s.cost)
