"""Scheduling objective function."""

from dataclasses import dataclass, replace

from pumpq_engine.core.baseline import level_change
from pumpq_engine.core.constants import (
    HOURS_PER_DAY,
    PRODUCTION_CAP_FACTOR,
    PUMP_HOUR_WEIGHT,
    RESERVOIR_VIOLATION_WEIGHT,
)
from pumpq_engine.core.metrics import round_half_up
from pumpq_engine.core.schemas import ScheduleRequest
from pumpq_engine.core.validate import validate_chromosome
from pumpq_engine.model.constraints import power_factor, power_factor_penalty, reservoir_violation


@dataclass
class Candidate:
    """A schedule candidate and its evaluation.

    Unevaluated candidates carry an infinite fitness.
    """

    chromosome: list[int]
    fitness: float = float("inf")
    cost: float = 0.0
    reservoir_violation: float = 0.0
    power_factor: float = 0.0

    def copy(self) -> "Candidate":
        return replace(self, chromosome=list(self.chromosome))


def evaluate_candidate(chromosome: list[int], request: ScheduleRequest) -> Candidate:
    """Evaluate a schedule.

    Objective = energy_cost + 1000 * reservoir_violation + power_factor_penalty
                + 10 * total_pump_hours

    Hourly production is capped at 120 % of that hour's demand. The running
    reservoir level is not clamped so that violations accumulate.

    Args:
        chromosome: Active pump count per hour
        request: Scheduling request

    Returns:
        Evaluated Candidate (cost rounded to whole units, cos φ to 2 decimals)

    Raises:
        InputValidationError: If the schedule is malformed
    """
    constraints = request.constraints
    chromosome = validate_chromosome(chromosome, constraints.max_active_pumps)

    efficiency = request.mean_efficiency
    unit_flow = request.unit_flow

    total_cost = 0.0
    violation = 0.0
    level = request.reservoir_level_pct

    for hour in range(HOURS_PER_DAY):
        demand = request.demand[hour]

        capacity = chromosome[hour] * unit_flow
        production = min(capacity, demand * PRODUCTION_CAP_FACTOR)

        # Energy cost
        total_cost += production * efficiency * request.tariffs[hour]

        # Reservoir balance
        level += level_change(production, demand)
        violation += reservoir_violation(level, constraints)

    cos_phi = power_factor(chromosome, len(request.pumps))
    pump_hours = sum(chromosome)

    fitness = (
        total_cost
        + violation * RESERVOIR_VIOLATION_WEIGHT
        + power_factor_penalty(cos_phi, constraints)
        + pump_hours * PUMP_HOUR_WEIGHT
    )

    return Candidate(
        chromosome=chromosome,
        fitness=fitness,
        cost=float(round_half_up(total_cost)),
        reservoir_violation=violation,
        power_factor=round_half_up(cos_phi, 2),
    )
