"""Soft constraints of the scheduling problem.

Constraints are not enforced on candidates; each one is turned into a
non-negative penalty that the objective adds to the energy cost.
"""

from pumpq_engine.core.constants import (
    HOURS_PER_DAY,
    POWER_FACTOR_BASE,
    POWER_FACTOR_PENALTY_WEIGHT,
    POWER_FACTOR_SPAN,
)
from pumpq_engine.core.schemas import OperatingConstraints


def reservoir_violation(level: float, constraints: OperatingConstraints) -> float:
    """Distance of one hourly level outside the allowed reservoir band.

    Args:
        level: Unclamped reservoir level in percent
        constraints: Operating constraints

    Returns:
        0 inside the band, otherwise the distance to the nearest bound
    """
    if level < constraints.min_reservoir_pct:
        return constraints.min_reservoir_pct - level
    if level > constraints.max_reservoir_pct:
        return level - constraints.max_reservoir_pct
    return 0.0


def power_factor(chromosome: list[int], pump_count: int) -> float:
    """Station power factor implied by the average number of running pumps.

    cos φ = 0.85 + (mean active pumps / installed pumps) * 0.15

    Args:
        chromosome: Active pump count per hour
        pump_count: Number of installed pumps

    Returns:
        Unrounded cos φ
    """
    load_factor = sum(chromosome) / HOURS_PER_DAY / pump_count
    return POWER_FACTOR_BASE + load_factor * POWER_FACTOR_SPAN


def power_factor_penalty(cos_phi: float, constraints: OperatingConstraints) -> float:
    """Penalty for a power factor below the contractual minimum."""
    if cos_phi < constraints.min_power_factor:
        return (constraints.min_power_factor - cos_phi) * POWER_FACTOR_PENALTY_WEIGHT
    return 0.0
