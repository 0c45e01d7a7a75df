"""Metrics computation for daily plans."""

import math
from typing import Optional

from pumpq_engine.core.schemas import AnomalySummary, DemandForecast, OptimizedSchedule, ScheduleRequest


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round to ``ndigits`` decimals with ties going up (2.5 -> 3, -2.5 -> -2).

    Reported figures use this instead of the built-in ``round``, which rounds
    ties to even.
    """
    scale = 10**ndigits
    return math.floor(value * scale + 0.5) / scale


def compute_pump_hours(planning: list[int]) -> int:
    """Total pump-hours of a schedule."""
    return int(sum(planning))


def compute_plan_metrics(
    schedule: OptimizedSchedule,
    request: ScheduleRequest,
    forecast: Optional[DemandForecast] = None,
    anomaly_summary: Optional[AnomalySummary] = None,
) -> dict:
    """Compute metrics comparing the optimized plan with the uniform baseline.

    Args:
        schedule: Optimized schedule
        request: Request the schedule answers
        forecast: Demand forecast the request was built from
        anomaly_summary: Detector summary for the station

    Returns:
        Dictionary of metrics
    """
    savings_pct = (
        schedule.savings / schedule.uniform_cost * 100 if schedule.uniform_cost != 0 else 0.0
    )
    pump_hours = compute_pump_hours(schedule.planning)
    installed_pump_hours = len(request.pumps) * len(schedule.planning)

    metrics = {
        "optimal_cost": schedule.cost,
        "uniform_cost": schedule.uniform_cost,
        "savings": schedule.savings,
        "savings_pct": savings_pct,
        "power_factor": schedule.power_factor,
        "min_power_factor": request.constraints.min_power_factor,
        "pump_hours": pump_hours,
        "utilization_pct": pump_hours / installed_pump_hours * 100,
        "reservoir_start_pct": schedule.reservoir_levels[0],
        "reservoir_end_pct": schedule.reservoir_levels[-1],
        "reservoir_min_pct": min(schedule.reservoir_levels),
        "reservoir_max_pct": max(schedule.reservoir_levels),
        "fitness": schedule.fitness,
    }

    if forecast is not None:
        metrics["forecast_daily_total_m3"] = forecast.daily_total
        metrics["forecast_confidence"] = forecast.confidence
        metrics["forecast_peak_hours"] = forecast.peak_hours

    if anomaly_summary is not None:
        metrics["readings_analyzed"] = anomaly_summary.total_readings
        metrics["anomaly_count"] = anomaly_summary.anomaly_count
        metrics["anomaly_rate"] = anomaly_summary.anomaly_rate
        metrics["anomaly_rate_exceeds_contamination"] = anomaly_summary.exceeds_contamination

    return metrics
