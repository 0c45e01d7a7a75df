"""Daily planning runner.

Forecasts tomorrow's demand from the bundle history, schedules the pumps
against that forecast, samples the cost / stability trade-off and screens
the sensor readings for anomalies.
"""

import logging

import numpy as np

from pumpq_engine.core.metrics import compute_plan_metrics
from pumpq_engine.core.schemas import ScheduleRequest
from pumpq_engine.core.validate import validate_demand_history, validate_schedule_result, validate_sensor_frame
from pumpq_engine.detect.detector import detect_anomalies, summarize_anomalies
from pumpq_engine.forecast.providers import PatternDemandForecaster
from pumpq_engine.io.bundle import load_bundle, write_results
from pumpq_engine.io.formats import readings_from_frame
from pumpq_engine.model.pareto import generate_pareto_front
from pumpq_engine.model.solve import optimize_pump_schedule

logger = logging.getLogger(__name__)


def run_daily_plan(bundle_path: str) -> tuple:
    """Run the daily plan on a bundle.

    Args:
        bundle_path: Path to run bundle

    Returns:
        Tuple of (schedule, metrics)
    """
    logger.info("Loading bundle from %s", bundle_path)
    station, run, demand_history, sensor_frame = load_bundle(bundle_path)

    validate_demand_history(demand_history)
    rng = np.random.default_rng(run.seed)

    logger.info("Station: %s, run: %s", station.station_id, run.run_id)
    logger.info("Demand history: %d hours", len(demand_history))

    # Forecast
    forecaster = PatternDemandForecaster(station.forecaster)
    forecast = forecaster.forecast_from_history(
        demand_history,
        day_of_week=run.day_of_week,
        is_holiday=run.is_holiday,
        temperature_c=run.temperature_c,
        season=run.season,
        rng=rng,
    )
    logger.info("Forecast: %d m³ (confidence %.2f)", forecast.daily_total, forecast.confidence)

    # Schedule against the forecast
    request = ScheduleRequest(
        demand=[float(v) for v in forecast.hourly],
        tariffs=run.tariffs,
        reservoir_level_pct=run.reservoir_level_pct,
        pumps=station.pumps,
        constraints=station.constraints,
    )
    schedule = optimize_pump_schedule(request, station.optimizer, rng)
    validate_schedule_result(schedule, request)
    logger.info("Schedule cost %.0f, savings %.0f vs uniform", schedule.cost, schedule.savings)

    pareto_front = generate_pareto_front(request, station.pareto, rng)

    # Anomaly screening
    anomalies = None
    summary = None
    if sensor_frame is not None:
        validate_sensor_frame(sensor_frame)
        anomalies = detect_anomalies(readings_from_frame(sensor_frame), station.detector, rng)
        summary = summarize_anomalies(anomalies, station.detector)
        logger.info("Anomalies: %d of %d readings", summary.anomaly_count, summary.total_readings)

    metrics = compute_plan_metrics(schedule, request, forecast, summary)

    logger.info("Writing results to %s", bundle_path)
    write_results(bundle_path, forecast, schedule, pareto_front, anomalies, metrics, run.seed)

    return schedule, metrics
