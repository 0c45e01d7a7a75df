"""24-hour demand forecasting.

The forecast is the canonical daily pattern of the history scaled by
calendar and weather factors, then by the diurnal bucket multipliers, with
a small uniform jitter per hour. Note the bucket multipliers apply on top of
a pattern that already carries the historical daily shape.
"""

import logging
from datetime import date, timedelta
from typing import Optional

import numpy as np

from pumpq_engine.core import constants as c
from pumpq_engine.core.metrics import round_half_up
from pumpq_engine.core.schemas import (
    AlgorithmDescriptor,
    DemandContext,
    DemandForecast,
    ForecastFactors,
    ForecasterOptions,
)
from pumpq_engine.core.validate import InputValidationError, coerce
from pumpq_engine.forecast.pattern import (
    compute_confidence,
    day_of_week_factor,
    extract_daily_pattern,
    holiday_factor,
    seasonal_factor,
    temperature_factor,
)

logger = logging.getLogger(__name__)


def peak_hours(hourly: list[float], count: int = c.PEAK_HOUR_COUNT) -> list[int]:
    """Hours of the ``count`` largest values (earlier hour wins ties), ascending."""
    ranked = sorted(range(len(hourly)), key=lambda hour: -hourly[hour])
    return sorted(ranked[:count])


def predict_demand(
    context: DemandContext | dict,
    options: Optional[ForecasterOptions | dict] = None,
    rng: Optional[np.random.Generator] = None,
) -> DemandForecast:
    """Forecast the next 24 hours of demand.

    Args:
        context: History, calendar and weather inputs
        options: Forecaster options (defaults when omitted)
        rng: Random source for the hourly jitter

    Returns:
        DemandForecast with whole m³/h values
    """
    context = coerce(DemandContext, context)
    options = coerce(ForecasterOptions, options or {})
    rng = rng if rng is not None else np.random.default_rng()

    pattern = extract_daily_pattern(context.historical, options)
    fallback = options.base_consumption_m3_day / c.HOURS_PER_DAY

    factors = ForecastFactors(
        day_of_week_factor=day_of_week_factor(context.day_of_week),
        holiday_factor=holiday_factor(context.is_holiday),
        temperature_factor=temperature_factor(context.temperature_c),
        seasonal_factor=seasonal_factor(context.season),
    )
    scale = (
        factors.day_of_week_factor
        * factors.holiday_factor
        * factors.temperature_factor
        * factors.seasonal_factor
    )

    hourly = []
    for hour in range(c.HOURS_PER_DAY):
        # A zero pattern hour falls back to the flat base
        demand = (pattern[hour] or fallback) * scale
        demand *= options.hour_multiplier(hour)
        demand *= 1 - options.jitter + rng.random() * 2 * options.jitter
        hourly.append(int(round_half_up(demand)))

    forecast = DemandForecast(
        hourly=hourly,
        daily_total=sum(hourly),
        confidence=compute_confidence(len(context.historical), context.is_holiday),
        peak_hours=peak_hours(hourly),
        factors=ForecastFactors(**{k: round_half_up(v, 2) for k, v in factors.model_dump().items()}),
    )
    logger.debug("Forecast daily total %d m³ (confidence %.2f)", forecast.daily_total, forecast.confidence)

    return forecast


def predict_multi_day(
    context: DemandContext | dict,
    days_ahead: int,
    start_date: Optional[date] = None,
    options: Optional[ForecasterOptions | dict] = None,
    rng: Optional[np.random.Generator] = None,
) -> list[DemandForecast]:
    """Forecast several consecutive days from the same history.

    The day of week advances from ``context.day_of_week``. Each day's holiday
    flag comes from the configured calendar only; ``context.is_holiday`` is
    ignored.

    Args:
        context: Inputs for the first day
        days_ahead: Number of days to forecast
        start_date: Calendar date of the first day (today when omitted)
        options: Forecaster options
        rng: Random source shared by all days

    Returns:
        One DemandForecast per day
    """
    if days_ahead < 0:
        raise InputValidationError(f"days_ahead must be >= 0, got {days_ahead}")

    context = coerce(DemandContext, context)
    options = coerce(ForecasterOptions, options or {})
    rng = rng if rng is not None else np.random.default_rng()
    start_date = start_date or date.today()
    holidays = set(options.holiday_dates)

    forecasts = []
    for offset in range(days_ahead):
        day = start_date + timedelta(days=offset)
        day_context = context.model_copy(
            update={
                "day_of_week": (context.day_of_week + offset) % 7,
                "is_holiday": day in holidays,
            }
        )
        forecasts.append(predict_demand(day_context, options, rng))

    return forecasts


def describe_forecaster(options: Optional[ForecasterOptions | dict] = None) -> AlgorithmDescriptor:
    """Describe the forecaster and its active parameters."""
    options = coerce(ForecasterOptions, options or {})
    parameters = options.model_dump(mode="json")
    heatwave, hot, warm = (threshold for threshold, _ in c.HOT_TEMPERATURE_FACTORS)
    parameters["temperature_thresholds"] = {
        "heatwave": heatwave,
        "hot": hot,
        "warm": warm,
        "cool": c.COOL_TEMPERATURE_THRESHOLD,
    }
    return AlgorithmDescriptor(
        name="Pattern-Based Demand Forecaster",
        parameters=parameters,
        description=(
            "Time series forecasting for water demand using pattern matching, "
            "seasonal adjustments, and temperature correlation"
        ),
    )
