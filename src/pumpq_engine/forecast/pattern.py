"""Daily demand pattern and adjustment factors."""

import numpy as np

from pumpq_engine.core import constants as c
from pumpq_engine.core.schemas import ForecasterOptions


def default_daily_pattern(options: ForecasterOptions) -> list[float]:
    """Flat base consumption shaped by the diurnal bucket multipliers."""
    base = options.base_consumption_m3_day / c.HOURS_PER_DAY
    return [base * options.hour_multiplier(hour) for hour in range(c.HOURS_PER_DAY)]


def extract_daily_pattern(historical: list[float], options: ForecasterOptions | None = None) -> list[float]:
    """Average same-hour consumption across all complete days of history.

    Trailing hours of an incomplete day are ignored. Fewer than 24 points
    fall back to the default pattern.

    Args:
        historical: Hourly consumption, oldest first, starting at hour 0
        options: Forecaster options (for the default pattern)

    Returns:
        24 hourly values
    """
    options = options or ForecasterOptions()

    if len(historical) < c.HOURS_PER_DAY:
        return default_daily_pattern(options)

    num_days = len(historical) // c.HOURS_PER_DAY
    days = np.asarray(historical[: num_days * c.HOURS_PER_DAY], dtype=float).reshape(num_days, c.HOURS_PER_DAY)

    return days.mean(axis=0).tolist()


def day_of_week_factor(day_of_week: int) -> float:
    """Weekday/weekend factor, 0 = Sunday. Unknown days get 1.0."""
    return c.DAY_OF_WEEK_FACTORS.get(day_of_week, 1.0)


def holiday_factor(is_holiday: bool) -> float:
    return c.HOLIDAY_FACTOR if is_holiday else 1.0


def temperature_factor(temperature_c: float) -> float:
    """Hotter days drive consumption up, cool days down."""
    for threshold, factor in c.HOT_TEMPERATURE_FACTORS:
        if temperature_c > threshold:
            return factor
    if temperature_c < c.COOL_TEMPERATURE_THRESHOLD:
        return c.COOL_TEMPERATURE_FACTOR
    return 1.0


def seasonal_factor(season: str) -> float:
    return c.DRY_SEASON_FACTOR if season == "dry" else 1.0


def compute_confidence(history_length: int, is_holiday: bool) -> float:
    """Confidence grows with history and drops on holidays, within [0.5, 0.95]."""
    confidence = c.BASE_CONFIDENCE

    if history_length >= c.HOURS_PER_WEEK:
        confidence += c.WEEK_HISTORY_BONUS
    elif history_length >= c.THREE_DAY_HISTORY_POINTS:
        confidence += c.THREE_DAY_HISTORY_BONUS

    if is_holiday:
        confidence -= c.HOLIDAY_CONFIDENCE_PENALTY

    return min(c.MAX_CONFIDENCE, max(c.MIN_CONFIDENCE, confidence))
