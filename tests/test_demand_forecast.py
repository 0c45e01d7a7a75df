"""Test the pattern-based demand forecaster."""

from datetime import date

import numpy as np
import pandas as pd
import pytest

from pumpq_engine.core.schemas import DemandContext, ForecasterOptions
from pumpq_engine.core.validate import InputValidationError
from pumpq_engine.forecast.pattern import (
    compute_confidence,
    default_daily_pattern,
    extract_daily_pattern,
    temperature_factor,
)
from pumpq_engine.forecast.predictor import describe_forecaster, peak_hours, predict_demand, predict_multi_day
from pumpq_engine.forecast.providers import PatternDemandForecaster

NO_JITTER = ForecasterOptions(jitter=0.0)


@pytest.fixture
def flat_context():
    """A week of constant 100 m³/h on a plain rainy Monday."""
    return DemandContext(historical=[100.0] * 168, day_of_week=1, temperature_c=25.0, season="rainy")


def test_constant_history_pattern():
    assert extract_daily_pattern([100.0] * 168) == [100.0] * 24


def test_short_history_uses_default_pattern():
    """Fewer than 24 points give the base consumption shaped by hour buckets."""
    options = ForecasterOptions()
    pattern = extract_daily_pattern([100.0] * 23, options)

    assert pattern == default_daily_pattern(options)
    assert pattern[12] == pytest.approx(6450 / 24)
    assert pattern[7] == pytest.approx(6450 / 24 * 1.3)


def test_partial_day_ignored():
    """Trailing hours of an incomplete day do not affect the pattern."""
    history = [10.0] * 24 + [30.0] * 24 + [1000.0] * 5
    assert extract_daily_pattern(history) == [20.0] * 24


@pytest.mark.parametrize(
    "history_length,is_holiday,expected",
    [
        (0, False, 0.70),
        (24, False, 0.70),
        (72, False, 0.78),
        (168, False, 0.85),
        (168, True, 0.75),
        (72, True, 0.68),
        (0, True, 0.60),
    ],
)
def test_confidence(history_length, is_holiday, expected):
    confidence = compute_confidence(history_length, is_holiday)

    assert confidence == pytest.approx(expected)
    assert 0.5 <= confidence <= 0.95


@pytest.mark.parametrize(
    "temperature,expected",
    [(40.0, 1.25), (38.0, 1.15), (36.0, 1.15), (31.0, 1.08), (30.0, 1.0), (20.0, 1.0), (19.9, 0.92)],
)
def test_temperature_factor(temperature, expected):
    """Thresholds are exclusive."""
    assert temperature_factor(temperature) == expected


def test_flat_history_forecast(flat_context):
    """Without jitter the forecast is the pattern times the hour bucket multiplier."""
    forecast = predict_demand(flat_context, NO_JITTER, np.random.default_rng(0))

    assert forecast.hourly[7] == 130
    assert forecast.hourly[19] == 140
    assert forecast.hourly[0] == 60
    assert forecast.hourly[12] == 100
    assert forecast.peak_hours == [6, 17, 18, 19, 20, 21]
    assert forecast.confidence == pytest.approx(0.85)


def test_forecast_shape(flat_context):
    """24 non-negative whole values that add up to the daily total."""
    forecast = predict_demand(flat_context, rng=np.random.default_rng(1))

    assert len(forecast.hourly) == 24
    assert all(isinstance(v, int) and v >= 0 for v in forecast.hourly)
    assert forecast.daily_total == sum(forecast.hourly)
    assert len(forecast.peak_hours) == 6
    assert forecast.peak_hours == sorted(forecast.peak_hours)


def test_jitter_bounds(flat_context):
    """Each hour stays within ±5 % of its jitter-free value."""
    expected = predict_demand(flat_context, NO_JITTER, np.random.default_rng(0)).hourly
    forecast = predict_demand(flat_context, rng=np.random.default_rng(2))

    for value, center in zip(forecast.hourly, expected):
        assert center * 0.95 - 1 <= value <= center * 1.05 + 1


def test_seed_reproducibility(flat_context):
    first = predict_demand(flat_context, rng=np.random.default_rng(3))
    second = predict_demand(flat_context, rng=np.random.default_rng(3))

    assert first.hourly == second.hourly


def test_factors_reported(flat_context):
    """Calendar and weather factors scale every hour."""
    context = flat_context.model_copy(
        update={"day_of_week": 5, "is_holiday": True, "temperature_c": 36.0, "season": "dry"}
    )
    forecast = predict_demand(context, NO_JITTER, np.random.default_rng(0))

    assert forecast.factors.day_of_week_factor == 1.05
    assert forecast.factors.holiday_factor == 0.85
    assert forecast.factors.temperature_factor == 1.15
    assert forecast.factors.seasonal_factor == 1.15
    # 100 * 1.05 * 0.85 * 1.15 * 1.15
    assert forecast.hourly[12] == 118


def test_zero_history_hours_fall_back_to_base(flat_context):
    """A zero pattern hour uses base consumption / 24."""
    context = flat_context.model_copy(update={"historical": [0.0] * 24})
    forecast = predict_demand(context, NO_JITTER, np.random.default_rng(0))

    assert forecast.hourly[12] == 269
    assert forecast.hourly[0] == 161


def test_multi_day_calendar(flat_context):
    """Day of week advances and configured holidays are applied."""
    context = flat_context.model_copy(update={"day_of_week": 4})
    forecasts = predict_multi_day(
        context, 3, start_date=date(2026, 12, 24), options=NO_JITTER, rng=np.random.default_rng(0)
    )

    assert len(forecasts) == 3
    assert [f.factors.day_of_week_factor for f in forecasts] == [1.03, 1.05, 0.92]
    assert [f.factors.holiday_factor for f in forecasts] == [1.0, 0.85, 1.0]


def test_multi_day_holidays_from_calendar_only(flat_context):
    """The context holiday flag does not override the calendar."""
    context = flat_context.model_copy(update={"is_holiday": True})
    forecasts = predict_multi_day(
        context, 2, start_date=date(2026, 6, 1), options=NO_JITTER, rng=np.random.default_rng(0)
    )

    assert [f.factors.holiday_factor for f in forecasts] == [1.0, 1.0]
    assert all(f.confidence == pytest.approx(0.85) for f in forecasts)


def test_multi_day_zero_days(flat_context):
    assert predict_multi_day(flat_context, 0) == []


def test_multi_day_negative_days_rejected(flat_context):
    with pytest.raises(InputValidationError):
        predict_multi_day(flat_context, -1)


@pytest.mark.parametrize(
    "update",
    [
        {"day_of_week": 7},
        {"historical": [-1.0] * 24},
        {"historical": [100.0] * 23 + [float("nan")]},
        {"historical": [float("inf")] * 24},
        {"temperature_c": float("nan")},
        {"season": "monsoon"},
    ],
)
def test_invalid_context_rejected(flat_context, update):
    context = {**flat_context.model_dump(), **update}

    with pytest.raises(InputValidationError):
        predict_demand(context)


def test_invalid_bucket_hours_rejected(flat_context):
    with pytest.raises(InputValidationError):
        predict_demand(flat_context, {"night_hours": [24]})


def test_peak_hours_ties():
    """Earlier hours win ties and the result is ascending."""
    assert peak_hours([5] * 24, 3) == [0, 1, 2]
    assert peak_hours([1] * 20 + [9, 9, 9, 9], 2) == [20, 21]


def test_forecaster_from_dataframe():
    """History can come from a bundle dataframe."""
    index = pd.date_range("2026-03-01", periods=72, freq="h")
    history = pd.DataFrame({"demand_m3_h": [100.0] * 72}, index=index)

    forecaster = PatternDemandForecaster(NO_JITTER)
    forecast = forecaster.forecast_from_history(history, day_of_week=1, temperature_c=25.0)

    assert forecast.hourly[12] == 100
    assert forecast.confidence == pytest.approx(0.78)


def test_describe_forecaster():
    params = describe_forecaster().parameters

    assert params["base_consumption_m3_day"] == 6450
    assert params["temperature_thresholds"] == {"heatwave": 38.0, "hot": 35.0, "warm": 30.0, "cool": 20.0}
