"""Forecast evaluation and charting helpers."""

import math

import numpy as np
import pandas as pd

from pumpq_engine.core.constants import ACCURACY_TOLERANCE_PCT, DEFAULT_BAND_MARGIN, HOURS_PER_DAY
from pumpq_engine.core.metrics import round_half_up
from pumpq_engine.core.schemas import AccuracyReport, DemandForecast


def compute_prediction_accuracy(predicted: list[float], actual: list[float]) -> AccuracyReport:
    """Compare a forecast with observed values.

    Points with a zero actual value contribute 0 % error. Mismatched or empty
    inputs return an all-zero report.

    Args:
        predicted: Forecast values
        actual: Observed values, same length

    Returns:
        AccuracyReport with MAPE (%), RMSE and the share of points within 5 % (%)
    """
    if len(predicted) != len(actual) or len(predicted) == 0:
        return AccuracyReport()

    pred = np.asarray(predicted, dtype=float)
    obs = np.asarray(actual, dtype=float)

    error = np.abs(pred - obs)
    safe_obs = np.where(obs > 0, obs, 1.0)
    percent_error = np.where(obs > 0, error / safe_obs * 100, 0.0)

    mape = percent_error.mean()
    rmse = math.sqrt(((pred - obs) ** 2).mean())
    within = (percent_error <= ACCURACY_TOLERANCE_PCT).sum() / len(pred) * 100

    return AccuracyReport(
        mape=round_half_up(float(mape), 2),
        rmse=round_half_up(rmse, 2),
        within_5_percent=round_half_up(float(within)),
    )


def forecast_band(
    historical: list[float], forecast: DemandForecast, margin: float = DEFAULT_BAND_MARGIN
) -> pd.DataFrame:
    """Chart data: the last 24 h of history followed by the next 24 h forecast.

    Args:
        historical: Hourly history, oldest first
        forecast: Forecast for the following day
        margin: Relative half-width of the confidence band

    Returns:
        DataFrame indexed by labels "-24h" ... "-1h", "+1h" ... "+24h" with
        columns historical, predicted, upper_bound, lower_bound (NaN where
        not applicable). The lower bound is floored at 0.
    """
    tail = list(historical[-HOURS_PER_DAY:])
    padded = [np.nan] * (HOURS_PER_DAY - len(tail)) + tail

    past = pd.DataFrame(
        {
            "historical": padded,
            "predicted": np.nan,
            "upper_bound": np.nan,
            "lower_bound": np.nan,
        },
        index=[f"-{HOURS_PER_DAY - i}h" for i in range(HOURS_PER_DAY)],
    )

    predicted = np.asarray(forecast.hourly, dtype=float)
    future = pd.DataFrame(
        {
            "historical": np.nan,
            "predicted": predicted,
            "upper_bound": predicted * (1 + margin),
            "lower_bound": np.maximum(predicted * (1 - margin), 0.0),
        },
        index=[f"+{i + 1}h" for i in range(HOURS_PER_DAY)],
    )

    band = pd.concat([past, future])
    band.index.name = "label"
    return band
