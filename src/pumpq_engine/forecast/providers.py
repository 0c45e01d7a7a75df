"""Demand forecaster implementations."""

from typing import Optional

import numpy as np
import pandas as pd

from pumpq_engine.core.constants import COL_DEMAND_M3_H
from pumpq_engine.core.schemas import DemandContext, DemandForecast, ForecasterOptions
from pumpq_engine.forecast.predictor import predict_demand


class PatternDemandForecaster:
    """Pattern-plus-factors forecaster.

    Holds the forecaster options so callers only pass the daily context.
    """

    def __init__(self, options: Optional[ForecasterOptions] = None):
        """Initialize with forecaster options.

        Args:
            options: Forecaster options (defaults when omitted)
        """
        self.options = options or ForecasterOptions()

    def forecast(self, context: DemandContext, rng: Optional[np.random.Generator] = None) -> DemandForecast:
        return predict_demand(context, self.options, rng)

    def forecast_from_history(
        self,
        history: pd.DataFrame,
        day_of_week: int,
        is_holiday: bool = False,
        temperature_c: float = 28.0,
        season: str = "rainy",
        rng: Optional[np.random.Generator] = None,
    ) -> DemandForecast:
        """Forecast from a demand history dataframe.

        Args:
            history: Hourly history with a demand_m3_h column, oldest first
            day_of_week: Day being forecast, 0 = Sunday
            is_holiday: Whether that day is a holiday
            temperature_c: Expected temperature
            season: "dry" or "rainy"
            rng: Random source

        Returns:
            DemandForecast for the day
        """
        context = DemandContext(
            historical=history[COL_DEMAND_M3_H].astype(float).tolist(),
            day_of_week=day_of_week,
            is_holiday=is_holiday,
            temperature_c=temperature_c,
            season=season,
        )
        return self.forecast(context, rng)
