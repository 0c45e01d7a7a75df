"""Demand forecaster interface."""

from typing import Optional, Protocol

import numpy as np

from pumpq_engine.core.schemas import DemandContext, DemandForecast


class DemandForecaster(Protocol):
    """Protocol for demand forecasters.

    Forecasters take the history and calendar/weather context of a day and
    return a 24-hour demand projection that can be fed to the scheduler.
    """

    def forecast(self, context: DemandContext, rng: Optional[np.random.Generator] = None) -> DemandForecast:
        """Generate a forecast for the next 24 hours.

        Args:
            context: History, day of week, holiday flag, temperature, season
            rng: Random source

        Returns:
            DemandForecast with 24 hourly values
        """
        ...
