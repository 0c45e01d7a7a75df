"""Generate synthetic example bundles for testing and demonstration."""

from pathlib import Path

import numpy as np
import pandas as pd

from pumpq_engine.core.schemas import (
    DetectorOptions,
    OperatingConstraints,
    OptimizerOptions,
    PumpConfig,
    RunConfig,
    StationConfig,
)
from pumpq_engine.io.bundle import init_bundle

BUNDLES_DIR = Path(__file__).parent.parent / "examples" / "bundles"

# Three-band tariff (FCFA/kWh): off-peak night, normal day, evening peak
TARIFFS = [68.0] * 6 + [110.0] * 12 + [150.0] * 4 + [68.0] * 2


def station_config(station_id: str) -> StationConfig:
    """Three identical 150 m³/h pumps."""
    pumps = [
        PumpConfig(pump_id=f"P{i}", power_kw=110.0, efficiency_kwh_per_m3=0.42, max_flow_m3_h=150.0)
        for i in range(1, 4)
    ]
    return StationConfig(
        station_id=station_id,
        pumps=pumps,
        constraints=OperatingConstraints(
            min_reservoir_pct=20.0,
            max_reservoir_pct=95.0,
            min_power_factor=0.9,
            max_active_pumps=3,
        ),
        optimizer=OptimizerOptions(population_size=60, generations=40),
        detector=DetectorOptions(n_estimators=50, anomaly_threshold=0.15),
    )


def demand_history(num_days: int, rng: np.random.Generator) -> pd.DataFrame:
    """Hourly demand with morning and evening peaks."""
    dates = pd.date_range("2026-03-01", periods=num_days * 24, freq="h")
    hour = dates.hour.to_numpy()

    base = 270.0
    shape = 1.0 + 0.3 * np.exp(-((hour - 7.5) ** 2) / 3) + 0.4 * np.exp(-((hour - 19) ** 2) / 4)
    shape = np.where((hour >= 22) | (hour <= 5), 0.6, shape)
    demand = np.maximum(base * shape + rng.normal(0, 10, len(dates)), 0)

    return pd.DataFrame({"demand_m3_h": demand}, index=dates)


def sensor_readings(num_hours: int, rng: np.random.Generator) -> pd.DataFrame:
    """Pump readings with a few injected faults."""
    dates = pd.date_range("2026-03-01", periods=num_hours, freq="h")

    readings = pd.DataFrame(
        {
            "kwh_per_m3": rng.normal(0.42, 0.01, num_hours),
            "flow_m3_h": rng.normal(300.0, 8.0, num_hours),
            "reservoir_pct": rng.normal(60.0, 5.0, num_hours),
            "vibration": rng.normal(2.5, 0.2, num_hours),
            "temperature": rng.normal(45.0, 1.5, num_hours),
            "pressure": rng.normal(4.2, 0.1, num_hours),
        },
        index=dates,
    )

    # Over-consumption, leak, and a drained reservoir
    readings.iloc[40, readings.columns.get_loc("kwh_per_m3")] = 0.62
    readings.iloc[80, readings.columns.get_loc("flow_m3_h")] = 360.0
    readings.iloc[80, readings.columns.get_loc("reservoir_pct")] = 38.0
    readings.iloc[120, readings.columns.get_loc("reservoir_pct")] = 18.0

    return readings


def generate_ziga_dry_season(rng: np.random.Generator):
    """Week of history, hot dry-season weekday, with sensor readings."""
    print("Generating ziga_dry_season bundle...")

    run_config = RunConfig(
        run_id="plan_001",
        seed=42,
        reservoir_level_pct=55.0,
        tariffs=TARIFFS,
        day_of_week=3,
        is_holiday=False,
        temperature_c=37.0,
        season="dry",
    )

    bundle_path = BUNDLES_DIR / "ziga_dry_season"
    init_bundle(
        bundle_path,
        station_config("ziga"),
        run_config,
        demand_history(7, rng),
        sensor_readings(168, rng),
    )
    print(f"✓ Created {bundle_path}")


def generate_ziga_holiday(rng: np.random.Generator):
    """Two days of history on a rainy-season holiday, no sensor data."""
    print("Generating ziga_holiday bundle...")

    run_config = RunConfig(
        run_id="plan_002",
        seed=7,
        reservoir_level_pct=40.0,
        tariffs=TARIFFS,
        day_of_week=5,
        is_holiday=True,
        temperature_c=24.0,
        season="rainy",
    )

    bundle_path = BUNDLES_DIR / "ziga_holiday"
    init_bundle(bundle_path, station_config("ziga"), run_config, demand_history(2, rng))
    print(f"✓ Created {bundle_path}")


if __name__ == "__main__":
    print("Generating example bundles...\n")
    rng = np.random.default_rng(2026)
    generate_ziga_dry_season(rng)
    generate_ziga_holiday(rng)
    print("\n✓ All example bundles generated")
