"""Run bundle I/O operations.

A run bundle is a folder containing:
- station_config.yaml: Station assets, constraints and engine options
- run_config.yaml: Run configuration (seed, tariffs, forecast context)
- demand_history.parquet: Hourly demand history
- sensor_readings.parquet: Pump sensor readings (optional)
- (outputs):
  - forecast.json: Demand forecast for the planning day
  - schedule.json: Optimized pump schedule
  - pareto_front.json: Cost / stability trade-off samples
  - anomalies.parquet: Per-reading anomaly scores
  - metrics.json: Computed metrics
  - bundle_metadata.json: Reproducibility metadata
"""

import json
from pathlib import Path
from typing import Optional

import pandas as pd
import yaml

from pumpq_engine import __version__
from pumpq_engine.core.schemas import (
    AnomalyResult,
    BundleMetadata,
    DemandForecast,
    OptimizedSchedule,
    ParetoSample,
    RunConfig,
    StationConfig,
)
from pumpq_engine.core.validate import coerce
from pumpq_engine.io.formats import anomalies_to_frame, read_parquet_timeseries, write_parquet_timeseries

STATION_CONFIG_FILE = "station_config.yaml"
RUN_CONFIG_FILE = "run_config.yaml"
DEMAND_HISTORY_FILE = "demand_history.parquet"
SENSOR_READINGS_FILE = "sensor_readings.parquet"

REQUIRED_FILES = [STATION_CONFIG_FILE, RUN_CONFIG_FILE, DEMAND_HISTORY_FILE]


def load_bundle(
    bundle_path: str | Path,
) -> tuple[StationConfig, RunConfig, pd.DataFrame, Optional[pd.DataFrame]]:
    """Load a run bundle.

    Args:
        bundle_path: Path to bundle directory

    Returns:
        Tuple of (station_config, run_config, demand_history_df, sensor_readings_df or None)
    """
    bundle_path = Path(bundle_path)

    if not bundle_path.exists():
        raise FileNotFoundError(f"Bundle not found: {bundle_path}")

    with open(bundle_path / STATION_CONFIG_FILE) as f:
        station_config = coerce(StationConfig, yaml.safe_load(f))

    with open(bundle_path / RUN_CONFIG_FILE) as f:
        run_config = coerce(RunConfig, yaml.safe_load(f))

    demand_history = read_parquet_timeseries(str(bundle_path / DEMAND_HISTORY_FILE))

    sensor_readings = None
    if (bundle_path / SENSOR_READINGS_FILE).exists():
        sensor_readings = read_parquet_timeseries(str(bundle_path / SENSOR_READINGS_FILE))

    return station_config, run_config, demand_history, sensor_readings


def _write_json(path: Path, payload) -> None:
    with open(path, "w") as f:
        json.dump(payload, f, indent=2, default=str)


def write_results(
    bundle_path: str | Path,
    forecast: DemandForecast,
    schedule: OptimizedSchedule,
    pareto_front: list[ParetoSample],
    anomalies: Optional[list[AnomalyResult]] = None,
    metrics: dict | None = None,
    seed: Optional[int] = None,
) -> None:
    """Write results to bundle.

    Args:
        bundle_path: Path to bundle directory
        forecast: Demand forecast
        schedule: Optimized schedule
        pareto_front: Trade-off samples
        anomalies: Optional detector results
        metrics: Optional metrics dictionary
        seed: Seed used for the run
    """
    bundle_path = Path(bundle_path)
    bundle_path.mkdir(exist_ok=True)

    _write_json(bundle_path / "forecast.json", forecast.model_dump(mode="json"))
    _write_json(bundle_path / "schedule.json", schedule.model_dump(mode="json"))
    _write_json(bundle_path / "pareto_front.json", [p.model_dump(mode="json") for p in pareto_front])

    if anomalies:
        write_parquet_timeseries(anomalies_to_frame(anomalies), str(bundle_path / "anomalies.parquet"))

    if metrics is not None:
        _write_json(bundle_path / "metrics.json", metrics)

    metadata = BundleMetadata(pumpq_version=__version__, seed=seed)
    _write_json(bundle_path / "bundle_metadata.json", metadata.model_dump(mode="json"))


def init_bundle(
    bundle_path: str | Path,
    station_config: StationConfig,
    run_config: RunConfig,
    demand_history: pd.DataFrame,
    sensor_readings: Optional[pd.DataFrame] = None,
) -> None:
    """Initialize a new run bundle.

    Args:
        bundle_path: Path to bundle directory
        station_config: Station configuration
        run_config: Run configuration
        demand_history: Hourly demand history dataframe
        sensor_readings: Optional sensor readings dataframe
    """
    bundle_path = Path(bundle_path)
    bundle_path.mkdir(parents=True, exist_ok=True)

    with open(bundle_path / STATION_CONFIG_FILE, "w") as f:
        yaml.safe_dump(station_config.model_dump(mode="json"), f, default_flow_style=False, sort_keys=False)

    with open(bundle_path / RUN_CONFIG_FILE, "w") as f:
        yaml.safe_dump(run_config.model_dump(mode="json"), f, default_flow_style=False, sort_keys=False)

    write_parquet_timeseries(demand_history, str(bundle_path / DEMAND_HISTORY_FILE))

    if sensor_readings is not None:
        write_parquet_timeseries(sensor_readings, str(bundle_path / SENSOR_READINGS_FILE))


def validate_bundle(bundle_path: str | Path) -> bool:
    """Validate that a bundle has all required files.

    Args:
        bundle_path: Path to bundle directory

    Returns:
        True if valid

    Raises:
        ValueError: If bundle is invalid
    """
    bundle_path = Path(bundle_path)

    for filename in REQUIRED_FILES:
        if not (bundle_path / filename).exists():
            raise ValueError(f"Missing required file: {filename}")

    return True
