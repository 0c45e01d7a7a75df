"""Data format helpers for Parquet I/O."""

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from pumpq_engine.core.constants import COL_TIMESTAMP, READING_OPTIONAL_COLUMNS, READING_REQUIRED_COLUMNS
from pumpq_engine.core.schemas import AnomalyResult, SensorReading


def read_parquet_timeseries(path: str) -> pd.DataFrame:
    """Read timeseries from Parquet file.

    Args:
        path: Path to Parquet file

    Returns:
        DataFrame with DatetimeIndex
    """
    df = pd.read_parquet(path)

    if COL_TIMESTAMP not in df.columns:
        raise ValueError(f"Timeseries must have '{COL_TIMESTAMP}' column")

    df[COL_TIMESTAMP] = pd.to_datetime(df[COL_TIMESTAMP])
    df = df.set_index(COL_TIMESTAMP)
    df.index.name = COL_TIMESTAMP

    return df


def write_parquet_timeseries(df: pd.DataFrame, path: str) -> None:
    """Write timeseries to Parquet file.

    Args:
        df: DataFrame with DatetimeIndex
        path: Output path
    """
    df_copy = df.copy()
    df_copy.index.name = COL_TIMESTAMP

    table = pa.Table.from_pandas(df_copy.reset_index())
    pq.write_table(table, path, compression="snappy")


def readings_from_frame(df: pd.DataFrame) -> list[SensorReading]:
    """Convert a sensor dataframe (DatetimeIndex) into readings.

    Optional columns that are missing or NaN become None.
    """
    optional = [col for col in READING_OPTIONAL_COLUMNS if col in df.columns]
    subset = df[READING_REQUIRED_COLUMNS + optional]
    frame = subset.astype(object).where(subset.notna(), None)

    return [
        SensorReading(timestamp=ts.to_pydatetime(), **row)
        for ts, row in zip(frame.index, frame.to_dict(orient="records"))
    ]


def readings_to_frame(readings: list[SensorReading]) -> pd.DataFrame:
    """Convert readings into a dataframe indexed by timestamp."""
    df = pd.DataFrame([r.model_dump() for r in readings])
    if df.empty:
        return pd.DataFrame(columns=READING_REQUIRED_COLUMNS + READING_OPTIONAL_COLUMNS)
    return df.set_index(COL_TIMESTAMP)


def anomalies_to_frame(results: list[AnomalyResult]) -> pd.DataFrame:
    """Flatten detector results into a dataframe indexed by timestamp."""
    rows = []
    for r in results:
        row = r.model_dump(exclude={"features"})
        row.update(r.features.model_dump())
        rows.append(row)

    df = pd.DataFrame(rows)
    if df.empty:
        return df
    return df.set_index(COL_TIMESTAMP)
