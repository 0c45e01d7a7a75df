"""Input validation beyond Pydantic schemas."""

from typing import TypeVar

import pandas as pd
import pydantic

from pumpq_engine.core.constants import (
    COL_DEMAND_M3_H,
    HOURS_PER_DAY,
    MAX_LEVEL_PCT,
    MIN_LEVEL_PCT,
    NUMERICAL_TOLERANCE,
    READING_REQUIRED_COLUMNS,
)

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


class InputValidationError(ValueError):
    """Raised when a caller passes malformed input to an engine."""

    pass


def coerce(model_cls: type[ModelT], value) -> ModelT:
    """Return ``value`` as an instance of ``model_cls``.

    Plain dicts are validated; instances pass through untouched.

    Raises:
        InputValidationError: If the value does not satisfy the schema
    """
    if isinstance(value, model_cls):
        return value
    try:
        return model_cls.model_validate(value)
    except pydantic.ValidationError as e:
        raise InputValidationError(f"Invalid {model_cls.__name__}: {e}") from e


def validate_chromosome(chromosome, max_active_pumps: int) -> list[int]:
    """Validate a pump-activation schedule.

    Args:
        chromosome: Active pump count per hour
        max_active_pumps: Upper bound for each gene

    Returns:
        The schedule as a list of ints

    Raises:
        InputValidationError: If the length is not 24 or a gene is out of range
    """
    genes = [int(g) for g in chromosome]
    if len(genes) != HOURS_PER_DAY:
        raise InputValidationError(
            f"Schedule must have {HOURS_PER_DAY} hourly entries, got {len(genes)}"
        )

    out_of_range = [(h, g) for h, g in enumerate(genes) if not 0 <= g <= max_active_pumps]
    if out_of_range:
        raise InputValidationError(
            f"Active pump counts must be within [0, {max_active_pumps}]. "
            f"Found (hour, count): {out_of_range}"
        )

    return genes


def validate_schedule_result(schedule, request) -> None:
    """Validate an optimized schedule against the request it answers.

    Args:
        schedule: OptimizedSchedule instance
        request: ScheduleRequest instance

    Raises:
        InputValidationError: If the schedule is malformed
    """
    validate_chromosome(schedule.planning, request.constraints.max_active_pumps)

    if len(schedule.reservoir_levels) != HOURS_PER_DAY + 1:
        raise InputValidationError(
            f"Reservoir trajectory must have {HOURS_PER_DAY + 1} points, "
            f"got {len(schedule.reservoir_levels)}"
        )

    for level in schedule.reservoir_levels:
        if not MIN_LEVEL_PCT - NUMERICAL_TOLERANCE <= level <= MAX_LEVEL_PCT + NUMERICAL_TOLERANCE:
            raise InputValidationError(f"Reported reservoir level out of range: {level}")


def validate_demand_history(df: pd.DataFrame) -> None:
    """Validate a demand history dataframe.

    Args:
        df: Hourly history with DatetimeIndex

    Raises:
        InputValidationError: If validation fails
    """
    if COL_DEMAND_M3_H not in df.columns:
        raise InputValidationError(f"Missing required column: {COL_DEMAND_M3_H}")

    _validate_index(df)

    # Check hourly step
    if len(df) > 1:
        time_diffs = df.index.to_series().diff().dropna()
        if not (time_diffs == pd.Timedelta(hours=1)).all():
            raise InputValidationError(
                f"Demand history must be hourly. Found: {time_diffs.value_counts().to_dict()}"
            )

    if df[COL_DEMAND_M3_H].isna().any():
        raise InputValidationError(f"NaN values found in column: {COL_DEMAND_M3_H}")

    if (df[COL_DEMAND_M3_H] < 0).any():
        raise InputValidationError(f"Column {COL_DEMAND_M3_H} contains negative values")


def validate_sensor_frame(df: pd.DataFrame) -> None:
    """Validate a sensor readings dataframe.

    Args:
        df: Readings with DatetimeIndex

    Raises:
        InputValidationError: If validation fails
    """
    missing_cols = set(READING_REQUIRED_COLUMNS) - set(df.columns)
    if missing_cols:
        raise InputValidationError(f"Missing required columns: {missing_cols}")

    _validate_index(df)

    if df[READING_REQUIRED_COLUMNS].isna().any().any():
        nan_cols = df[READING_REQUIRED_COLUMNS].columns[df[READING_REQUIRED_COLUMNS].isna().any()].tolist()
        raise InputValidationError(f"NaN values found in columns: {nan_cols}")


def _validate_index(df: pd.DataFrame) -> None:
    if not isinstance(df.index, pd.DatetimeIndex):
        raise InputValidationError("Timeseries must have DatetimeIndex")

    if not df.index.is_monotonic_increasing:
        raise InputValidationError("Timestamps must be monotonic increasing")

    if df.index.has_duplicates:
        raise InputValidationError("Duplicate timestamps found")
