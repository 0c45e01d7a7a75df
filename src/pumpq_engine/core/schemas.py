"""Pydantic schemas for configuration, engine inputs and results."""

from datetime import date, datetime
from typing import Annotated, Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from pumpq_engine.core import constants as c

# A 24-entry hourly series (tariffs or demand), all values >= 0
HourlyProfile = Annotated[
    list[Annotated[float, Field(ge=0, allow_inf_nan=False)]],
    Field(min_length=c.HOURS_PER_DAY, max_length=c.HOURS_PER_DAY),
]

Season = Literal["dry", "rainy"]


class PumpConfig(BaseModel):
    """Pump asset configuration."""

    model_config = ConfigDict(allow_inf_nan=False)

    pump_id: str = Field(..., description="Unique pump identifier")
    power_kw: float = Field(..., gt=0, description="Rated power in kW")
    efficiency_kwh_per_m3: float = Field(..., gt=0, description="Specific energy in kWh/m³")
    max_flow_m3_h: float = Field(..., gt=0, description="Maximum flow in m³/h")


class OperatingConstraints(BaseModel):
    """Station operating limits."""

    model_config = ConfigDict(allow_inf_nan=False)

    min_reservoir_pct: float = Field(default=20.0, ge=0, le=100)
    max_reservoir_pct: float = Field(default=95.0, ge=0, le=100)
    min_power_factor: float = Field(default=0.9, gt=0, le=1)
    max_active_pumps: int = Field(default=3, ge=1)

    @model_validator(mode="after")
    def validate_reservoir_band(self) -> "OperatingConstraints":
        """Ensure the reservoir band is not empty."""
        if self.min_reservoir_pct >= self.max_reservoir_pct:
            raise ValueError(
                f"min_reservoir_pct ({self.min_reservoir_pct}) must be below "
                f"max_reservoir_pct ({self.max_reservoir_pct})"
            )
        return self


class OptimizerOptions(BaseModel):
    """Evolutionary search parameters."""

    population_size: int = Field(default=c.DEFAULT_POPULATION_SIZE, ge=1)
    generations: int = Field(default=c.DEFAULT_GENERATIONS, ge=0)
    crossover_rate: float = Field(default=c.DEFAULT_CROSSOVER_RATE, ge=0, le=1)
    mutation_rate: float = Field(default=c.DEFAULT_MUTATION_RATE, ge=0, le=1)
    elite_count: int = Field(default=c.DEFAULT_ELITE_COUNT, ge=0)
    tournament_size: int = Field(default=c.DEFAULT_TOURNAMENT_SIZE, ge=1)


class ParetoOptions(BaseModel):
    """Heuristic trade-off sampling parameters."""

    points: int = Field(default=c.DEFAULT_PARETO_POINTS, ge=1)
    off_peak_tariff_threshold: float = Field(default=c.DEFAULT_OFF_PEAK_TARIFF_THRESHOLD, ge=0)
    min_ratio: float = Field(default=c.DEFAULT_PARETO_MIN_RATIO, ge=0, le=1)
    ratio_span: float = Field(default=c.DEFAULT_PARETO_RATIO_SPAN, ge=0, le=1)


class ScheduleRequest(BaseModel):
    """Inputs of a single scheduling run."""

    model_config = ConfigDict(allow_inf_nan=False)

    demand: HourlyProfile
    tariffs: HourlyProfile
    reservoir_level_pct: float = Field(..., ge=0, le=100)
    pumps: list[PumpConfig] = Field(..., min_length=1)
    constraints: OperatingConstraints = Field(default_factory=OperatingConstraints)

    @property
    def mean_efficiency(self) -> float:
        return sum(p.efficiency_kwh_per_m3 for p in self.pumps) / len(self.pumps)

    @property
    def unit_flow(self) -> float:
        """Flow contributed by each active pump (first pump is the reference unit)."""
        return self.pumps[0].max_flow_m3_h


class OptimizedSchedule(BaseModel):
    """Best schedule found by the optimizer."""

    planning: list[int] = Field(..., min_length=c.HOURS_PER_DAY, max_length=c.HOURS_PER_DAY)
    cost: float
    savings: float
    uniform_cost: float
    power_factor: float
    reservoir_levels: list[float]
    fitness: float
    fitness_history: list[float] = Field(default_factory=list)


class ParetoSample(BaseModel):
    """One cost / reservoir-stability trade-off point."""

    cost: float
    stability: float
    schedule: list[int]


class SensorReading(BaseModel):
    """Single pump sensor reading."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    timestamp: datetime
    kwh_per_m3: float
    flow_m3_h: float
    reservoir_pct: float
    vibration: Optional[float] = None
    temperature: Optional[float] = None
    pressure: Optional[float] = None


class FeatureStats(BaseModel):
    mean: float
    std: float = Field(..., ge=0)


class BaselineStats(BaseModel):
    """Batch-wide statistics used for z-scores."""

    kwh_per_m3: FeatureStats
    flow_m3_h: FeatureStats
    reservoir_pct: FeatureStats


class DetectorOptions(BaseModel):
    """Anomaly detector parameters."""

    n_estimators: int = Field(default=c.DEFAULT_N_ESTIMATORS, ge=1)
    max_samples: int = Field(default=c.DEFAULT_MAX_SAMPLES, ge=2)
    anomaly_threshold: float = Field(default=c.DEFAULT_ANOMALY_THRESHOLD, ge=0, le=1)
    contamination: float = Field(default=c.DEFAULT_CONTAMINATION, ge=0, le=0.5)
    bootstrap: bool = Field(default=False, description="Random subsample per tree instead of a fixed prefix")
    critical_reservoir_pct: float = Field(default=c.DEFAULT_CRITICAL_RESERVOIR_PCT, ge=0, le=100)


class FeatureDeviations(BaseModel):
    kwh_per_m3_deviation: float = 0.0
    flow_deviation: float = 0.0
    combined_score: float = 0.0


class AnomalyResult(BaseModel):
    """Detector output for one reading."""

    timestamp: datetime
    score: float = Field(..., ge=0, le=1)
    is_anomaly: bool
    probable_cause: str
    confidence: float = Field(..., ge=0, le=1)
    features: FeatureDeviations = Field(default_factory=FeatureDeviations)


class AnomalySummary(BaseModel):
    """Batch-level view of detector output."""

    total_readings: int
    anomaly_count: int
    anomaly_rate: float
    contamination: float
    exceeds_contamination: bool
    mean_score: float
    max_score: float


class TimelinePoint(BaseModel):
    timestamp: datetime
    score: float
    threshold: float


class DemandContext(BaseModel):
    """Inputs of a demand forecast."""

    model_config = ConfigDict(allow_inf_nan=False)

    historical: list[Annotated[float, Field(ge=0, allow_inf_nan=False)]] = Field(default_factory=list)
    day_of_week: int = Field(..., ge=0, le=6, description="0 = Sunday ... 6 = Saturday")
    is_holiday: bool = False
    temperature_c: float = 28.0
    season: Season = "rainy"


class ForecasterOptions(BaseModel):
    """Demand forecaster parameters."""

    base_consumption_m3_day: float = Field(default=c.DEFAULT_BASE_CONSUMPTION_M3_DAY, gt=0)
    morning_peak_hours: list[int] = Field(default_factory=lambda: list(c.MORNING_PEAK_HOURS))
    evening_peak_hours: list[int] = Field(default_factory=lambda: list(c.EVENING_PEAK_HOURS))
    night_hours: list[int] = Field(default_factory=lambda: list(c.NIGHT_HOURS))
    morning_peak_multiplier: float = Field(default=c.MORNING_PEAK_MULTIPLIER, gt=0)
    evening_peak_multiplier: float = Field(default=c.EVENING_PEAK_MULTIPLIER, gt=0)
    night_multiplier: float = Field(default=c.NIGHT_MULTIPLIER, gt=0)
    jitter: float = Field(default=c.DEFAULT_JITTER, ge=0, lt=1)
    holiday_dates: list[date] = Field(
        default_factory=lambda: [date.fromisoformat(d) for d in c.DEFAULT_HOLIDAY_DATES]
    )

    @field_validator("morning_peak_hours", "evening_peak_hours", "night_hours")
    @classmethod
    def validate_hours(cls, v: list[int]) -> list[int]:
        """Ensure hour buckets hold valid hours of day."""
        bad = [h for h in v if not 0 <= h < c.HOURS_PER_DAY]
        if bad:
            raise ValueError(f"Hours out of range 0-23: {bad}")
        return v

    def hour_multiplier(self, hour: int) -> float:
        """Diurnal bucket multiplier; morning wins over evening wins over night."""
        if hour in self.morning_peak_hours:
            return self.morning_peak_multiplier
        if hour in self.evening_peak_hours:
            return self.evening_peak_multiplier
        if hour in self.night_hours:
            return self.night_multiplier
        return 1.0


class ForecastFactors(BaseModel):
    day_of_week_factor: float
    holiday_factor: float
    temperature_factor: float
    seasonal_factor: float


class DemandForecast(BaseModel):
    """24-hour demand projection."""

    hourly: list[int] = Field(..., min_length=c.HOURS_PER_DAY, max_length=c.HOURS_PER_DAY)
    daily_total: int
    confidence: float = Field(..., ge=c.MIN_CONFIDENCE, le=c.MAX_CONFIDENCE)
    peak_hours: list[int]
    factors: ForecastFactors


class AccuracyReport(BaseModel):
    mape: float = 0.0
    rmse: float = 0.0
    within_5_percent: float = 0.0


class AlgorithmDescriptor(BaseModel):
    """Self-description of an engine and its active parameters."""

    name: str
    version: str = c.ALGORITHM_VERSION
    parameters: dict[str, Any]
    description: str


class StationConfig(BaseModel):
    """Station assets, limits and engine tuning."""

    station_id: str = Field(..., description="Unique station identifier")
    pumps: list[PumpConfig] = Field(..., min_length=1)
    constraints: OperatingConstraints = Field(default_factory=OperatingConstraints)
    optimizer: OptimizerOptions = Field(default_factory=OptimizerOptions)
    pareto: ParetoOptions = Field(default_factory=ParetoOptions)
    detector: DetectorOptions = Field(default_factory=DetectorOptions)
    forecaster: ForecasterOptions = Field(default_factory=ForecasterOptions)


class RunConfig(BaseModel):
    """Run-specific configuration."""

    model_config = ConfigDict(allow_inf_nan=False)

    run_id: str = Field(..., description="Unique run identifier")
    seed: Optional[int] = Field(default=None, ge=0, description="Seed for reproducible runs")
    reservoir_level_pct: float = Field(default=50.0, ge=0, le=100)
    tariffs: HourlyProfile
    day_of_week: int = Field(..., ge=0, le=6)
    is_holiday: bool = False
    temperature_c: float = 28.0
    season: Season = "rainy"


class BundleMetadata(BaseModel):
    """Metadata for reproducibility tracking."""

    created_at: datetime = Field(default_factory=datetime.utcnow)
    pumpq_version: str
    seed: Optional[int] = None
