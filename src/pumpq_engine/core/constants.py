"""Canonical defaults, units, and feature names.

UNITS:
- Flow / demand: m³/h
- Specific energy: kWh/m³
- Tariffs: currency per kWh (FCFA/kWh for the reference station)
- Reservoir level: percent of usable capacity
- Power factor: cos φ, dimensionless in (0, 1]
- Time: hourly steps, 24 per planning day, hour 0 = midnight

RESERVOIR BALANCE EQUATION (per hour):
level[t] = level[t-1] + (production[t] - demand[t]) / RESERVOIR_CAPACITY_M3 * 100
"""

HOURS_PER_DAY = 24
HOURS_PER_WEEK = 7 * HOURS_PER_DAY

# Reservoir model: 1000 m³ of net inflow moves the level by 100 %
RESERVOIR_CAPACITY_M3 = 1000.0
MIN_LEVEL_PCT = 0.0
MAX_LEVEL_PCT = 100.0

# Optimizer defaults
DEFAULT_POPULATION_SIZE = 50
DEFAULT_GENERATIONS = 20
DEFAULT_CROSSOVER_RATE = 0.9
DEFAULT_MUTATION_RATE = 0.1
DEFAULT_ELITE_COUNT = 5
DEFAULT_TOURNAMENT_SIZE = 3

# Fitness weights
PRODUCTION_CAP_FACTOR = 1.2
RESERVOIR_VIOLATION_WEIGHT = 1000.0
POWER_FACTOR_PENALTY_WEIGHT = 100000.0
PUMP_HOUR_WEIGHT = 10.0

# Power factor model: cos φ = BASE + load_factor * SPAN
POWER_FACTOR_BASE = 0.85
POWER_FACTOR_SPAN = 0.15

# Pareto sampling
DEFAULT_PARETO_POINTS = 50
DEFAULT_OFF_PEAK_TARIFF_THRESHOLD = 100.0
DEFAULT_PARETO_MIN_RATIO = 0.2
DEFAULT_PARETO_RATIO_SPAN = 0.4

# Anomaly detector defaults
DEFAULT_N_ESTIMATORS = 50
DEFAULT_MAX_SAMPLES = 256
DEFAULT_ANOMALY_THRESHOLD = 0.15
DEFAULT_CONTAMINATION = 0.1
DEFAULT_CRITICAL_RESERVOIR_PCT = 30.0
MIN_READINGS_FOR_DETECTION = 10
EULER_GAMMA = 0.5772156649
STRUCTURAL_WEIGHT = 0.6
STATISTICAL_WEIGHT = 0.4
Z_SCORE_CAP = 3.0

FEATURE_KWH_PER_M3 = "kwh_per_m3"
FEATURE_FLOW = "flow_m3_h"
FEATURE_RESERVOIR = "reservoir_pct"

SPLIT_FEATURES = (FEATURE_KWH_PER_M3, FEATURE_FLOW, FEATURE_RESERVOIR)

CAUSE_INSUFFICIENT_DATA = "Insufficient data"
CAUSE_NORMAL = "Normal"
CAUSE_OVER_CONSUMPTION = "Energy over-consumption"
CAUSE_LEAK = "Probable leak detected"
CAUSE_WEAR = "Pump wear or fouling"
CAUSE_CRITICAL_RESERVOIR = "Critical reservoir level"
CAUSE_UNIDENTIFIED = "Unidentified anomaly"
CAUSE_SEPARATOR = " + "

# Static importance weights reported alongside detector output
FEATURE_IMPORTANCE = {
    "kWh/m³": 0.45,
    "Flow": 0.25,
    "Reservoir level": 0.15,
    "Vibration": 0.10,
    "Temperature": 0.05,
}

# Demand forecaster defaults
DEFAULT_BASE_CONSUMPTION_M3_DAY = 6450.0
MORNING_PEAK_HOURS = (6, 7, 8, 9)
EVENING_PEAK_HOURS = (17, 18, 19, 20, 21)
NIGHT_HOURS = (22, 23, 0, 1, 2, 3, 4, 5)
MORNING_PEAK_MULTIPLIER = 1.3
EVENING_PEAK_MULTIPLIER = 1.4
NIGHT_MULTIPLIER = 0.6
DEFAULT_JITTER = 0.05
PEAK_HOUR_COUNT = 6

# 0 = Sunday ... 6 = Saturday
DAY_OF_WEEK_FACTORS = {
    0: 0.90,
    1: 1.00,
    2: 1.02,
    3: 1.01,
    4: 1.03,
    5: 1.05,
    6: 0.92,
}
HOLIDAY_FACTOR = 0.85
DRY_SEASON_FACTOR = 1.15

# (exclusive lower bound in °C, factor), checked in order
HOT_TEMPERATURE_FACTORS = ((38.0, 1.25), (35.0, 1.15), (30.0, 1.08))
COOL_TEMPERATURE_THRESHOLD = 20.0
COOL_TEMPERATURE_FACTOR = 0.92

BASE_CONFIDENCE = 0.70
WEEK_HISTORY_BONUS = 0.15
THREE_DAY_HISTORY_POINTS = 72
THREE_DAY_HISTORY_BONUS = 0.08
HOLIDAY_CONFIDENCE_PENALTY = 0.10
MIN_CONFIDENCE = 0.5
MAX_CONFIDENCE = 0.95

ACCURACY_TOLERANCE_PCT = 5.0
DEFAULT_BAND_MARGIN = 0.1

# National holidays observed by the reference station (Burkina Faso, 2026)
DEFAULT_HOLIDAY_DATES = (
    "2026-01-01",
    "2026-01-03",
    "2026-03-20",
    "2026-05-01",
    "2026-08-05",
    "2026-12-11",
    "2026-12-25",
)

ALGORITHM_VERSION = "1.0.0"

# Bundle column names
COL_TIMESTAMP = "timestamp"
COL_DEMAND_M3_H = "demand_m3_h"
COL_VIBRATION = "vibration"
COL_TEMPERATURE = "temperature"
COL_PRESSURE = "pressure"

READING_REQUIRED_COLUMNS = [FEATURE_KWH_PER_M3, FEATURE_FLOW, FEATURE_RESERVOIR]
READING_OPTIONAL_COLUMNS = [COL_VIBRATION, COL_TEMPERATURE, COL_PRESSURE]

# Tolerance for numerical comparisons
NUMERICAL_TOLERANCE = 1e-6
