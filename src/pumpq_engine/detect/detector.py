"""Pump anomaly detection.

Score = 0.6 * structural + 0.4 * statistical

- structural: 1 - mean path length / ceil(log2(max_samples)) over the forest
- statistical: |z| of kWh/m³ against the batch baseline, capped at 3σ

Readings scoring above the threshold are flagged and explained by simple
rules on the batch z-scores.
"""

import logging
from typing import Optional

import numpy as np

from pumpq_engine.core import constants as c
from pumpq_engine.core.metrics import round_half_up
from pumpq_engine.core.schemas import (
    AlgorithmDescriptor,
    AnomalyResult,
    AnomalySummary,
    BaselineStats,
    DetectorOptions,
    FeatureDeviations,
    FeatureStats,
    SensorReading,
    TimelinePoint,
)
from pumpq_engine.core.validate import InputValidationError, coerce
from pumpq_engine.detect.isolation import (
    PartitionTree,
    average_path_length,
    build_forest,
    height_limit,
    readings_matrix,
)

logger = logging.getLogger(__name__)


def compute_stats(values) -> FeatureStats:
    """Population mean and standard deviation.

    A constant feature gets its exact value as mean and a zero std; numpy
    would otherwise leave a few ulps of rounding error in both.
    """
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return FeatureStats(mean=0.0, std=0.0)
    if np.ptp(arr) == 0:
        return FeatureStats(mean=float(arr[0]), std=0.0)
    return FeatureStats(mean=float(arr.mean()), std=float(arr.std()))


def compute_baseline(readings: list[SensorReading]) -> BaselineStats:
    """Batch-wide statistics of each split feature."""
    return BaselineStats(
        kwh_per_m3=compute_stats([r.kwh_per_m3 for r in readings]),
        flow_m3_h=compute_stats([r.flow_m3_h for r in readings]),
        reservoir_pct=compute_stats([r.reservoir_pct for r in readings]),
    )


def z_score(value: float, stats: FeatureStats) -> float:
    """Signed z-score; 0 for a constant feature."""
    if stats.std == 0:
        return 0.0
    return (value - stats.mean) / stats.std


def feature_deviations(reading: SensorReading, baseline: BaselineStats) -> FeatureDeviations:
    kwh_dev = abs(z_score(reading.kwh_per_m3, baseline.kwh_per_m3))
    flow_dev = abs(z_score(reading.flow_m3_h, baseline.flow_m3_h))

    return FeatureDeviations(
        kwh_per_m3_deviation=round_half_up(kwh_dev, 2),
        flow_deviation=round_half_up(flow_dev, 2),
        combined_score=round_half_up((kwh_dev + flow_dev) * 50) / 100,
    )


def raw_anomaly_score(
    point: np.ndarray,
    reading: SensorReading,
    trees: list[PartitionTree],
    baseline: BaselineStats,
    options: DetectorOptions,
) -> float:
    """Unrounded blend of the structural and statistical signals."""
    max_path = height_limit(options.max_samples)
    structural = 1 - average_path_length(point, trees) / max_path

    kwh_z = abs(z_score(reading.kwh_per_m3, baseline.kwh_per_m3))
    statistical = min(1.0, kwh_z / c.Z_SCORE_CAP)

    return structural * c.STRUCTURAL_WEIGHT + statistical * c.STATISTICAL_WEIGHT


def determine_probable_cause(
    reading: SensorReading,
    baseline: BaselineStats,
    options: Optional[DetectorOptions] = None,
) -> str:
    """Explain a flagged reading.

    Rules, all matches joined in this order:
    - kWh/m³ z > 2: energy over-consumption
    - flow z > 1.5 and reservoir below its mean: probable leak
    - kWh/m³ z > 1.5 and flow z < 0.5: pump wear or fouling
    - reservoir below the critical level: critical reservoir level
    """
    options = options or DetectorOptions()

    kwh_z = z_score(reading.kwh_per_m3, baseline.kwh_per_m3)
    flow_z = z_score(reading.flow_m3_h, baseline.flow_m3_h)

    causes = []
    if kwh_z > 2:
        causes.append(c.CAUSE_OVER_CONSUMPTION)
    if flow_z > 1.5 and reading.reservoir_pct < baseline.reservoir_pct.mean:
        causes.append(c.CAUSE_LEAK)
    if kwh_z > 1.5 and flow_z < 0.5:
        causes.append(c.CAUSE_WEAR)
    if reading.reservoir_pct < options.critical_reservoir_pct:
        causes.append(c.CAUSE_CRITICAL_RESERVOIR)

    return c.CAUSE_SEPARATOR.join(causes) if causes else c.CAUSE_UNIDENTIFIED


def _insufficient_data(readings: list[SensorReading]) -> list[AnomalyResult]:
    return [
        AnomalyResult(
            timestamp=r.timestamp,
            score=0.0,
            is_anomaly=False,
            probable_cause=c.CAUSE_INSUFFICIENT_DATA,
            confidence=0.0,
        )
        for r in readings
    ]


def _coerce_readings(readings) -> list[SensorReading]:
    try:
        return [coerce(SensorReading, r) for r in readings]
    except TypeError as e:
        raise InputValidationError(f"Readings must be an iterable of sensor readings: {e}") from e


def detect_anomalies(
    readings: list[SensorReading | dict],
    options: Optional[DetectorOptions | dict] = None,
    rng: Optional[np.random.Generator] = None,
) -> list[AnomalyResult]:
    """Score every reading of a batch.

    Batches of fewer than 10 readings are not analyzed: every result has a
    zero score and cause "Insufficient data".

    Args:
        readings: Sensor readings in time order
        options: Detector parameters (defaults when omitted)
        rng: Random source for tree construction

    Returns:
        One AnomalyResult per reading, in input order
    """
    readings = _coerce_readings(readings)
    options = coerce(DetectorOptions, options or {})

    if len(readings) < c.MIN_READINGS_FOR_DETECTION:
        return _insufficient_data(readings)

    rng = rng if rng is not None else np.random.default_rng()

    baseline = compute_baseline(readings)
    points = readings_matrix(readings)
    trees = build_forest(points, options, rng)
    logger.debug("Built %d partition trees over %d readings", len(trees), len(readings))

    results = []
    for point, reading in zip(points, readings):
        raw = raw_anomaly_score(point, reading, trees, baseline, options)
        is_anomaly = raw > options.anomaly_threshold
        score = min(1.0, max(0.0, raw))

        results.append(
            AnomalyResult(
                timestamp=reading.timestamp,
                score=round_half_up(score, 3),
                is_anomaly=is_anomaly,
                probable_cause=(
                    determine_probable_cause(reading, baseline, options) if is_anomaly else c.CAUSE_NORMAL
                ),
                confidence=min(1.0, score * 5),
                features=feature_deviations(reading, baseline),
            )
        )

    return results


def detect_realtime_anomaly(
    current: SensorReading | dict,
    history: list[SensorReading | dict],
    options: Optional[DetectorOptions | dict] = None,
    rng: Optional[np.random.Generator] = None,
) -> AnomalyResult:
    """Score the latest reading against its history."""
    return detect_anomalies([*history, current], options, rng)[-1]


def anomaly_timeline(
    readings: list[SensorReading | dict],
    window_size: int = 24,
    options: Optional[DetectorOptions | dict] = None,
    rng: Optional[np.random.Generator] = None,
) -> list[TimelinePoint]:
    """Rolling anomaly score of each reading over the window ending at it.

    Args:
        readings: Sensor readings in time order
        window_size: Readings per window, the scored reading included
        options: Detector parameters
        rng: Random source shared by all windows

    Returns:
        One point per reading from index ``window_size - 1`` onwards
    """
    if window_size < 1:
        raise InputValidationError(f"window_size must be >= 1, got {window_size}")

    readings = _coerce_readings(readings)
    options = coerce(DetectorOptions, options or {})
    rng = rng if rng is not None else np.random.default_rng()

    timeline = []
    for end in range(window_size, len(readings) + 1):
        latest = detect_anomalies(readings[end - window_size : end], options, rng)[-1]
        timeline.append(
            TimelinePoint(
                timestamp=latest.timestamp,
                score=latest.score,
                threshold=options.anomaly_threshold,
            )
        )

    return timeline


def summarize_anomalies(
    results: list[AnomalyResult], options: Optional[DetectorOptions | dict] = None
) -> AnomalySummary:
    """Compare the observed anomaly rate with the expected contamination."""
    options = coerce(DetectorOptions, options or {})

    total = len(results)
    flagged = sum(1 for r in results if r.is_anomaly)
    rate = flagged / total if total else 0.0
    scores = [r.score for r in results]

    return AnomalySummary(
        total_readings=total,
        anomaly_count=flagged,
        anomaly_rate=round_half_up(rate, 4),
        contamination=options.contamination,
        exceeds_contamination=rate > options.contamination,
        mean_score=round_half_up(float(np.mean(scores)), 3) if scores else 0.0,
        max_score=max(scores) if scores else 0.0,
    )


def feature_importance() -> list[dict]:
    """Static feature weights used to explain detector output."""
    return [{"feature": name, "importance": weight} for name, weight in c.FEATURE_IMPORTANCE.items()]


def describe_detector(options: Optional[DetectorOptions | dict] = None) -> AlgorithmDescriptor:
    """Describe the detector and its active parameters."""
    options = coerce(DetectorOptions, options or {})
    return AlgorithmDescriptor(
        name="Isolation Forest Anomaly Detector",
        parameters=options.model_dump(),
        description=(
            "Unsupervised anomaly detection for pump monitoring using isolation "
            "trees and statistical deviation"
        ),
    )
