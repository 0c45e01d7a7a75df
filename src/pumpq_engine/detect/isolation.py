"""Randomized partition trees (isolation-forest style).

Trees are built per detection batch and discarded after scoring. A point's
path length is the number of splits needed to reach its leaf plus the
expected depth of an unbuilt subtree holding the leaf's residual points.
Short paths mean the point is easy to isolate.
"""

import math
from dataclasses import dataclass
from typing import Union

import numpy as np

from pumpq_engine.core.constants import EULER_GAMMA, SPLIT_FEATURES
from pumpq_engine.core.schemas import DetectorOptions, SensorReading


@dataclass(frozen=True)
class Leaf:
    size: int


@dataclass(frozen=True)
class Split:
    feature: int
    threshold: float
    left: "PartitionTree"
    right: "PartitionTree"


PartitionTree = Union[Leaf, Split]


def readings_matrix(readings: list[SensorReading]) -> np.ndarray:
    """Stack the split features of each reading into an (n, 3) array."""
    return np.array(
        [[getattr(r, name) for name in SPLIT_FEATURES] for r in readings],
        dtype=float,
    ).reshape(len(readings), len(SPLIT_FEATURES))


def height_limit(sample_size: int) -> int:
    """ceil(log2(sample_size)), 0 for samples of one point or fewer."""
    if sample_size <= 1:
        return 0
    return math.ceil(math.log2(sample_size))


def expected_path_length(size: int) -> float:
    """Average depth of an unsuccessful search in a tree of ``size`` points.

    c(n) = 2 * (ln(n - 1) + γ) - 2 * (n - 1) / n, 0 for n <= 1
    """
    if size <= 1:
        return 0.0
    return 2 * (math.log(size - 1) + EULER_GAMMA) - 2 * (size - 1) / size


def build_tree(
    points: np.ndarray, height: int, max_height: int, rng: np.random.Generator
) -> PartitionTree:
    """Recursively partition ``points`` on random features and thresholds.

    Args:
        points: (n, 3) feature matrix of the current node
        height: Depth of the current node
        max_height: Depth at which every node becomes a leaf
        rng: Random source

    Returns:
        Root of the (sub)tree
    """
    if len(points) <= 1 or height >= max_height:
        return Leaf(size=len(points))

    feature = int(rng.integers(len(SPLIT_FEATURES)))
    column = points[:, feature]
    low, high = column.min(), column.max()
    threshold = float(low + rng.random() * (high - low))

    mask = column < threshold
    return Split(
        feature=feature,
        threshold=threshold,
        left=build_tree(points[mask], height + 1, max_height, rng),
        right=build_tree(points[~mask], height + 1, max_height, rng),
    )


def build_forest(
    points: np.ndarray, options: DetectorOptions, rng: np.random.Generator
) -> list[PartitionTree]:
    """Build ``options.n_estimators`` trees.

    Each tree sees the first ``min(max_samples, n)`` points. With
    ``options.bootstrap`` each tree draws its own random subsample of that
    size instead.
    """
    sample_size = min(options.max_samples, len(points))
    max_height = height_limit(sample_size)

    trees = []
    for _ in range(options.n_estimators):
        if options.bootstrap:
            idx = rng.choice(len(points), size=sample_size, replace=False)
            sample = points[idx]
        else:
            sample = points[:sample_size]
        trees.append(build_tree(sample, 0, max_height, rng))

    return trees


def path_length(point: np.ndarray, tree: PartitionTree) -> float:
    """Edges from root to the point's leaf plus the leaf correction c(size)."""
    depth = 0
    node = tree
    while isinstance(node, Split):
        node = node.left if point[node.feature] < node.threshold else node.right
        depth += 1
    return depth + expected_path_length(node.size)


def average_path_length(point: np.ndarray, trees: list[PartitionTree]) -> float:
    return sum(path_length(point, tree) for tree in trees) / len(trees)
