"""Test the randomized partition trees."""

import numpy as np
import pytest

from pumpq_engine.core.schemas import DetectorOptions
from pumpq_engine.detect.isolation import (
    Leaf,
    Split,
    build_forest,
    build_tree,
    expected_path_length,
    height_limit,
    path_length,
)


def leaf_sizes(tree) -> list[int]:
    if isinstance(tree, Leaf):
        return [tree.size]
    return leaf_sizes(tree.left) + leaf_sizes(tree.right)


def depth(tree) -> int:
    if isinstance(tree, Leaf):
        return 0
    return 1 + max(depth(tree.left), depth(tree.right))


@pytest.fixture
def points():
    rng = np.random.default_rng(0)
    return np.column_stack(
        [rng.normal(0.42, 0.01, 40), rng.normal(300, 8, 40), rng.normal(60, 5, 40)]
    )


@pytest.mark.parametrize(
    "size,expected",
    [(0, 0.0), (1, 0.0), (2, 0.1544313298), (256, 10.2447709)],
)
def test_expected_path_length(size, expected):
    """c(n) = 2 * (ln(n - 1) + γ) - 2 * (n - 1) / n."""
    assert expected_path_length(size) == pytest.approx(expected, abs=1e-6)


@pytest.mark.parametrize("size,expected", [(0, 0), (1, 0), (2, 1), (10, 4), (256, 8), (257, 9)])
def test_height_limit(size, expected):
    assert height_limit(size) == expected


def test_tree_partitions_every_point(points):
    """Leaf sizes add up to the sample and depth respects the limit."""
    tree = build_tree(points, 0, height_limit(len(points)), np.random.default_rng(1))

    assert sum(leaf_sizes(tree)) == len(points)
    assert depth(tree) <= height_limit(len(points))


def test_identical_points_reach_height_limit():
    """Points that cannot be separated end in one leaf at the height limit."""
    same = np.tile([0.42, 300.0, 60.0], (16, 1))
    tree = build_tree(same, 0, 4, np.random.default_rng(2))

    assert path_length(same[0], tree) == pytest.approx(4 + expected_path_length(16))


def test_single_point_is_a_leaf():
    tree = build_tree(np.array([[0.42, 300.0, 60.0]]), 0, 5, np.random.default_rng(3))
    assert tree == Leaf(size=1)


def test_split_routes_by_threshold():
    """Values below the threshold go left."""
    tree = Split(feature=0, threshold=0.5, left=Leaf(size=1), right=Split(
        feature=1, threshold=10.0, left=Leaf(size=1), right=Leaf(size=2)
    ))

    assert path_length(np.array([0.4, 0.0, 0.0]), tree) == 1
    assert path_length(np.array([0.6, 5.0, 0.0]), tree) == 2
    assert path_length(np.array([0.6, 20.0, 0.0]), tree) == pytest.approx(2 + expected_path_length(2))


def test_forest_uses_sample_prefix(points):
    """Each tree partitions min(max_samples, n) points."""
    options = DetectorOptions(n_estimators=5, max_samples=16)
    trees = build_forest(points, options, np.random.default_rng(4))

    assert len(trees) == 5
    assert all(sum(leaf_sizes(t)) == 16 for t in trees)
    assert all(depth(t) <= height_limit(16) for t in trees)


def test_forest_sample_capped_by_batch(points):
    options = DetectorOptions(n_estimators=3)
    trees = build_forest(points, options, np.random.default_rng(5))

    assert all(sum(leaf_sizes(t)) == len(points) for t in trees)


def test_bootstrap_forest(points):
    """Random subsamples have the same size as the prefix."""
    options = DetectorOptions(n_estimators=4, max_samples=10, bootstrap=True)
    trees = build_forest(points, options, np.random.default_rng(6))

    assert all(sum(leaf_sizes(t)) == 10 for t in trees)
