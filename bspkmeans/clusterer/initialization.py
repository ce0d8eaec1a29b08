# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Input generation and initial mean selection.

K-means is sensitive to its starting means. Three seeding strategies are
offered:

- ``uniform``: k points uniformly inside the bounding box of the input. Cheap,
  but ignores where the points actually are.
- ``random``: k points sampled from the input.
- ``uniformRandom``: the bounding box is split into equal cells and each cell
  receives means in proportion to how many points it holds, sampled from those
  points. Dense regions get more means.

All strategies return fresh Point objects, so no mean is ever the same object
as an input point or as another mean.
"""

import logging
from typing import List, Optional, Sequence

import numpy as np

from .point import Point

logger = logging.getLogger(__name__)

INIT_MODES = ("random", "uniform", "uniformRandom")


def _check(k: int, points: Sequence[Point]):
    if k < 1:
        raise ValueError(f"k must be >= 1, got {k}")
    if len(points) == 0:
        raise ValueError("cannot choose means from an empty point set")


def _as_array(points: Sequence[Point]) -> np.ndarray:
    return np.asarray([p.coordinates for p in points], dtype=np.float64).reshape(-1, 3)


def _to_points(rows: np.ndarray) -> List[Point]:
    return [Point(r[0], r[1], r[2]) for r in rows]


def generate_points(k: int, num: int, seed: int = 1) -> List[Point]:
    """
    Synthetic input with roughly ``k`` clusters.

    Point ``i`` has coordinate ``((i + offset) % k) / k + U(0, 0.5)`` with
    offsets 1, 5 and 7 for x, y and z.
    """
    if k < 1:
        raise ValueError(f"k must be >= 1, got {k}")
    if num < 0:
        raise ValueError(f"num must be >= 0, got {num}")
    rng = np.random.default_rng(seed)
    i = np.arange(num)[:, None]
    offsets = np.array([1, 5, 7])
    coords = ((i + offsets) % k) / k + rng.random((num, 3)) * 0.5
    return _to_points(coords)


def random_sample_means(k: int, points: Sequence[Point], seed: Optional[int] = 7) -> List[Point]:
    """Copies of ``k`` input points chosen with replacement."""
    _check(k, points)
    rng = np.random.default_rng(seed)
    chosen = rng.integers(0, len(points), size=k)
    return [Point(*points[i].coordinates) for i in chosen]


def uniform_means(k: int, points: Sequence[Point], seed: Optional[int] = None) -> List[Point]:
    """``k`` points uniform in the bounding box of ``points``."""
    _check(k, points)
    coords = _as_array(points)
    rng = np.random.default_rng(seed)
    return _to_points(rng.uniform(coords.min(axis=0), coords.max(axis=0), size=(k, 3)))


def uniform_random_means(
    k: int, points: Sequence[Point], seed: Optional[int] = None, divisions: int = 2
) -> List[Point]:
    """
    Proportional subspace selection.

    Parameters
    ----------
    k : int
        Number of means.
    points : sequence of Point
        Input points.
    seed : int, optional
        Random seed.
    divisions : int, default=2
        Cells per axis; the space is split into ``divisions ** 3`` cells.
    """
    _check(k, points)
    if divisions < 1:
        raise ValueError(f"divisions must be >= 1, got {divisions}")
    coords = _as_array(points)
    lo = coords.min(axis=0)
    span = coords.max(axis=0) - lo
    scaled = np.divide(coords - lo, span, out=np.zeros_like(coords), where=span > 0)
    cell_xyz = np.minimum((scaled * divisions).astype(np.int64), divisions - 1)
    cells = (cell_xyz[:, 0] * divisions + cell_xyz[:, 1]) * divisions + cell_xyz[:, 2]

    counts = np.bincount(cells, minlength=divisions ** 3)
    quotas = (k * counts) // len(points)
    # Leftovers from rounding down go to the most populated cells first.
    by_size = [c for c in np.argsort(-counts, kind="stable") if counts[c] > 0]
    leftover = k - int(quotas.sum())
    i = 0
    while leftover > 0:
        quotas[by_size[i % len(by_size)]] += 1
        leftover -= 1
        i += 1

    rng = np.random.default_rng(seed)
    means: List[Point] = []
    for cell in np.nonzero(quotas)[0]:
        members = np.nonzero(cells == cell)[0]
        picked = rng.choice(members, size=int(quotas[cell]), replace=quotas[cell] > len(members))
        means.extend(_to_points(coords[picked]))
    logger.debug(
        "Placed %d means in %d of %d cells", k, int((quotas > 0).sum()), divisions ** 3
    )
    return means


def initialize_means(
    mode: str, k: int, points: Sequence[Point], seed: Optional[int] = None
) -> List[Point]:
    """Choose ``k`` initial means with the strategy named by ``mode``."""
    if mode == "random":
        return random_sample_means(k, points, seed)
    if mode == "uniform":
        return uniform_means(k, points, seed)
    if mode == "uniformRandom":
        return uniform_random_means(k, points, seed)
    raise ValueError(f"initMode must be one of {', '.join(INIT_MODES)}, got '{mode}'")
