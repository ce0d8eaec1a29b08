# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Centroid computation.

Two equivalent routes are provided:

- ``find_average`` / ``update`` work on an explicit partition (mean -> points),
  one independent reduction per mean.
- ``ClusterStats`` accumulates per-mean counts, centroids and centred sums of
  squares for a chunk of points. Partial stats from different workers are
  merged at the end of a superstep, so no grouped structure is ever built and
  no counter is shared.
"""

from functools import partial
from typing import Dict, List, Sequence

import numpy as np

from .classifier import closest_index
from .errors import InvalidStateError
from .point import Point


def find_average(old_mean: Point, points: Sequence[Point]) -> Point:
    """
    Centroid of ``points``.

    Returns ``old_mean`` itself when ``points`` is empty, so a mean that
    attracted no points stays where it is.
    """
    if len(points) == 0:
        return old_mean
    x = 0.0
    y = 0.0
    z = 0.0
    for p in points:
        x += p.x
        y += p.y
        z += p.z
    n = len(points)
    return Point(x / n, y / n, z / n)


def update(
    partition: Dict[Point, Sequence[Point]], old_means: Sequence[Point], executor=None
) -> List[Point]:
    """
    New means, positionally aligned with ``old_means``.

    Raises
    ------
    InvalidStateError
        If the partition does not have exactly one entry per distinct mean.
    """
    distinct = {id(m) for m in old_means}
    if len(partition) != len(distinct):
        raise InvalidStateError(
            f"partition has {len(partition)} entries for {len(distinct)} means"
        )
    pairs = [(m, partition.get(m)) for m in old_means]
    if executor is None:
        return [_average_pair(pair) for pair in pairs]
    occupied = [i for i, (m, assigned) in enumerate(pairs) if _check_pair(m, assigned)]
    new_means = list(old_means)
    # Only occupied slots cross the executor, so empty ones keep their object.
    averaged = executor.map(_average_pair, [pairs[i] for i in occupied])
    for i, mean in zip(occupied, averaged):
        new_means[i] = mean
    return new_means


def _check_pair(old_mean: Point, assigned) -> bool:
    if assigned is None:
        raise InvalidStateError(f"partition has no entry for mean {old_mean}")
    return len(assigned) > 0


def _average_pair(pair) -> Point:
    old_mean, assigned = pair
    _check_pair(old_mean, assigned)
    return find_average(old_mean, assigned)


class ClusterStats:
    """
    Per-mean partial statistics for one chunk of points.

    Each slot keeps a running centroid and the sum of squared distances to it
    (Welford), so the within-cluster sum of squares stays exact for points
    far from the origin. Partials combine with the pairwise update of Chan
    et al.

    Attributes
    ----------
    counts : np.ndarray
        Shape ``(k,)``, number of points closest to each mean.
    centroids : np.ndarray
        Shape ``(k, 3)``, centroid of those points (zero for empty slots).
    m2 : np.ndarray
        Shape ``(k,)``, sum of squared distances of those points to their
        centroid.
    square_norms : np.ndarray
        Shape ``(k,)``, sums of the points' squared norms.
    """

    __slots__ = ("counts", "centroids", "m2", "square_norms")

    def __init__(
        self,
        counts: np.ndarray,
        centroids: np.ndarray,
        m2: np.ndarray,
        square_norms: np.ndarray,
    ):
        self.counts = counts
        self.centroids = centroids
        self.m2 = m2
        self.square_norms = square_norms

    @classmethod
    def empty(cls, k: int) -> "ClusterStats":
        return cls(np.zeros(k, dtype=np.int64), np.zeros((k, 3)), np.zeros(k), np.zeros(k))

    @classmethod
    def from_points(cls, points: Sequence[Point], means: Sequence[Point]) -> "ClusterStats":
        """Classify ``points`` against ``means`` and accumulate the result."""
        k = len(means)
        counts = [0] * k
        centroids = [[0.0, 0.0, 0.0] for _ in range(k)]
        m2 = [0.0] * k
        square_norms = [0.0] * k
        for p in points:
            i = closest_index(p, means)
            counts[i] += 1
            n = counts[i]
            c = centroids[i]
            dx = p.x - c[0]
            dy = p.y - c[1]
            dz = p.z - c[2]
            c[0] += dx / n
            c[1] += dy / n
            c[2] += dz / n
            m2[i] += dx * (p.x - c[0]) + dy * (p.y - c[1]) + dz * (p.z - c[2])
            square_norms[i] += p.square_norm()
        return cls(
            np.asarray(counts, dtype=np.int64),
            np.asarray(centroids, dtype=np.float64).reshape(k, 3),
            np.asarray(m2, dtype=np.float64),
            np.asarray(square_norms, dtype=np.float64),
        )

    @property
    def k(self) -> int:
        return len(self.counts)

    def merge(self, other: "ClusterStats") -> "ClusterStats":
        if self.k != other.k:
            raise InvalidStateError(f"cannot merge stats for {self.k} and {other.k} means")
        counts = self.counts + other.counts
        safe = np.where(counts > 0, counts, 1)
        delta = other.centroids - self.centroids
        centroids = self.centroids + delta * (other.counts / safe)[:, None]
        m2 = (
            self.m2
            + other.m2
            + np.einsum("ij,ij->i", delta, delta) * (self.counts * other.counts / safe)
        )
        return ClusterStats(counts, centroids, m2, self.square_norms + other.square_norms)

    def new_means(self, old_means: Sequence[Point]) -> List[Point]:
        """Centroids per mean slot; empty slots keep their old mean."""
        if len(old_means) != self.k:
            raise InvalidStateError(
                f"stats cover {self.k} means but {len(old_means)} were given"
            )
        result = []
        for i, old_mean in enumerate(old_means):
            if self.counts[i] == 0:
                result.append(old_mean)
            else:
                c = self.centroids[i]
                result.append(Point(c[0], c[1], c[2]))
        return result

    def signal(self) -> float:
        """Total squared norm of every accumulated point."""
        return float(self.square_norms.sum())

    def noise(self, means: Sequence[Point]) -> float:
        """
        Within-cluster sum of squared distances to ``means``.

        Per slot this is ``m2 + n * |centroid - mean|^2``, so the points do
        not have to be revisited.
        """
        if len(means) != self.k:
            raise InvalidStateError(
                f"stats cover {self.k} means but {len(means)} were given"
            )
        centers = np.asarray([m.coordinates for m in means], dtype=np.float64).reshape(-1, 3)
        offset = np.where(self.counts[:, None] > 0, self.centroids - centers, 0.0)
        return float((self.m2 + self.counts * np.einsum("ij,ij->i", offset, offset)).sum())

    def __repr__(self) -> str:
        return f"ClusterStats(k={self.k}, n={int(self.counts.sum())})"


def accumulate(points: Sequence[Point], means: Sequence[Point]) -> ClusterStats:
    """Module-level entry point for workers; picklable by reference."""
    return ClusterStats.from_points(points, means)


def stats_for(means: Sequence[Point]):
    """A picklable one-argument accumulator bound to ``means``."""
    return partial(accumulate, means=list(means))
