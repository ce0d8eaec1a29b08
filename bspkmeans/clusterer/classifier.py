# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Nearest-mean classification.

Each point is classified independently of every other point, so the work is
a plain map over the input and can be handed to any executor.
"""

from functools import partial
from typing import Dict, List, Sequence

from .errors import InvalidStateError
from .point import Point


def closest_index(point: Point, means: Sequence[Point]) -> int:
    """
    Index of the mean closest to ``point``.

    Means are scanned left to right and a later mean only wins when it is
    strictly closer, so ties go to the lowest index.

    Raises
    ------
    InvalidStateError
        If ``means`` is empty.
    """
    if len(means) == 0:
        raise InvalidStateError("cannot classify a point against an empty mean set")
    best = 0
    min_distance = point.square_distance(means[0])
    for i in range(1, len(means)):
        distance = point.square_distance(means[i])
        if distance < min_distance:
            min_distance = distance
            best = i
    return best


def find_closest(point: Point, means: Sequence[Point]) -> Point:
    """Return the mean closest to ``point`` (first one on ties)."""
    return means[closest_index(point, means)]


def assign(points: Sequence[Point], means: Sequence[Point], executor=None) -> List[int]:
    """
    Nearest-mean index for every point, in input order.

    Parameters
    ----------
    points : sequence of Point
    means : sequence of Point
        Must be non-empty.
    executor : optional
        Executor whose ``map`` distributes the points. Runs inline when None.
    """
    if len(means) == 0:
        raise InvalidStateError("cannot classify points against an empty mean set")
    means = list(means)
    if executor is None:
        return [closest_index(p, means) for p in points]
    return executor.map(partial(closest_index, means=means), points)


def classify(
    points: Sequence[Point], means: Sequence[Point], executor=None
) -> Dict[Point, List[Point]]:
    """
    Partition ``points`` by their closest mean.

    Every mean is a key of the result, mapped to an empty list when no point
    is closest to it. Points keep their input order within each list.
    """
    indices = assign(points, means, executor)
    partition: Dict[Point, List[Point]] = {mean: [] for mean in means}
    for point, index in zip(points, indices):
        partition[means[index]].append(point)
    return partition
