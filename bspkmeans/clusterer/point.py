# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Points in three-dimensional space.
"""

from typing import Tuple


class Point:
    """
    One point in three-dimensional space.

    Points are immutable and compare by identity: two points with the same
    coordinates are distinct objects, and either may be used as a dict key
    without colliding with the other.

    Parameters
    ----------
    x, y, z : float
        Coordinates. Non-finite values are not checked.
    """

    __slots__ = ("_x", "_y", "_z")

    def __init__(self, x: float, y: float, z: float):
        object.__setattr__(self, "_x", float(x))
        object.__setattr__(self, "_y", float(y))
        object.__setattr__(self, "_z", float(z))

    def __setattr__(self, name, value):
        raise AttributeError(f"Point is immutable, cannot set '{name}'")

    def __delattr__(self, name):
        raise AttributeError(f"Point is immutable, cannot delete '{name}'")

    @property
    def x(self) -> float:
        return self._x

    @property
    def y(self) -> float:
        return self._y

    @property
    def z(self) -> float:
        return self._z

    @property
    def coordinates(self) -> Tuple[float, float, float]:
        """The coordinates as an ``(x, y, z)`` tuple."""
        return (self._x, self._y, self._z)

    def square_distance(self, other: "Point") -> float:
        """
        Squared Euclidean distance to ``other``.

        The square root is never taken; only the ordering of distances
        matters to the clustering.
        """
        dx = other._x - self._x
        dy = other._y - self._y
        dz = other._z - self._z
        return dx * dx + dy * dy + dz * dz

    def square_norm(self) -> float:
        """Squared distance to the origin."""
        return self._x * self._x + self._y * self._y + self._z * self._z

    def __reduce__(self):
        return (Point, self.coordinates)

    def __repr__(self) -> str:
        return f"Point({self._x!r}, {self._y!r}, {self._z!r})"

    def __str__(self) -> str:
        return f"({self._x:.2f}, {self._y:.2f}, {self._z:.2f})"
