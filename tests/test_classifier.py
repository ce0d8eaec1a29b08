# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Tests for nearest-mean classification.
"""

import random
import unittest

from bspkmeans.clusterer import (
    InvalidStateError,
    Point,
    SequentialExecutor,
    ThreadExecutor,
    assign,
    classify,
    closest_index,
    find_closest,
)


def _random_points(n, seed):
    rng = random.Random(seed)
    return [Point(rng.uniform(-5, 5), rng.uniform(-5, 5), rng.uniform(-5, 5)) for _ in range(n)]


class FindClosestTest(unittest.TestCase):
    """Test cases for find_closest."""

    def test_empty_means(self):
        with self.assertRaises(InvalidStateError):
            find_closest(Point(0, 0, 0), [])

    def test_single_mean(self):
        mean = Point(100, 100, 100)
        self.assertIs(find_closest(Point(0, 0, 0), [mean]), mean)

    def test_returns_closest(self):
        means = [Point(0, 0, 0), Point(5, 5, 5), Point(10, 10, 10)]
        self.assertIs(find_closest(Point(6, 6, 6), means), means[1])
        self.assertIs(find_closest(Point(9, 9, 9), means), means[2])
        self.assertIs(find_closest(Point(-1, 0, 0), means), means[0])

    def test_ties_go_to_first(self):
        """Equal distances keep the earlier mean."""
        means = [Point(-1, 0, 0), Point(1, 0, 0)]
        self.assertIs(find_closest(Point(0, 0, 0), means), means[0])
        self.assertEqual(closest_index(Point(0, 0, 0), list(reversed(means))), 0)

    def test_duplicate_coordinates(self):
        """Two means at the same place: the first one wins."""
        means = [Point(1, 1, 1), Point(1, 1, 1)]
        self.assertIs(find_closest(Point(0, 0, 0), means), means[0])

    def test_no_closer_mean_exists(self):
        points = _random_points(200, seed=1)
        means = _random_points(7, seed=2)
        for p in points:
            best = find_closest(p, means)
            d = p.square_distance(best)
            self.assertTrue(all(d <= p.square_distance(m) for m in means))


class ClassifyTest(unittest.TestCase):
    """Test cases for classify and assign."""

    def test_partition_covers_every_mean(self):
        means = [Point(0, 0, 0), Point(10, 10, 10), Point(1000, 1000, 1000)]
        points = [Point(1, 0, 0), Point(9, 9, 9)]
        partition = classify(points, means)
        self.assertEqual(set(map(id, partition)), set(map(id, means)))
        self.assertEqual(partition[means[2]], [])
        self.assertEqual(partition[means[0]], [points[0]])
        self.assertEqual(partition[means[1]], [points[1]])

    def test_partition_is_exact(self):
        """Every point lands in exactly one list."""
        points = _random_points(300, seed=3)
        means = _random_points(5, seed=4)
        partition = classify(points, means)
        flattened = [p for assigned in partition.values() for p in assigned]
        self.assertEqual(len(flattened), len(points))
        self.assertEqual({id(p) for p in flattened}, {id(p) for p in points})
        for mean, assigned in partition.items():
            for p in assigned:
                self.assertIs(find_closest(p, means), mean)

    def test_keeps_input_order(self):
        means = [Point(0, 0, 0)]
        points = [Point(3, 0, 0), Point(1, 0, 0), Point(2, 0, 0)]
        self.assertEqual(classify(points, means)[means[0]], points)

    def test_equal_coordinate_points_stay_distinct(self):
        means = [Point(0, 0, 0)]
        points = [Point(1, 1, 1), Point(1, 1, 1)]
        assigned = classify(points, means)[means[0]]
        self.assertEqual(len(assigned), 2)
        self.assertIsNot(assigned[0], assigned[1])

    def test_empty_points(self):
        means = [Point(0, 0, 0), Point(1, 1, 1)]
        partition = classify([], means)
        self.assertEqual(len(partition), 2)
        self.assertTrue(all(v == [] for v in partition.values()))

    def test_empty_means(self):
        with self.assertRaises(InvalidStateError):
            classify([Point(0, 0, 0)], [])

    def test_executors_agree(self):
        points = _random_points(500, seed=5)
        means = _random_points(6, seed=6)
        expected = assign(points, means)
        self.assertEqual(assign(points, means, SequentialExecutor()), expected)
        with ThreadExecutor(parallelism=3) as executor:
            self.assertEqual(assign(points, means, executor), expected)
            partition = classify(points, means, executor)
        self.assertEqual(partition, classify(points, means))


if __name__ == "__main__":
    unittest.main()
