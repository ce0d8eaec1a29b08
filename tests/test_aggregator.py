# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Tests for centroid computation.
"""

import random
import unittest

import numpy as np

from bspkmeans.clusterer import (
    ClusterStats,
    InvalidStateError,
    Point,
    ProcessExecutor,
    ThreadExecutor,
    classify,
    find_average,
    update,
)


class FindAverageTest(unittest.TestCase):
    """Test cases for find_average."""

    def test_empty_returns_old_mean(self):
        mean = Point(3, 4, 5)
        self.assertIs(find_average(mean, []), mean)

    def test_centroid(self):
        points = [Point(0, 0, 0), Point(2, 4, 6), Point(1, 2, 9)]
        avg = find_average(Point(100, 100, 100), points)
        self.assertAlmostEqual(avg.x, 1.0)
        self.assertAlmostEqual(avg.y, 2.0)
        self.assertAlmostEqual(avg.z, 5.0)

    def test_new_point_returned(self):
        """A mean is replaced, not mutated."""
        mean = Point(1, 1, 1)
        avg = find_average(mean, [Point(1, 1, 1)])
        self.assertIsNot(avg, mean)
        self.assertEqual(avg.coordinates, mean.coordinates)
        self.assertEqual(mean.coordinates, (1.0, 1.0, 1.0))


class UpdateTest(unittest.TestCase):
    """Test cases for update."""

    def setUp(self):
        self.means = [Point(0, 0, 0), Point(10, 0, 0), Point(50, 50, 50)]
        self.points = [Point(0, 0, 0), Point(1, 0, 0), Point(10, 0, 0), Point(11, 0, 0)]

    def test_positional_correspondence(self):
        new_means = update(classify(self.points, self.means), self.means)
        self.assertEqual(len(new_means), 3)
        self.assertEqual(new_means[0].coordinates, (0.5, 0.0, 0.0))
        self.assertEqual(new_means[1].coordinates, (10.5, 0.0, 0.0))
        self.assertIs(new_means[2], self.means[2])

    def test_missing_mean_in_partition(self):
        partition = classify(self.points, self.means[:2])
        with self.assertRaises(InvalidStateError):
            update(partition, self.means)

    def test_foreign_key_in_partition(self):
        partition = classify(self.points, self.means)
        del partition[self.means[2]]
        partition[Point(50, 50, 50)] = []
        with self.assertRaises(InvalidStateError):
            update(partition, self.means)

    def test_with_executor(self):
        partition = classify(self.points, self.means)
        with ThreadExecutor(parallelism=2) as executor:
            parallel = update(partition, self.means, executor)
        sequential = update(partition, self.means)
        self.assertEqual([m.coordinates for m in parallel], [m.coordinates for m in sequential])

    def test_process_executor_keeps_unmoved_mean(self):
        """An empty slot hands back the old mean object, not a pickled copy."""
        means = [Point(0, 0, 0), Point(10, 0, 0)]
        partition = classify([Point(1, 0, 0)], means)
        with ProcessExecutor(parallelism=2) as executor:
            new_means = update(partition, means, executor)
        self.assertEqual(new_means[0].coordinates, (1.0, 0.0, 0.0))
        self.assertIs(new_means[1], means[1])


class ClusterStatsTest(unittest.TestCase):
    """Test cases for ClusterStats."""

    def setUp(self):
        rng = random.Random(11)
        self.points = [Point(rng.random(), rng.random(), rng.random()) for _ in range(400)]
        self.means = [Point(0.2, 0.2, 0.2), Point(0.8, 0.8, 0.8), Point(0.2, 0.8, 0.5)]

    def test_matches_partition_route(self):
        stats = ClusterStats.from_points(self.points, self.means)
        expected = update(classify(self.points, self.means), self.means)
        for got, want in zip(stats.new_means(self.means), expected):
            np.testing.assert_allclose(got.coordinates, want.coordinates, rtol=1e-12)

    def test_merge_equals_whole(self):
        whole = ClusterStats.from_points(self.points, self.means)
        left = ClusterStats.from_points(self.points[:123], self.means)
        right = ClusterStats.from_points(self.points[123:], self.means)
        merged = left.merge(right)
        np.testing.assert_array_equal(merged.counts, whole.counts)
        np.testing.assert_allclose(merged.centroids, whole.centroids, rtol=1e-12)
        np.testing.assert_allclose(merged.m2, whole.m2, rtol=1e-9)
        np.testing.assert_allclose(merged.square_norms, whole.square_norms, rtol=1e-12)
        self.assertEqual(int(merged.counts.sum()), len(self.points))

    def test_merge_size_mismatch(self):
        with self.assertRaises(InvalidStateError):
            ClusterStats.empty(2).merge(ClusterStats.empty(3))

    def test_empty_slot_keeps_old_mean(self):
        far = Point(100, 100, 100)
        means = self.means + [far]
        new_means = ClusterStats.from_points(self.points, means).new_means(means)
        self.assertIs(new_means[3], far)

    def test_new_means_length_mismatch(self):
        stats = ClusterStats.from_points(self.points, self.means)
        with self.assertRaises(InvalidStateError):
            stats.new_means(self.means[:2])

    def test_noise_is_wcss(self):
        stats = ClusterStats.from_points(self.points, self.means)
        new_means = stats.new_means(self.means)
        partition = classify(self.points, self.means)
        expected = sum(
            p.square_distance(new_means[i])
            for i, mean in enumerate(self.means)
            for p in partition[mean]
        )
        self.assertAlmostEqual(stats.noise(new_means), expected, places=9)
        self.assertAlmostEqual(
            stats.signal(), sum(p.square_norm() for p in self.points), places=9
        )

    def test_noise_far_from_origin(self):
        """WCSS keeps sub-unit spreads around coordinates near 1e8."""
        points = [Point(1e8, 0, 0), Point(1e8 + 1, 0, 0)]
        mean = [Point(1e8 + 0.5, 0, 0)]
        stats = ClusterStats.from_points(points, mean)
        self.assertAlmostEqual(stats.noise(mean), 0.5)
        self.assertAlmostEqual(stats.noise([Point(1e8, 0, 0)]), 1.0)
        merged = ClusterStats.from_points(points[:1], mean).merge(
            ClusterStats.from_points(points[1:], mean)
        )
        self.assertAlmostEqual(merged.noise(mean), 0.5)
        self.assertEqual(merged.new_means(mean)[0].x, 1e8 + 0.5)

    def test_empty(self):
        stats = ClusterStats.empty(4)
        self.assertEqual(stats.k, 4)
        self.assertEqual(stats.signal(), 0.0)
        self.assertEqual(stats.noise([Point(1, 1, 1)] * 4), 0.0)


if __name__ == "__main__":
    unittest.main()
