#!/usr/bin/env python
# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Basic clustering example using BSPKMeans with eta convergence.
"""

import logging

from bspkmeans.clusterer import BSPKMeans, Point


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    # Two well-separated groups
    points = [
        Point(0.0, 0.0, 0.0),
        Point(1.0, 1.0, 0.0),
        Point(0.5, 0.5, 0.5),
        Point(9.0, 8.0, 9.0),
        Point(8.0, 9.0, 8.0),
        Point(8.5, 8.5, 8.5),
    ]

    kmeans = BSPKMeans(k=2, eta=1e-6, executor="threads", parallelism=2, seed=42)

    print("Training model...")
    model = kmeans.fit(points)

    print(f"\nNumber of clusters: {model.numClusters}")
    print("\nCluster centers:")
    for i, center in enumerate(model.clusterCenters()):
        print(f"  Cluster {i}: {center}")

    print("\nPredictions:")
    for point, cluster in zip(points, model.predictAll(points)):
        print(f"  {point} -> {cluster}")

    cost = model.computeCost(points)
    print(f"\nWithin-cluster sum of squares: {cost:.4f}")

    summary = model.summary
    print(f"\nConverged: {summary.converged} after {summary.iterations} supersteps")
    print(f"Training time: {summary.elapsedMillis}ms")

    new_point = Point(0.2, 0.3, 0.1)
    print(f"\nNew point {new_point} assigned to cluster: {model.predict(new_point)}")


if __name__ == "__main__":
    main()
