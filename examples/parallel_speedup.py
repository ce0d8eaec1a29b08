#!/usr/bin/env python
# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Times the k-means loop sequentially and on a process pool.
"""

import logging

from bspkmeans.benchmark import compare
from bspkmeans.clusterer import ProcessExecutor, generate_points, random_sample_means


def main():
    logging.basicConfig(level=logging.INFO)

    num_points = 50000
    eta = 0.01
    k = 32
    points = generate_points(k, num_points)
    means = random_sample_means(k, points)

    with ProcessExecutor() as executor:
        result = compare(points, means, eta, executor, warmup_runs=1, bench_runs=3)

    print(f"sequential time: {result.sequential_ms:.1f} ms")
    print(f"parallel time: {result.parallel_ms:.1f} ms")
    print(f"speedup: {result.speedup:.2f}")


if __name__ == "__main__":
    main()
