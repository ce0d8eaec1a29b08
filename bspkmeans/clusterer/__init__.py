# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
BSP K-Means Clustering
======================

K-means over points in 3-D space, run as a sequence of bulk-synchronous
supersteps: classify every point in parallel, merge per-worker partial sums
into new means, check convergence, repeat.

Functions:
    classify: Partition points by their closest mean
    update: Compute new means from a partition
    converged: Eta stability check between two mean sequences
    run: Iterate until the means are stable

Classes:
    Point: Immutable 3-D point with identity semantics
    BSPKMeans: Estimator with typed params
    BSPKMeansModel: Fitted means
    TrainingSummary: Facts about a training run

Example:
    >>> from bspkmeans.clusterer import Point, run
    >>>
    >>> points = [Point(0, 0, 0), Point(1, 0, 0), Point(10, 0, 0), Point(11, 0, 0)]
    >>> means = run(points, [Point(0, 0, 0), Point(11, 0, 0)], eta=1e-4)
    >>> [str(m) for m in means]
    ['(0.50, 0.00, 0.00)', '(10.50, 0.00, 0.00)']
"""

from .aggregator import ClusterStats, find_average, update
from .classifier import assign, classify, closest_index, find_closest
from .convergence import (
    AnyOf,
    ConvergenceCriterion,
    EtaConvergence,
    SignalToNoiseConvergence,
    StepsConvergence,
    Superstep,
    converged,
)
from .driver import IterationResult, iterate, run
from .errors import ClusteringError, InvalidStateError
from .executors import (
    ProcessExecutor,
    SequentialExecutor,
    SparkExecutor,
    ThreadExecutor,
    make_executor,
)
from .initialization import (
    generate_points,
    initialize_means,
    random_sample_means,
    uniform_means,
    uniform_random_means,
)
from .kmeans import BSPKMeans, BSPKMeansModel, TrainingSummary
from .point import Point

__all__ = [
    "Point",
    "find_closest",
    "closest_index",
    "assign",
    "classify",
    "find_average",
    "update",
    "ClusterStats",
    "converged",
    "ConvergenceCriterion",
    "EtaConvergence",
    "StepsConvergence",
    "SignalToNoiseConvergence",
    "AnyOf",
    "Superstep",
    "run",
    "iterate",
    "IterationResult",
    "SequentialExecutor",
    "ThreadExecutor",
    "ProcessExecutor",
    "SparkExecutor",
    "make_executor",
    "generate_points",
    "initialize_means",
    "random_sample_means",
    "uniform_means",
    "uniform_random_means",
    "BSPKMeans",
    "BSPKMeansModel",
    "TrainingSummary",
    "ClusteringError",
    "InvalidStateError",
]
