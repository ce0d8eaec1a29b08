# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Execution backends for the BSP superstep.

Every executor offers two operations:

- ``map(fn, items)``: ordered map, used to classify points and to average
  means one by one.
- ``superstep(points, means)``: classify and accumulate ``ClusterStats`` in
  parallel, then merge the partials. The call returns only once every worker
  has finished, which is the barrier between rounds.

Workers only read the shared means and write to their own partial result.
"""

import logging
import os
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from functools import reduce
from typing import Callable, List, Optional, Sequence

from pyspark import SparkConf, SparkContext

from .aggregator import ClusterStats, accumulate, stats_for
from .point import Point

logger = logging.getLogger(__name__)

EXECUTORS = ("sequential", "threads", "processes", "spark")


def default_parallelism() -> int:
    return os.cpu_count() or 1


def split(items: Sequence, parts: int) -> List[Sequence]:
    """Split ``items`` into at most ``parts`` contiguous, non-empty slices."""
    n = len(items)
    parts = max(1, min(parts, n))
    size, extra = divmod(n, parts)
    chunks = []
    start = 0
    for i in range(parts):
        end = start + size + (1 if i < extra else 0)
        if end > start:
            chunks.append(items[start:end])
        start = end
    return chunks


def _map_chunk(fn: Callable, chunk: Sequence) -> list:
    return [fn(item) for item in chunk]


class SequentialExecutor:
    """Runs everything in the calling thread."""

    name = "sequential"
    parallelism = 1

    def map(self, fn: Callable, items: Sequence) -> list:
        return [fn(item) for item in items]

    def superstep(self, points: Sequence[Point], means: Sequence[Point]) -> ClusterStats:
        return accumulate(points, means)

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class PoolExecutor(SequentialExecutor):
    """
    Chunked execution on a ``concurrent.futures`` pool.

    Parameters
    ----------
    parallelism : int, default=0
        Number of workers and of chunks per operation. 0 uses the CPU count.
    """

    pool_class = ThreadPoolExecutor

    def __init__(self, parallelism: int = 0):
        if parallelism < 0:
            raise ValueError(f"parallelism must be >= 0, got {parallelism}")
        self.parallelism = parallelism or default_parallelism()
        self._pool: Optional[Executor] = None

    @property
    def pool(self) -> Executor:
        if self._pool is None:
            logger.debug("Starting %s with %d workers", self.pool_class.__name__, self.parallelism)
            self._pool = self.pool_class(max_workers=self.parallelism)
        return self._pool

    def map(self, fn: Callable, items: Sequence) -> list:
        items = list(items)
        if not items:
            return []
        futures = [self.pool.submit(_map_chunk, fn, chunk) for chunk in split(items, self.parallelism)]
        result = []
        for future in futures:
            result.extend(future.result())
        return result

    def superstep(self, points: Sequence[Point], means: Sequence[Point]) -> ClusterStats:
        points = list(points)
        if not points:
            return ClusterStats.empty(len(means))
        worker = stats_for(means)
        futures = [self.pool.submit(worker, chunk) for chunk in split(points, self.parallelism)]
        return reduce(ClusterStats.merge, [f.result() for f in futures])

    def close(self):
        if self._pool is not None:
            logger.debug("Shutting down %s", self.pool_class.__name__)
            self._pool.shutdown(wait=True)
            self._pool = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(parallelism={self.parallelism})"


class ThreadExecutor(PoolExecutor):
    """Worker threads sharing the caller's memory."""

    name = "threads"
    pool_class = ThreadPoolExecutor


class ProcessExecutor(PoolExecutor):
    """Worker processes; points and means are pickled to each worker."""

    name = "processes"
    pool_class = ProcessPoolExecutor


class SparkExecutor(SequentialExecutor):
    """
    Runs the superstep as Spark jobs.

    The points are parallelized once and cached; each round ships the current
    means to the partitions, accumulates one ``ClusterStats`` per partition and
    reduces them on the driver.

    Parameters
    ----------
    spark_context : SparkContext, optional
        Context to run on. When omitted a local context with ``parallelism``
        cores is created and stopped again by ``close``.
    parallelism : int, default=0
        Number of partitions. 0 uses the context's default parallelism.
    """

    name = "spark"

    def __init__(self, spark_context=None, parallelism: int = 0):
        if parallelism < 0:
            raise ValueError(f"parallelism must be >= 0, got {parallelism}")
        self._owns_context = spark_context is None
        if spark_context is None:
            cores = parallelism or default_parallelism()
            conf = (
                SparkConf()
                .setMaster(f"local[{cores}]")
                .setAppName("BSPKMeans")
                .set("spark.ui.enabled", "false")
            )
            spark_context = SparkContext.getOrCreate(conf)
            logger.debug("Started local SparkContext with %d cores", cores)
        self.sc = spark_context
        self.parallelism = parallelism or self.sc.defaultParallelism
        self._cached_points = None
        self._rdd = None

    def _points_rdd(self, points: Sequence[Point]):
        if self._rdd is None or self._cached_points is not points:
            if self._rdd is not None:
                self._rdd.unpersist()
            self._cached_points = points
            self._rdd = self.sc.parallelize(list(points), self.parallelism).cache()
        return self._rdd

    def map(self, fn: Callable, items: Sequence) -> list:
        items = list(items)
        if not items:
            return []
        return self.sc.parallelize(items, min(self.parallelism, len(items))).map(fn).collect()

    def superstep(self, points: Sequence[Point], means: Sequence[Point]) -> ClusterStats:
        if len(points) == 0:
            return ClusterStats.empty(len(means))
        worker = stats_for(means)
        return (
            self._points_rdd(points)
            .mapPartitions(lambda it: [worker(list(it))])
            .reduce(ClusterStats.merge)
        )

    def close(self):
        if self._rdd is not None:
            self._rdd.unpersist()
            self._rdd = None
            self._cached_points = None
        if self._owns_context and self.sc is not None:
            logger.debug("Stopping local SparkContext")
            self.sc.stop()
            self.sc = None

    def __repr__(self) -> str:
        return f"SparkExecutor(parallelism={self.parallelism})"


def make_executor(name: str, parallelism: int = 0, spark_context=None):
    """
    Build an executor by name.

    Parameters
    ----------
    name : str
        One of "sequential", "threads", "processes", "spark".
    parallelism : int, default=0
        Worker count; 0 picks a default for the backend.
    spark_context : SparkContext, optional
        Only used by the "spark" backend.
    """
    if name == "sequential":
        return SequentialExecutor()
    if name == "threads":
        return ThreadExecutor(parallelism)
    if name == "processes":
        return ProcessExecutor(parallelism)
    if name == "spark":
        return SparkExecutor(spark_context, parallelism)
    raise ValueError(f"executor must be one of {', '.join(EXECUTORS)}, got '{name}'")
