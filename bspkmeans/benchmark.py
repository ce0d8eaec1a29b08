# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Sequential vs. parallel timing of the k-means loop.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Sequence

from .clusterer import Point, SequentialExecutor, run

logger = logging.getLogger(__name__)


@dataclass
class Comparison:
    """Timings in milliseconds."""
    sequential_ms: float
    parallel_ms: float

    @property
    def speedup(self) -> float:
        return self.sequential_ms / self.parallel_ms if self.parallel_ms > 0 else float("inf")


def measure(fn: Callable[[], object], warmup_runs: int = 2, bench_runs: int = 5) -> float:
    """
    Mean wall-clock time of ``fn`` in milliseconds.

    ``warmup_runs`` calls are made first and discarded.
    """
    if bench_runs < 1:
        raise ValueError(f"bench_runs must be >= 1, got {bench_runs}")
    for _ in range(warmup_runs):
        fn()
    total = 0.0
    for _ in range(bench_runs):
        start = time.perf_counter()
        fn()
        total += time.perf_counter() - start
    return total * 1000.0 / bench_runs


def compare(
    points: Sequence[Point],
    means: Sequence[Point],
    eta: float,
    parallel_executor,
    warmup_runs: int = 2,
    bench_runs: int = 5,
) -> Comparison:
    """Time ``run`` sequentially and on ``parallel_executor``."""
    sequential = SequentialExecutor()
    seq_ms = measure(lambda: run(points, means, eta, sequential), warmup_runs, bench_runs)
    logger.info("sequential time: %.1f ms", seq_ms)
    par_ms = measure(lambda: run(points, means, eta, parallel_executor), warmup_runs, bench_runs)
    logger.info("parallel time: %.1f ms (%r)", par_ms, parallel_executor)
    return Comparison(seq_ms, par_ms)
