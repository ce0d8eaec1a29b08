# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
The k-means iteration loop.

Each pass of the loop is one superstep: classify every point and accumulate
per-mean statistics on the executor, wait for all workers, compute the new means,
then ask the criterion whether to stop. The loop is a plain ``while`` so the
number of rounds is not bounded by the call stack.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .convergence import ConvergenceCriterion, EtaConvergence, Superstep, movement
from .errors import InvalidStateError
from .executors import SequentialExecutor
from .point import Point

logger = logging.getLogger(__name__)


@dataclass
class IterationResult:
    """
    Outcome of a clustering run.

    Attributes:
        means: final means, index-aligned with the initial means
        iterations: number of supersteps executed
        converged: True when a stability rule stopped the run, False when
            only a step cap did
        elapsed: wall-clock seconds spent in the loop
        movement_history: largest squared mean movement of each superstep
        signal: total squared norm of the points
        noise: within-cluster sum of squares of the final means
        cluster_sizes: points per mean slot in the last superstep
    """
    means: List[Point]
    iterations: int
    converged: bool
    elapsed: float
    movement_history: List[float] = field(default_factory=list)
    signal: float = 0.0
    noise: float = 0.0
    cluster_sizes: List[int] = field(default_factory=list)


def iterate(
    points: Sequence[Point],
    means: Sequence[Point],
    criterion: ConvergenceCriterion,
    executor=None,
) -> IterationResult:
    """
    Run supersteps until ``criterion`` reports convergence.

    Parameters
    ----------
    points : sequence of Point
        Input points. Never modified.
    means : sequence of Point
        Initial means; the slot order is kept throughout the run.
    criterion : ConvergenceCriterion
        Stopping rule checked after every superstep.
    executor : optional
        Backend for the parallel phase. Defaults to sequential execution.

    Raises
    ------
    InvalidStateError
        If ``means`` is empty.
    """
    if len(means) == 0:
        raise InvalidStateError("cannot run k-means with an empty mean set")
    executor = executor or SequentialExecutor()
    means = list(means)
    history: List[float] = []
    iteration = 0
    start = time.perf_counter()

    while True:
        iteration += 1
        stats = executor.superstep(points, means)
        new_means = stats.new_means(means)
        step = Superstep(
            iteration=iteration,
            old_means=means,
            new_means=new_means,
            signal=stats.signal(),
            noise=stats.noise(new_means),
        )
        history.append(movement(means, new_means))
        logger.debug(
            "Superstep %d: max movement %.6g, empty clusters %d",
            iteration,
            history[-1],
            int((stats.counts == 0).sum()),
        )
        if criterion.is_converged(step):
            break
        means = new_means

    elapsed = time.perf_counter() - start
    stable = criterion.fired_stable(step)
    logger.info(
        "%s after %d supersteps in %.3fs (%r)",
        "Converged" if stable else "Stopped",
        iteration,
        elapsed,
        criterion,
    )
    return IterationResult(
        means=new_means,
        iterations=iteration,
        converged=stable,
        elapsed=elapsed,
        movement_history=history,
        signal=step.signal,
        noise=step.noise,
        cluster_sizes=[int(c) for c in stats.counts],
    )


def run(
    points: Sequence[Point],
    initial_means: Sequence[Point],
    eta: float,
    executor: Optional[object] = None,
) -> List[Point]:
    """
    Cluster ``points`` until every mean moves less than ``eta`` in a round.

    Returns the final means, index-aligned with ``initial_means``. No
    iteration cap is applied; use ``iterate`` with a step criterion for that.
    """
    return iterate(points, initial_means, EtaConvergence(eta), executor).means
