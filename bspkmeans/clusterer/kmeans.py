# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Estimator interface for BSP k-means.

This module wraps the iteration loop in a ``fit``/model pair configured with
Spark ML ``Params``, so settings are typed, have defaults and can be read back
with getters.
"""

import logging
from typing import Dict, List, Optional, Sequence

import numpy as np

from pyspark import keyword_only
from pyspark.ml.param import Param, Params, TypeConverters
from pyspark.ml.param.shared import HasMaxIter, HasSeed

from .aggregator import ClusterStats
from .classifier import assign, classify, closest_index
from .convergence import (
    AnyOf,
    ConvergenceCriterion,
    EtaConvergence,
    SignalToNoiseConvergence,
    StepsConvergence,
)
from .driver import IterationResult, iterate
from .executors import EXECUTORS, make_executor
from .initialization import INIT_MODES, initialize_means
from .point import Point

logger = logging.getLogger(__name__)

CONVERGENCE_MODES = ("eta", "steps", "snr")


class BSPKMeansParams(HasMaxIter, HasSeed):
    """
    Params for BSPKMeans.

    Parameters
    ----------
    k : int, default=2
        Number of means (k >= 1).

    eta : float, default=0.01
        Stability threshold: a round is converged once every mean moved less
        than eta in squared distance.

    convergence : str, default="eta"
        Stopping rule. Options: "eta", "steps", "snr"

    maxIter : int, default=0
        Number of supersteps for "steps"; an upper bound for "eta" and "snr".
        0 means no bound (not allowed with "steps").

    snrTarget : float, default=30.0
        Signal-to-noise target in dB for "snr".

    initMode : str, default="random"
        Initial mean selection. Options: "random", "uniform", "uniformRandom"

    executor : str, default="threads"
        Parallel backend. Options: "sequential", "threads", "processes", "spark"

    parallelism : int, default=0
        Workers (or Spark partitions). 0 picks the backend default.

    seed : int, optional
        Random seed for initialization.
    """

    k = Param(
        Params._dummy(),
        "k",
        "Number of means (must be >= 1).",
        typeConverter=TypeConverters.toInt,
    )

    eta = Param(
        Params._dummy(),
        "eta",
        "Stability threshold on squared mean movement",
        typeConverter=TypeConverters.toFloat,
    )

    convergence = Param(
        Params._dummy(),
        "convergence",
        "Convergence strategy: eta, steps, snr",
        typeConverter=TypeConverters.toString,
    )

    snrTarget = Param(
        Params._dummy(),
        "snrTarget",
        "Signal-to-noise target in dB for snr convergence",
        typeConverter=TypeConverters.toFloat,
    )

    initMode = Param(
        Params._dummy(),
        "initMode",
        "Initialization mode: random, uniform, uniformRandom",
        typeConverter=TypeConverters.toString,
    )

    executor = Param(
        Params._dummy(),
        "executor",
        "Execution backend: sequential, threads, processes, spark",
        typeConverter=TypeConverters.toString,
    )

    parallelism = Param(
        Params._dummy(),
        "parallelism",
        "Number of workers (0 = backend default)",
        typeConverter=TypeConverters.toInt,
    )

    def __init__(self, *args):
        super(BSPKMeansParams, self).__init__(*args)
        self._setDefault(
            k=2,
            eta=0.01,
            convergence="eta",
            maxIter=0,
            snrTarget=30.0,
            initMode="random",
            executor="threads",
            parallelism=0,
        )

    def getK(self) -> int:
        """Gets the value of k or its default value."""
        return self.getOrDefault(self.k)

    def getEta(self) -> float:
        """Gets the value of eta or its default value."""
        return self.getOrDefault(self.eta)

    def getConvergence(self) -> str:
        """Gets the value of convergence or its default value."""
        return self.getOrDefault(self.convergence)

    def getSnrTarget(self) -> float:
        """Gets the value of snrTarget or its default value."""
        return self.getOrDefault(self.snrTarget)

    def getInitMode(self) -> str:
        """Gets the value of initMode or its default value."""
        return self.getOrDefault(self.initMode)

    def getExecutor(self) -> str:
        """Gets the value of executor or its default value."""
        return self.getOrDefault(self.executor)

    def getParallelism(self) -> int:
        """Gets the value of parallelism or its default value."""
        return self.getOrDefault(self.parallelism)


class BSPKMeans(BSPKMeansParams):
    """
    K-means over 3-D points with bulk-synchronous parallel supersteps.

    Every superstep classifies all points against the current means in
    parallel, merges per-worker partial sums into new means, and then checks
    the configured convergence rule.

    Examples
    --------
    >>> from bspkmeans.clusterer import BSPKMeans, Point
    >>> points = [Point(0, 0, 0), Point(1, 0, 0), Point(10, 0, 0), Point(11, 0, 0)]
    >>> kmeans = BSPKMeans(k=2, eta=1e-4, executor="sequential")
    >>> model = kmeans.fit(points, initial_means=[Point(0, 0, 0), Point(11, 0, 0)])
    >>> model.clusterCenters()
    array([[ 0.5,  0. ,  0. ],
           [10.5,  0. ,  0. ]])

    Notes
    -----
    - "threads" shares memory but is limited by the GIL; "processes" and
      "spark" run the classification truly in parallel.
    - Pass ``spark_context`` to ``fit`` to run on an existing cluster.

    See Also
    --------
    BSPKMeansModel : The fitted model
    """

    @keyword_only
    def __init__(
        self,
        *,
        k: int = 2,
        eta: float = 0.01,
        convergence: str = "eta",
        maxIter: int = 0,
        snrTarget: float = 30.0,
        initMode: str = "random",
        executor: str = "threads",
        parallelism: int = 0,
        seed: Optional[int] = None,
    ):
        """
        Initialize BSPKMeans estimator.
        """
        super(BSPKMeans, self).__init__()
        kwargs = self._input_kwargs
        self.setParams(**kwargs)

    @keyword_only
    def setParams(
        self,
        *,
        k: int = 2,
        eta: float = 0.01,
        convergence: str = "eta",
        maxIter: int = 0,
        snrTarget: float = 30.0,
        initMode: str = "random",
        executor: str = "threads",
        parallelism: int = 0,
        seed: Optional[int] = None,
    ):
        """
        Set parameters for BSPKMeans.
        """
        kwargs = self._input_kwargs
        return self._set(**kwargs)

    def setK(self, value: int):
        """Sets the value of k."""
        return self._set(k=value)

    def setEta(self, value: float):
        """Sets the value of eta."""
        return self._set(eta=value)

    def setConvergence(self, value: str):
        """Sets the value of convergence."""
        return self._set(convergence=value)

    def setMaxIter(self, value: int):
        """Sets the value of maxIter."""
        return self._set(maxIter=value)

    def setSnrTarget(self, value: float):
        """Sets the value of snrTarget."""
        return self._set(snrTarget=value)

    def setInitMode(self, value: str):
        """Sets the value of initMode."""
        return self._set(initMode=value)

    def setExecutor(self, value: str):
        """Sets the value of executor."""
        return self._set(executor=value)

    def setParallelism(self, value: int):
        """Sets the value of parallelism."""
        return self._set(parallelism=value)

    def setSeed(self, value: int):
        """Sets the value of seed."""
        return self._set(seed=value)

    def _validate(self):
        if self.getK() < 1:
            raise ValueError(f"k must be >= 1, got {self.getK()}")
        if self.getEta() < 0:
            raise ValueError(f"eta must be >= 0, got {self.getEta()}")
        if self.getMaxIter() < 0:
            raise ValueError(f"maxIter must be >= 0, got {self.getMaxIter()}")
        if self.getParallelism() < 0:
            raise ValueError(f"parallelism must be >= 0, got {self.getParallelism()}")
        if self.getConvergence() not in CONVERGENCE_MODES:
            raise ValueError(
                f"convergence must be one of {', '.join(CONVERGENCE_MODES)}, "
                f"got '{self.getConvergence()}'"
            )
        if self.getConvergence() == "steps" and self.getMaxIter() < 1:
            raise ValueError("convergence 'steps' needs maxIter >= 1")
        if self.getInitMode() not in INIT_MODES:
            raise ValueError(
                f"initMode must be one of {', '.join(INIT_MODES)}, got '{self.getInitMode()}'"
            )
        if self.getExecutor() not in EXECUTORS:
            raise ValueError(
                f"executor must be one of {', '.join(EXECUTORS)}, got '{self.getExecutor()}'"
            )

    def criterion(self) -> ConvergenceCriterion:
        """The stopping rule described by the current params."""
        self._validate()
        mode = self.getConvergence()
        max_iter = self.getMaxIter()
        if mode == "steps":
            return StepsConvergence(max_iter)
        if mode == "eta":
            rule: ConvergenceCriterion = EtaConvergence(self.getEta())
        else:
            rule = SignalToNoiseConvergence(self.getSnrTarget())
        if max_iter > 0:
            rule = AnyOf(rule, StepsConvergence(max_iter))
        return rule

    def _seed(self) -> Optional[int]:
        seed = self.getOrDefault(self.seed)
        return None if seed is None else seed % (2 ** 32)

    def fit(
        self,
        points: Sequence[Point],
        initial_means: Optional[Sequence[Point]] = None,
        spark_context=None,
    ) -> "BSPKMeansModel":
        """
        Cluster ``points``.

        Parameters
        ----------
        points : sequence of Point
            Input points; must be non-empty.
        initial_means : sequence of Point, optional
            Starting means. When omitted, ``initMode`` chooses k of them.
        spark_context : SparkContext, optional
            Context for the "spark" executor.

        Returns
        -------
        BSPKMeansModel
        """
        criterion = self.criterion()
        points = list(points)
        if not points:
            raise ValueError("cannot fit on an empty point set")
        k = self.getK()
        if initial_means is None:
            means = initialize_means(self.getInitMode(), k, points, self._seed())
        else:
            means = list(initial_means)
            if len(means) != k:
                raise ValueError(f"expected {k} initial means, got {len(means)}")

        logger.info(
            "Fitting BSPKMeans: k=%d, points=%d, criterion=%r, executor=%s",
            k,
            len(points),
            criterion,
            self.getExecutor(),
        )
        with make_executor(self.getExecutor(), self.getParallelism(), spark_context) as ex:
            result = iterate(points, means, criterion, ex)
        summary = TrainingSummary(
            result,
            k=k,
            num_points=len(points),
            convergence=self.getConvergence(),
            executor=self.getExecutor(),
            effective_k=sum(1 for size in result.cluster_sizes if size > 0),
        )
        return BSPKMeansModel(result.means, summary)


class BSPKMeansModel:
    """
    Means fitted by BSPKMeans.

    Attributes
    ----------
    means : list of Point
        Final means, in the order of the initial means.

    Examples
    --------
    >>> centers = model.clusterCenters()
    >>> cluster = model.predict(Point(0.2, 0.1, 0.0))
    >>> cost = model.computeCost(points)
    """

    def __init__(self, means: Sequence[Point], summary: Optional["TrainingSummary"] = None):
        self.means: List[Point] = list(means)
        self._summary = summary

    def clusterCenters(self) -> np.ndarray:
        """
        Get the means as a NumPy array.

        Returns
        -------
        np.ndarray
            Array of shape (k, 3).
        """
        return np.array([m.coordinates for m in self.means], dtype=np.float64).reshape(-1, 3)

    @property
    def numClusters(self) -> int:
        """Number of means."""
        return len(self.means)

    def predict(self, point: Point) -> int:
        """
        Index of the mean closest to ``point`` (0 to k-1).
        """
        return closest_index(point, self.means)

    def predictAll(self, points: Sequence[Point], executor=None) -> List[int]:
        """Cluster index for every point, in input order."""
        return assign(points, self.means, executor)

    def classify(self, points: Sequence[Point]) -> Dict[Point, List[Point]]:
        """Partition ``points`` by their closest mean."""
        return classify(points, self.means)

    def computeCost(self, points: Sequence[Point]) -> float:
        """
        Within-cluster sum of squares (WCSS).

        The sum of squared distances from each point to its closest mean.
        """
        return ClusterStats.from_points(points, self.means).noise(self.means)

    def hasSummary(self) -> bool:
        """True if the model came out of ``fit`` in this session."""
        return self._summary is not None

    @property
    def summary(self) -> "TrainingSummary":
        """
        Get the training summary.

        Raises
        ------
        RuntimeError
            If the model has no summary.
        """
        if self._summary is None:
            raise RuntimeError("No training summary available for this model")
        return self._summary


class TrainingSummary:
    """
    Facts about one training run.

    Attributes
    ----------
    k : int
        Requested number of means.

    effectiveK : int
        Means with at least one point assigned in the final superstep.

    numPoints : int
        Number of training points.

    iterations : int
        Supersteps performed.

    converged : bool
        Whether a stability rule (eta or snr) stopped the run.

    convergence : str
        Convergence mode used.

    executor : str
        Backend used.

    elapsedMillis : int
        Training time in milliseconds.
    """

    def __init__(
        self,
        result: IterationResult,
        k: int,
        num_points: int,
        convergence: str,
        executor: str,
        effective_k: int,
    ):
        self._result = result
        self._k = k
        self._num_points = num_points
        self._convergence = convergence
        self._executor = executor
        self._effective_k = effective_k

    @property
    def k(self) -> int:
        return self._k

    @property
    def effectiveK(self) -> int:
        return self._effective_k

    @property
    def numPoints(self) -> int:
        return self._num_points

    @property
    def iterations(self) -> int:
        return self._result.iterations

    @property
    def converged(self) -> bool:
        return self._result.converged

    @property
    def convergence(self) -> str:
        return self._convergence

    @property
    def executor(self) -> str:
        return self._executor

    @property
    def elapsedMillis(self) -> int:
        return int(round(self._result.elapsed * 1000))

    @property
    def avgIterationMillis(self) -> float:
        """Average time per superstep in milliseconds."""
        return self._result.elapsed * 1000.0 / max(self._result.iterations, 1)

    @property
    def movementHistory(self) -> List[float]:
        """Largest squared mean movement of each superstep."""
        return list(self._result.movement_history)

    @property
    def signalToNoise(self) -> float:
        """Final signal-to-noise ratio in dB."""
        return SignalToNoiseConvergence.ratio_db(self._result.signal, self._result.noise)
