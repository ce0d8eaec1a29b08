# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Convergence checks.

``converged`` is the eta stability test. The criterion classes wrap it and the
other stopping rules (fixed step count, signal-to-noise ratio) behind one
``is_converged(step)`` interface so the driver does not care which one it got.
"""

import math
from dataclasses import dataclass
from typing import Sequence

from .errors import InvalidStateError
from .point import Point


def converged(eta: float, old_means: Sequence[Point], new_means: Sequence[Point]) -> bool:
    """
    True iff every mean moved less than ``eta`` (squared distance, strict).

    ``old_means[i]`` and ``new_means[i]`` must describe the same cluster.

    Raises
    ------
    InvalidStateError
        If the two sequences differ in length.
    """
    if len(old_means) != len(new_means):
        raise InvalidStateError(
            f"cannot compare {len(old_means)} old means with {len(new_means)} new means"
        )
    return all(old.square_distance(new) < eta for old, new in zip(old_means, new_means))


def movement(old_means: Sequence[Point], new_means: Sequence[Point]) -> float:
    """Largest squared distance any mean moved."""
    if len(old_means) != len(new_means):
        raise InvalidStateError(
            f"cannot compare {len(old_means)} old means with {len(new_means)} new means"
        )
    return max((old.square_distance(new) for old, new in zip(old_means, new_means)), default=0.0)


@dataclass(frozen=True)
class Superstep:
    """
    Everything a criterion may look at after one classify/update round.

    Attributes:
        iteration: 1-based number of the round that just finished
        old_means: means the points were classified against
        new_means: centroids computed in this round, index-aligned with old_means
        signal: total squared norm of the points
        noise: within-cluster sum of squares against new_means
    """
    iteration: int
    old_means: Sequence[Point]
    new_means: Sequence[Point]
    signal: float = 0.0
    noise: float = 0.0


class ConvergenceCriterion:
    """Base class for stopping rules."""

    #: True when stopping through this rule means the means are stable.
    stable = True

    def is_converged(self, step: Superstep) -> bool:
        raise NotImplementedError

    def fired_stable(self, step: Superstep) -> bool:
        """True when this rule fired for ``step`` and its firing means stability."""
        return self.stable and self.is_converged(step)

    def __or__(self, other: "ConvergenceCriterion") -> "AnyOf":
        return AnyOf(self, other)


class EtaConvergence(ConvergenceCriterion):
    """Stop once every mean moved less than ``eta``."""

    def __init__(self, eta: float):
        if eta < 0:
            raise ValueError(f"eta must be >= 0, got {eta}")
        self.eta = eta

    def is_converged(self, step: Superstep) -> bool:
        return converged(self.eta, step.old_means, step.new_means)

    def __repr__(self) -> str:
        return f"EtaConvergence(eta={self.eta})"


class StepsConvergence(ConvergenceCriterion):
    """Stop after a fixed number of rounds."""

    stable = False

    def __init__(self, max_steps: int):
        if max_steps < 1:
            raise ValueError(f"max_steps must be >= 1, got {max_steps}")
        self.max_steps = max_steps

    def is_converged(self, step: Superstep) -> bool:
        return step.iteration >= self.max_steps

    def __repr__(self) -> str:
        return f"StepsConvergence(max_steps={self.max_steps})"


class SignalToNoiseConvergence(ConvergenceCriterion):
    """
    Stop once the signal-to-noise ratio reaches ``target_db`` decibels.

    The signal is the energy of the points themselves, the noise is what is
    lost by replacing each point with its mean. High targets may never be
    reached; pair this with a step cap.
    """

    def __init__(self, target_db: float):
        self.target_db = target_db

    @staticmethod
    def ratio_db(signal: float, noise: float) -> float:
        if noise <= 0.0:
            return math.inf
        if signal <= 0.0:
            return -math.inf
        return 10.0 * math.log10(signal / noise)

    def is_converged(self, step: Superstep) -> bool:
        return self.ratio_db(step.signal, step.noise) >= self.target_db

    def __repr__(self) -> str:
        return f"SignalToNoiseConvergence(target_db={self.target_db})"


class AnyOf(ConvergenceCriterion):
    """Stop as soon as any member criterion does."""

    def __init__(self, *criteria: ConvergenceCriterion):
        if not criteria:
            raise ValueError("AnyOf needs at least one criterion")
        self.criteria = criteria

    def is_converged(self, step: Superstep) -> bool:
        return any(c.is_converged(step) for c in self.criteria)

    def fired_stable(self, step: Superstep) -> bool:
        return any(c.fired_stable(step) for c in self.criteria)

    def __repr__(self) -> str:
        return "AnyOf(" + ", ".join(repr(c) for c in self.criteria) + ")"
