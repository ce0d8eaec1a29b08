# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Exceptions raised by the clusterer.
"""


class ClusteringError(Exception):
    """Base class for clustering failures."""


class InvalidStateError(ClusteringError):
    """
    A caller contract was violated.

    Raised for an empty mean set, mean sequences of different lengths, or a
    partition that does not cover every mean. The run is aborted; retrying
    with the same inputs fails the same way.
    """
