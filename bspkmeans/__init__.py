# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
BSP K-Means
===========

Bulk-synchronous parallel k-means clustering over points in 3-D space.
"""

import logging

__version__ = "0.1.0"
__all__ = ["clusterer"]

logging.getLogger(__name__).addHandler(logging.NullHandler())
