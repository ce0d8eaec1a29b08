#!/usr/bin/env python
# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Setup configuration for the bspkmeans package.
"""

from setuptools import setup, find_packages
import os

# Read version from package
with open(os.path.join("bspkmeans", "__init__.py")) as f:
    for line in f:
        if line.startswith("__version__"):
            version = line.split("=")[1].strip().strip('"').strip("'")
            break

# Read long description from README
long_description = """
# BSP K-Means

K-means clustering of 3-D points as a bulk-synchronous parallel computation.

## Features

- **Superstep loop**: classify, merge per-worker partial sums, check convergence
- **Pluggable backends**: sequential, thread pool, process pool, Spark RDDs
- **Convergence strategies**: eta stability, fixed steps, signal-to-noise ratio
- **Seeding strategies**: uniform, random sample, proportional subspace

## Installation

```bash
pip install bspkmeans
```

## Quick Start

```python
from bspkmeans.clusterer import BSPKMeans, generate_points

points = generate_points(k=8, num=10000)
model = BSPKMeans(k=8, eta=0.01, executor="processes").fit(points)
print(model.clusterCenters())
print(model.summary.iterations)
```
"""

setup(
    name="bspkmeans",
    version=version,
    description="Bulk-synchronous parallel k-means clustering for 3-D points",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="MassiveDataScience",
    author_email="support@massivedatascience.com",
    license="Apache License 2.0",
    packages=find_packages(exclude=["tests", "tests.*", "examples"]),
    python_requires=">=3.8",
    install_requires=[
        "pyspark>=3.4.0",
        "numpy>=1.20.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=3.0.0",
            "black>=22.0.0",
            "flake8>=4.0.0",
            "mypy>=0.950",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Scientific/Engineering",
        "Topic :: Software Development :: Libraries",
    ],
    keywords="clustering kmeans bsp parallel spark",
)
