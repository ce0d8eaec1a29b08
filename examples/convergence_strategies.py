#!/usr/bin/env python
# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Compares the eta, steps and signal-to-noise stopping rules and the three
seeding strategies on the same synthetic input.
"""

from bspkmeans.clusterer import BSPKMeans, generate_points


def main():
    k = 8
    points = generate_points(k, 5000)

    for init_mode in ["uniform", "random", "uniformRandom"]:
        for convergence, extra in [
            ("steps", {"maxIter": 1}),
            ("steps", {"maxIter": 10}),
            ("eta", {"eta": 1e-4}),
            ("snr", {"snrTarget": 20.0, "maxIter": 50}),
        ]:
            kmeans = BSPKMeans(
                k=k,
                convergence=convergence,
                initMode=init_mode,
                executor="sequential",
                seed=42,
                **extra,
            )
            model = kmeans.fit(points)
            summary = model.summary
            print(
                f"{init_mode:>13} {convergence:>5} {str(extra):>34}: "
                f"iterations={summary.iterations:3d} "
                f"WCSS={model.computeCost(points):10.4f} "
                f"SNR={summary.signalToNoise:6.2f} dB"
            )


if __name__ == "__main__":
    main()
