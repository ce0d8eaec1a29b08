#!/usr/bin/env python3
"""
Smoke test for bspkmeans.

Goals:
- Prove import & end-to-end fit on every executor backend
- Check that all backends agree on the final means for the same input
- Exercise the steps and snr convergence modes
- Keep it FAST and self-contained for CI
"""

import math
import shutil

import numpy as np


def _assert(cond, msg):
    if not cond:
        raise AssertionError(msg)


def main():
    print("Starting smoke test…")

    try:
        # 1) Import the Python-facing API
        from bspkmeans.clusterer import BSPKMeans, generate_points, random_sample_means
        print("✓ Imported BSPKMeans")

        # 2) Toy dataset
        k = 4
        points = generate_points(k, 2000)
        means = random_sample_means(k, points, seed=7)
        print(f"✓ Generated {len(points)} points")

        # 3) Fit on every local backend and compare
        backends = ["sequential", "threads", "processes"]
        if shutil.which("java"):
            backends.append("spark")
        else:
            print("⚠️  No java on PATH, skipping spark backend")

        reference = None
        for backend in backends:
            model = BSPKMeans(k=k, eta=1e-6, executor=backend, parallelism=2).fit(
                points, initial_means=means
            )
            centers = model.clusterCenters()
            _assert(centers.shape == (k, 3), f"{backend}: bad centers shape {centers.shape}")
            _assert(model.summary.converged, f"{backend}: did not converge")
            cost = model.computeCost(points)
            _assert(math.isfinite(cost) and cost >= 0, f"{backend}: cost invalid: {cost}")
            if reference is None:
                reference = centers
            else:
                _assert(
                    np.allclose(centers, reference, atol=1e-9),
                    f"{backend}: centers differ from sequential run",
                )
            print(f"✓ {backend}: {model.summary.iterations} supersteps, cost={cost:.6f}")

        # 4) Other convergence modes
        steps_model = BSPKMeans(k=k, convergence="steps", maxIter=3, executor="sequential").fit(
            points, initial_means=means
        )
        _assert(steps_model.summary.iterations == 3, "steps mode ran the wrong number of rounds")
        _assert(not steps_model.summary.converged, "steps mode must not report stability")
        print("✓ steps mode OK")

        snr_model = BSPKMeans(
            k=k, convergence="snr", snrTarget=5.0, maxIter=50, executor="sequential"
        ).fit(points, initial_means=means)
        _assert(snr_model.summary.signalToNoise >= 5.0, "snr mode stopped below target")
        print("✓ snr mode OK")

        print("\n✅ Smoke tests passed")
        return 0

    except Exception as e:
        import traceback
        print(f"\n❌ Smoke test failed: {e}")
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
