# /// script
# requires-python = ">=3.11"
# dependencies = ["typer>=0.9.0", "fehlberg"]
#
# [tool.uv.sources]
# fehlberg = { path = ".." }
# ///
"""Integrate the harmonic oscillator with the adaptive RKF45 integrator.

Solves ``y1' = y2, y2' = -y1`` with ``y(0) = [1, 0]`` (exact solution
``[cos t, -sin t]``). The initial step size comes from the bisection
estimator, every accepted sample is recorded, and the trajectory is
written to CSV.

Requires fehlberg to be installed (``uv pip install -e .`` from the repo root).

Usage:
    uv run examples/harmonic_oscillator.py [OPTIONS]

Examples:
    # One period at the default tolerance
    uv run examples/harmonic_oscillator.py

    # Tight tolerance over ten periods, with per-step logging
    uv run examples/harmonic_oscillator.py --tol 1e-10 --t-end 62.83 --verbose
"""

import logging
import math
import time
from pathlib import Path
from typing import Annotated

import jax.numpy as jnp
import typer

from fehlberg import set_dtype
from fehlberg.integrators import (
    LoggingSink,
    TrajectoryRecorder,
    chain,
    estimate_initial_step,
    rkf45_integrate,
    stack_components,
)

set_dtype(jnp.float64)

# Per-equation form: each component reads x = [t, y1, y2]
_oscillator = stack_components([
    lambda x: x[2],
    lambda x: -x[1],
])


def main(
    tol: Annotated[float, typer.Option(help="Local error tolerance per step")] = 1e-8,
    t_end: Annotated[float, typer.Option(help="End of the integration interval")] = 2.0 * math.pi,
    output: Annotated[Path, typer.Option(help="CSV file for the trajectory")] = Path(
        "harmonic_oscillator.csv"
    ),
    verbose: Annotated[bool, typer.Option(help="Log every sample and rejection")] = False,
):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    y0 = jnp.array([1.0, 0.0])

    print("\n── Stage 1: Estimating initial step size ──")
    t0 = time.perf_counter()
    h0 = estimate_initial_step(_oscillator, 0.0, t_end, y0, tol)
    print(f"  h0 = {float(h0):.6e} ({time.perf_counter() - t0:.2f}s)")

    print("\n── Stage 2: Integrating ──")
    recorder = TrajectoryRecorder()
    callback = chain(recorder, LoggingSink(level=logging.DEBUG)) if verbose else recorder
    t0 = time.perf_counter()
    result = rkf45_integrate(_oscillator, 0.0, t_end, h0, y0, tol, callback=callback)
    elapsed = time.perf_counter() - t0
    print(
        f"  {result.n_accepted} accepted / {result.n_rejected} rejected steps in {elapsed:.2f}s"
    )

    t_final = float(result.t)
    exact = jnp.array([jnp.cos(t_final), -jnp.sin(t_final)])
    energy = recorder.states[:, 0] ** 2 + recorder.states[:, 1] ** 2
    print(f"  Final time: {t_final:.9f}")
    print(f"  Max |y - exact| at final time: {float(jnp.max(jnp.abs(result.state - exact))):.3e}")
    print(f"  Max |y1^2 + y2^2 - 1|: {float(jnp.max(jnp.abs(energy - 1.0))):.3e}")

    print("\n── Stage 3: Writing trajectory ──")
    path = recorder.write_csv(output)
    print(f"  {len(recorder)} samples written to {path}")

    print("\nDone.")


if __name__ == "__main__":
    typer.run(main)
