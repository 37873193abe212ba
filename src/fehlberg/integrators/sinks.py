"""Callback sinks for :func:`~fehlberg.integrators.rkf45_integrate`.

The integrator reports every sample through ``callback(r, dx, err)``:

- ``r``: time-and-state vector ``[t, y_1, ..., y_N]``
- ``dx``: per-equation derivative estimate of the step (zeros for the
  initial condition)
- ``err``: largest local error of the step (0.0 for the initial condition)

Any callable with that signature works. This module provides an
accumulating :class:`TrajectoryRecorder`, a :class:`LoggingSink`, and
:func:`chain` to feed several sinks from one integration.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import jax.numpy as jnp
import numpy as np
import polars as pl
from jax import Array

logger = logging.getLogger(__name__)


class TrajectoryRecorder:
    """Accumulate every reported sample of an integration in memory.

    Examples:
        ```python
        import jax.numpy as jnp
        from fehlberg.integrators import TrajectoryRecorder, rkf45_integrate
        recorder = TrajectoryRecorder()
        rkf45_integrate(lambda t, y: -y, 0.0, 1.0, 0.1, jnp.array([1.0]), 1e-6,
                        callback=recorder)
        recorder.times[-1], recorder.states[-1]
        ```
    """

    def __init__(self) -> None:
        self._samples: list[Array] = []
        self._derivatives: list[Array] = []
        self._errors: list[Array] = []

    def __call__(self, r: Array, dx: Array, err: Array) -> None:
        self._samples.append(jnp.asarray(r))
        self._derivatives.append(jnp.asarray(dx))
        self._errors.append(jnp.asarray(err))

    def __len__(self) -> int:
        return len(self._samples)

    def _require_samples(self) -> None:
        if not self._samples:
            raise ValueError("No samples have been recorded")

    @property
    def times(self) -> Array:
        """Sample times, shape ``(n,)``."""
        self._require_samples()
        return jnp.stack(self._samples)[:, 0]

    @property
    def states(self) -> Array:
        """Sampled states, shape ``(n, N)``."""
        self._require_samples()
        return jnp.stack(self._samples)[:, 1:]

    @property
    def derivatives(self) -> Array:
        """Per-step derivative estimates, shape ``(n, N)``."""
        self._require_samples()
        return jnp.stack(self._derivatives)

    @property
    def errors(self) -> Array:
        """Largest local error of each sample, shape ``(n,)``."""
        self._require_samples()
        return jnp.stack(self._errors)

    def to_polars(self) -> pl.DataFrame:
        """Return the trajectory as a DataFrame.

        Columns are ``t``, ``y0`` .. ``y{N-1}``, ``dx0`` .. ``dx{N-1}`` and
        ``error``, one row per sample.
        """
        states = np.asarray(self.states)
        derivatives = np.asarray(self.derivatives)
        columns = {"t": np.asarray(self.times)}
        for j in range(states.shape[1]):
            columns[f"y{j}"] = states[:, j]
        for j in range(derivatives.shape[1]):
            columns[f"dx{j}"] = derivatives[:, j]
        columns["error"] = np.asarray(self.errors)
        return pl.DataFrame(columns)

    def write_csv(self, filepath: str | Path) -> Path:
        """Write the trajectory to a CSV file and return its path."""
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        self.to_polars().write_csv(filepath)
        logger.info("Trajectory with %d samples written to %s", len(self), filepath)
        return filepath


class LoggingSink:
    """Log each sample through a :class:`logging.Logger`.

    Args:
        log: Logger to write to. Defaults to this module's logger.
        level: Logging level of the sample records.
    """

    def __init__(self, log: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self.log = log if log is not None else logger
        self.level = level

    def __call__(self, r: Array, dx: Array, err: Array) -> None:
        if self.log.isEnabledFor(self.level):
            self.log.log(
                self.level,
                "t=%.9e y=%s err=%.3e",
                float(r[0]),
                np.array2string(np.asarray(r[1:]), precision=9),
                float(err),
            )


def chain(*callbacks: Callable[[Array, Array, Array], object]) -> Callable[[Array, Array, Array], None]:
    """Return a callback that forwards each sample to ``callbacks`` in order."""

    def _fan_out(r: Array, dx: Array, err: Array) -> None:
        for callback in callbacks:
            callback(r, dx, err)

    return _fan_out
