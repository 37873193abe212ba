"""Adaptive Runge-Kutta-Fehlberg 4(5) integration.

Implemented in JAX: single step attempts and the initial step-size search
are compatible with ``jax.jit``; the integration loop itself runs in
Python so that each accepted sample can be handed to a callback.

Available functions:

- :func:`rkf45_attempt` -- One six-stage RKF45 attempt (5th- and 4th-order
  solutions plus their discrepancy)
- :func:`rkf45_integrate` -- Adaptive integration from ``a`` past ``b``
- :func:`estimate_initial_step` -- Bisection search for an initial step size
- :func:`stack_components` -- Build a vector right-hand side from
  per-equation functions

Right-hand sides share a common interface::

    dy = dynamics(t, y)

and samples are delivered to ``callback(r, dx, err)`` with
``r = [t, y_1, ..., y_N]``.
"""

from fehlberg.integrators._tableau import TABLEAU, B
from fehlberg.integrators._types import (
    IntegrationError,
    IntegrationResult,
    IntegratorConfig,
    NonFiniteStateError,
    StepAttempt,
    StepSizeError,
)
from fehlberg.integrators.components import pack_trial_state, stack_components
from fehlberg.integrators.rkf45 import rkf45_attempt, rkf45_integrate
from fehlberg.integrators.sinks import LoggingSink, TrajectoryRecorder, chain
from fehlberg.integrators.step_size import estimate_initial_step, local_error

__all__ = [
    "TABLEAU",
    "B",
    "IntegrationError",
    "IntegrationResult",
    "IntegratorConfig",
    "NonFiniteStateError",
    "StepAttempt",
    "StepSizeError",
    "pack_trial_state",
    "stack_components",
    "rkf45_attempt",
    "rkf45_integrate",
    "LoggingSink",
    "TrajectoryRecorder",
    "chain",
    "estimate_initial_step",
    "local_error",
]
