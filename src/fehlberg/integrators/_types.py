"""Type definitions for the RKF45 integrator.

Provides the core data types used by the stepper and the step-size
estimator:

- :class:`StepAttempt`: Output of a single six-stage RKF45 evaluation,
  holding both embedded solutions and the per-equation discrepancy.
- :class:`IntegrationResult`: Summary returned by a full integration run.
- :class:`IntegratorConfig`: Step-size controller constants and the
  liveness bounds of the rejection loop.

The NamedTuple types are treated by JAX as pytrees, so ``StepAttempt``
can be returned from ``jax.jit``-compiled functions directly.

The exception hierarchy covers the failures that abort an integration.
Precondition violations (bad ``tol``, ``h``, shapes) raise ``ValueError``.
"""

from __future__ import annotations

from typing import NamedTuple

from jax import Array


class StepAttempt(NamedTuple):
    """Result of one RKF45 step attempt from ``(t, state)`` with step ``h``.

    Attributes:
        state_high: 5th-order solution ``state + h * dx``.
        state_low: 4th-order solution.
        dx: 5th-order weighted slope combination (the per-equation
            derivative estimate, without the ``h`` factor).
        rel: Per-equation discrepancy ``|state_high - state_low|``.
    """

    state_high: Array
    state_low: Array
    dx: Array
    rel: Array


class IntegrationResult(NamedTuple):
    """Result of :func:`~fehlberg.integrators.rkf45_integrate`.

    Attributes:
        t: Time of the last accepted sample (may overshoot ``b``).
        state: State at ``t``.
        h_next: Step size the controller proposed after the last
            accepted step.
        n_accepted: Number of accepted steps (excluding the initial sample).
        n_rejected: Total number of rejected attempts.
    """

    t: Array
    state: Array
    h_next: Array
    n_accepted: int
    n_rejected: int


class IntegratorConfig(NamedTuple):
    """Configuration of the RKF45 step-size controller.

    Defaults reproduce the classical Fehlberg controller: a step is
    rejected when its largest local error exceeds ``10 * tol`` and the
    step size is rescaled by ``0.84 * (tol * h / err) ** 0.25``.

    Attributes:
        safety_factor: Multiplicative safety factor of the rescale law.
        rescale_exponent: Exponent applied to ``tol * h / err``.
        reject_factor: A step is rejected when its error exceeds
            ``reject_factor * tol``.
        max_step_attempts: Maximum number of consecutive rejections before
            the integration is aborted with
            :class:`StepSizeError`.
        bisection_iterations: Number of bisection iterations performed by
            the initial step-size estimator.
    """

    safety_factor: float = 0.84
    rescale_exponent: float = 0.25
    reject_factor: float = 10.0
    max_step_attempts: int = 100
    bisection_iterations: int = 32


class IntegrationError(RuntimeError):
    """Base class for failures that abort an integration run."""


class StepSizeError(IntegrationError):
    """The step size underflowed, became non-finite, or never converged."""


class NonFiniteStateError(IntegrationError):
    """A step produced a NaN or infinite state or error estimate."""
