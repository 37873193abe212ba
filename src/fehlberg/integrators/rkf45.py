"""Runge-Kutta-Fehlberg 4(5) adaptive integrator (RKF45).

Implements the Fehlberg embedded Runge-Kutta pair: six stage evaluations
per attempt yield a 5th-order solution, which is propagated, and a
4th-order solution, whose distance from the 5th-order one is the local
error estimate.

:func:`rkf45_attempt` performs one pure, JIT-compatible attempt.
:func:`rkf45_integrate` drives the attempt from ``a`` to ``b``:

1. The largest per-equation discrepancy ``err`` is compared against
   ``10 * tol``. Larger errors reject the attempt; time does not advance.
2. Whether accepted or rejected, the step size is rescaled by
   ``0.84 * (tol * h / err) ** 0.25`` (see :mod:`._adaptive`).
3. Every accepted step, and the initial condition, is reported through
   ``callback(r, dx, err)`` where ``r = [t, y_1, ..., y_N]``.

The loop ends after the first accepted step that lands beyond ``b``; there
is no attempt to land on ``b`` exactly.
"""

from __future__ import annotations

import functools
import logging
import math
from collections.abc import Callable

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from fehlberg.config import get_dtype
from fehlberg.integrators._adaptive import rescale_factor, worst_component
from fehlberg.integrators._tableau import A as _A
from fehlberg.integrators._tableau import B_HIGH as _B_HIGH
from fehlberg.integrators._tableau import B_LOW as _B_LOW
from fehlberg.integrators._tableau import C as _C
from fehlberg.integrators._types import (
    IntegrationResult,
    IntegratorConfig,
    NonFiniteStateError,
    StepAttempt,
    StepSizeError,
)

logger = logging.getLogger(__name__)

StepCallback = Callable[[Array, Array, Array], object]


def _weighted(weights, k):
    """Sum ``w_i * k_i`` left to right, skipping zero weights."""
    return sum(w * ki for w, ki in zip(weights, k) if w != 0.0)


def rkf45_attempt(
    dynamics: Callable[[ArrayLike, ArrayLike], Array],
    t: ArrayLike,
    state: ArrayLike,
    h: ArrayLike,
) -> StepAttempt:
    """Evaluate one RKF45 step attempt from ``(t, state)`` with step ``h``.

    Stage ``i`` is evaluated at time ``t + c_i * h`` and state
    ``state + h * sum_j(a_ij * k_j)``. The attempt is a pure function
    of its inputs and is compatible with ``jax.jit`` and ``jax.vmap``.

    Args:
        dynamics: ODE right-hand side ``f(t, y) -> dy/dt`` returning the
            whole derivative vector.
        t: Time at the start of the step.
        state: State vector at ``t``.
        h: Step size.

    Returns:
        StepAttempt: Named tuple with fields:
            - ``state_high``: 5th-order solution at ``t + h``.
            - ``state_low``: 4th-order solution at ``t + h``.
            - ``dx``: 5th-order weighted slope (no ``h`` factor).
            - ``rel``: Per-equation ``|state_high - state_low|``.

    Raises:
        ValueError: If ``dynamics`` returns a vector whose shape differs
            from ``state``.

    Examples:
        ```python
        import jax.numpy as jnp
        from fehlberg.integrators import rkf45_attempt
        def harmonic(t, y):
            return jnp.array([y[1], -y[0]])
        step = rkf45_attempt(harmonic, 0.0, jnp.array([1.0, 0.0]), 0.1)
        step.state_high  # ~[cos(0.1), -sin(0.1)]
        ```
    """
    dtype = get_dtype()
    t = jnp.asarray(t, dtype=dtype)
    state = jnp.asarray(state, dtype=dtype)
    h = jnp.asarray(h, dtype=dtype)

    def f(ti, yi):
        dy = jnp.asarray(dynamics(ti, yi), dtype=dtype)
        if dy.shape != state.shape:
            raise ValueError(
                f"dynamics returned shape {dy.shape}, expected {state.shape} "
                f"to match the state vector"
            )
        return dy

    k = [f(t, state)]
    for c_i, a_i in zip(_C[1:], _A):
        k.append(f(t + c_i * h, state + h * _weighted(a_i, k)))

    dx = _weighted(_B_HIGH, k)
    state_high = state + h * dx
    state_low = state + h * _weighted(_B_LOW, k)

    return StepAttempt(
        state_high=state_high,
        state_low=state_low,
        dx=dx,
        rel=jnp.abs(state_high - state_low),
    )


def as_state_vector(state: ArrayLike) -> Array:
    """Cast ``state`` to the configured dtype and require a non-empty vector.

    Raises:
        ValueError: If ``state`` is not 1-D or has no equations.
    """
    state = jnp.asarray(state, dtype=get_dtype())
    if state.ndim != 1 or state.shape[0] == 0:
        raise ValueError(f"State must be a non-empty vector, got shape {state.shape}")
    return state


def _check_step_size(t: Array, h: Array) -> None:
    h_value = float(h)
    if not math.isfinite(h_value) or h_value <= 0.0:
        raise StepSizeError(f"Step size became {h_value} at t={float(t)}")
    if float(t + h) == float(t):
        raise StepSizeError(
            f"Step size {h_value:.3e} underflowed: no progress possible at t={float(t)}"
        )


def rkf45_integrate(
    dynamics: Callable[[ArrayLike, ArrayLike], Array],
    a: ArrayLike,
    b: ArrayLike,
    h: ArrayLike,
    state: ArrayLike,
    tol: float,
    callback: StepCallback | None = None,
    config: IntegratorConfig | None = None,
    jit: bool = True,
) -> IntegrationResult:
    """Integrate ``y' = dynamics(t, y)`` from ``a`` past ``b`` with RKF45.

    Before the first step ``callback`` receives the initial condition with
    a zero error vector and zero error. After that it is called once per
    accepted step, in strictly increasing time order. Rejected attempts
    produce no callback and are logged at DEBUG level.

    Args:
        dynamics: ODE right-hand side ``f(t, y) -> dy/dt``.
        a: Start time.
        b: End time. Integration stops after the first accepted step
            beyond ``b``.
        h: Initial step size (positive), for instance from
            :func:`~fehlberg.integrators.estimate_initial_step`.
        state: Initial state vector of length N.
        tol: Local error tolerance per step.
        callback: Optional sink ``callback(r, dx, err)`` with ``r`` the
            time-and-state vector of length N + 1, ``dx`` the
            per-equation derivative estimate and ``err`` the largest local
            error of the step.
        config: Controller configuration. Uses default
            :class:`IntegratorConfig` if ``None``.
        jit: Compile the step attempt with ``jax.jit``. Disable for
            right-hand sides that are not traceable by JAX.

    Returns:
        IntegrationResult: Final time, final state, proposed next step
        size and accepted/rejected step counts.

    Raises:
        ValueError: If ``tol <= 0``, ``h`` is not a positive finite
            number, ``a > b``, the state is not a non-empty vector, or the
            dynamics output does not match the state shape.
        StepSizeError: If ``config.max_step_attempts`` consecutive attempts
            are rejected or the step size underflows.
        NonFiniteStateError: If an attempt produces a NaN or infinite
            state or error estimate.

    Examples:
        ```python
        import jax.numpy as jnp
        from fehlberg.integrators import rkf45_integrate
        def decay(t, y):
            return -y
        result = rkf45_integrate(decay, 0.0, 1.0, 0.1, jnp.array([1.0]), 1e-6)
        result.state  # ~exp(-result.t)
        ```
    """
    if config is None:
        config = IntegratorConfig()
    if not tol > 0.0:
        raise ValueError(f"Tolerance must be positive, got {tol}")

    dtype = get_dtype()
    state = as_state_vector(state)
    if float(a) > float(b):
        raise ValueError(f"Backward integration is not supported (a={a} > b={b})")

    if not (math.isfinite(float(h)) and float(h) > 0.0):
        raise ValueError(f"Initial step size must be positive and finite, got {h}")

    t = jnp.asarray(a, dtype=dtype)
    t_end = jnp.asarray(b, dtype=dtype)
    h = jnp.asarray(h, dtype=dtype)

    attempt = functools.partial(rkf45_attempt, dynamics)
    if jit:
        attempt = jax.jit(attempt)

    if callback is not None:
        callback(
            jnp.concatenate([t[None], state]),
            jnp.zeros_like(state),
            jnp.asarray(0.0, dtype=dtype),
        )

    n_accepted = 0
    n_rejected = 0
    attempts = 0
    threshold = config.reject_factor * tol

    while t <= t_end:
        _check_step_size(t, h)
        step = attempt(t, state, h)

        if not (jnp.all(jnp.isfinite(step.rel)) and jnp.all(jnp.isfinite(step.state_high))):
            raise NonFiniteStateError(
                f"Non-finite state or error estimate at t={float(t)} with h={float(h):.3e}"
            )

        error = step.rel[worst_component(step.rel)]
        h_next = h * rescale_factor(
            error, h, tol, config.safety_factor, config.rescale_exponent
        )

        if error > threshold:
            n_rejected += 1
            attempts += 1
            logger.debug(
                "Step rejected at t=%.6e: error %.3e > %.3e, h %.3e -> %.3e",
                float(t),
                float(error),
                threshold,
                float(h),
                float(h_next),
            )
            if attempts >= config.max_step_attempts:
                raise StepSizeError(
                    f"Step at t={float(t)} rejected {attempts} consecutive times "
                    f"(last error {float(error):.3e}, tolerance {tol:.3e})"
                )
            h = h_next
            continue

        attempts = 0
        t = t + h
        state = step.state_high
        h = h_next
        n_accepted += 1

        if callback is not None:
            callback(jnp.concatenate([t[None], state]), step.dx, error)

    logger.debug(
        "Integration finished at t=%.6e: %d accepted, %d rejected steps",
        float(t),
        n_accepted,
        n_rejected,
    )

    return IntegrationResult(
        t=t,
        state=state,
        h_next=h,
        n_accepted=n_accepted,
        n_rejected=n_rejected,
    )
