"""Initial step-size estimation for the RKF45 integrator.

Searches for the largest step size whose *single* RKF45 attempt from the
initial condition stays within tolerance. The local error of an attempt,

.. math::

    e(h) = \\max_j |y^{(5)}_j(h) - y^{(4)}_j(h)|,

is bisected over ``[tol, b - a]`` for a fixed number of iterations (32 by
default), so the result is located to about ``2**-32`` of the bracket
width. The bisection runs in ``jax.lax.fori_loop`` and is compatible with
``jax.jit`` when the dynamics are traceable; ``jit=False`` runs the same
iterations as a Python loop for dynamics that are not.

If even ``h = tol`` exceeds the tolerance, the search collapses onto the
lower end of the bracket and returns a step of about ``tol``; no error
is raised.
"""

from __future__ import annotations

from collections.abc import Callable

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from fehlberg.config import get_dtype
from fehlberg.integrators._types import IntegratorConfig
from fehlberg.integrators.rkf45 import as_state_vector, rkf45_attempt


def local_error(
    dynamics: Callable[[ArrayLike, ArrayLike], Array],
    t: ArrayLike,
    state: ArrayLike,
    h: ArrayLike,
) -> Array:
    """Return the largest per-equation local error of one RKF45 attempt.

    This is the same quantity the stepper compares against its rejection
    threshold.

    Args:
        dynamics: ODE right-hand side ``f(t, y) -> dy/dt``.
        t: Start time of the attempt.
        state: State vector at ``t``.
        h: Step size of the attempt.

    Returns:
        jax.Array: Scalar ``max_j |rk5_j - rk4_j|``.
    """
    return jnp.max(rkf45_attempt(dynamics, t, state, h).rel)


def estimate_initial_step(
    dynamics: Callable[[ArrayLike, ArrayLike], Array],
    a: ArrayLike,
    b: ArrayLike,
    state: ArrayLike,
    tol: float,
    config: IntegratorConfig | None = None,
    jit: bool = True,
) -> Array:
    """Estimate an initial step size for :func:`rkf45_integrate`.

    Args:
        dynamics: ODE right-hand side ``f(t, y) -> dy/dt``.
        a: Start time.
        b: End time; ``b - a`` is the upper end of the search bracket.
        state: Initial state vector.
        tol: Local error tolerance; also the lower end of the bracket.
        config: Uses ``config.bisection_iterations``. Defaults to
            :class:`IntegratorConfig` if ``None``.
        jit: Run the bisection in ``jax.lax.fori_loop``. Disable for
            right-hand sides that are not traceable by JAX; the same
            iterations then run as a Python loop.

    Returns:
        jax.Array: Final bisection midpoint ``h0`` with
        ``tol <= h0 <= b - a``.

    Raises:
        ValueError: If ``tol <= 0``, ``b <= a``, ``tol > b - a`` or the
            state is not a non-empty vector.

    Examples:
        ```python
        import jax.numpy as jnp
        from fehlberg.integrators import estimate_initial_step
        def decay(t, y):
            return -y
        h0 = estimate_initial_step(decay, 0.0, 1.0, jnp.array([1.0]), 1e-6)
        ```
    """
    if config is None:
        config = IntegratorConfig()
    if not tol > 0.0:
        raise ValueError(f"Tolerance must be positive, got {tol}")
    if not float(b) > float(a):
        raise ValueError(f"Interval end must exceed its start, got a={a}, b={b}")
    if tol > float(b) - float(a):
        raise ValueError(
            f"Tolerance {tol} exceeds the interval length {float(b) - float(a)}; "
            f"no step in [tol, b - a] exists"
        )

    dtype = get_dtype()
    a = jnp.asarray(a, dtype=dtype)
    b = jnp.asarray(b, dtype=dtype)
    state = as_state_vector(state)

    def body_fn(_i, carry):
        lower, upper, _mid = carry
        mid = (upper + lower) * 0.5
        within = local_error(dynamics, a, state, mid) < tol
        lower = jnp.where(within, mid, lower)
        upper = jnp.where(within, upper, mid)
        return (lower, upper, mid)

    lower = jnp.asarray(tol, dtype=dtype)
    carry = (lower, b - a, lower)

    if jit:
        carry = jax.lax.fori_loop(0, config.bisection_iterations, body_fn, carry)
    else:
        for i in range(config.bisection_iterations):
            carry = body_fn(i, carry)

    _lower, _upper, mid = carry
    return mid
