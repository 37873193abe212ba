"""Step-size control for the embedded RKF45 pair.

The controller works on the raw per-equation discrepancy between the 5th-
and 4th-order solutions (no mixed absolute/relative scaling):

1. The worst equation is the one with the largest discrepancy. Ties go to
   the later index, so step-size sequences are reproducible bit for bit.
2. The rescale factor follows the classical law

   .. math::

       s = S \\left(\\frac{\\text{tol} \\cdot h}{\\text{err}}\\right)^{1/4}

   with safety factor :math:`S = 0.84`.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from fehlberg.config import get_dtype


def worst_component(rel: ArrayLike) -> Array:
    """Return the index of the last component attaining ``max(rel)``.

    Args:
        rel: Per-equation discrepancy vector.

    Returns:
        jax.Array: Integer index of the worst equation.
    """
    rel = jnp.asarray(rel, dtype=get_dtype())
    return rel.shape[0] - 1 - jnp.argmax(rel[::-1])


def rescale_factor(
    error: ArrayLike,
    h: ArrayLike,
    tol: float,
    safety_factor: float = 0.84,
    exponent: float = 0.25,
) -> Array:
    """Compute the step-size rescale factor for the next attempt.

    A zero error leaves the step size unchanged (factor 1.0).

    Args:
        error: Discrepancy of the worst equation.
        h: Step size of the attempt that produced ``error``.
        tol: Local error tolerance.
        safety_factor: Multiplicative safety factor.
        exponent: Exponent applied to ``tol * h / error``.

    Returns:
        jax.Array: Scalar factor ``s``; the next step size is ``h * s``.
    """
    error = jnp.asarray(error, dtype=get_dtype())
    h = jnp.asarray(h, dtype=get_dtype())

    safe_error = jnp.where(error > 0.0, error, 1.0)
    scale = safety_factor * jnp.power(tol * h / safe_error, exponent)
    return jnp.where(error > 0.0, scale, 1.0)
