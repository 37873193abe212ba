"""Adapters from per-equation right-hand sides to a single vector callable.

Some problems are naturally written as N scalar functions, one per
equation, each reading the packed trial vector ``x = [t, y_1, ..., y_N]``.
:func:`stack_components` turns such a list into the ``f(t, y) -> dy/dt``
form used by the integrators. The equations stay coupled: every component
sees the full trial vector of the current stage.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from fehlberg.config import get_dtype


def pack_trial_state(t: ArrayLike, y: ArrayLike) -> Array:
    """Pack time and state into ``[t, y_1, ..., y_N]``."""
    dtype = get_dtype()
    t = jnp.asarray(t, dtype=dtype)
    y = jnp.asarray(y, dtype=dtype)
    return jnp.concatenate([jnp.reshape(t, (1,)), y])


def stack_components(
    components: Sequence[Callable[[Array], ArrayLike]],
) -> Callable[[ArrayLike, ArrayLike], Array]:
    """Combine N per-equation functions into one vector right-hand side.

    Args:
        components: Sequence of N callables. Component ``j`` maps the trial
            vector ``[t, y_1, ..., y_N]`` to the scalar derivative of
            equation ``j``. Components must be composed of JAX operations
            to be used with ``jit=True``.

    Returns:
        Callable: ``f(t, y) -> dy/dt`` returning a vector of length N.

    Raises:
        ValueError: If ``components`` is empty. The returned callable
            raises ``ValueError`` when called with a state whose length
            differs from the number of components.

    Examples:
        ```python
        from fehlberg.integrators import stack_components
        dynamics = stack_components([lambda x: x[2], lambda x: -x[1]])
        dynamics(0.0, [1.0, 0.0])  # [0.0, -1.0]
        ```
    """
    components = tuple(components)
    if not components:
        raise ValueError("At least one component function is required")

    def dynamics(t, y):
        x = pack_trial_state(t, y)
        if x.shape[0] - 1 != len(components):
            raise ValueError(
                f"State has {x.shape[0] - 1} equations but {len(components)} "
                f"component functions were given"
            )
        return jnp.stack(
            [jnp.reshape(jnp.asarray(fj(x), dtype=x.dtype), ()) for fj in components]
        )

    return dynamics
