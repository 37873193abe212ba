import jax.numpy as jnp
import pytest

from fehlberg.config import set_dtype


@pytest.fixture(autouse=True)
def _ensure_float64():
    """Set float64 precision before every test.

    The tolerances exercised by the integrator tests (down to 1e-9) are
    below float32 resolution. test_config.py overrides this with its own
    autouse fixture that sets float32.
    """
    set_dtype(jnp.float64)
