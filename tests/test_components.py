"""Tests for per-equation right-hand side adapters."""

import jax.numpy as jnp
import pytest

from fehlberg.integrators import pack_trial_state, rkf45_attempt, stack_components


class TestPackTrialState:
    def test_layout(self):
        x = pack_trial_state(2.0, jnp.array([3.0, 4.0]))
        assert jnp.array_equal(x, jnp.array([2.0, 3.0, 4.0]))

    def test_scalar_array_time(self):
        x = pack_trial_state(jnp.asarray(0.5), [1.0])
        assert x.shape == (2,)
        assert float(x[0]) == 0.5


class TestStackComponents:
    def test_evaluates_each_component(self):
        dynamics = stack_components([lambda x: x[2], lambda x: -x[1]])
        dy = dynamics(0.0, jnp.array([1.0, 0.5]))
        assert jnp.array_equal(dy, jnp.array([0.5, -1.0]))

    def test_components_see_time(self):
        dynamics = stack_components([lambda x: x[0] * 2.0])
        assert float(dynamics(1.5, jnp.array([0.0]))[0]) == 3.0

    def test_coupled_system(self):
        """Each component reads every state value of the stage."""
        dynamics = stack_components(
            [lambda x: x[1] + x[2] + x[3], lambda x: x[1] * x[2], lambda x: x[3] - x[1]]
        )
        dy = dynamics(0.0, jnp.array([1.0, 2.0, 3.0]))
        assert jnp.array_equal(dy, jnp.array([6.0, 2.0, 2.0]))

    def test_python_scalars(self):
        dynamics = stack_components([lambda x: 1.0, lambda x: 2.0])
        assert jnp.array_equal(dynamics(0.0, jnp.zeros(2)), jnp.array([1.0, 2.0]))

    def test_with_attempt(self):
        vector = rkf45_attempt(lambda t, y: -y, 0.0, jnp.array([1.0, 2.0]), 0.1)
        stacked = rkf45_attempt(
            stack_components([lambda x: -x[1], lambda x: -x[2]]), 0.0, jnp.array([1.0, 2.0]), 0.1
        )
        assert jnp.allclose(vector.state_high, stacked.state_high, atol=1e-15)
        assert jnp.allclose(vector.rel, stacked.rel, atol=1e-15)

    def test_empty_raises(self):
        with pytest.raises(ValueError, match="At least one"):
            stack_components([])

    def test_size_mismatch_raises(self):
        dynamics = stack_components([lambda x: x[1]])
        with pytest.raises(ValueError, match="equations"):
            dynamics(0.0, jnp.array([1.0, 2.0]))
