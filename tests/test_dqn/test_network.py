"""Tests for the Q-network and input normalization."""

import jax
import jax.numpy as jnp
import numpy as np

from qlearn.dqn import QNetwork, normalize


class TestQNetwork:
    def test_single_output_shape(self):
        net = QNetwork(state_size=6, action_size=4, inner_size=64, key=jax.random.key(0))
        out = net(jnp.ones(6))
        assert out.shape == (4,)

    def test_batch_output_shape(self):
        net = QNetwork(state_size=6, action_size=4, inner_size=64, key=jax.random.key(0))
        out = net(jnp.ones((64, 6)))
        assert out.shape == (64, 4)

    def test_batch_matches_single(self):
        key = jax.random.key(1)
        net = QNetwork(state_size=3, action_size=2, inner_size=8, key=key)
        xs = jax.random.normal(key, (5, 3))
        batched = net(xs)
        for i in range(5):
            np.testing.assert_allclose(batched[i], net(xs[i]), rtol=1e-5, atol=1e-6)

    def test_layer_shapes(self):
        net = QNetwork(state_size=6, action_size=4, inner_size=32, key=jax.random.key(0))
        assert len(net.layers) == 3
        assert net.layers[0].weight.shape == (32, 6)
        assert net.layers[1].weight.shape == (32, 32)
        assert net.layers[2].weight.shape == (4, 32)

    def test_deterministic(self):
        net = QNetwork(state_size=6, action_size=4, key=jax.random.key(0))
        x = jnp.arange(6.0)
        assert jnp.array_equal(net(x), net(x))

    def test_same_key_same_params(self):
        n1 = QNetwork(6, 4, 16, key=jax.random.key(3))
        n2 = QNetwork(6, 4, 16, key=jax.random.key(3))
        for a, b in zip(jax.tree.leaves(n1), jax.tree.leaves(n2), strict=True):
            assert jnp.array_equal(a, b)


class TestNormalize:
    def test_row_zero_mean_unit_scale(self):
        x = jnp.array([10.0, 10.0, 3.0, 4.0, 21.0, 21.0])
        out = normalize(x, axis=-1, eps=1e-3)
        assert abs(float(jnp.mean(out))) < 1e-5
        assert abs(float(jnp.std(out)) - 1.0) < 1e-3

    def test_constant_maps_to_zero(self):
        out = normalize(jnp.full((6,), 7.0), axis=-1, eps=1e-3)
        assert jnp.all(out == 0.0)

    def test_matches_formula(self):
        x = jnp.array([1.0, 2.0, 4.0])
        mean = x.mean()
        var = ((x - mean) ** 2).mean()
        expected = (x - mean) / jnp.sqrt(var + 1e-3)
        np.testing.assert_allclose(normalize(x, eps=1e-3), expected, rtol=1e-6)

    def test_batch_axis_normalizes_columns(self):
        x = jnp.array([[1.0, 100.0], [3.0, 100.0], [5.0, 100.0]])
        out = normalize(x, axis=0)
        np.testing.assert_allclose(out.mean(axis=0), [0.0, 0.0], atol=1e-6)
        # constant column collapses to zero
        assert jnp.all(out[:, 1] == 0.0)

    def test_feature_axis_normalizes_rows(self):
        x = jnp.array([[1.0, 2.0, 3.0], [10.0, 20.0, 30.0]])
        out = normalize(x, axis=1)
        np.testing.assert_allclose(out.mean(axis=1), [0.0, 0.0], atol=1e-6)

    def test_zeros_stay_finite(self):
        out = normalize(jnp.zeros((64, 6)), axis=0)
        assert jnp.all(jnp.isfinite(out))
