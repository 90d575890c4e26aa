"""Tests for qlearn.seeding."""

import jax.numpy as jnp

from qlearn.seeding import make_rng


class TestSeeding:
    def test_make_rng_deterministic(self):
        assert jnp.array_equal(make_rng(1), make_rng(1))

    def test_different_seeds_differ(self):
        assert not jnp.array_equal(make_rng(0), make_rng(1))
