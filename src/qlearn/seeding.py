"""JAX PRNG key management.

All network randomness flows through explicit keys; there is no global
state.  Domain-side randomness (exploration) uses NumPy generators owned
by the strategy objects.
"""

from __future__ import annotations

import jax


def make_rng(seed: int) -> jax.Array:
    """Create a JAX PRNG key from an integer seed."""
    return jax.random.PRNGKey(seed)
