"""Q-network and input normalization, implemented with Equinox."""

from __future__ import annotations

import equinox as eqx
import jax
import jax.numpy as jnp


def normalize(x: jax.Array, axis: int = -1, eps: float = 1e-3) -> jax.Array:
    """Shift to zero mean and scale to unit variance along *axis*.

    ``(x - mean) / sqrt(var + eps)`` with the population variance; *eps*
    keeps constant slices finite (they map to zero).
    """
    mean = jnp.mean(x, axis=axis, keepdims=True)
    centered = x - mean
    var = jnp.mean(jnp.square(centered), axis=axis, keepdims=True)
    return centered / jnp.sqrt(var + eps)


class QNetwork(eqx.Module):
    """Three-layer MLP: state -> Q(s, a) for each action.

    ``state_size -> inner_size -> inner_size -> action_size`` with ReLU
    after the first two layers.  Accepts a single ``(state_size,)`` vector
    or a ``(B, state_size)`` batch.
    """

    layers: list
    state_size: int = eqx.field(static=True)
    action_size: int = eqx.field(static=True)
    inner_size: int = eqx.field(static=True)

    def __init__(
        self,
        state_size: int,
        action_size: int,
        inner_size: int = 64,
        *,
        key: jax.Array,
    ) -> None:
        self.state_size = state_size
        self.action_size = action_size
        self.inner_size = inner_size
        dims = [state_size, inner_size, inner_size, action_size]
        keys = jax.random.split(key, len(dims) - 1)
        self.layers = [
            eqx.nn.Linear(d_in, d_out, key=k)
            for d_in, d_out, k in zip(dims[:-1], dims[1:], keys)
        ]

    def __call__(self, x: jax.Array) -> jax.Array:
        if x.ndim == 2:
            return jax.vmap(self._forward)(x)
        return self._forward(x)

    def _forward(self, x: jax.Array) -> jax.Array:
        for layer in self.layers[:-1]:
            x = jax.nn.relu(layer(x))
        return self.layers[-1](x)
