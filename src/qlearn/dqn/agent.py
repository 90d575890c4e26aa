"""Pure-functional DQN core.

All methods are static pure functions; state is threaded explicitly
through ``DQNState``.  ``DQNAgentTrainer`` wraps them with the mutable,
domain-facing interface.

Usage::

    config = DQNConfig(gamma=0.9)
    state = DQN.init(rng, state_size=6, action_size=4, config=config)
    state, metrics = DQN.train_step(state, batch, config=config)
    q = DQN.query(state.target_params, obs, config=config)
"""

from __future__ import annotations

from functools import partial

import chex
import equinox as eqx
import jax
import jax.numpy as jnp
import optax

from qlearn.dqn.batch import Batch
from qlearn.dqn.config import DQNConfig
from qlearn.dqn.network import QNetwork, normalize
from qlearn.dqn.types import DQNMetrics, DQNState


class UnusedParamsError(RuntimeError):
    """A learnable parameter received no gradient.

    Means the loss is not wired to every parameter of the network, which
    is a defect in the model or loss, never in the data.
    """


def huber_loss(predictions: chex.Array, targets: chex.Array, delta: float = 1.0) -> chex.Array:
    """Mean Huber loss: ``0.5 * e**2`` for ``|e| <= delta``, linear beyond."""
    return jnp.mean(optax.huber_loss(predictions, targets, delta=delta))


def decode_actions(actions: chex.Array) -> chex.Array:
    """Index of the largest score in each action vector (first one on ties)."""
    return jnp.argmax(actions, axis=-1).astype(jnp.int32)


def td_targets(
    max_next_q: chex.Array,
    rewards: chex.Array,
    dones: chex.Array,
    gamma: float,
) -> chex.Array:
    """Bellman backup ``max_a' Q(s', a') * (1 - done) * gamma + r``."""
    return max_next_q * (1.0 - dones) * gamma + rewards


def check_grads(grads, params) -> None:
    """Raise ``UnusedParamsError`` unless every learnable array has a gradient.

    Runs on tree structure only, so inside ``jax.jit`` it fires at trace
    time.
    """
    is_none = lambda x: x is None  # noqa: E731
    param_leaves = jax.tree.leaves(eqx.filter(params, eqx.is_inexact_array), is_leaf=is_none)
    grad_leaves = jax.tree.leaves(grads, is_leaf=is_none)
    if len(param_leaves) != len(grad_leaves):
        raise UnusedParamsError(
            f"gradient tree has {len(grad_leaves)} leaves, parameters have {len(param_leaves)}"
        )
    missing = sum(
        1 for p, g in zip(param_leaves, grad_leaves) if p is not None and g is None
    )
    if missing:
        raise UnusedParamsError(f"{missing} parameter array(s) received no gradient")


class DQN:
    """Namespace for DQN pure functions.  Not instantiated."""

    @staticmethod
    def make_optimizer(config: DQNConfig) -> optax.GradientTransformation:
        """SGD with Nesterov momentum and no weight decay."""
        return optax.sgd(config.lr, momentum=config.momentum, nesterov=config.nesterov)

    @staticmethod
    def init(
        rng: chex.PRNGKey,
        state_size: int,
        action_size: int,
        config: DQNConfig,
    ) -> DQNState:
        """Build a random online network, its target copy and optimizer state."""
        q_net = QNetwork(state_size, action_size, config.inner_size, key=rng)
        return DQN.from_params(q_net, config)

    @staticmethod
    def from_params(params: QNetwork, config: DQNConfig) -> DQNState:
        """State whose online and target networks are both *params*.

        The optimizer is bound afresh, so momentum starts from zero.
        """
        opt_state = DQN.make_optimizer(config).init(eqx.filter(params, eqx.is_array))
        return DQNState(
            params=params,
            target_params=params,
            opt_state=opt_state,
            step=jnp.zeros((), dtype=jnp.int32),
        )

    @staticmethod
    def sync_target(state: DQNState) -> DQNState:
        """Target <- online."""
        return state._replace(target_params=state.params)

    @staticmethod
    @partial(jax.jit, static_argnames=("config",))
    def query(params: QNetwork, obs: chex.Array, *, config: DQNConfig) -> chex.Array:
        """Action values for one state vector, non-finite outputs set to 0.

        The vector is normalized across its own features.
        """
        q = params(normalize(obs, axis=-1, eps=config.norm_eps))
        return jnp.where(jnp.isfinite(q), q, 0.0)

    @staticmethod
    @partial(jax.jit, static_argnames=("config",))
    def train_step(
        state: DQNState,
        batch: Batch,
        *,
        config: DQNConfig,
    ) -> tuple[DQNState, DQNMetrics]:
        """Fit the online network to one batch with ``config.train_steps`` updates.

        The target network is synced from the online network before the
        inner loop, held fixed during it, and synced again afterwards.
        Every inner step computes a fresh gradient; nothing accumulates
        across steps.

        Args:
            state: Current DQN state.
            batch: Raw (unnormalized) batch, each field with leading
                dimension ``config.batch_size``.
            config: DQN hyperparameters (static).

        Returns:
            (new_state, metrics) tuple.
        """
        optimizer = DQN.make_optimizer(config)
        state = DQN.sync_target(state)

        states = normalize(batch.states, axis=config.batch_norm_axis, eps=config.norm_eps)
        next_states = normalize(
            batch.next_states, axis=config.batch_norm_axis, eps=config.norm_eps
        )
        actions = decode_actions(batch.actions)
        rewards = batch.rewards.astype(jnp.float32)
        dones = batch.dones.astype(jnp.float32)

        # The target network is frozen for the whole inner loop.
        max_next_q = jnp.max(state.target_params(next_states), axis=-1)
        targets = jax.lax.stop_gradient(td_targets(max_next_q, rewards, dones, config.gamma))

        def loss_fn(params):
            q_all = params(states)
            current_q = q_all[jnp.arange(q_all.shape[0]), actions]
            return huber_loss(current_q, targets, config.huber_delta), current_q

        def _inner_step(carry, _):
            params, opt_state = carry
            (loss, current_q), grads = eqx.filter_value_and_grad(loss_fn, has_aux=True)(
                params
            )
            check_grads(grads, params)
            updates, new_opt_state = optimizer.update(
                grads, opt_state, eqx.filter(params, eqx.is_array),
            )
            new_params = eqx.apply_updates(params, updates)
            return (new_params, new_opt_state), (loss, jnp.mean(current_q))

        (new_params, new_opt_state), (losses, q_means) = jax.lax.scan(
            _inner_step,
            (state.params, state.opt_state),
            None,
            length=config.train_steps,
        )
        final_loss, _ = loss_fn(new_params)

        new_state = DQNState(
            params=new_params,
            target_params=new_params,
            opt_state=new_opt_state,
            step=state.step + 1,
        )
        metrics = DQNMetrics(losses=losses, final_loss=final_loss, q_mean=q_means[0])
        return new_state, metrics
