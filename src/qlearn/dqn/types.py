"""DQN state and metrics containers."""

from __future__ import annotations

from typing import Any, NamedTuple

import chex

from qlearn.dqn.network import QNetwork

OptState = Any  # optax optimizer state pytree


class DQNState(NamedTuple):
    """Everything the trainer learns.  All fields are JAX pytrees.

    Fields:
        params: Online Q-network, the only network gradients touch.
        target_params: Target Q-network.  Replaced only by assignment
            from ``params``.
        opt_state: Optax optimizer state bound to ``params``.
        step: Number of ``train_step`` calls so far.
    """

    params: QNetwork
    target_params: QNetwork
    opt_state: OptState
    step: chex.Array


class DQNMetrics(NamedTuple):
    """Returned by ``DQN.train_step``.

    Fields:
        losses: Loss before each inner gradient step, shape ``(train_steps,)``.
        final_loss: Loss after the last inner step against the same targets.
        q_mean: Mean selected Q-value before the first inner step.
    """

    losses: chex.Array
    final_loss: chex.Array
    q_mean: chex.Array
