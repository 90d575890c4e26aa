"""Neural (DQN) agent trainer.

Stateful facade over the pure functions in ``qlearn.dqn.agent``.  The
outer loop is plain Python: collect one batch by driving the domain
agent, run one jitted ``DQN.train_step`` on it, then ask the
termination strategy whether to stop.

Usage::

    from qlearn.dqn import DQNAgentTrainer, DQNConfig
    from qlearn.env.grid_world import GridAgent, GridState, Move
    from qlearn.strategy import FixedIterations, RandomExploration

    trainer = DQNAgentTrainer(
        state_size=6,
        action_size=4,
        action_decoder=Move.from_values,
        config=DQNConfig(gamma=0.9, lr=1e-3, inner_size=64),
    )
    agent = GridAgent(GridState(x=0, y=0))
    trainer.train(agent, FixedIterations(10_000), RandomExploration(seed=0))
    trainer.best_action(GridState(x=3, y=4))
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

import jax.numpy as jnp
import numpy as np

from qlearn.dqn.agent import DQN
from qlearn.dqn.batch import Batch, BatchCollector, to_vector
from qlearn.dqn.config import DQNConfig
from qlearn.dqn.network import QNetwork
from qlearn.dqn.types import DQNMetrics, DQNState
from qlearn.mdp import Agent, State
from qlearn.metrics import log_step_progress
from qlearn.seeding import make_rng
from qlearn.strategy.explore import ExplorationStrategy
from qlearn.strategy.terminate import TerminationStrategy

logger = logging.getLogger(__name__)


class DQNAgentTrainer:
    """Learns action values with an online/target Q-network pair.

    Args:
        state_size: Length of every state vector.
        action_size: Length of every action vector and of the value vector.
        action_decoder: Maps an ``(action_size,)`` value vector to a domain
            action (typically the arg-max action).
        config: Hyperparameters, fixed for the trainer's lifetime.
        seed: Seed for network initialization.
        log_interval: Log progress every this many batches during
            ``train`` (0 disables).
    """

    def __init__(
        self,
        state_size: int,
        action_size: int,
        action_decoder: Callable[[np.ndarray], Any],
        config: DQNConfig | None = None,
        *,
        seed: int = 0,
        log_interval: int = 100,
    ) -> None:
        if state_size <= 0 or action_size <= 0:
            raise ValueError(
                f"state_size and action_size must be positive, got {state_size}, {action_size}"
            )
        self._state_size = state_size
        self._action_size = action_size
        self._config = config or DQNConfig()
        self._action_decoder = action_decoder
        self.log_interval = log_interval
        self._state: DQNState = DQN.init(
            make_rng(seed), state_size, action_size, self._config
        )
        self._collector = BatchCollector(state_size, action_size, self._config.batch_size)

    # ------------------------------------------------------------------
    # Read-only properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> DQNConfig:
        return self._config

    @property
    def gamma(self) -> float:
        return self._config.gamma

    @property
    def learning_rate(self) -> float:
        return self._config.lr

    @property
    def state_size(self) -> int:
        return self._state_size

    @property
    def action_size(self) -> int:
        return self._action_size

    @property
    def inner_size(self) -> int:
        return self._config.inner_size

    @property
    def dqn_state(self) -> DQNState:
        """The current online/target/optimizer state (immutable pytree)."""
        return self._state

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def expected_value(self, state: State) -> np.ndarray:
        """Estimated value of each action in *state*, from the target network.

        NaN (and infinite) outputs are reported as 0.
        """
        obs = jnp.asarray(to_vector(state, self._state_size, "state"))
        q = DQN.query(self._state.target_params, obs, config=self._config)
        return np.asarray(q)

    def best_action(self, state: State) -> Any:
        """The domain action the decoder picks from ``expected_value(state)``."""
        return self._action_decoder(self.expected_value(state))

    def learned_values(self) -> QNetwork:
        """The online network itself (immutable, so safe to share)."""
        return self._state.params

    def export_model(self) -> QNetwork:
        """The online network, for saving or later import.

        Equinox modules are immutable and training rebinds rather than
        mutates them, so the returned reference is already a snapshot.
        """
        return self._state.params

    def import_model(self, model: QNetwork) -> None:
        """Replace online and target networks with *model*.

        All learned progress is discarded, including optimizer momentum.
        """
        if (model.state_size, model.action_size, model.inner_size) != (
            self._state_size,
            self._action_size,
            self._config.inner_size,
        ):
            raise ValueError(
                f"model sizes ({model.state_size}, {model.action_size}, {model.inner_size}) "
                f"do not match trainer ({self._state_size}, {self._action_size}, "
                f"{self._config.inner_size})"
            )
        self._state = DQN.from_params(model, self._config)

    def save(self, directory: str | Path) -> Path:
        """Write the exported model and its sizes to *directory*."""
        from qlearn.checkpoint import save_model

        return save_model(
            directory,
            self.export_model(),
            metadata={
                "state_size": self._state_size,
                "action_size": self._action_size,
                "inner_size": self._config.inner_size,
                "gamma": self._config.gamma,
                "lr": self._config.lr,
                "train_calls": int(self._state.step),
            },
        )

    def load(self, directory: str | Path) -> None:
        """Import a model previously written by :meth:`save`."""
        from qlearn.checkpoint import load_model

        self.import_model(load_model(directory, self.export_model()))

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------

    def train_dqn(self, batch: Batch) -> DQNMetrics:
        """Run one training step (``config.train_steps`` updates) on *batch*."""
        self._state, metrics = DQN.train_step(self._state, batch, config=self._config)
        return metrics

    def train(
        self,
        agent: Agent,
        termination_strategy: TerminationStrategy,
        exploration_strategy: ExplorationStrategy,
        *,
        callback: Callable[[int, dict[str, Any]], None] | None = None,
    ) -> int:
        """Collect batches and train on them until termination.

        The termination strategy is consulted after every transition
        while collecting and once more after each training step.

        Args:
            agent: Domain agent, mutated by the exploration strategy.
            termination_strategy: Sole stop condition.
            exploration_strategy: Chooses and applies actions.
            callback: Optional ``callback(batch_index, record)`` called
                after every training step with scalar metrics.

        Returns:
            Number of batches trained on.
        """
        logger.info(
            "Starting DQN training: state_size=%d action_size=%d inner_size=%d gamma=%g lr=%g",
            self._state_size,
            self._action_size,
            self._config.inner_size,
            self._config.gamma,
            self._config.lr,
        )
        n_batches = 0
        transitions = 0
        while True:
            collected = self._collector.collect(agent, termination_strategy, exploration_strategy)
            metrics = self.train_dqn(collected.batch)
            n_batches += 1
            transitions += collected.length

            if callback is not None or (
                self.log_interval and n_batches % self.log_interval == 0
            ):
                record = {
                    "batch": n_batches,
                    "transitions": transitions,
                    "loss": float(metrics.losses[0]),
                    "final_loss": float(metrics.final_loss),
                    "q_mean": float(metrics.q_mean),
                    "early_stop": collected.stopped,
                }
                if self.log_interval and n_batches % self.log_interval == 0:
                    log_step_progress(n_batches, record, logger_name=__name__)
                if callback is not None:
                    callback(n_batches, record)

            if termination_strategy.should_stop(collected.last_state):
                break

        logger.info("DQN training finished after %d batches (%d transitions)", n_batches, transitions)
        return n_batches
