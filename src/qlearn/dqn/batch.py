"""Fixed-capacity transition batches and the loop that fills them.

A ``Batch`` is a NamedTuple of NumPy arrays with a leading batch
dimension.  It is always allocated full-size and zeroed; if the
termination strategy stops collection early, the remaining rows stay
zero (``done=False``) and still go to the training step.
"""

from __future__ import annotations

import logging
from typing import Any, NamedTuple

import numpy as np

from qlearn.mdp import Agent, State
from qlearn.strategy.explore import ExplorationStrategy
from qlearn.strategy.terminate import TerminationStrategy

logger = logging.getLogger(__name__)


class Batch(NamedTuple):
    """Batched ``(s, a, s', r, done)`` transitions.

    Fields:
        states:      ``(B, state_size)``  float32
        actions:     ``(B, action_size)`` float32, domain action encoding
        next_states: ``(B, state_size)``  float32
        rewards:     ``(B,)``             float32
        dones:       ``(B,)``             bool
    """

    states: np.ndarray
    actions: np.ndarray
    next_states: np.ndarray
    rewards: np.ndarray
    dones: np.ndarray

    @classmethod
    def zeros(cls, batch_size: int, state_size: int, action_size: int) -> Batch:
        return cls(
            states=np.zeros((batch_size, state_size), dtype=np.float32),
            actions=np.zeros((batch_size, action_size), dtype=np.float32),
            next_states=np.zeros((batch_size, state_size), dtype=np.float32),
            rewards=np.zeros((batch_size,), dtype=np.float32),
            dones=np.zeros((batch_size,), dtype=np.bool_),
        )


class Collected(NamedTuple):
    """Result of ``BatchCollector.collect``."""

    batch: Batch
    last_state: State  # state after the final action taken
    length: int  # transitions actually recorded
    stopped: bool  # termination strategy fired during collection


def to_vector(obj: Any, size: int, what: str = "value") -> np.ndarray:
    """``obj.to_array()`` as a float32 vector, checked to have length *size*."""
    vec = np.asarray(obj.to_array(), dtype=np.float32).reshape(-1)
    if vec.shape[0] != size:
        raise ValueError(f"{what} {obj!r} encodes to length {vec.shape[0]}, expected {size}")
    return vec


class BatchCollector:
    """Drives an agent with the given strategies to fill one batch."""

    def __init__(self, state_size: int, action_size: int, batch_size: int = 64) -> None:
        self.state_size = state_size
        self.action_size = action_size
        self.batch_size = batch_size

    def collect(
        self,
        agent: Agent,
        termination_strategy: TerminationStrategy,
        exploration_strategy: ExplorationStrategy,
    ) -> Collected:
        """Record up to ``batch_size`` transitions.

        Row ``i`` holds the state before the exploration strategy acts,
        the action taken, the resulting state and its reward.  When the
        termination strategy stops on the resulting state, row ``i`` is
        marked done and collection ends.
        """
        batch = Batch.zeros(self.batch_size, self.state_size, self.action_size)
        s_next = agent.current_state()
        length = 0

        for i in range(self.batch_size):
            s_t = agent.current_state()
            action = exploration_strategy.pick_action(agent)
            s_next = agent.current_state()

            batch.states[i] = to_vector(s_t, self.state_size, "state")
            batch.actions[i] = to_vector(action, self.action_size, "action")
            batch.next_states[i] = to_vector(s_next, self.state_size, "state")
            batch.rewards[i] = s_next.reward()
            length = i + 1

            if termination_strategy.should_stop(s_next):
                batch.dones[i] = True
                logger.debug("Termination during collection at row %d", i)
                return Collected(batch, s_next, length, stopped=True)

        return Collected(batch, s_next, length, stopped=False)
