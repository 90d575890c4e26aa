"""Tabular Q-value trainer.

Keeps a ``{state: {action: value}}`` table and updates one entry per
environment step with a ``LearningStrategy``.

Usage::

    trainer = AgentTrainer()
    trainer.train(
        agent,
        QLearning(alpha=0.2, gamma=0.01, initial_value=2.0),
        FixedIterations(100_000),
        RandomExploration(seed=0),
    )
    trainer.best_action(state)
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Callable

from qlearn.mdp import Agent, State
from qlearn.strategy.explore import ExplorationStrategy
from qlearn.strategy.learn import LearningStrategy
from qlearn.strategy.terminate import TerminationStrategy

logger = logging.getLogger(__name__)

QTable = dict[Any, dict[Any, float]]


class AgentTrainer:
    """Learns action values for an ``Agent`` and answers queries about them."""

    def __init__(self) -> None:
        self._q: QTable = {}

    def expected_values(self, state: State) -> dict[Any, float] | None:
        """Learned values for *state* keyed by action, or ``None``."""
        return self._q.get(state)

    def expected_value(self, state: State, action: Any) -> float | None:
        values = self._q.get(state)
        if values is None:
            return None
        return values.get(action)

    def export_learned_values(self) -> QTable:
        """A deep copy of the whole table, safe to keep or mutate."""
        return copy.deepcopy(self._q)

    def learned_values(self) -> QTable:
        return self._q

    def import_state(self, q: QTable) -> None:
        """Replace all learned progress with *q*."""
        self._q = q

    def best_action(self, state: State) -> Any | None:
        """Highest-valued learned action for *state*, or ``None``."""
        values = self._q.get(state)
        if not values:
            return None
        return max(values.items(), key=lambda kv: kv[1])[0]

    def train(
        self,
        agent: Agent,
        learning_strategy: LearningStrategy,
        termination_strategy: TerminationStrategy,
        exploration_strategy: ExplorationStrategy,
    ) -> None:
        """Step the agent and update values until termination."""
        steps = 0
        while True:
            s_t = agent.current_state()
            action = exploration_strategy.pick_action(agent)

            s_next = agent.current_state()
            old_values = self._q.get(s_t)
            old_value = old_values.get(action) if old_values is not None else None
            v = learning_strategy.value(self._q.get(s_next), old_value, s_next.reward())
            self._q.setdefault(s_t, {})[action] = v
            steps += 1

            if termination_strategy.should_stop(s_next):
                break
        logger.debug("Tabular training stopped after %d steps (%d states)", steps, len(self._q))

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(
        self,
        path: str | Path,
        *,
        encode_state: Callable[[Any], Any] | None = None,
        encode_action: Callable[[Any], Any] | None = None,
    ) -> Path:
        """Write the table to a JSON file (see ``checkpoint.save_q_table``)."""
        from qlearn.checkpoint import save_q_table

        return save_q_table(
            path, self._q, encode_state=encode_state, encode_action=encode_action
        )

    def load(
        self,
        path: str | Path,
        *,
        decode_state: Callable[[Any], Any],
        decode_action: Callable[[Any], Any],
    ) -> None:
        """Replace the table with one read by ``checkpoint.load_q_table``."""
        from qlearn.checkpoint import load_q_table

        self.import_state(
            load_q_table(path, decode_state=decode_state, decode_action=decode_action)
        )
