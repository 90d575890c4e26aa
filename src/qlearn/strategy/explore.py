"""Exploration strategies: decide which action an agent takes next."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import numpy as np

from qlearn.mdp import Agent


class ExplorationStrategy(ABC):
    """Selects the next action for an ``Agent`` and applies it."""

    @abstractmethod
    def pick_action(self, agent: Agent) -> Any:
        """Apply one action to *agent* and return the action taken."""
        ...


class RandomExploration(ExplorationStrategy):
    """Always take a uniformly random legal action.

    Owns its own ``numpy.random.Generator`` so runs are reproducible
    given *seed*.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._rng = np.random.default_rng(seed)

    def pick_action(self, agent: Agent) -> Any:
        return agent.take_random_action(self._rng)

    def __repr__(self) -> str:
        return "RandomExploration()"
