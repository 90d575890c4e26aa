"""Domain contracts for Markov decision processes.

A domain supplies a ``State`` (reward + legal actions) and an ``Agent``
that owns a current state and advances it by taking actions.  Trainers
never look inside either; they only use the methods below.

States and actions must be hashable and equatable (the tabular trainer
keys dicts by them).  Frozen dataclasses are the natural fit::

    @dataclass(frozen=True)
    class Pos(State):
        x: int
        y: int

        def reward(self) -> float:
            return -math.hypot(10 - self.x, 10 - self.y)

        def actions(self) -> list[Move]:
            return [Move(0, -1), Move(0, 1), Move(-1, 0), Move(1, 0)]

For the neural trainer both states and actions additionally provide
``to_array()`` returning a fixed-length float vector.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import numpy as np


class State(ABC):
    """A state of the process: a reward and the actions legal from it."""

    @abstractmethod
    def reward(self) -> float:
        """Reward received for arriving in this state."""
        ...

    @abstractmethod
    def actions(self) -> list[Any]:
        """Actions that may be taken from this state (empty when terminal)."""
        ...

    def random_action(self, rng: np.random.Generator) -> Any:
        """Pick one of ``actions()`` uniformly at random."""
        actions = self.actions()
        if not actions:
            raise ValueError(f"{self!r} has no actions to choose from")
        return actions[int(rng.integers(len(actions)))]


class Agent(ABC):
    """Owns the current state and applies actions to it."""

    @abstractmethod
    def current_state(self) -> State:
        ...

    @abstractmethod
    def take_action(self, action: Any) -> None:
        """Advance the current state according to the domain dynamics."""
        ...

    def take_random_action(self, rng: np.random.Generator) -> Any:
        action = self.current_state().random_action(rng)
        self.take_action(action)
        return action
