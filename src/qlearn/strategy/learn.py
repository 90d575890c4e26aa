"""Learning strategies for the tabular trainer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any


class LearningStrategy(ABC):
    """Computes the new value of the action just taken.

    Arguments are the learned values of the actions in the new state
    (``None`` if that state was never visited), the current value of the
    taken action (``None`` if never learned), and the reward received.
    """

    @abstractmethod
    def value(
        self,
        new_action_values: Mapping[Any, float] | None,
        current_value: float | None,
        reward: float,
    ) -> float:
        ...


class QLearning(LearningStrategy):
    """Q-learning with learning rate ``alpha`` and discount ``gamma``.

    ``initial_value`` stands in for the best next value when the next
    state is unknown, and is the value assigned the first time an action
    is seen.
    """

    def __init__(self, alpha: float, gamma: float, initial_value: float) -> None:
        self.alpha = alpha
        self.gamma = gamma
        self.initial_value = initial_value

    def value(
        self,
        new_action_values: Mapping[Any, float] | None,
        current_value: float | None,
        reward: float,
    ) -> float:
        if new_action_values:
            max_next = max(new_action_values.values())
        else:
            max_next = self.initial_value
        if current_value is None:
            return self.initial_value
        return current_value + self.alpha * (reward + self.gamma * max_next - current_value)

    def __repr__(self) -> str:
        return (
            f"QLearning(alpha={self.alpha}, gamma={self.gamma}, "
            f"initial_value={self.initial_value})"
        )
