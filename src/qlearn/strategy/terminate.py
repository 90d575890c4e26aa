"""Termination strategies: decide when training ends."""

from __future__ import annotations

from abc import ABC, abstractmethod

from qlearn.mdp import State


class TerminationStrategy(ABC):
    """Stateful stop condition, consulted with the latest observed state."""

    @abstractmethod
    def should_stop(self, state: State) -> bool:
        """Return ``True`` to end training."""
        ...


class FixedIterations(TerminationStrategy):
    """Stop after ``iters`` calls, regardless of the state.

    Every call counts, so ``FixedIterations(0)`` stops on the first check.
    """

    def __init__(self, iters: int) -> None:
        if iters < 0:
            raise ValueError(f"iters must be >= 0, got {iters}")
        self.iters = iters
        self.calls = 0

    def should_stop(self, state: State) -> bool:
        self.calls += 1
        return self.calls > self.iters

    def __repr__(self) -> str:
        return f"FixedIterations(iters={self.iters}, calls={self.calls})"


class SinkStates(TerminationStrategy):
    """Stop once the agent reaches a state with no legal actions."""

    def should_stop(self, state: State) -> bool:
        return not state.actions()
