"""Betting on a weighted coin until broke or rich.

Each turn the gambler bets part of the balance; heads (probability
``(weight + 1) / 256``) wins the bet, tails loses it.  Reaching
``target`` pays 1, everything else pays 0.  Balances of 0 or at least
``target`` have no legal bets, so ``SinkStates`` ends an episode there.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from qlearn.mdp import Agent, State


@dataclass(frozen=True)
class Bet:
    amount: int


@dataclass(frozen=True)
class CoinState(State):
    balance: int
    target: int = 100

    def reward(self) -> float:
        return 1.0 if self.balance >= self.target else 0.0

    def actions(self) -> list[Bet]:
        if self.balance < self.target // 2:
            top = self.balance
        else:
            top = self.target - self.balance
        return [Bet(amount) for amount in range(1, top + 1)]


class CoinAgent(Agent):
    def __init__(self, state: CoinState, weight: int = 100, seed: int | None = None) -> None:
        self.state = state
        self.weight = weight
        self._rng = np.random.default_rng(seed)

    def current_state(self) -> CoinState:
        return self.state

    def take_action(self, action: Bet) -> None:
        heads = int(self._rng.integers(256)) <= self.weight
        delta = action.amount if heads else -action.amount
        self.state = CoinState(balance=self.state.balance + delta, target=self.state.target)
