#!/usr/bin/env python3
"""Learn a betting policy for the weighted coin.

Usage::

    python scripts/weighted_coin.py --trials 100000
"""

from __future__ import annotations

from dataclasses import dataclass

import tyro

from qlearn import AgentTrainer, setup_logging
from qlearn.env.weighted_coin import CoinAgent, CoinState
from qlearn.strategy import QLearning, RandomExploration, SinkStates


@dataclass(frozen=True)
class CoinArgs:
    """Weighted-coin configuration."""

    trials: int = 100_000
    target: int = 100
    # Heads when a uniform byte is <= weight
    weight: int = 100

    alpha: float = 0.2
    gamma: float = 1.0
    initial_value: float = 0.0

    seed: int = 0


def main(args: CoinArgs) -> None:
    setup_logging()
    trainer = AgentTrainer()
    learning = QLearning(args.alpha, args.gamma, args.initial_value)
    exploration = RandomExploration(seed=args.seed)
    agent = CoinAgent(CoinState(balance=1, target=args.target), args.weight, seed=args.seed)

    for trial in range(args.trials):
        agent.state = CoinState(balance=1 + trial % (args.target - 2), target=args.target)
        trainer.train(agent, learning, SinkStates(), exploration)

    print("Balance\tBet\tQ-value")
    for balance in range(1, args.target):
        state = CoinState(balance=balance, target=args.target)
        action = trainer.best_action(state)
        if action is None:
            print(f"{balance}\t-\t-")
            continue
        print(f"{balance}\t{action.amount}\t{trainer.expected_value(state, action)}")


if __name__ == "__main__":
    main(tyro.cli(CoinArgs))
