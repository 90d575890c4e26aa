#!/usr/bin/env python3
"""Train the tabular trainer on the grid world.

Usage::

    python scripts/train_q.py --iterations 100000
    python scripts/train_q.py --save runs/grid_q.json
    python scripts/train_q.py --load runs/grid_q.json --iterations 0
"""

from __future__ import annotations

from dataclasses import dataclass

import tyro

from qlearn import AgentTrainer, setup_logging
from qlearn.env.grid_world import GridAgent, GridState, Move, render_policy
from qlearn.strategy import FixedIterations, QLearning, RandomExploration


@dataclass(frozen=True)
class TrainQArgs:
    """Tabular Q-learning configuration."""

    iterations: int = 100_000

    # QLearning parameters
    alpha: float = 0.2
    gamma: float = 0.01
    initial_value: float = 2.0

    seed: int = 0

    # Optional JSON table to continue from / write to
    load: str | None = None
    save: str | None = None


def main(args: TrainQArgs) -> None:
    setup_logging()
    trainer = AgentTrainer()
    if args.load is not None:
        trainer.load(
            args.load,
            decode_state=lambda d: GridState(**d),
            decode_action=lambda d: Move(**d),
        )

    trainer.train(
        GridAgent(GridState(x=0, y=0)),
        QLearning(args.alpha, args.gamma, args.initial_value),
        FixedIterations(args.iterations),
        RandomExploration(seed=args.seed),
    )

    if args.save is not None:
        trainer.save(args.save)

    print(render_policy(trainer.best_action))


if __name__ == "__main__":
    main(tyro.cli(TrainQArgs))
