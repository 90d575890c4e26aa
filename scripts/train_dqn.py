#!/usr/bin/env python3
"""Train the DQN trainer on the grid world and print the learned policy.

Usage::

    python scripts/train_dqn.py --help
    python scripts/train_dqn.py --iterations 10000
    python scripts/train_dqn.py --dqn.gamma 0.9
    python scripts/train_dqn.py --save-dir runs/grid --metrics runs/grid/metrics.jsonl
"""

from __future__ import annotations

from dataclasses import dataclass

import tyro

from qlearn.dqn import DQNAgentTrainer, DQNConfig
from qlearn.env.grid_world import ACTION_SIZE, STATE_SIZE, GridAgent, GridState, Move, render_policy
from qlearn.metrics import MetricsLogger, setup_logging
from qlearn.strategy import FixedIterations, RandomExploration


@dataclass(frozen=True)
class TrainDQNArgs:
    """DQN grid-world training configuration."""

    # Termination: number of termination checks before stopping
    iterations: int = 10_000

    # Target cell and grid size
    tx: int = 10
    ty: int = 10
    size: int = 21

    # Algorithm hyperparameters
    dqn: DQNConfig = DQNConfig(gamma=0.9, lr=1e-3, inner_size=64)

    seed: int = 0
    log_interval: int = 20

    # Optional outputs
    save_dir: str | None = None
    metrics: str | None = None


def main(args: TrainDQNArgs) -> None:
    setup_logging()
    trainer = DQNAgentTrainer(
        STATE_SIZE,
        ACTION_SIZE,
        action_decoder=Move.from_values,
        config=args.dqn,
        seed=args.seed,
        log_interval=args.log_interval,
    )
    agent = GridAgent(GridState(x=0, y=0, tx=args.tx, ty=args.ty, maxx=args.size, maxy=args.size))

    metrics_logger = MetricsLogger(args.metrics) if args.metrics else None
    try:
        trainer.train(
            agent,
            FixedIterations(args.iterations),
            RandomExploration(seed=args.seed),
            callback=(lambda _, record: metrics_logger.write(record)) if metrics_logger else None,
        )
    finally:
        if metrics_logger is not None:
            metrics_logger.close()

    if args.save_dir is not None:
        trainer.save(args.save_dir)

    print(render_policy(trainer.best_action, args.tx, args.ty, args.size, args.size))


if __name__ == "__main__":
    main(tyro.cli(TrainDQNArgs))
