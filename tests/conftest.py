"""Shared fixtures: small DQN configs and grid-world trainers."""

import pytest

from qlearn.dqn import DQNAgentTrainer, DQNConfig
from qlearn.env.grid_world import ACTION_SIZE, STATE_SIZE, Move


@pytest.fixture
def small_config() -> DQNConfig:
    return DQNConfig(inner_size=16, gamma=0.9, batch_size=64, train_steps=20)


@pytest.fixture
def grid_trainer(small_config: DQNConfig) -> DQNAgentTrainer:
    return DQNAgentTrainer(
        STATE_SIZE,
        ACTION_SIZE,
        action_decoder=Move.from_values,
        config=small_config,
        seed=0,
        log_interval=0,
    )
