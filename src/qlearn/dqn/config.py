"""DQN hyperparameters."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DQNConfig:
    """All DQN hyperparameters in one place.

    Frozen dataclass, so it can be passed to jitted functions as a
    static argument and never changes over a trainer's lifetime.
    """

    # Network
    inner_size: int = 64

    # Optimization
    lr: float = 1e-3
    gamma: float = 0.99
    momentum: float = 0.9
    nesterov: bool = True
    huber_delta: float = 1.0

    # Batching
    batch_size: int = 64
    train_steps: int = 20  # gradient steps per collected batch

    # Input normalization
    norm_eps: float = 1e-3
    # 1: per row across features (the same policy single-state queries use);
    # 0: per feature column across the batch.
    batch_norm_axis: int = 1

    def __post_init__(self) -> None:
        if self.inner_size <= 0:
            raise ValueError(f"inner_size must be positive, got {self.inner_size}")
        if self.batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        if self.train_steps <= 0:
            raise ValueError(f"train_steps must be positive, got {self.train_steps}")
        if self.batch_norm_axis not in (0, 1):
            raise ValueError(f"batch_norm_axis must be 0 or 1, got {self.batch_norm_axis}")
