"""Pluggable strategies used by the trainers.

- ``explore``: which action to take next (``RandomExploration``)
- ``terminate``: when to stop training (``FixedIterations``, ``SinkStates``)
- ``learn``: tabular value update rules (``QLearning``)
"""

from qlearn.strategy.explore import ExplorationStrategy, RandomExploration
from qlearn.strategy.learn import LearningStrategy, QLearning
from qlearn.strategy.terminate import FixedIterations, SinkStates, TerminationStrategy

__all__ = [
    "ExplorationStrategy",
    "RandomExploration",
    "LearningStrategy",
    "QLearning",
    "TerminationStrategy",
    "FixedIterations",
    "SinkStates",
]
