from qlearn.dqn.agent import DQN, UnusedParamsError, decode_actions, huber_loss, td_targets
from qlearn.dqn.batch import Batch, BatchCollector
from qlearn.dqn.config import DQNConfig
from qlearn.dqn.network import QNetwork, normalize
from qlearn.dqn.trainer import DQNAgentTrainer
from qlearn.dqn.types import DQNMetrics, DQNState

__all__ = [
    "DQN",
    "DQNAgentTrainer",
    "DQNConfig",
    "DQNMetrics",
    "DQNState",
    "Batch",
    "BatchCollector",
    "QNetwork",
    "UnusedParamsError",
    "decode_actions",
    "huber_loss",
    "normalize",
    "td_targets",
]
