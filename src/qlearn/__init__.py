"""qlearn: reusable Q-learning with a tabular and a JAX neural trainer."""

from qlearn.checkpoint import load_eqx, load_model, load_q_table, save_eqx, save_model, save_q_table
from qlearn.mdp import Agent, State
from qlearn.metrics import MetricsLogger, setup_logging
from qlearn.seeding import make_rng
from qlearn.trainer import AgentTrainer

__all__ = [
    "Agent",
    "AgentTrainer",
    "MetricsLogger",
    "State",
    "load_eqx",
    "load_model",
    "load_q_table",
    "make_rng",
    "save_eqx",
    "save_model",
    "save_q_table",
    "setup_logging",
]
