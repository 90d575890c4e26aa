"""Example domains.

- ``grid_world``: torus grid rewarded by distance to a target cell; usable
  by both trainers (states and moves encode to vectors).
- ``weighted_coin``: gambler's ruin with a biased coin; tabular only.
"""

from qlearn.env.grid_world import GridAgent, GridState, Move, render_policy
from qlearn.env.weighted_coin import Bet, CoinAgent, CoinState

__all__ = [
    "GridAgent",
    "GridState",
    "Move",
    "render_policy",
    "Bet",
    "CoinAgent",
    "CoinState",
]
