"""Wrap-around grid world rewarded by closeness to a target cell.

The agent moves one cell left/right/up/down on a ``maxx x maxy`` torus.
Reward is the negative Euclidean distance to ``(tx, ty)``, so the learned
best action from any cell should move towards the target.

State vector (6 floats): ``[tx, ty, x, y, maxx, maxy]``.
Action vector (4 floats): one-hot over ``left, right, up, down``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

import numpy as np

from qlearn.mdp import Agent, State

STATE_SIZE = 6
ACTION_SIZE = 4


@dataclass(frozen=True)
class Move:
    dx: int
    dy: int

    def to_array(self) -> np.ndarray:
        vec = np.zeros(ACTION_SIZE, dtype=np.float32)
        vec[MOVES.index(self)] = 1.0
        return vec

    @classmethod
    def from_values(cls, values: np.ndarray) -> Move:
        """The move with the largest value (first one on ties)."""
        return MOVES[int(np.argmax(values))]

    @property
    def arrow(self) -> str:
        return _ARROWS[self]


LEFT = Move(-1, 0)
RIGHT = Move(1, 0)
UP = Move(0, -1)
DOWN = Move(0, 1)
MOVES = (LEFT, RIGHT, UP, DOWN)
_ARROWS = {LEFT: "<", RIGHT: ">", UP: "^", DOWN: "v"}


@dataclass(frozen=True)
class GridState(State):
    x: int
    y: int
    tx: int = 10
    ty: int = 10
    maxx: int = 21
    maxy: int = 21

    def reward(self) -> float:
        return -self.distance()

    def actions(self) -> list[Move]:
        return list(MOVES)

    def distance(self) -> float:
        """Euclidean distance to the target cell."""
        return math.hypot(self.tx - self.x, self.ty - self.y)

    def to_array(self) -> np.ndarray:
        return np.array(
            [self.tx, self.ty, self.x, self.y, self.maxx, self.maxy], dtype=np.float32
        )

    @classmethod
    def from_array(cls, vec: np.ndarray) -> GridState:
        tx, ty, x, y, maxx, maxy = (int(v) for v in vec)
        return cls(x=x, y=y, tx=tx, ty=ty, maxx=maxx, maxy=maxy)

    def moved(self, move: Move) -> GridState:
        """The state after *move*, wrapping around the grid edges."""
        return replace(self, x=(self.x + move.dx) % self.maxx, y=(self.y + move.dy) % self.maxy)


class GridAgent(Agent):
    def __init__(self, state: GridState) -> None:
        self.state = state

    def current_state(self) -> GridState:
        return self.state

    def take_action(self, action: Move) -> None:
        self.state = self.state.moved(action)


def render_policy(best_action, tx: int = 10, ty: int = 10, maxx: int = 21, maxy: int = 21) -> str:
    """Arrow map of ``best_action(state)`` over the whole grid, one row per ``y``.

    Cells where *best_action* returns ``None`` are drawn as ``-``.
    """
    rows = []
    for y in range(maxy):
        cells = []
        for x in range(maxx):
            action = best_action(GridState(x=x, y=y, tx=tx, ty=ty, maxx=maxx, maxy=maxy))
            cells.append("-" if action is None else action.arrow)
        rows.append("".join(cells))
    return "\n".join(rows)
