"""Square grid with a goal corner and a trap corner."""

from typing import List, Optional, Tuple

import numpy as np

from .base import Environment

UP, RIGHT, DOWN, LEFT = 0, 1, 2, 3

_MOVES = {
    UP: (0, -1),
    RIGHT: (1, 0),
    DOWN: (0, 1),
    LEFT: (-1, 0),
}


class GridWorld(Environment):
    """Deterministic ``size`` x ``size`` grid.

    States are flattened as ``y * size + x``. The agent starts at (1, 1).
    The top-left cell is the goal (score +1) and the bottom-right cell is a
    trap (score -1); both end the episode. Actions are 0=up, 1=right,
    2=down, 3=left, and only moves that stay inside the grid are legal.

    Args:
        size: Grid side length (>= 3).

    Examples:
        >>> env = GridWorld()
        >>> env.state_id()
        5
        >>> env.step(UP); env.step(LEFT)
        >>> env.is_game_over(), env.score()
        (True, 1.0)
    """

    name = "grid_world"

    def __init__(self, size: int = 4):
        if size < 3:
            raise ValueError(f"size must be >= 3, got {size}")

        self.size = size
        self.x = 1
        self.y = 1

    def reset(self) -> None:
        self.x = 1
        self.y = 1

    def state_id(self) -> int:
        return self.y * self.size + self.x

    def num_states(self) -> int:
        return self.size * self.size

    def num_actions(self) -> int:
        return 4

    def _cell_score(self, x: int, y: int) -> float:
        if x == 0 and y == 0:
            return 1.0
        if x == self.size - 1 and y == self.size - 1:
            return -1.0
        return 0.0

    def _is_terminal(self, x: int, y: int) -> bool:
        return self._cell_score(x, y) != 0.0

    def _target(self, x: int, y: int, action: int) -> Optional[Tuple[int, int]]:
        dx, dy = _MOVES[action]
        nx, ny = x + dx, y + dy
        if 0 <= nx < self.size and 0 <= ny < self.size:
            return nx, ny
        return None

    def _legal_actions(self, x: int, y: int) -> List[int]:
        if self._is_terminal(x, y):
            return []
        return [a for a in (UP, RIGHT, DOWN, LEFT) if self._target(x, y, a) is not None]

    def is_game_over(self) -> bool:
        return self._is_terminal(self.x, self.y)

    def available_actions(self) -> List[int]:
        return self._legal_actions(self.x, self.y)

    def score(self) -> float:
        return self._cell_score(self.x, self.y)

    def _apply(self, action: int) -> None:
        self.x, self.y = self._target(self.x, self.y, action)

    def render(self) -> str:
        rows = []
        for y in range(self.size):
            row = []
            for x in range(self.size):
                if (x, y) == (self.x, self.y):
                    row.append("X")
                elif (x, y) == (0, 0):
                    row.append("G")
                elif (x, y) == (self.size - 1, self.size - 1):
                    row.append("B")
                else:
                    row.append(".")
            rows.append(" ".join(row))
        return "\n".join(rows)

    @property
    def has_model(self) -> bool:
        return True

    def transition_probabilities(self) -> np.ndarray:
        n = self.num_states()
        probs = np.zeros((n, 4, n), dtype=np.float64)
        for y in range(self.size):
            for x in range(self.size):
                for action in self._legal_actions(x, y):
                    nx, ny = self._target(x, y, action)
                    probs[y * self.size + x, action, ny * self.size + nx] = 1.0
        return probs

    def reward_function(self) -> np.ndarray:
        rewards = np.zeros((self.num_states(), 4), dtype=np.float64)
        for y in range(self.size):
            for x in range(self.size):
                for action in self._legal_actions(x, y):
                    nx, ny = self._target(x, y, action)
                    rewards[y * self.size + x, action] = self._cell_score(nx, ny)
        return rewards
