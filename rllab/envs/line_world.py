"""One-dimensional corridor with a terminal cell at each end."""

from typing import List

import numpy as np

from .base import Environment

LEFT = 0
RIGHT = 1


class LineWorld(Environment):
    """Corridor of ``length`` cells with absorbing ends.

    The agent starts in the middle cell and moves left (0) or right (1).
    Reaching cell 0 scores ``left_reward``, reaching the last cell scores
    ``right_reward``; the score is 0 before either end is reached.

    Args:
        length: Number of cells (>= 3).
        left_reward: Score of the left terminal cell.
        right_reward: Score of the right terminal cell.

    Examples:
        >>> env = LineWorld()
        >>> env.state_id(), env.available_actions()
        (2, [0, 1])
        >>> env.step(RIGHT); env.step(RIGHT)
        >>> env.is_game_over(), env.score()
        (True, 1.0)
    """

    name = "line_world"

    def __init__(
        self,
        length: int = 5,
        left_reward: float = -1.0,
        right_reward: float = 1.0,
    ):
        if length < 3:
            raise ValueError(f"length must be >= 3, got {length}")

        self.length = length
        self.left_reward = float(left_reward)
        self.right_reward = float(right_reward)
        self.start = length // 2
        self.position = self.start

    def reset(self) -> None:
        self.position = self.start

    def state_id(self) -> int:
        return self.position

    def num_states(self) -> int:
        return self.length

    def num_actions(self) -> int:
        return 2

    def _is_terminal(self, cell: int) -> bool:
        return cell == 0 or cell == self.length - 1

    def _cell_reward(self, cell: int) -> float:
        if cell == 0:
            return self.left_reward
        if cell == self.length - 1:
            return self.right_reward
        return 0.0

    def is_game_over(self) -> bool:
        return self._is_terminal(self.position)

    def available_actions(self) -> List[int]:
        if self.is_game_over():
            return []
        return [LEFT, RIGHT]

    def score(self) -> float:
        return self._cell_reward(self.position)

    def _apply(self, action: int) -> None:
        self.position += -1 if action == LEFT else 1

    def render(self) -> str:
        cells = ["X" if i == self.position else "_" for i in range(self.length)]
        return "".join(cells)

    @property
    def has_model(self) -> bool:
        return True

    def transition_probabilities(self) -> np.ndarray:
        n = self.length
        probs = np.zeros((n, 2, n), dtype=np.float64)
        for state in range(1, n - 1):
            probs[state, LEFT, state - 1] = 1.0
            probs[state, RIGHT, state + 1] = 1.0
        return probs

    def reward_function(self) -> np.ndarray:
        n = self.length
        rewards = np.zeros((n, 2), dtype=np.float64)
        for state in range(1, n - 1):
            rewards[state, LEFT] = self._cell_reward(state - 1)
            rewards[state, RIGHT] = self._cell_reward(state + 1)
        return rewards
