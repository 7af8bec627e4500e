"""Monty Hall game generalised to any number of doors."""

from typing import List, Optional

from ..utils import seed_rng
from .base import Environment


class MontyHall(Environment):
    """Monty Hall with ``n_doors`` doors and ``n_doors - 1`` decisions.

    Each turn the agent picks one of the remaining doors. While more than
    two doors remain, the host then removes a door that is neither the
    agent's pick nor the winning door. The pick made when only two doors
    remain is final; the score is 1 if it hides the prize, 0 otherwise.

    The state encodes what the agent can observe (the remaining doors and
    its current pick), never the winning door::

        state = remaining_mask * (n_doors + 1) + (pick + 1 if picked else 0)

    Args:
        n_doors: Number of doors (>= 3). The classic game uses 3.
        seed: Random seed for the prize placement and the host.

    Examples:
        >>> env = MontyHall(seed=0)
        >>> env.available_actions()
        [0, 1, 2]
        >>> env.step(0)
        >>> len(env.available_actions())
        2
    """

    name = "monty_hall"

    def __init__(self, n_doors: int = 3, seed: Optional[int] = None):
        if n_doors < 3:
            raise ValueError(f"n_doors must be >= 3, got {n_doors}")

        self.n_doors = n_doors
        self.rng = seed_rng(seed)
        self.reset()

    def seed(self, seed: Optional[int]) -> None:
        """Set random seed."""
        self.rng = seed_rng(seed)

    def reset(self) -> None:
        self.winning_door = int(self.rng.integers(self.n_doors))
        self.remaining = list(range(self.n_doors))
        self.chosen_door: Optional[int] = None
        self.final_choice: Optional[int] = None
        self.opened_doors: List[int] = []

    def state_id(self) -> int:
        mask = sum(1 << door for door in self.remaining)
        pick = 0 if self.chosen_door is None else self.chosen_door + 1
        return mask * (self.n_doors + 1) + pick

    def num_states(self) -> int:
        return (1 << self.n_doors) * (self.n_doors + 1)

    def num_actions(self) -> int:
        return self.n_doors

    def is_game_over(self) -> bool:
        return self.final_choice is not None

    def available_actions(self) -> List[int]:
        if self.is_game_over():
            return []
        return list(self.remaining)

    def score(self) -> float:
        if self.final_choice is not None and self.final_choice == self.winning_door:
            return 1.0
        return 0.0

    def _apply(self, action: int) -> None:
        if len(self.remaining) == 2:
            self.final_choice = action
            return

        self.chosen_door = action
        candidates = [d for d in self.remaining if d != action and d != self.winning_door]
        opened = candidates[int(self.rng.integers(len(candidates)))]
        self.remaining.remove(opened)
        self.opened_doors.append(opened)

    def render(self) -> str:
        doors = []
        for door in range(self.n_doors):
            if door in self.opened_doors:
                doors.append("[ ]")
            elif door == self.final_choice:
                doors.append("[*]" if door == self.winning_door else "[x]")
            elif door == self.chosen_door:
                doors.append("[?]")
            else:
                doors.append(f"[{door}]")
        return " ".join(doors)
