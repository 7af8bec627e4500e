"""Repeated rock-paper-scissors against a uniformly random opponent."""

from typing import List, Optional

from ..utils import seed_rng
from .base import Environment

ROCK, PAPER, SCISSORS = 0, 1, 2
_MOVE_NAMES = ("Rock", "Paper", "Scissors")

# State used before the opponent has played
INITIAL_STATE = 3


def round_outcome(player_move: int, opponent_move: int) -> float:
    """Return +1 for a win, 0 for a draw and -1 for a loss."""
    if player_move == opponent_move:
        return 0.0
    if (player_move - opponent_move) % 3 == 1:
        return 1.0
    return -1.0


class RockPaperScissors(Environment):
    """Rock-paper-scissors played over a fixed number of rounds.

    The state is the opponent's previous move (0..2), or 3 before the first
    round. The score is the cumulative round outcome.

    Args:
        max_rounds: Rounds per episode (>= 1).
        seed: Random seed for the opponent's moves.
    """

    name = "rps"

    def __init__(self, max_rounds: int = 2, seed: Optional[int] = None):
        if max_rounds < 1:
            raise ValueError(f"max_rounds must be >= 1, got {max_rounds}")

        self.max_rounds = max_rounds
        self.rng = seed_rng(seed)
        self.current_round = 0
        self.player_score = 0.0
        self.opponent_last_move: Optional[int] = None

    def seed(self, seed: Optional[int]) -> None:
        """Set random seed."""
        self.rng = seed_rng(seed)

    def reset(self) -> None:
        self.current_round = 0
        self.player_score = 0.0
        self.opponent_last_move = None

    def state_id(self) -> int:
        if self.opponent_last_move is None:
            return INITIAL_STATE
        return self.opponent_last_move

    def num_states(self) -> int:
        return 4

    def num_actions(self) -> int:
        return 3

    def is_game_over(self) -> bool:
        return self.current_round >= self.max_rounds

    def available_actions(self) -> List[int]:
        if self.is_game_over():
            return []
        return [ROCK, PAPER, SCISSORS]

    def score(self) -> float:
        return self.player_score

    def _apply(self, action: int) -> None:
        opponent_move = int(self.rng.integers(3))
        self.player_score += round_outcome(action, opponent_move)
        self.opponent_last_move = opponent_move
        self.current_round += 1

    def render(self) -> str:
        lines = [
            f"Round: {self.current_round}/{self.max_rounds}",
            f"Current score: {self.player_score}",
        ]
        if self.opponent_last_move is not None:
            lines.append(f"Opponent's last move: {_MOVE_NAMES[self.opponent_last_move]}")
        return "\n".join(lines)
