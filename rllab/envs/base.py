"""Environment contract shared by every task.

States and actions are small integers so that tables indexed by
``state_id()`` and action can be used directly by the algorithms.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import List

import numpy as np

from ..errors import AlreadyTerminal, InvalidAction, ModelUnavailable


class Environment(ABC):
    """Discrete, episodic environment driven by integer actions.

    Subclasses implement the dynamics; the base class provides action
    validation, rendering to stdout and a default ``run_policy``.

    Reward convention: algorithms compute rewards as the difference of
    ``score()`` across a ``step``. ``score()`` is therefore cumulative
    (or terminal-only) for every environment shipped with rllab.
    """

    name: str = "environment"

    @abstractmethod
    def reset(self) -> None:
        """Return to the initial state of a new episode."""
        raise NotImplementedError

    @abstractmethod
    def state_id(self) -> int:
        """Current state identifier in ``[0, num_states())``."""
        raise NotImplementedError

    @abstractmethod
    def num_states(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def num_actions(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def available_actions(self) -> List[int]:
        """Legal actions in ascending order; empty iff the episode is over."""
        raise NotImplementedError

    @abstractmethod
    def is_game_over(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def score(self) -> float:
        raise NotImplementedError

    @abstractmethod
    def _apply(self, action: int) -> None:
        """Apply an already validated action."""
        raise NotImplementedError

    @abstractmethod
    def render(self) -> str:
        """Return a human-readable description of the current state."""
        raise NotImplementedError

    def step(self, action: int) -> None:
        """Apply ``action`` to the environment.

        Raises:
            AlreadyTerminal: If the episode is already over.
            InvalidAction: If ``action`` is not currently available.
        """
        if self.is_game_over():
            raise AlreadyTerminal(f"{self.name}: cannot step, the episode is over")
        available = self.available_actions()
        if action not in available:
            raise InvalidAction(action, available)
        self._apply(int(action))

    def display(self) -> None:
        print(self.render())

    @property
    def has_model(self) -> bool:
        """Whether ``transition_probabilities`` and ``reward_function`` exist."""
        return False

    def transition_probabilities(self) -> np.ndarray:
        """Transition model P[s, a, s'], shape (n_states, n_actions, n_states).

        Rows of illegal actions and of terminal states are all zeros; every
        other row sums to 1.
        """
        raise ModelUnavailable(f"{self.name} does not expose a transition model")

    def reward_function(self) -> np.ndarray:
        """Expected score delta R[s, a], shape (n_states, n_actions)."""
        raise ModelUnavailable(f"{self.name} does not expose a reward function")

    def run_policy(self, policy: Sequence[int], max_steps: int = 1000) -> float:
        """Run a deterministic policy from a fresh episode.

        Follows ``policy[state]``, falling back to the first available action
        when the stored action is illegal, until the episode ends or
        ``max_steps`` steps have been taken.

        Returns:
            Accumulated reward (score at the end minus score at the start).
        """
        self.reset()
        start_score = self.score()
        steps = 0
        while not self.is_game_over() and steps < max_steps:
            available = self.available_actions()
            action = int(policy[self.state_id()])
            if action not in available:
                action = available[0]
            self.step(action)
            steps += 1
        return self.score() - start_score
