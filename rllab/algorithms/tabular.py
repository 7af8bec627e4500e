"""Tabular temporal-difference control.

This module implements value-based tabular algorithms:
- Q-learning (off-policy TD control)
- SARSA (on-policy TD control)
- Dyna-Q (Q-learning plus planning from a learned deterministic model)

Actions are always chosen among the state's available actions, and a
terminal next state (no available actions) contributes 0 to the bootstrap.
"""

from collections.abc import Sequence
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from ..envs.base import Environment
from ..utils import epsilon_greedy_action, greedy_action
from .base import Algorithm, take_step, validate_td_params


class TabularTD(Algorithm):
    """Q-table owner shared by Q-learning and SARSA."""

    _param_attrs = ("alpha", "epsilon", "gamma", "max_steps")
    _table_attrs = ("q_table",)

    def __init__(
        self,
        num_states: int,
        num_actions: int,
        alpha: float = 0.1,
        epsilon: float = 0.1,
        gamma: float = 0.99,
        max_steps: int = 1000,
        seed: int = 42,
    ):
        super().__init__(num_states, num_actions, seed=seed)
        validate_td_params(alpha, epsilon, gamma, max_steps)
        self.alpha = alpha
        self.epsilon = epsilon
        self.gamma = gamma
        self.max_steps = max_steps
        self.reset_tables()

    def reset_tables(self) -> None:
        self.q_table = np.zeros((self.num_states, self.num_actions), dtype=np.float64)

    def get_q_table(self) -> np.ndarray:
        """Copy of the Q-table, shape (num_states, num_actions)."""
        return self.q_table.copy()

    def get_best_action(self, state: int, available_actions: Sequence[int]) -> int:
        actions = self._check_query(state, available_actions)
        return greedy_action(self.q_table[state], actions)

    def _select(self, state: int, available_actions: Sequence[int], rng: np.random.Generator) -> int:
        return epsilon_greedy_action(self.q_table[state], available_actions, self.epsilon, rng)

    def _max_q(self, state: int, available_actions: Sequence[int]) -> float:
        if len(available_actions) == 0:
            return 0.0
        return float(np.max(self.q_table[state, list(available_actions)]))


class QLearning(TabularTD):
    """Q-learning (off-policy TD control).

    Q(s, a) <- Q(s, a) + alpha * (r + gamma * max_{a' in A(s')} Q(s', a') - Q(s, a))

    Args:
        num_states: Number of states.
        num_actions: Number of actions.
        alpha: Learning rate in (0, 1].
        epsilon: Exploration probability in [0, 1].
        gamma: Discount factor in [0, 1].
        max_steps: Step cap per episode.
        seed: Default training seed.

    Examples:
        >>> from rllab.envs import LineWorld
        >>> env = LineWorld()
        >>> agent = QLearning(env.num_states(), env.num_actions())
        >>> rewards = agent.train(env, 200)
        >>> agent.get_best_action(3, [0, 1])
        1
    """

    name = "q_learning"

    def update(
        self,
        state: int,
        action: int,
        reward: float,
        next_state: int,
        next_available: Sequence[int],
    ) -> None:
        """Apply one Q-learning update for an observed transition."""
        td_target = reward + self.gamma * self._max_q(next_state, next_available)
        td_error = td_target - self.q_table[state, action]
        self.q_table[state, action] += self.alpha * td_error

    def _after_real_step(
        self,
        state: int,
        action: int,
        reward: float,
        next_state: int,
        next_available: List[int],
        rng: np.random.Generator,
    ) -> None:
        """Hook for extra work after each real update."""

    def _run_episode(self, env: Environment, rng: np.random.Generator) -> Tuple[float, bool]:
        env.reset()
        total = 0.0
        steps = 0

        while not env.is_game_over() and steps < self.max_steps:
            state = env.state_id()
            action = self._select(state, env.available_actions(), rng)

            reward = take_step(env, action)
            next_state = env.state_id()
            next_available = env.available_actions()

            self.update(state, action, reward, next_state, next_available)
            self._after_real_step(state, action, reward, next_state, next_available, rng)

            total += reward
            steps += 1

        return total, not env.is_game_over()


class Sarsa(TabularTD):
    """SARSA (on-policy TD control).

    Q(s, a) <- Q(s, a) + alpha * (r + gamma * Q(s', a') - Q(s, a))

    where a' is the epsilon-greedy action actually taken in s'.
    """

    name = "sarsa"

    def update(
        self,
        state: int,
        action: int,
        reward: float,
        next_state: int,
        next_action: Optional[int] = None,
    ) -> None:
        """Apply one SARSA update; ``next_action`` is None at a terminal state."""
        next_q = 0.0 if next_action is None else self.q_table[next_state, next_action]
        td_error = reward + self.gamma * next_q - self.q_table[state, action]
        self.q_table[state, action] += self.alpha * td_error

    def _run_episode(self, env: Environment, rng: np.random.Generator) -> Tuple[float, bool]:
        env.reset()
        total = 0.0
        steps = 0
        if env.is_game_over():
            return total, False

        state = env.state_id()
        action = self._select(state, env.available_actions(), rng)

        while steps < self.max_steps:
            reward = take_step(env, action)
            total += reward
            steps += 1

            next_state = env.state_id()
            next_available = env.available_actions()
            if not next_available:
                self.update(state, action, reward, next_state, None)
                break

            next_action = self._select(next_state, next_available, rng)
            self.update(state, action, reward, next_state, next_action)
            state, action = next_state, next_action

        return total, not env.is_game_over()


class DynaQ(QLearning):
    """Dyna-Q: Q-learning with extra planning updates from a learned model.

    After each real step the transition ``(s, a) -> (r, s')`` is cached in a
    deterministic model, then ``planning_steps`` previously seen pairs are
    sampled uniformly and replayed through the Q-learning update. With
    ``planning_steps=0`` this is exactly Q-learning.

    Args:
        planning_steps: Simulated updates per real step (>= 0).
        **kwargs: Forwarded to :class:`QLearning`.
    """

    name = "dyna_q"
    _param_attrs = QLearning._param_attrs + ("planning_steps",)

    def __init__(self, num_states: int, num_actions: int, planning_steps: int = 5, **kwargs):
        if planning_steps < 0:
            raise ValueError(f"planning_steps must be >= 0, got {planning_steps}")
        self.planning_steps = planning_steps
        super().__init__(num_states, num_actions, **kwargs)

    def reset_tables(self) -> None:
        super().reset_tables()
        self.model: Dict[Tuple[int, int], Tuple[float, int]] = {}
        # Actions observed in each next state, empty when it was terminal
        self.observed_actions: Dict[int, List[int]] = {}

    def _after_real_step(self, state, action, reward, next_state, next_available, rng) -> None:
        self.model[(state, action)] = (reward, next_state)
        self.observed_actions[next_state] = list(next_available)
        self.plan(rng)

    def plan(self, rng: np.random.Generator) -> None:
        """Run ``planning_steps`` simulated updates from the model."""
        if self.planning_steps == 0 or not self.model:
            return

        pairs = list(self.model)
        for _ in range(self.planning_steps):
            state, action = pairs[int(rng.integers(len(pairs)))]
            reward, next_state = self.model[(state, action)]
            self.update(state, action, reward, next_state, self.observed_actions[next_state])

    def _extra_state(self) -> Dict[str, Any]:
        return {
            "model": [[s, a, r, s2] for (s, a), (r, s2) in self.model.items()],
            "observed_actions": {str(s): acts for s, acts in self.observed_actions.items()},
        }

    def _load_extra_state(self, extra: Dict[str, Any]) -> None:
        self.model = {
            (int(s), int(a)): (float(r), int(s2)) for s, a, r, s2 in extra.get("model", [])
        }
        self.observed_actions = {
            int(s): [int(a) for a in acts]
            for s, acts in extra.get("observed_actions", {}).items()
        }
