"""Dynamic-programming planners working from a known model.

Both planners read ``transition_probabilities()`` and ``reward_function()``
from the environment. An action whose transition row is all zeros is
illegal in that state; a state without legal actions is terminal and keeps
value 0. Training episodes just run the planned policy.
"""

from abc import abstractmethod
from collections.abc import Sequence
from typing import Tuple

import numpy as np

from ..envs.base import Environment
from ..errors import ModelUnavailable
from ..logging import get_logger
from .base import Algorithm

logger = get_logger(__name__)

# Minimum gain for policy improvement to switch action
_IMPROVEMENT_TOLERANCE = 1e-12


def load_model(env: Environment, num_states: int, num_actions: int) -> Tuple[np.ndarray, np.ndarray]:
    """Fetch and validate the (P, R) model of ``env``.

    Raises:
        ModelUnavailable: If ``env`` has no model.
        ValueError: If the arrays have the wrong shape.
    """
    if not env.has_model:
        raise ModelUnavailable(f"{env.name} does not expose a transition model")

    P = np.asarray(env.transition_probabilities(), dtype=np.float64)
    R = np.asarray(env.reward_function(), dtype=np.float64)
    if P.shape != (num_states, num_actions, num_states):
        raise ValueError(
            f"transition_probabilities shape must be "
            f"({num_states}, {num_actions}, {num_states}), got {P.shape}"
        )
    if R.shape != (num_states, num_actions):
        raise ValueError(f"reward_function shape must be ({num_states}, {num_actions}), got {R.shape}")
    return P, R


class Planner(Algorithm):
    """Holds the value function and deterministic policy of a planner."""

    _table_attrs = ("values", "policy")

    def __init__(
        self,
        num_states: int,
        num_actions: int,
        gamma: float = 0.99,
        theta: float = 1e-6,
        max_iterations: int = 1000,
        seed: int = 42,
    ):
        super().__init__(num_states, num_actions, seed=seed)
        if gamma < 0 or gamma > 1:
            raise ValueError(f"gamma must be in [0, 1], got {gamma}")
        if theta <= 0:
            raise ValueError(f"theta must be positive, got {theta}")
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {max_iterations}")

        self.gamma = gamma
        self.theta = theta
        self.max_iterations = max_iterations
        self.reset_tables()

    def reset_tables(self) -> None:
        self.values = np.zeros(self.num_states, dtype=np.float64)
        self.policy = np.zeros(self.num_states, dtype=np.int64)
        self.converged = False

    def solve(self, env: Environment) -> bool:
        """Plan on the model of ``env``; returns whether it converged."""
        self.bind(env)
        P, R = load_model(env, self.num_states, self.num_actions)
        self.converged = self._solve(P, R)
        if not self.converged:
            logger.warning(
                "%s on %s stopped at the iteration cap without converging",
                self.name, env.name,
            )
        return self.converged

    @abstractmethod
    def _solve(self, P: np.ndarray, R: np.ndarray) -> bool:
        raise NotImplementedError

    def _backup(self, P: np.ndarray, R: np.ndarray, state: int, action: int) -> float:
        return float(R[state, action] + self.gamma * P[state, action] @ self.values)

    def _before_training(self, env: Environment, rng: np.random.Generator) -> None:
        self.solve(env)

    def _run_episode(self, env: Environment, rng: np.random.Generator) -> Tuple[float, bool]:
        return env.run_policy(self.policy), False

    def get_values(self) -> np.ndarray:
        """Copy of the state-value function, shape (num_states,)."""
        return self.values.copy()

    def get_policy(self) -> np.ndarray:
        return self.policy.copy()

    def get_best_action(self, state: int, available_actions: Sequence[int]) -> int:
        actions = self._check_query(state, available_actions)
        action = int(self.policy[state])
        if action in actions:
            return action
        return int(actions[0])


class PolicyIteration(Planner):
    """Policy iteration: alternate full evaluation and greedy improvement.

    Evaluation applies in-place Bellman expectation sweeps for the current
    policy until the largest value change is below ``theta``. Improvement
    switches a state's action only when another legal action is strictly
    better, so ties cannot make the policy oscillate.

    Args:
        num_states: Number of states.
        num_actions: Number of actions.
        gamma: Discount factor in [0, 1].
        theta: Convergence threshold of policy evaluation.
        max_iterations: Cap on evaluation/improvement rounds.
        max_evaluation_sweeps: Cap on sweeps within one evaluation.
        seed: Default training seed.
    """

    name = "policy_iteration"
    _param_attrs = ("gamma", "theta", "max_iterations", "max_evaluation_sweeps")

    def __init__(self, num_states: int, num_actions: int, max_evaluation_sweeps: int = 10000, **kwargs):
        if max_evaluation_sweeps < 1:
            raise ValueError(f"max_evaluation_sweeps must be >= 1, got {max_evaluation_sweeps}")
        self.max_evaluation_sweeps = max_evaluation_sweeps
        super().__init__(num_states, num_actions, **kwargs)

    def _evaluate(self, P: np.ndarray, R: np.ndarray, legal: np.ndarray) -> bool:
        for _ in range(self.max_evaluation_sweeps):
            delta = 0.0
            for s in range(self.num_states):
                if not legal[s].any():
                    continue
                v = self._backup(P, R, s, int(self.policy[s]))
                delta = max(delta, abs(v - self.values[s]))
                self.values[s] = v
            if delta < self.theta:
                return True
        return False

    def _improve(self, P: np.ndarray, R: np.ndarray, legal: np.ndarray) -> bool:
        stable = True
        for s in range(self.num_states):
            if not legal[s].any():
                continue
            current = self._backup(P, R, s, int(self.policy[s]))
            for a in np.flatnonzero(legal[s]):
                q = self._backup(P, R, s, int(a))
                if q > current + _IMPROVEMENT_TOLERANCE:
                    self.policy[s] = a
                    current = q
                    stable = False
        return stable

    def _solve(self, P: np.ndarray, R: np.ndarray) -> bool:
        legal = P.sum(axis=2) > 0
        self.values = np.zeros(self.num_states, dtype=np.float64)
        self.policy = np.array(
            [int(np.argmax(row)) if row.any() else 0 for row in legal], dtype=np.int64
        )

        for iteration in range(self.max_iterations):
            evaluated = self._evaluate(P, R, legal)
            if self._improve(P, R, legal) and evaluated:
                logger.debug("%s converged after %d iterations", self.name, iteration + 1)
                return True
        return False


class ValueIteration(Planner):
    """Value iteration with in-place Bellman optimality sweeps.

    Each sweep computes Q(s, a) = R(s, a) + gamma * sum_s' P(s, a, s') V(s')
    for every legal action, stores V(s) = max_a Q(s, a) and the maximising
    action. Illegal actions get Q = -inf. Sweeps stop when the largest value
    change is below ``theta`` or after ``max_iterations`` sweeps.
    """

    name = "value_iteration"
    _param_attrs = ("gamma", "theta", "max_iterations")
    _table_attrs = ("values", "policy", "q_values")

    def reset_tables(self) -> None:
        super().reset_tables()
        self.q_values = np.full((self.num_states, self.num_actions), -np.inf, dtype=np.float64)

    def get_q_values(self) -> np.ndarray:
        """Copy of the last computed Q-values, -inf for illegal actions."""
        return self.q_values.copy()

    def _solve(self, P: np.ndarray, R: np.ndarray) -> bool:
        legal = P.sum(axis=2) > 0
        self.values = np.zeros(self.num_states, dtype=np.float64)
        self.policy = np.zeros(self.num_states, dtype=np.int64)
        self.q_values = np.full((self.num_states, self.num_actions), -np.inf, dtype=np.float64)

        for sweep in range(self.max_iterations):
            delta = 0.0
            for s in range(self.num_states):
                if not legal[s].any():
                    continue
                for a in np.flatnonzero(legal[s]):
                    self.q_values[s, a] = self._backup(P, R, s, int(a))
                best = int(np.argmax(self.q_values[s]))
                delta = max(delta, abs(self.q_values[s, best] - self.values[s]))
                self.values[s] = self.q_values[s, best]
                self.policy[s] = best
            if delta < self.theta:
                logger.debug("%s converged after %d sweeps", self.name, sweep + 1)
                return True
        return False
