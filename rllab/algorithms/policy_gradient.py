"""REINFORCE with a tabular softmax policy.

Policy gradient update (Sutton & Barto, 2018, Ch. 13):
θ_{s,a} <- θ_{s,a} + α * γ^t * G_t * (1_{a=a_t} - π_θ(a|s))

Probabilities are always restricted to the actions available in the state.
"""

from collections.abc import Sequence
from typing import Optional, Tuple

import numpy as np

from ..envs.base import Environment
from ..utils import check_actions, discounted_returns, sample_from_probs, softmax
from .base import Algorithm, take_step


class SoftmaxPolicy:
    """Tabular softmax policy parameterised by action preferences θ(s, a).

    π(a|s) = exp(θ(s,a)) / sum_{a' in A(s)} exp(θ(s,a'))

    Args:
        n_states: Number of states.
        n_actions: Number of actions.

    Examples:
        >>> policy = SoftmaxPolicy(n_states=5, n_actions=2)
        >>> policy.action_probs(0).tolist()
        [0.5, 0.5]
        >>> policy.action_probs(0, available_actions=[1]).tolist()
        [0.0, 1.0]
    """

    def __init__(self, n_states: int, n_actions: int):
        if n_states < 1:
            raise ValueError(f"n_states must be >= 1, got {n_states}")
        if n_actions < 1:
            raise ValueError(f"n_actions must be >= 1, got {n_actions}")

        self.n_states = n_states
        self.n_actions = n_actions
        self.theta = np.zeros((n_states, n_actions), dtype=np.float64)

    def action_probs(self, state: int, available_actions: Optional[Sequence[int]] = None) -> np.ndarray:
        """Action probabilities, zero outside ``available_actions``."""
        if state < 0 or state >= self.n_states:
            raise ValueError(f"state must be in [0, {self.n_states}), got {state}")
        if available_actions is None:
            return softmax(self.theta[state])

        mask = np.zeros(self.n_actions, dtype=bool)
        mask[check_actions(available_actions, state)] = True
        return softmax(self.theta[state], mask=mask)

    def sample_action(
        self,
        state: int,
        available_actions: Sequence[int],
        rng: np.random.Generator,
    ) -> int:
        """Sample an action by walking the cumulative distribution."""
        return sample_from_probs(self.action_probs(state, available_actions), rng)

    def greedy_action(self, state: int, available_actions: Sequence[int]) -> int:
        actions = check_actions(available_actions, state)
        probs = self.action_probs(state, actions)
        return int(actions[np.argmax(probs[actions])])

    def get_theta(self) -> np.ndarray:
        return self.theta.copy()

    def set_theta(self, theta: np.ndarray) -> None:
        theta = np.asarray(theta, dtype=np.float64)
        if theta.shape != (self.n_states, self.n_actions):
            raise ValueError(
                f"theta shape must be ({self.n_states}, {self.n_actions}), "
                f"got {theta.shape}"
            )
        self.theta = theta


class Reinforce(Algorithm):
    """REINFORCE: Monte Carlo policy gradient (episodic, no baseline).

    Args:
        num_states: Number of states.
        num_actions: Number of actions.
        alpha: Learning rate (> 0).
        gamma: Discount factor in [0, 1].
        max_steps: Step cap per episode.
        seed: Default training seed.
    """

    name = "reinforce"
    _param_attrs = ("alpha", "gamma", "max_steps")
    _table_attrs = ("logits",)

    def __init__(
        self,
        num_states: int,
        num_actions: int,
        alpha: float = 0.01,
        gamma: float = 0.99,
        max_steps: int = 1000,
        seed: int = 42,
    ):
        super().__init__(num_states, num_actions, seed=seed)
        if alpha <= 0:
            raise ValueError(f"alpha must be positive, got {alpha}")
        if gamma < 0 or gamma > 1:
            raise ValueError(f"gamma must be in [0, 1], got {gamma}")
        if max_steps < 1:
            raise ValueError(f"max_steps must be >= 1, got {max_steps}")

        self.alpha = alpha
        self.gamma = gamma
        self.max_steps = max_steps
        self.reset_tables()

    def reset_tables(self) -> None:
        self.policy = SoftmaxPolicy(self.num_states, self.num_actions)

    @property
    def logits(self) -> np.ndarray:
        return self.policy.theta

    @logits.setter
    def logits(self, value: np.ndarray) -> None:
        self.policy.set_theta(value)

    def get_logits(self) -> np.ndarray:
        return self.policy.get_theta()

    def get_action_probabilities(self, state: int, available_actions: Sequence[int]) -> np.ndarray:
        return self.policy.action_probs(state, available_actions)

    def get_best_action(self, state: int, available_actions: Sequence[int]) -> int:
        actions = self._check_query(state, available_actions)
        return self.policy.greedy_action(state, actions)

    def update(self, trace) -> None:
        """Apply the policy-gradient update for a full (state, action, reward, available) trace."""
        returns = discounted_returns([step[2] for step in trace], self.gamma)

        for t, (state, action, _, available) in enumerate(trace):
            probs = self.policy.action_probs(state, available)
            scale = self.alpha * (self.gamma ** t) * returns[t]
            for a in available:
                grad = (1.0 if a == action else 0.0) - probs[a]
                self.policy.theta[state, a] += scale * grad

    def _run_episode(self, env: Environment, rng: np.random.Generator) -> Tuple[float, bool]:
        env.reset()
        trace = []

        while not env.is_game_over() and len(trace) < self.max_steps:
            state = env.state_id()
            available = env.available_actions()
            action = self.policy.sample_action(state, available, rng)
            trace.append((state, action, take_step(env, action), available))

        self.update(trace)
        return sum(step[2] for step in trace), not env.is_game_over()
