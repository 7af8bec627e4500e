"""Value-function approximation and experience replay.

- SemiGradientSarsa: linear Q over hashed binary features
- LinearDQN: Q-learning on a per-(state, action) weight table trained from
  a replay memory. The table is not shared across states, so this is
  Q-learning with experience replay rather than a function approximator.
"""

from collections import deque
from collections.abc import Sequence
from dataclasses import astuple, dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

import numpy as np

from ..envs.base import Environment
from ..utils import epsilon_greedy_action, greedy_action, seed_rng
from .base import Algorithm, take_step, validate_td_params


@dataclass(frozen=True)
class Transition:
    """One step of experience stored in a :class:`ReplayMemory`."""

    state: int
    action: int
    reward: float
    next_state: int
    terminal: bool


class ReplayMemory:
    """Bounded FIFO buffer of transitions.

    Pushing into a full memory evicts the oldest transition.

    Args:
        capacity: Maximum number of stored transitions (>= 1).

    Examples:
        >>> memory = ReplayMemory(capacity=2)
        >>> for s in range(3):
        ...     memory.push(Transition(s, 0, 0.0, s + 1, False))
        >>> [t.state for t in memory]
        [1, 2]
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._buffer: deque = deque(maxlen=capacity)

    def push(self, transition: Transition) -> None:
        self._buffer.append(transition)

    def sample(self, batch_size: int, rng: np.random.Generator) -> List[Transition]:
        """Draw ``batch_size`` distinct transitions uniformly at random."""
        if batch_size > len(self._buffer):
            raise ValueError(
                f"cannot sample {batch_size} transitions from a memory of {len(self._buffer)}"
            )
        indices = rng.choice(len(self._buffer), size=batch_size, replace=False)
        return [self._buffer[int(i)] for i in indices]

    def clear(self) -> None:
        self._buffer.clear()

    def __len__(self) -> int:
        return len(self._buffer)

    def __iter__(self) -> Iterator[Transition]:
        return iter(self._buffer)


class SemiGradientSarsa(Algorithm):
    """Episodic semi-gradient SARSA with a linear action-value function.

    Q(s, a) = w . x(s, a), where x(s, a) is a binary vector with two active
    entries: ``(s * A + a) % F`` and ``(S * A + s) % F``. The update

        w <- w + alpha * (r + gamma * Q(s', a') - Q(s, a)) * x(s, a)

    only differentiates the current prediction, hence semi-gradient.

    Args:
        num_states: Number of states (S).
        num_actions: Number of actions (A).
        num_features: Feature vector length (F). Defaults to S * (A + 1),
            which makes every feature distinct.
        alpha: Step size in (0, 1].
        epsilon: Exploration probability in [0, 1].
        gamma: Discount factor in [0, 1].
        max_steps: Step cap per episode.
        seed: Default training seed.
    """

    name = "semi_gradient_sarsa"
    _param_attrs = ("num_features", "alpha", "epsilon", "gamma", "max_steps")
    _table_attrs = ("weights",)

    def __init__(
        self,
        num_states: int,
        num_actions: int,
        num_features: Optional[int] = None,
        alpha: float = 0.1,
        epsilon: float = 0.1,
        gamma: float = 0.99,
        max_steps: int = 100,
        seed: int = 42,
    ):
        super().__init__(num_states, num_actions, seed=seed)
        validate_td_params(alpha, epsilon, gamma, max_steps)
        if num_features is not None and num_features < 1:
            raise ValueError(f"num_features must be >= 1, got {num_features}")

        self.num_features = num_features
        self.alpha = alpha
        self.epsilon = epsilon
        self.gamma = gamma
        self.max_steps = max_steps
        self.reset_tables()

    @property
    def feature_size(self) -> int:
        if self.num_features is not None:
            return self.num_features
        return self.num_states * (self.num_actions + 1)

    def reset_tables(self) -> None:
        self.weights = np.zeros(self.feature_size, dtype=np.float64)

    def features(self, state: int, action: int) -> np.ndarray:
        """Binary feature vector x(state, action), shape (feature_size,)."""
        x = np.zeros(self.feature_size, dtype=np.float64)
        x[(state * self.num_actions + action) % self.feature_size] = 1.0
        x[(self.num_states * self.num_actions + state) % self.feature_size] = 1.0
        return x

    def q_value(self, state: int, action: int) -> float:
        return float(self.weights @ self.features(state, action))

    def q_values(self, state: int) -> np.ndarray:
        """Approximate Q-values of every action in ``state``."""
        return np.array([self.q_value(state, a) for a in range(self.num_actions)])

    def get_weights(self) -> np.ndarray:
        return self.weights.copy()

    def get_best_action(self, state: int, available_actions: Sequence[int]) -> int:
        actions = self._check_query(state, available_actions)
        return greedy_action(self.q_values(state), actions)

    def update(
        self,
        state: int,
        action: int,
        reward: float,
        next_state: int,
        next_action: Optional[int] = None,
    ) -> None:
        """Semi-gradient step; ``next_action`` is None at a terminal state."""
        x = self.features(state, action)
        next_q = 0.0 if next_action is None else self.q_value(next_state, next_action)
        td_error = reward + self.gamma * next_q - float(self.weights @ x)
        self.weights += self.alpha * td_error * x

    def _select(self, state: int, available: Sequence[int], rng: np.random.Generator) -> int:
        return epsilon_greedy_action(self.q_values(state), available, self.epsilon, rng)

    def _run_episode(self, env: Environment, rng: np.random.Generator) -> Tuple[float, bool]:
        env.reset()
        total = 0.0
        if env.is_game_over():
            return total, False

        state = env.state_id()
        action = self._select(state, env.available_actions(), rng)
        for _ in range(self.max_steps):
            reward = take_step(env, action)
            total += reward

            next_state = env.state_id()
            next_available = env.available_actions()
            if not next_available:
                self.update(state, action, reward, next_state, None)
                break

            next_action = self._select(next_state, next_available, rng)
            self.update(state, action, reward, next_state, next_action)
            state, action = next_state, next_action

        return total, not env.is_game_over()


class LinearDQN(Algorithm):
    """Q-learning with experience replay on a per-(state, action) weight table.

    After each real step the transition is pushed into a FIFO replay memory.
    Once the memory holds ``batch_size`` transitions, every step samples
    ``batch_size`` of them without replacement and applies an independent
    update to each::

        w[s, a] <- w[s, a] + alpha * (r + gamma * max_a' w[s', a'] - w[s, a])

    with no bootstrap for terminal transitions. Weights start uniform in
    [-0.1, 0.1) from ``seed``.
    """

    name = "dqn"
    _param_attrs = ("alpha", "epsilon", "gamma", "memory_capacity", "batch_size", "max_steps")
    _table_attrs = ("weights",)

    def __init__(
        self,
        num_states: int,
        num_actions: int,
        alpha: float = 0.1,
        epsilon: float = 0.1,
        gamma: float = 0.99,
        memory_capacity: int = 1000,
        batch_size: int = 32,
        max_steps: int = 1000,
        seed: int = 42,
    ):
        super().__init__(num_states, num_actions, seed=seed)
        validate_td_params(alpha, epsilon, gamma, max_steps)
        if batch_size < 1 or batch_size > memory_capacity:
            raise ValueError(
                f"batch_size must be in [1, memory_capacity={memory_capacity}], got {batch_size}"
            )

        self.alpha = alpha
        self.epsilon = epsilon
        self.gamma = gamma
        self.memory_capacity = memory_capacity
        self.batch_size = batch_size
        self.max_steps = max_steps
        self.reset_tables()

    def reset_tables(self) -> None:
        rng = seed_rng(self.seed)
        self.weights = rng.uniform(-0.1, 0.1, size=(self.num_states, self.num_actions))
        self.memory = ReplayMemory(self.memory_capacity)

    def get_weights(self) -> np.ndarray:
        return self.weights.copy()

    def get_q_table(self) -> np.ndarray:
        return self.weights.copy()

    def get_best_action(self, state: int, available_actions: Sequence[int]) -> int:
        actions = self._check_query(state, available_actions)
        return greedy_action(self.weights[state], actions)

    def update(self, transition: Transition) -> None:
        s, a = transition.state, transition.action
        bootstrap = 0.0 if transition.terminal else float(np.max(self.weights[transition.next_state]))
        td_error = transition.reward + self.gamma * bootstrap - self.weights[s, a]
        self.weights[s, a] += self.alpha * td_error

    def replay(self, rng: np.random.Generator) -> None:
        """Sample a batch from the memory and update on each transition."""
        if len(self.memory) < self.batch_size:
            return
        for transition in self.memory.sample(self.batch_size, rng):
            self.update(transition)

    def _run_episode(self, env: Environment, rng: np.random.Generator) -> Tuple[float, bool]:
        env.reset()
        total = 0.0
        steps = 0

        while not env.is_game_over() and steps < self.max_steps:
            state = env.state_id()
            action = epsilon_greedy_action(
                self.weights[state], env.available_actions(), self.epsilon, rng
            )
            reward = take_step(env, action)
            self.memory.push(
                Transition(state, action, reward, env.state_id(), env.is_game_over())
            )
            self.replay(rng)

            total += reward
            steps += 1

        return total, not env.is_game_over()

    def _extra_state(self) -> Dict[str, Any]:
        return {"memory": [list(astuple(t)) for t in self.memory]}

    def _load_extra_state(self, extra: Dict[str, Any]) -> None:
        for s, a, r, s2, done in extra.get("memory", []):
            self.memory.push(Transition(int(s), int(a), float(r), int(s2), bool(done)))
