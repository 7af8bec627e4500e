"""Monte Carlo control.

Episodes are generated in full under a behaviour policy and then processed
backwards with G_t = r_t + gamma * G_{t+1}.

- OnPolicyMonteCarlo: first-visit averaging under an epsilon-soft policy
- OffPolicyMonteCarlo: weighted importance sampling towards the greedy
  target policy, with a UCB-style exploration bonus
"""

from collections.abc import Sequence
from typing import Any, Dict, List, Set, Tuple

import numpy as np

from ..envs.base import Environment
from ..utils import (
    check_actions,
    discounted_returns,
    epsilon_greedy_action,
    greedy_action,
    random_greedy_action,
)
from .base import Algorithm, take_step

# (state, action, reward)
Step = Tuple[int, int, float]


def _validate_mc_params(epsilon: float, gamma: float, max_steps: int) -> None:
    if epsilon < 0 or epsilon > 1:
        raise ValueError(f"epsilon must be in [0, 1], got {epsilon}")
    if gamma < 0 or gamma > 1:
        raise ValueError(f"gamma must be in [0, 1], got {gamma}")
    if max_steps < 1:
        raise ValueError(f"max_steps must be >= 1, got {max_steps}")


class OnPolicyMonteCarlo(Algorithm):
    """First-visit on-policy Monte Carlo control with an epsilon-soft policy.

    Q(s, a) is the arithmetic mean of every first-visit return observed for
    (s, a) so far: ``returns_sum / returns_count``. After each update the
    epsilon-soft policy of the state is recomputed over the actions observed
    there.

    Algorithm (Sutton & Barto, 2018, Ch. 5):
    1. Generate an episode with the epsilon-greedy behaviour policy
    2. Compute G_t backwards for every step
    3. For the first visit of each (s, a), add G_t to its running mean

    Args:
        num_states: Number of states.
        num_actions: Number of actions.
        epsilon: Exploration probability in [0, 1].
        gamma: Discount factor in [0, 1].
        max_steps: Step cap per episode.
        step_limit_penalty: Subtracted from the last reward of an episode
            that hits the step cap (learning signal only).
        seed: Default training seed.
    """

    name = "monte_carlo_on_policy"
    _param_attrs = ("epsilon", "gamma", "max_steps", "step_limit_penalty")
    _table_attrs = ("q_table", "returns_sum", "returns_count", "policy_table")

    def __init__(
        self,
        num_states: int,
        num_actions: int,
        epsilon: float = 0.1,
        gamma: float = 0.99,
        max_steps: int = 1000,
        step_limit_penalty: float = 1.0,
        seed: int = 42,
    ):
        super().__init__(num_states, num_actions, seed=seed)
        _validate_mc_params(epsilon, gamma, max_steps)
        self.epsilon = epsilon
        self.gamma = gamma
        self.max_steps = max_steps
        self.step_limit_penalty = step_limit_penalty
        self.reset_tables()

    def reset_tables(self) -> None:
        shape = (self.num_states, self.num_actions)
        self.q_table = np.zeros(shape, dtype=np.float64)
        self.returns_sum = np.zeros(shape, dtype=np.float64)
        self.returns_count = np.zeros(shape, dtype=np.int64)
        # Rows stay zero until the state has been updated once
        self.policy_table = np.zeros(shape, dtype=np.float64)
        self.observed_actions: Dict[int, List[int]] = {}

    def get_q_table(self) -> np.ndarray:
        return self.q_table.copy()

    def get_best_action(self, state: int, available_actions: Sequence[int]) -> int:
        actions = self._check_query(state, available_actions)
        return greedy_action(self.q_table[state], actions)

    def get_action_probabilities(self, state: int, available_actions: Sequence[int]) -> np.ndarray:
        """Epsilon-soft distribution over all actions, zero outside ``available_actions``."""
        actions = self._check_query(state, available_actions)
        probs = np.zeros(self.num_actions, dtype=np.float64)
        probs[actions] = self.epsilon / actions.size
        probs[greedy_action(self.q_table[state], actions)] += 1.0 - self.epsilon
        return probs

    def generate_episode(
        self, env: Environment, rng: np.random.Generator
    ) -> Tuple[List[Step], bool]:
        """Play one episode under the behaviour policy.

        Returns:
            Tuple of (trace, truncated). The trace holds (state, action,
            reward) triples; when truncated by the step cap, the last reward
            carries ``-step_limit_penalty``.
        """
        env.reset()
        trace: List[Step] = []

        while len(trace) < self.max_steps:
            available = env.available_actions()
            if not available:
                break
            state = env.state_id()
            self.observed_actions.setdefault(state, list(available))
            action = epsilon_greedy_action(
                self.q_table[state], available, self.epsilon, rng, random_ties=True
            )
            trace.append((state, action, take_step(env, action)))

        truncated = not env.is_game_over()
        if truncated and trace:
            state, action, reward = trace[-1]
            trace[-1] = (state, action, reward - self.step_limit_penalty)
        return trace, truncated

    def process_episode(self, trace: Sequence[Step]) -> None:
        """Fold the first-visit returns of ``trace`` into the running means."""
        returns = discounted_returns([reward for _, _, reward in trace], self.gamma)

        first_visits: Dict[Tuple[int, int], int] = {}
        for t, (state, action, _) in enumerate(trace):
            first_visits.setdefault((state, action), t)

        for (state, action), t in sorted(first_visits.items(), key=lambda item: -item[1]):
            self.returns_sum[state, action] += returns[t]
            self.returns_count[state, action] += 1
            self.q_table[state, action] = (
                self.returns_sum[state, action] / self.returns_count[state, action]
            )
            self._update_policy(state)

    def _update_policy(self, state: int) -> None:
        actions = self.observed_actions.get(state)
        if not actions:
            actions = list(range(self.num_actions))
        self.policy_table[state] = self.get_action_probabilities(state, actions)

    def _run_episode(self, env: Environment, rng: np.random.Generator) -> Tuple[float, bool]:
        trace, truncated = self.generate_episode(env, rng)
        self.process_episode(trace)
        total = sum(reward for _, _, reward in trace)
        if truncated and trace:
            total += self.step_limit_penalty
        return total, truncated

    def _extra_state(self) -> Dict[str, Any]:
        return {"observed_actions": {str(s): a for s, a in self.observed_actions.items()}}

    def _load_extra_state(self, extra: Dict[str, Any]) -> None:
        self.observed_actions = {
            int(s): [int(a) for a in acts]
            for s, acts in extra.get("observed_actions", {}).items()
        }


class OffPolicyMonteCarlo(Algorithm):
    """Off-policy Monte Carlo control with weighted importance sampling.

    The target policy is greedy in Q. The behaviour policy is epsilon-greedy
    where the exploration branch picks the action maximising

        Q(s, a) + sqrt(2 ln N(s) / n(s, a)) + novelty(s)

    with an infinite bonus for untried actions and ``novelty(s) = 1`` for
    states not yet visited in the current episode. Updates walk the episode
    backwards::

        G <- gamma * G + r_t
        C(s, a) <- C(s, a) + W
        Q(s, a) <- Q(s, a) + W / C(s, a) * (G - Q(s, a))
        stop if a_t is not greedy in s_t, else W <- W / b(a_t | s_t)

    where ``b = 1 - eps + eps / |A(s)|`` for the greedy action. Epsilon
    decays geometrically per episode down to ``min_epsilon``.
    """

    name = "monte_carlo_off_policy"
    _param_attrs = (
        "epsilon",
        "gamma",
        "epsilon_decay",
        "min_epsilon",
        "max_steps",
        "step_limit_penalty",
        "current_epsilon",
    )
    _table_attrs = ("q_table", "c_table", "visit_counts")

    def __init__(
        self,
        num_states: int,
        num_actions: int,
        epsilon: float = 0.1,
        gamma: float = 0.99,
        epsilon_decay: float = 0.995,
        min_epsilon: float = 0.01,
        max_steps: int = 100,
        step_limit_penalty: float = 1.0,
        seed: int = 42,
    ):
        super().__init__(num_states, num_actions, seed=seed)
        _validate_mc_params(epsilon, gamma, max_steps)
        if epsilon_decay <= 0 or epsilon_decay > 1:
            raise ValueError(f"epsilon_decay must be in (0, 1], got {epsilon_decay}")
        if min_epsilon < 0 or min_epsilon > epsilon:
            raise ValueError(f"min_epsilon must be in [0, epsilon], got {min_epsilon}")

        self.epsilon = epsilon
        self.gamma = gamma
        self.epsilon_decay = epsilon_decay
        self.min_epsilon = min_epsilon
        self.max_steps = max_steps
        self.step_limit_penalty = step_limit_penalty
        self.current_epsilon = epsilon
        self.reset_tables()

    def reset_tables(self) -> None:
        shape = (self.num_states, self.num_actions)
        self.q_table = np.zeros(shape, dtype=np.float64)
        self.c_table = np.zeros(shape, dtype=np.float64)
        self.visit_counts = np.zeros(shape, dtype=np.int64)
        self.visited_this_episode: Set[int] = set()

    def get_q_table(self) -> np.ndarray:
        return self.q_table.copy()

    def get_best_action(self, state: int, available_actions: Sequence[int]) -> int:
        actions = self._check_query(state, available_actions)
        return greedy_action(self.q_table[state], actions)

    def exploration_scores(self, state: int, available_actions: Sequence[int]) -> np.ndarray:
        """Q-value plus UCB and novelty bonuses for every available action."""
        actions = check_actions(available_actions, state)
        counts = self.visit_counts[state, actions].astype(np.float64)
        total = float(self.visit_counts[state].sum())

        bonus = np.full(actions.size, np.inf)
        tried = counts > 0
        if tried.any():
            bonus[tried] = np.sqrt(2.0 * np.log(total) / counts[tried])
        novelty = 0.0 if state in self.visited_this_episode else 1.0
        return self.q_table[state, actions] + bonus + novelty

    def behaviour_probability(self, state: int, action: int, available_actions: Sequence[int]) -> float:
        """Probability assigned to ``action`` by the epsilon-greedy behaviour policy."""
        actions = check_actions(available_actions, state)
        eps = self.current_epsilon
        if action == greedy_action(self.q_table[state], actions):
            return 1.0 - eps + eps / actions.size
        return eps / actions.size

    def select_behaviour_action(
        self, state: int, available_actions: Sequence[int], rng: np.random.Generator
    ) -> int:
        actions = check_actions(available_actions, state)
        if rng.random() < self.current_epsilon:
            scores = np.zeros(self.num_actions, dtype=np.float64)
            scores[actions] = self.exploration_scores(state, actions)
            action = random_greedy_action(scores, actions, rng)
        else:
            action = greedy_action(self.q_table[state], actions)
        self.visited_this_episode.add(state)
        self.visit_counts[state, action] += 1
        return action

    def _run_episode(self, env: Environment, rng: np.random.Generator) -> Tuple[float, bool]:
        env.reset()
        self.visited_this_episode = set()
        # (state, action, reward, available actions)
        trace = []

        while len(trace) < self.max_steps:
            available = env.available_actions()
            if not available:
                break
            state = env.state_id()
            action = self.select_behaviour_action(state, available, rng)
            trace.append((state, action, take_step(env, action), available))

        total = sum(step[2] for step in trace)
        truncated = not env.is_game_over()
        if truncated and trace:
            state, action, reward, available = trace[-1]
            trace[-1] = (state, action, reward - self.step_limit_penalty, available)

        self.process_episode(trace)
        return total, truncated

    def process_episode(self, trace) -> None:
        """Weighted importance-sampling update over ``trace``, last step first."""
        G = 0.0
        W = 1.0
        for state, action, reward, available in reversed(trace):
            G = self.gamma * G + reward
            self.c_table[state, action] += W
            self.q_table[state, action] += (
                W / self.c_table[state, action] * (G - self.q_table[state, action])
            )
            if action != greedy_action(self.q_table[state], available):
                break
            W /= self.behaviour_probability(state, action, available)

    def _after_episode(self, episode: int) -> None:
        self.current_epsilon = max(self.min_epsilon, self.current_epsilon * self.epsilon_decay)
