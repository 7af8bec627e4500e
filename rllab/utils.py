"""Utility functions shared by the learning algorithms.

This module provides RNG seeding, action-selection helpers restricted to the
legal actions of a state, numerically stable softmax and return computation.
"""

from collections.abc import Sequence
from typing import Optional

import numpy as np

from .errors import NoAvailableActions


def seed_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Create a seeded NumPy random number generator.

    Args:
        seed: Random seed. If None, defaults to 0 for reproducibility.

    Returns:
        Seeded NumPy random generator.

    Examples:
        >>> rng = seed_rng(42)
        >>> 0 <= rng.integers(10) < 10
        True
    """
    if seed is None:
        seed = 0
    return np.random.default_rng(seed)


def check_actions(available_actions: Sequence[int], state: Optional[int] = None) -> np.ndarray:
    """Return the available actions as an integer array, failing if empty.

    Raises:
        NoAvailableActions: If ``available_actions`` is empty.
    """
    actions = np.asarray(list(available_actions), dtype=np.int64)
    if actions.size == 0:
        where = "" if state is None else f" in state {state}"
        raise NoAvailableActions(f"no available actions{where}")
    return actions


def greedy_action(values: np.ndarray, available_actions: Sequence[int]) -> int:
    """Select the highest-valued available action.

    Ties are broken by the order of ``available_actions`` (first seen wins).

    Args:
        values: Values for every action of the state, shape (n_actions,).
        available_actions: Legal actions, non-empty.

    Returns:
        Selected action index.

    Examples:
        >>> greedy_action(np.array([0.5, 0.8, 0.8]), [0, 1, 2])
        1
        >>> greedy_action(np.array([0.5, 0.8, 0.3]), [0, 2])
        0
    """
    actions = check_actions(available_actions)
    return int(actions[np.argmax(values[actions])])


def random_greedy_action(
    values: np.ndarray,
    available_actions: Sequence[int],
    rng: np.random.Generator,
) -> int:
    """Select the highest-valued available action, breaking ties uniformly."""
    actions = check_actions(available_actions)
    candidate_values = values[actions]
    best = actions[candidate_values == np.max(candidate_values)]
    if best.size == 1:
        return int(best[0])
    return int(best[rng.integers(best.size)])


def epsilon_greedy_action(
    values: np.ndarray,
    available_actions: Sequence[int],
    epsilon: float,
    rng: np.random.Generator,
    random_ties: bool = False,
) -> int:
    """Select an available action using an epsilon-greedy policy.

    With probability epsilon, selects uniformly among ``available_actions``.
    Otherwise selects the greedy action, breaking ties by first-seen order
    (or uniformly at random when ``random_ties`` is set).

    Args:
        values: Values for every action of the state, shape (n_actions,).
        available_actions: Legal actions, non-empty.
        epsilon: Exploration probability in [0, 1].
        rng: Random number generator for exploration.
        random_ties: Break greedy ties uniformly at random.

    Returns:
        Selected action index.
    """
    if epsilon < 0 or epsilon > 1:
        raise ValueError(f"epsilon must be in [0, 1], got {epsilon}")

    actions = check_actions(available_actions)
    if rng.random() < epsilon:
        return int(actions[rng.integers(actions.size)])
    if random_ties:
        return random_greedy_action(values, actions, rng)
    return greedy_action(values, actions)


def softmax(logits: np.ndarray, mask: Optional[np.ndarray] = None) -> np.ndarray:
    """Compute numerically stable softmax probabilities.

    softmax(x_i) = exp(x_i - max(x)) / sum(exp(x_j - max(x)))

    Args:
        logits: Input logits, shape (n,).
        mask: Optional boolean array, shape (n,). Masked-out entries get
            probability zero and do not take part in the normalisation.

    Returns:
        Softmax probabilities, shape (n,), sums to 1.0.

    Examples:
        >>> probs = softmax(np.array([1.0, 2.0, 3.0]))
        >>> bool(probs[2] > probs[1] > probs[0])
        True
    """
    logits = np.asarray(logits, dtype=np.float64)
    if mask is None:
        mask = np.ones(logits.shape, dtype=bool)
    if not np.any(mask):
        raise ValueError("softmax mask must select at least one entry")

    # Subtract max for numerical stability
    shifted = logits - np.max(logits[mask])
    exp_logits = np.where(mask, np.exp(np.where(mask, shifted, 0.0)), 0.0)
    return exp_logits / np.sum(exp_logits)


def sample_from_probs(probs: np.ndarray, rng: np.random.Generator) -> int:
    """Sample an index by walking the cumulative distribution.

    Draws u ~ U[0, 1) and returns the first index whose cumulative
    probability exceeds u; rounding leftovers fall on the last index with
    non-zero probability.
    """
    u = rng.random()
    cumulative = 0.0
    for index, p in enumerate(probs):
        cumulative += p
        if u < cumulative:
            return index
    return int(np.flatnonzero(probs)[-1])


def discounted_returns(
    rewards: Sequence[float],
    gamma: float,
) -> np.ndarray:
    """Compute discounted returns G_t for Monte Carlo methods.

    Returns G_t = sum_{k=t}^{T-1} gamma^(k-t) * r_k computed backwards
    from the end of the episode.

    Args:
        rewards: Sequence of rewards [r_0, r_1, ..., r_{T-1}].
        gamma: Discount factor in [0, 1].

    Returns:
        Array of returns [G_0, G_1, ..., G_{T-1}], shape (T,).

    Examples:
        >>> returns = discounted_returns([1.0, 2.0, 3.0], gamma=0.9)
        >>> bool(np.isclose(returns[0], 1.0 + 0.9 * 2.0 + 0.9**2 * 3.0))
        True
    """
    if gamma < 0 or gamma > 1:
        raise ValueError(f"gamma must be in [0, 1], got {gamma}")

    rewards = np.asarray(rewards, dtype=np.float64)
    returns = np.zeros(len(rewards), dtype=np.float64)

    G = 0.0
    for t in range(len(rewards) - 1, -1, -1):
        G = rewards[t] + gamma * G
        returns[t] = G

    return returns
