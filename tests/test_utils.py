"""Tests for utility functions."""

import numpy as np
import pytest

from rllab.errors import NoAvailableActions
from rllab.utils import (
    check_actions,
    discounted_returns,
    epsilon_greedy_action,
    greedy_action,
    random_greedy_action,
    sample_from_probs,
    seed_rng,
    softmax,
)


class TestSeedRNG:
    """Tests for RNG seeding."""

    def test_seed_rng(self):
        """Test same seed produces the same sequence."""
        rng1 = seed_rng(42)
        rng2 = seed_rng(42)
        assert rng1.integers(100) == rng2.integers(100)

    def test_default_seed_is_zero(self):
        """Test that None falls back to seed 0."""
        assert seed_rng(None).random() == seed_rng(0).random()


class TestSoftmax:
    """Tests for softmax function."""

    def test_softmax_basic(self):
        """Test basic softmax computation."""
        probs = softmax(np.array([1.0, 2.0, 3.0]))

        assert np.allclose(probs.sum(), 1.0)
        assert np.all(probs >= 0)
        assert probs[2] > probs[1] > probs[0]

    def test_softmax_numerical_stability(self):
        """Test softmax with large values."""
        probs = softmax(np.array([1000.0, 1001.0, 1002.0]))

        assert np.allclose(probs.sum(), 1.0)
        assert np.all(np.isfinite(probs))

    def test_softmax_mask(self):
        """Test masked entries get zero probability."""
        mask = np.array([True, False, True])
        probs = softmax(np.array([0.0, 50.0, 0.0]), mask=mask)

        assert probs[1] == 0.0
        assert np.allclose(probs, [0.5, 0.0, 0.5])

    def test_softmax_empty_mask(self):
        """Test an all-false mask is rejected."""
        with pytest.raises(ValueError, match="at least one"):
            softmax(np.zeros(3), mask=np.zeros(3, dtype=bool))


class TestActionSelection:
    """Tests for greedy and epsilon-greedy selection."""

    def test_check_actions_empty(self):
        """Test an empty action set is a precondition violation."""
        with pytest.raises(NoAvailableActions, match="state 4"):
            check_actions([], state=4)

    def test_greedy_restricted_to_available(self):
        """Test greedy ignores values of unavailable actions."""
        values = np.array([0.1, 0.9, 0.3])
        assert greedy_action(values, [0, 2]) == 2

    def test_greedy_first_seen_tie_break(self):
        """Test ties go to the first available action."""
        values = np.array([0.0, 1.0, 1.0, 1.0])
        assert greedy_action(values, [3, 2, 1]) == 3
        assert greedy_action(values, [1, 2, 3]) == 1

    def test_random_greedy_covers_ties(self, rng):
        """Test random tie-breaking picks every tied action."""
        values = np.array([1.0, 1.0, 0.0])
        picks = {random_greedy_action(values, [0, 1, 2], rng) for _ in range(100)}
        assert picks == {0, 1}

    def test_epsilon_zero_is_greedy(self, rng):
        """Test epsilon=0 always exploits."""
        values = np.array([0.1, 0.9, 0.3])
        for _ in range(20):
            assert epsilon_greedy_action(values, [0, 1, 2], 0.0, rng) == 1

    def test_epsilon_one_is_uniform_over_available(self, rng):
        """Test epsilon=1 explores only available actions, roughly uniformly."""
        values = np.array([0.1, 0.9, 0.3, 0.0])
        counts = np.zeros(4)
        for _ in range(3000):
            counts[epsilon_greedy_action(values, [0, 2, 3], 1.0, rng)] += 1

        assert counts[1] == 0
        assert np.allclose(counts[[0, 2, 3]] / 3000, 1 / 3, atol=0.05)

    def test_invalid_epsilon(self, rng):
        """Test invalid epsilon raises error."""
        with pytest.raises(ValueError, match="epsilon"):
            epsilon_greedy_action(np.zeros(2), [0, 1], 1.5, rng)

    def test_empty_available_actions(self, rng):
        """Test selection from an empty set fails fast."""
        with pytest.raises(NoAvailableActions):
            epsilon_greedy_action(np.zeros(2), [], 0.1, rng)


class TestSampling:
    """Tests for cumulative sampling."""

    def test_degenerate_distribution(self, rng):
        """Test a one-hot distribution always returns its index."""
        probs = np.array([0.0, 0.0, 1.0])
        assert all(sample_from_probs(probs, rng) == 2 for _ in range(20))

    def test_frequencies(self, rng):
        """Test sample frequencies follow the probabilities."""
        probs = np.array([0.2, 0.8])
        samples = [sample_from_probs(probs, rng) for _ in range(5000)]
        assert np.isclose(np.mean(samples), 0.8, atol=0.03)


class TestDiscountedReturns:
    """Tests for discounted returns computation."""

    def test_discounted_returns_basic(self):
        """Test G_t includes the reward at t."""
        returns = discounted_returns([1.0, 2.0, 3.0], gamma=0.5)
        assert np.allclose(returns, [1.0 + 0.5 * 2.0 + 0.25 * 3.0, 2.0 + 0.5 * 3.0, 3.0])

    def test_discounted_returns_no_discount(self):
        """Test returns with gamma=1."""
        assert np.allclose(discounted_returns([1.0, 1.0, 1.0], gamma=1.0), [3.0, 2.0, 1.0])

    def test_empty_episode(self):
        """Test an empty episode has no returns."""
        assert discounted_returns([], gamma=0.9).shape == (0,)

    def test_invalid_gamma(self):
        """Test invalid gamma raises error."""
        with pytest.raises(ValueError, match="gamma"):
            discounted_returns([1.0], gamma=1.5)
