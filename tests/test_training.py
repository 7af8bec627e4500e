"""Tests for training helpers."""

import numpy as np
import pytest

from rllab.algorithms import PolicyIteration, QLearning
from rllab.envs import LineWorld
from rllab.training import TrainingHistory, evaluate_policy, rollout, train_algorithm
from rllab.utils import seed_rng


class TestTrainingHistory:
    """Tests for TrainingHistory."""

    def test_empty(self):
        history = TrainingHistory()
        assert history.mean_reward() is None
        assert history.best_reward() is None
        assert history.final_reward() is None
        assert history.num_episodes() == 0

    def test_statistics(self):
        history = TrainingHistory(episode_rewards=[-1.0, 1.0, 1.0, 0.0])
        assert history.mean_reward() == 0.25
        assert history.best_reward() == 1.0
        assert history.final_reward() == 0.0
        assert history.num_episodes() == 4


class TestTrainAlgorithm:
    """Tests for train_algorithm."""

    def test_matches_train(self):
        env = LineWorld()
        history = train_algorithm(QLearning(5, 2), env, 30, rng=seed_rng(1))
        rewards = QLearning(5, 2).train(env, 30, rng=seed_rng(1))
        assert history.episode_rewards == rewards

    def test_logs_summary(self, log_stream):
        train_algorithm(QLearning(5, 2), LineWorld(), 5)
        assert "Trained q_learning on line_world for 5 episodes" in log_stream.getvalue()

    def test_negative_episodes(self):
        with pytest.raises(ValueError, match="num_episodes"):
            train_algorithm(QLearning(5, 2), LineWorld(), -1)


class TestRollout:
    """Tests for greedy rollouts and evaluation."""

    def test_rollout_steps(self):
        env = LineWorld()
        agent = PolicyIteration(5, 2)
        agent.solve(env)

        steps = rollout(agent, env)
        assert steps == [(2, 1, 0.0), (3, 1, 1.0)]

    def test_rollout_render(self, capsys):
        env = LineWorld()
        agent = PolicyIteration(5, 2)
        agent.solve(env)

        rollout(agent, env, render=True)
        assert capsys.readouterr().out.splitlines() == ["__X__", "___X_", "____X"]

    def test_rollout_step_bound_warns(self, log_stream):
        env = LineWorld(length=101)
        steps = rollout(QLearning(101, 2), env, max_steps=4)
        assert len(steps) == 4
        assert "hit the 4 step bound" in log_stream.getvalue()

    def test_evaluate_policy(self):
        env = LineWorld()
        agent = PolicyIteration(5, 2)
        agent.solve(env)
        mean, std = evaluate_policy(agent, env, 5)
        assert mean == 1.0
        assert std == 0.0

    def test_evaluate_policy_requires_episodes(self):
        with pytest.raises(ValueError, match="num_episodes"):
            evaluate_policy(QLearning(5, 2), LineWorld(), 0)
