"""Tests for policy iteration and value iteration."""

import numpy as np
import pytest

from rllab.algorithms import PolicyIteration, ValueIteration
from rllab.algorithms.planning import Planner
from rllab.envs import GridWorld, LineWorld, RockPaperScissors
from rllab.errors import ModelUnavailable, NoAvailableActions


class TestPolicyIteration:
    """Tests for policy iteration."""

    def test_line_world_values(self):
        """Test values of the line world with gamma=0.9."""
        env = LineWorld()
        agent = PolicyIteration(5, 2, gamma=0.9, theta=1e-10)
        assert agent.solve(env)

        values = agent.get_values()
        assert np.allclose(values, [0.0, 0.9 * 0.9, 0.9, 1.0, 0.0])
        assert list(agent.get_policy()[1:4]) == [1, 1, 1]

    def test_train_returns_policy_rewards(self):
        env = LineWorld()
        agent = PolicyIteration(5, 2)
        assert agent.train(env, 3) == [1.0, 1.0, 1.0]
        assert agent.converged

    def test_no_model(self):
        agent = PolicyIteration(4, 3)
        with pytest.raises(ModelUnavailable):
            agent.train(RockPaperScissors(), 1)

    def test_iteration_cap_reported(self, log_stream):
        """Test hitting the cap leaves converged False and logs a warning."""
        env = GridWorld()
        agent = PolicyIteration(16, 4, gamma=0.99, max_iterations=1, max_evaluation_sweeps=1)
        assert not agent.solve(env)
        assert not agent.converged
        assert "without converging" in log_stream.getvalue()

    def test_improvement_ignores_ties(self):
        """Test equal-valued actions do not switch the policy."""
        # State 0 reaches terminal state 1 with reward 1 through either action
        P = np.zeros((2, 2, 2))
        P[0, :, 1] = 1.0
        R = np.zeros((2, 2))
        R[0] = 1.0
        legal = P.sum(axis=2) > 0

        agent = PolicyIteration(2, 2, gamma=0.9)
        agent.policy[0] = 1
        assert agent._improve(P, R, legal)
        assert agent.policy[0] == 1

    def test_grid_world_policy_reaches_goal(self):
        env = GridWorld()
        agent = PolicyIteration(16, 4, gamma=0.9)
        assert agent.solve(env)
        assert agent.get_policy()[5] in (0, 3)
        assert env.run_policy(agent.get_policy()) == 1.0


class TestValueIteration:
    """Tests for value iteration."""

    def test_line_world_values(self):
        env = LineWorld()
        agent = ValueIteration(5, 2, gamma=0.9, theta=1e-10)
        assert agent.solve(env)
        assert np.allclose(agent.get_values(), [0.0, 0.81, 0.9, 1.0, 0.0])

    def test_q_values(self):
        env = LineWorld()
        agent = ValueIteration(5, 2, gamma=0.9, theta=1e-10)
        agent.solve(env)

        q = agent.get_q_values()
        assert np.isclose(q[3, 1], 1.0)
        assert np.isclose(q[3, 0], 0.9 * 0.9)
        assert np.isclose(q[1, 0], -1.0)
        # Terminal states have no legal actions
        assert np.all(np.isneginf(q[0]))
        assert np.all(np.isneginf(q[4]))

    def test_grid_world_reaches_goal(self):
        env = GridWorld()
        agent = ValueIteration(16, 4, gamma=0.9)
        rewards = agent.train(env, 1)
        assert rewards == [1.0]

    def test_iteration_cap(self):
        agent = ValueIteration(5, 2, max_iterations=1)
        assert not agent.solve(LineWorld())


class TestPlannersAgree:
    """Tests comparing both planners."""

    @pytest.mark.parametrize("env_factory", [LineWorld, GridWorld, lambda: LineWorld(length=9)])
    def test_same_values_and_policy(self, env_factory):
        """Test both planners agree within theta on values and on unambiguous actions."""
        env = env_factory()
        theta = 1e-8
        pi = PolicyIteration(env.num_states(), env.num_actions(), gamma=0.9, theta=theta)
        vi = ValueIteration(env.num_states(), env.num_actions(), gamma=0.9, theta=theta)
        pi.solve(env)
        vi.solve(env)

        assert np.allclose(pi.get_values(), vi.get_values(), atol=10 * theta)

        q = vi.get_q_values()
        for state in range(env.num_states()):
            legal = np.isfinite(q[state])
            if legal.sum() < 2:
                continue
            ordered = np.sort(q[state, legal])
            if ordered[-1] - ordered[-2] > 1e-6:
                assert pi.get_policy()[state] == vi.get_policy()[state]


class TestGetBestAction:
    """Tests for planner action queries."""

    def test_falls_back_to_first_available(self):
        env = LineWorld()
        agent = ValueIteration(5, 2)
        agent.solve(env)
        assert agent.get_best_action(2, [1]) == 1
        assert agent.get_best_action(2, [0]) == 0

    def test_empty_available(self):
        with pytest.raises(NoAvailableActions):
            ValueIteration(5, 2).get_best_action(2, [])

    def test_invalid_params(self):
        with pytest.raises(ValueError, match="theta"):
            ValueIteration(5, 2, theta=0.0)
        with pytest.raises(ValueError, match="max_evaluation_sweeps"):
            PolicyIteration(5, 2, max_evaluation_sweeps=0)


class TestPlannerBase:
    """Tests for the shared planner base class."""

    def test_planner_is_abstract(self):
        with pytest.raises(TypeError, match="_solve"):
            Planner(5, 2)
