"""Tests for environments."""

import numpy as np
import pytest

from rllab.envs import (
    ENVIRONMENTS,
    GridWorld,
    LineWorld,
    MontyHall,
    RockPaperScissors,
    make_environment,
)
from rllab.envs.grid_world import DOWN, LEFT, RIGHT, UP
from rllab.envs.rps import INITIAL_STATE, PAPER, ROCK, SCISSORS, round_outcome
from rllab.errors import AlreadyTerminal, InvalidAction, ModelUnavailable


def _check_model(env):
    """Rows sum to 1 for legal actions and to 0 otherwise."""
    P = env.transition_probabilities()
    R = env.reward_function()
    n_s, n_a = env.num_states(), env.num_actions()
    assert P.shape == (n_s, n_a, n_s)
    assert R.shape == (n_s, n_a)
    sums = P.sum(axis=2)
    assert np.all(np.isclose(sums, 0.0) | np.isclose(sums, 1.0))
    return P, R


class TestLineWorld:
    """Tests for LineWorld."""

    def test_initial_state(self):
        env = LineWorld()
        assert env.num_states() == 5
        assert env.num_actions() == 2
        assert env.state_id() == 2
        assert env.available_actions() == [0, 1]
        assert not env.is_game_over()
        assert env.score() == 0.0

    def test_reach_right_end(self):
        env = LineWorld()
        env.step(1)
        env.step(1)
        assert env.is_game_over()
        assert env.score() == 1.0
        assert env.available_actions() == []

    def test_reach_left_end(self):
        env = LineWorld()
        env.step(0)
        env.step(0)
        assert env.is_game_over()
        assert env.score() == -1.0

    def test_reset(self):
        env = LineWorld()
        env.step(1)
        env.reset()
        assert env.state_id() == 2
        assert env.score() == 0.0

    def test_step_after_terminal_fails(self):
        env = LineWorld()
        env.step(1)
        env.step(1)
        with pytest.raises(AlreadyTerminal):
            env.step(0)

    def test_invalid_action_fails(self):
        env = LineWorld()
        with pytest.raises(InvalidAction) as excinfo:
            env.step(2)
        assert excinfo.value.action == 2
        assert excinfo.value.available_actions == [0, 1]
        assert isinstance(excinfo.value, ValueError)

    def test_render(self):
        assert LineWorld().render() == "__X__"

    def test_model(self):
        env = LineWorld()
        P, R = _check_model(env)
        assert P[2, 1, 3] == 1.0
        assert P[1, 0, 0] == 1.0
        assert R[3, 1] == 1.0
        assert R[1, 0] == -1.0
        # Terminal states have no outgoing transitions
        assert P[0].sum() == 0.0 and P[4].sum() == 0.0

    def test_length_validation(self):
        with pytest.raises(ValueError, match="length"):
            LineWorld(length=2)


class TestGridWorld:
    """Tests for GridWorld."""

    def test_initial_state(self):
        env = GridWorld()
        assert env.num_states() == 16
        assert env.num_actions() == 4
        assert env.state_id() == 5
        assert env.available_actions() == [UP, RIGHT, DOWN, LEFT]

    def test_corner_actions(self):
        env = GridWorld()
        env.step(UP)
        # (1, 0): top edge, up is illegal
        assert env.available_actions() == [RIGHT, DOWN, LEFT]

    def test_goal(self):
        env = GridWorld()
        env.step(LEFT)
        env.step(UP)
        assert env.is_game_over()
        assert env.score() == 1.0

    def test_trap(self):
        env = GridWorld()
        for action in (DOWN, DOWN, RIGHT, RIGHT):
            env.step(action)
        assert env.is_game_over()
        assert env.score() == -1.0

    def test_out_of_bounds_move_fails(self):
        env = GridWorld()
        env.step(UP)
        with pytest.raises(InvalidAction):
            env.step(UP)

    def test_model_matches_dynamics(self):
        env = GridWorld()
        P, R = _check_model(env)
        for state in range(env.num_states()):
            legal = P[state].sum(axis=1) > 0
            y, x = divmod(state, env.size)
            env.x, env.y = x, y
            assert list(np.flatnonzero(legal)) == env.available_actions()
        assert R[1, LEFT] == 1.0
        assert R[14, RIGHT] == -1.0

    def test_render(self):
        lines = GridWorld().render().splitlines()
        assert lines[0] == "G . . ."
        assert lines[1] == ". X . ."
        assert lines[3] == ". . . B"


class TestRockPaperScissors:
    """Tests for RockPaperScissors."""

    def test_round_outcome(self):
        assert round_outcome(PAPER, ROCK) == 1.0
        assert round_outcome(ROCK, SCISSORS) == 1.0
        assert round_outcome(SCISSORS, PAPER) == 1.0
        assert round_outcome(ROCK, PAPER) == -1.0
        assert round_outcome(ROCK, ROCK) == 0.0

    def test_episode(self):
        env = RockPaperScissors(seed=0)
        assert env.state_id() == INITIAL_STATE
        env.step(ROCK)
        assert env.state_id() in (0, 1, 2)
        assert not env.is_game_over()
        env.step(PAPER)
        assert env.is_game_over()
        assert env.available_actions() == []
        assert -2.0 <= env.score() <= 2.0

    def test_seed_reproducible(self):
        env1 = RockPaperScissors(max_rounds=10, seed=3)
        env2 = RockPaperScissors(max_rounds=10, seed=3)
        for _ in range(10):
            env1.step(ROCK)
            env2.step(ROCK)
            assert env1.state_id() == env2.state_id()
        assert env1.score() == env2.score()

    def test_no_model(self):
        env = RockPaperScissors()
        assert not env.has_model
        with pytest.raises(ModelUnavailable):
            env.transition_probabilities()
        with pytest.raises(NotImplementedError):
            env.reward_function()


class TestMontyHall:
    """Tests for MontyHall."""

    def test_dimensions(self):
        env = MontyHall(seed=0)
        assert env.num_actions() == 3
        assert env.num_states() == 32
        # All doors remain, no pick yet
        assert env.state_id() == 7 * 4

    def test_host_opens_non_winning_door(self):
        env = MontyHall(seed=0)
        env.winning_door = 1
        env.step(0)
        assert env.opened_doors == [2]
        assert env.available_actions() == [0, 1]
        assert env.state_id() == 3 * 4 + 1

    def test_final_choice(self):
        env = MontyHall(seed=0)
        env.winning_door = 1
        env.step(0)
        env.step(1)
        assert env.is_game_over()
        assert env.score() == 1.0
        with pytest.raises(AlreadyTerminal):
            env.step(0)

    def test_state_does_not_reveal_prize(self):
        env = MontyHall(seed=0)
        states = set()
        for winning in range(3):
            env.reset()
            env.winning_door = winning
            states.add(env.state_id())
        assert len(states) == 1

    def test_switching_wins_two_thirds(self):
        env = MontyHall(seed=1)
        wins = 0
        for _ in range(3000):
            env.reset()
            env.step(0)
            env.step([d for d in env.available_actions() if d != 0][0])
            wins += env.score()
        assert abs(wins / 3000 - 2 / 3) < 0.05

    def test_five_doors(self):
        env = make_environment("monty_hall_2", seed=0)
        steps = 0
        while not env.is_game_over():
            env.step(env.available_actions()[0])
            steps += 1
        assert steps == 4
        assert env.score() in (0.0, 1.0)
        assert len(env.opened_doors) == 3

    def test_opened_door_cannot_be_picked(self):
        env = MontyHall(seed=0)
        env.winning_door = 1
        env.step(0)
        with pytest.raises(InvalidAction):
            env.step(2)


class TestRunPolicy:
    """Tests for Environment.run_policy."""

    def test_run_policy_right(self):
        env = LineWorld()
        assert env.run_policy([1] * 5) == 1.0

    def test_run_policy_left(self):
        env = LineWorld()
        assert env.run_policy(np.zeros(5, dtype=int)) == -1.0

    def test_illegal_policy_action_falls_back(self):
        env = GridWorld()
        # UP everywhere; falls back to RIGHT on the top edge, then reaches
        # the right column and goes down to the trap
        policy = [UP] * 16
        policy[7] = DOWN
        policy[11] = DOWN
        assert env.run_policy(policy) == -1.0

    def test_step_bound(self):
        env = LineWorld()
        # Alternate forever between the middle cells
        policy = [0, 1, 0, 0, 0]
        assert env.run_policy(policy, max_steps=10) == 0.0


class TestMakeEnvironment:
    """Tests for the environment registry."""

    @pytest.mark.parametrize("name", sorted(ENVIRONMENTS))
    def test_registered(self, name):
        env = make_environment(name)
        assert env.name == name
        assert env.available_actions()

    def test_kwargs_forwarded(self):
        assert make_environment("line_world", length=7).num_states() == 7

    def test_unknown(self):
        with pytest.raises(ValueError, match="unknown environment"):
            make_environment("chess")
