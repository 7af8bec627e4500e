"""Tests for the command-line driver."""

import pytest

from rllab.cli import build_parser, main
from rllab.io import snapshot_path


def test_list(capsys):
    assert main(["list"]) == 0
    out = capsys.readouterr().out
    assert "line_world" in out
    assert "secret_<id>" in out
    assert "monte_carlo_off_policy" in out


def test_train_saves_snapshot(tmp_path, capsys):
    args = [
        "train",
        "--env", "line_world",
        "--algorithm", "q_learning",
        "--episodes", "1000",
        "--models-dir", str(tmp_path),
    ]
    assert main(args) == 0
    out = capsys.readouterr().out
    assert "Trained q_learning on line_world for 1000 episodes" in out
    assert "Greedy rollout: 2 steps, reward 1.0000" in out
    assert snapshot_path(tmp_path, "line_world", "q_learning").exists()

    # The second run loads the snapshot instead of training
    assert main(args) == 0
    out = capsys.readouterr().out
    assert "skipping training" in out
    assert "Greedy rollout: 2 steps, reward 1.0000" in out


def test_train_no_save(tmp_path, capsys):
    args = [
        "train",
        "--env", "grid_world",
        "--algorithm", "value_iteration",
        "--episodes", "1",
        "--models-dir", str(tmp_path),
        "--no-save",
    ]
    assert main(args) == 0
    assert "reward 1.0000" in capsys.readouterr().out
    assert not list(tmp_path.iterdir())


def test_train_params_and_seed(tmp_path, capsys):
    args = [
        "train",
        "--env", "line_world",
        "--algorithm", "dyna_q",
        "--episodes", "50",
        "--param", "planning_steps=3",
        "--param", "alpha=0.2",
        "--seed", "7",
        "--no-save",
    ]
    assert main(args) == 0
    assert "Trained dyna_q" in capsys.readouterr().out


def test_unknown_algorithm_rejected():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["train", "--env", "line_world", "--algorithm", "ppo"])


def test_command_required():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])
