"""Training loop helpers and policy evaluation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .algorithms.base import Algorithm, take_step
from .envs.base import Environment
from .logging import get_logger

logger = get_logger(__name__)


@dataclass
class TrainingHistory:
    """
    Per-episode rewards collected by :func:`train_algorithm`.
    """

    episode_rewards: List[float] = field(default_factory=list)

    def mean_reward(self) -> Optional[float]:
        """
        Get the mean episode reward.

        Returns:
            Mean reward, or None if no episodes have been recorded.
        """
        if not self.episode_rewards:
            return None
        return float(np.mean(self.episode_rewards))

    def best_reward(self) -> Optional[float]:
        """
        Get the best (maximum) episode reward.

        Returns:
            Maximum reward, or None if no episodes have been recorded.
        """
        if not self.episode_rewards:
            return None
        return max(self.episode_rewards)

    def final_reward(self) -> Optional[float]:
        if not self.episode_rewards:
            return None
        return self.episode_rewards[-1]

    def num_episodes(self) -> int:
        return len(self.episode_rewards)


def train_algorithm(
    algorithm: Algorithm,
    env: Environment,
    num_episodes: int,
    rng: Optional[np.random.Generator] = None,
) -> TrainingHistory:
    """
    Train ``algorithm`` on ``env`` and summarise the run.

    Args:
        algorithm: Algorithm to train.
        env: Environment to train on.
        num_episodes: Number of training episodes.
        rng: Random number generator forwarded to ``algorithm.train``.

    Returns:
        History of per-episode rewards.
    """
    history = TrainingHistory(episode_rewards=algorithm.train(env, num_episodes, rng=rng))
    mean = history.mean_reward()
    logger.info(
        "Trained %s on %s for %d episodes, mean reward %s",
        algorithm.name,
        env.name,
        history.num_episodes(),
        "n/a" if mean is None else f"{mean:.4f}",
    )
    return history


def rollout(
    algorithm: Algorithm,
    env: Environment,
    max_steps: int = 1000,
    render: bool = False,
) -> List[Tuple[int, int, float]]:
    """
    Play one greedy episode.

    Args:
        algorithm: Trained algorithm queried through ``get_best_action``.
        env: Environment to play in (reset first).
        max_steps: Step bound.
        render: Print the environment after every step.

    Returns:
        List of (state, action, reward) steps.
    """
    env.reset()
    if render:
        env.display()

    steps = []
    while not env.is_game_over() and len(steps) < max_steps:
        state = env.state_id()
        action = algorithm.get_best_action(state, env.available_actions())
        steps.append((state, action, take_step(env, action)))
        if render:
            env.display()

    if not env.is_game_over():
        logger.warning("Greedy rollout of %s on %s hit the %d step bound", algorithm.name, env.name, max_steps)
    return steps


def evaluate_policy(
    algorithm: Algorithm,
    env: Environment,
    num_episodes: int,
    max_steps: int = 1000,
) -> Tuple[float, float]:
    """
    Evaluate the greedy policy of ``algorithm`` over several episodes.

    Returns:
        Tuple of (mean, std) of the episode rewards.
    """
    if num_episodes < 1:
        raise ValueError(f"num_episodes must be >= 1, got {num_episodes}")

    totals = [
        sum(reward for _, _, reward in rollout(algorithm, env, max_steps=max_steps))
        for _ in range(num_episodes)
    ]
    return float(np.mean(totals)), float(np.std(totals))
