"""Algorithm contract shared by every learner.

An algorithm owns its tables (Q-values, weights, models, counts) and drives
an :class:`~rllab.envs.Environment` through episodes in :meth:`Algorithm.train`.
Randomness always comes from an explicit ``numpy.random.Generator``.
"""

import copy
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from ..envs.base import Environment
from ..errors import SnapshotError
from ..logging import get_logger
from ..utils import check_actions, seed_rng

logger = get_logger(__name__)


def take_step(env: Environment, action: int) -> float:
    """Step ``env`` and return the change in score as the reward."""
    before = env.score()
    env.step(action)
    return env.score() - before


def encode_array(array: np.ndarray) -> Dict[str, Any]:
    """Encode an array as a JSON-safe dictionary."""
    return {"dtype": str(array.dtype), "shape": list(array.shape), "data": array.tolist()}


def decode_array(payload: Dict[str, Any]) -> np.ndarray:
    """Inverse of :func:`encode_array`."""
    try:
        array = np.asarray(payload["data"], dtype=np.dtype(payload["dtype"]))
        return array.reshape(tuple(payload["shape"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise SnapshotError(f"malformed array payload: {exc}") from exc


def validate_td_params(alpha: float, epsilon: float, gamma: float, max_steps: int) -> None:
    """Check the hyper-parameters shared by the temporal-difference learners."""
    if alpha <= 0 or alpha > 1:
        raise ValueError(f"alpha must be in (0, 1], got {alpha}")
    if epsilon < 0 or epsilon > 1:
        raise ValueError(f"epsilon must be in [0, 1], got {epsilon}")
    if gamma < 0 or gamma > 1:
        raise ValueError(f"gamma must be in [0, 1], got {gamma}")
    if max_steps < 1:
        raise ValueError(f"max_steps must be >= 1, got {max_steps}")


class Algorithm(ABC):
    """Base class for learning and planning algorithms.

    Subclasses declare the attributes that make up their snapshot:
    ``_param_attrs`` for scalar hyper-parameters and ``_table_attrs`` for
    NumPy arrays. Anything else goes through ``_extra_state`` and
    ``_load_extra_state``.

    Args:
        num_states: Number of environment states.
        num_actions: Number of environment actions.
        seed: Seed of the generator created by :meth:`train` when none is
            given.
    """

    name: str = "algorithm"
    _param_attrs: Tuple[str, ...] = ()
    _table_attrs: Tuple[str, ...] = ()

    def __init__(self, num_states: int, num_actions: int, seed: int = 42):
        if num_states < 1:
            raise ValueError(f"num_states must be >= 1, got {num_states}")
        if num_actions < 1:
            raise ValueError(f"num_actions must be >= 1, got {num_actions}")

        self.num_states = num_states
        self.num_actions = num_actions
        self.seed = seed

    @abstractmethod
    def reset_tables(self) -> None:
        """(Re)allocate every table for the current dimensions."""
        raise NotImplementedError

    @abstractmethod
    def get_best_action(self, state: int, available_actions: Sequence[int]) -> int:
        """Greedy action among ``available_actions``.

        Raises:
            NoAvailableActions: If ``available_actions`` is empty.
        """
        raise NotImplementedError

    @abstractmethod
    def _run_episode(self, env: Environment, rng: np.random.Generator) -> Tuple[float, bool]:
        """Run one episode, returning (total reward, truncated by step cap)."""
        raise NotImplementedError

    def _before_training(self, env: Environment, rng: np.random.Generator) -> None:
        """Hook called once per :meth:`train` call, before the first episode."""

    def _after_episode(self, episode: int) -> None:
        """Hook called after every training episode."""

    def bind(self, env: Environment) -> bool:
        """Adapt the algorithm to ``env``.

        If the environment's dimensions differ from the current ones, every
        table is reinitialised and previous learning is discarded.

        Returns:
            True if the tables were reinitialised.
        """
        num_states, num_actions = env.num_states(), env.num_actions()
        if (num_states, num_actions) == (self.num_states, self.num_actions):
            return False

        logger.warning(
            "%s: environment %s has %d states x %d actions, tables were %d x %d; "
            "reinitialising and discarding previous learning",
            self.name, env.name, num_states, num_actions, self.num_states, self.num_actions,
        )
        self.num_states = num_states
        self.num_actions = num_actions
        self.reset_tables()
        return True

    def train(
        self,
        env: Environment,
        num_episodes: int,
        rng: Optional[np.random.Generator] = None,
    ) -> List[float]:
        """Train on ``env`` for ``num_episodes`` episodes.

        Args:
            env: Environment to interact with.
            num_episodes: Number of episodes (>= 0).
            rng: Random number generator. If None, uses ``seed_rng(self.seed)``.

        Returns:
            Reward total (sum of score deltas) of every episode.
        """
        if num_episodes < 0:
            raise ValueError(f"num_episodes must be >= 0, got {num_episodes}")

        self.bind(env)
        if rng is None:
            rng = seed_rng(self.seed)

        self._before_training(env, rng)

        rewards = []
        truncated = 0
        for episode in range(num_episodes):
            total, was_truncated = self._run_episode(env, rng)
            rewards.append(float(total))
            truncated += int(was_truncated)
            self._after_episode(episode)
            logger.debug("%s episode %d: reward=%.4f", self.name, episode, total)

        if truncated:
            logger.debug(
                "%s: %d of %d episodes hit the step cap", self.name, truncated, num_episodes
            )
        return rewards

    def get_policy(self) -> np.ndarray:
        """Greedy action for every state, considering all actions legal."""
        all_actions = list(range(self.num_actions))
        return np.array(
            [self.get_best_action(s, all_actions) for s in range(self.num_states)],
            dtype=np.int64,
        )

    def _check_state(self, state: int) -> None:
        if state < 0 or state >= self.num_states:
            raise ValueError(f"state must be in [0, {self.num_states}), got {state}")

    def _check_query(self, state: int, available_actions: Sequence[int]) -> np.ndarray:
        self._check_state(state)
        return check_actions(available_actions, state)

    def _extra_state(self) -> Dict[str, Any]:
        return {}

    def _load_extra_state(self, extra: Dict[str, Any]) -> None:
        pass

    def state_dict(self) -> Dict[str, Any]:
        """JSON-safe snapshot of hyper-parameters, tables and extra state."""
        return {
            "num_states": self.num_states,
            "num_actions": self.num_actions,
            "seed": self.seed,
            "params": {attr: getattr(self, attr) for attr in self._param_attrs},
            "tables": {attr: encode_array(getattr(self, attr)) for attr in self._table_attrs},
            "extra": self._extra_state(),
        }

    def load_state_dict(self, state: Dict[str, Any]) -> None:
        """Restore a snapshot produced by :meth:`state_dict`.

        The snapshot is restored into a copy of the algorithm first; ``self``
        is only updated once every table and the extra state have loaded.

        Raises:
            SnapshotError: If keys are missing, values are malformed or table
                shapes do not match. The algorithm is left unchanged.
        """
        missing = [k for k in ("num_states", "num_actions", "params", "tables") if k not in state]
        if missing:
            raise SnapshotError(f"{self.name}: snapshot is missing keys {missing}")
        for key in ("params", "tables"):
            if not isinstance(state[key], dict):
                raise SnapshotError(f"{self.name}: snapshot {key!r} must be an object")

        staged = copy.deepcopy(self)
        staged._restore(state)
        self.__dict__.update(staged.__dict__)

    def _restore(self, state: Dict[str, Any]) -> None:
        try:
            num_states = int(state["num_states"])
            num_actions = int(state["num_actions"])
        except (TypeError, ValueError) as exc:
            raise SnapshotError(f"{self.name}: malformed dimensions: {exc}") from exc
        if num_states < 1 or num_actions < 1:
            raise SnapshotError(
                f"{self.name}: snapshot has {num_states} states x {num_actions} actions"
            )

        self.num_states = num_states
        self.num_actions = num_actions
        self.seed = state.get("seed", self.seed)
        for attr in self._param_attrs:
            if attr in state["params"]:
                setattr(self, attr, state["params"][attr])
        self.reset_tables()

        for attr in self._table_attrs:
            if attr not in state["tables"]:
                raise SnapshotError(f"{self.name}: snapshot is missing table {attr!r}")
            table = decode_array(state["tables"][attr])
            expected = getattr(self, attr).shape
            if table.shape != expected:
                raise SnapshotError(
                    f"{self.name}: table {attr!r} has shape {table.shape}, expected {expected}"
                )
            setattr(self, attr, table)

        try:
            self._load_extra_state(state.get("extra", {}))
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise SnapshotError(f"{self.name}: malformed extra state: {exc}") from exc
