"""Environments implementing the :class:`Environment` contract.

- LineWorld: corridor with a losing and a winning end
- GridWorld: grid with a goal corner and a trap corner
- RockPaperScissors: repeated game against a random opponent
- MontyHall: the door game, for 3 or more doors
- NativeEnvironment: adapter over a native shared library
"""

from functools import partial
from typing import Callable, Dict

from .base import Environment
from .grid_world import GridWorld
from .line_world import LineWorld
from .monty_hall import MontyHall
from .native import NativeEnvironment
from .rps import RockPaperScissors

ENVIRONMENTS: Dict[str, Callable[..., Environment]] = {
    "line_world": LineWorld,
    "grid_world": GridWorld,
    "rps": RockPaperScissors,
    "monty_hall": MontyHall,
    "monty_hall_2": partial(MontyHall, n_doors=5),
}

_NATIVE_PREFIX = "secret_"


def make_environment(name: str, **kwargs) -> Environment:
    """Build an environment by registry name.

    Names of the form ``secret_<id>`` load a :class:`NativeEnvironment`.

    Examples:
        >>> make_environment("line_world").num_states()
        5
    """
    if name in ENVIRONMENTS:
        env = ENVIRONMENTS[name](**kwargs)
        env.name = name
        return env
    if name.startswith(_NATIVE_PREFIX) and name[len(_NATIVE_PREFIX):].isdigit():
        return NativeEnvironment(int(name[len(_NATIVE_PREFIX):]), **kwargs)
    known = sorted(ENVIRONMENTS) + [f"{_NATIVE_PREFIX}<id>"]
    raise ValueError(f"unknown environment {name!r}, expected one of {known}")


__all__ = [
    "Environment",
    "LineWorld",
    "GridWorld",
    "RockPaperScissors",
    "MontyHall",
    "NativeEnvironment",
    "ENVIRONMENTS",
    "make_environment",
]
