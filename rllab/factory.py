"""Factory for creating algorithms from configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Type

from .algorithms import (
    Algorithm,
    DynaQ,
    LinearDQN,
    OffPolicyMonteCarlo,
    OnPolicyMonteCarlo,
    PolicyIteration,
    QLearning,
    Reinforce,
    Sarsa,
    SemiGradientSarsa,
    ValueIteration,
)

ALGORITHMS: Dict[str, Type[Algorithm]] = {
    cls.name: cls
    for cls in (
        QLearning,
        Sarsa,
        DynaQ,
        OnPolicyMonteCarlo,
        OffPolicyMonteCarlo,
        PolicyIteration,
        ValueIteration,
        SemiGradientSarsa,
        LinearDQN,
        Reinforce,
    )
}


def _parse_value(text: str) -> Any:
    lowered = text.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if lowered == "none":
        return None
    for cast in (int, float):
        try:
            return cast(text)
        except ValueError:
            continue
    return text


@dataclass(frozen=True)
class AlgorithmConfig:
    """
    Configuration for creating a learning algorithm.

    Args:
        name: Registered algorithm name, e.g. "q_learning" or "dqn".
        params: Constructor keyword arguments (alpha, epsilon, gamma, seed, ...).
            Parameters not accepted by the algorithm are rejected by
            :func:`create_algorithm`.
    """

    name: str
    params: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_strings(cls, name: str, pairs: Iterable[str]) -> "AlgorithmConfig":
        """
        Build a configuration from ``key=value`` strings.

        Values are parsed as bool, None, int or float when possible and kept
        as strings otherwise.

        Examples:
            >>> AlgorithmConfig.from_strings("q_learning", ["alpha=0.5", "max_steps=10"]).params
            {'alpha': 0.5, 'max_steps': 10}
        """
        params: Dict[str, Any] = {}
        for pair in pairs:
            key, sep, value = pair.partition("=")
            if not sep or not key.strip():
                raise ValueError(f"expected key=value, got {pair!r}")
            params[key.strip()] = _parse_value(value.strip())
        return cls(name=name, params=params)


def create_algorithm(config: AlgorithmConfig, num_states: int, num_actions: int) -> Algorithm:
    """
    Create an algorithm from a configuration.

    Args:
        config: Algorithm configuration.
        num_states: Number of environment states.
        num_actions: Number of environment actions.

    Returns:
        A freshly constructed algorithm.

    Raises:
        ValueError: If the algorithm name is not registered or a parameter
            is not accepted by the algorithm.
    """
    name_lower = config.name.lower()
    if name_lower not in ALGORITHMS:
        raise ValueError(
            f"Unsupported algorithm name '{config.name}'. "
            f"Supported names: {sorted(ALGORITHMS)}"
        )

    try:
        return ALGORITHMS[name_lower](num_states, num_actions, **config.params)
    except TypeError as exc:
        raise ValueError(f"Invalid parameters for {name_lower}: {exc}") from exc
