"""rllab - a tabular reinforcement-learning laboratory."""

__version__ = "0.1.0"

# Algorithms
from .algorithms import (
    Algorithm,
    DynaQ,
    LinearDQN,
    OffPolicyMonteCarlo,
    OnPolicyMonteCarlo,
    PolicyIteration,
    QLearning,
    Reinforce,
    ReplayMemory,
    Sarsa,
    SemiGradientSarsa,
    SoftmaxPolicy,
    Transition,
    ValueIteration,
)

# Environments
from .envs import (
    ENVIRONMENTS,
    Environment,
    GridWorld,
    LineWorld,
    MontyHall,
    NativeEnvironment,
    RockPaperScissors,
    make_environment,
)
from .errors import (
    AlreadyTerminal,
    InvalidAction,
    ModelUnavailable,
    NativeLibraryError,
    NoAvailableActions,
    RLLabError,
    SnapshotError,
)
from .factory import ALGORITHMS, AlgorithmConfig, create_algorithm
from .io import load_snapshot, save_snapshot
from .logging import configure_logging, get_logger, set_log_level
from .training import TrainingHistory, evaluate_policy, rollout, train_algorithm

__all__ = [
    "__version__",
    # Environments
    "Environment",
    "LineWorld",
    "GridWorld",
    "RockPaperScissors",
    "MontyHall",
    "NativeEnvironment",
    "ENVIRONMENTS",
    "make_environment",
    # Algorithms
    "Algorithm",
    "QLearning",
    "Sarsa",
    "DynaQ",
    "OnPolicyMonteCarlo",
    "OffPolicyMonteCarlo",
    "PolicyIteration",
    "ValueIteration",
    "SemiGradientSarsa",
    "LinearDQN",
    "ReplayMemory",
    "Transition",
    "Reinforce",
    "SoftmaxPolicy",
    # Configuration and training
    "AlgorithmConfig",
    "ALGORITHMS",
    "create_algorithm",
    "TrainingHistory",
    "train_algorithm",
    "evaluate_policy",
    "rollout",
    # Persistence
    "save_snapshot",
    "load_snapshot",
    # Errors
    "RLLabError",
    "InvalidAction",
    "AlreadyTerminal",
    "NoAvailableActions",
    "ModelUnavailable",
    "SnapshotError",
    "NativeLibraryError",
    # Logging
    "get_logger",
    "set_log_level",
    "configure_logging",
]
