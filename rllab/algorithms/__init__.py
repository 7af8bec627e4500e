"""Learning and planning algorithms.

- Tabular TD control: QLearning, Sarsa, DynaQ
- Monte Carlo control: OnPolicyMonteCarlo, OffPolicyMonteCarlo
- Planning: PolicyIteration, ValueIteration
- Approximation: SemiGradientSarsa, LinearDQN (with ReplayMemory)
- Policy gradient: Reinforce (with SoftmaxPolicy)
"""

from .approximation import LinearDQN, ReplayMemory, SemiGradientSarsa, Transition
from .base import Algorithm
from .monte_carlo import OffPolicyMonteCarlo, OnPolicyMonteCarlo
from .planning import PolicyIteration, ValueIteration
from .policy_gradient import Reinforce, SoftmaxPolicy
from .tabular import DynaQ, QLearning, Sarsa

__all__ = [
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
]
