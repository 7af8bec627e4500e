"""Example: Comparing rllab algorithms

Trains every algorithm on the line world and grid world, then shows the
Monty Hall agent learning to switch doors.
"""

import numpy as np

from rllab import (
    ALGORITHMS,
    AlgorithmConfig,
    MontyHall,
    create_algorithm,
    evaluate_policy,
    make_environment,
    train_algorithm,
)


def example_compare_on_grids():
    """Example: Train each algorithm and evaluate its greedy policy."""
    print("=" * 60)
    print("Example 1: Algorithms on line world and grid world")
    print("=" * 60)

    for env_name in ("line_world", "grid_world"):
        env = make_environment(env_name)
        print(f"\n{env_name} ({env.num_states()} states, {env.num_actions()} actions)")
        for name in sorted(ALGORITHMS):
            algorithm = create_algorithm(AlgorithmConfig(name), env.num_states(), env.num_actions())
            history = train_algorithm(algorithm, env, 300)
            mean, _ = evaluate_policy(algorithm, env, 5, max_steps=100)
            print(
                f"  {name:<24} train mean={history.mean_reward():+.3f}  "
                f"greedy reward={mean:+.3f}"
            )

    print()


def example_monty_hall():
    """Example: Learning to switch in the Monty Hall game."""
    print("=" * 60)
    print("Example 2: Monty Hall")
    print("=" * 60)

    env = MontyHall(seed=0)
    algorithm = create_algorithm(
        AlgorithmConfig("monte_carlo_on_policy", {"epsilon": 0.2}),
        env.num_states(),
        env.num_actions(),
    )
    train_algorithm(algorithm, env, 5000)

    wins = []
    for _ in range(1000):
        env.reset()
        while not env.is_game_over():
            env.step(algorithm.get_best_action(env.state_id(), env.available_actions()))
        wins.append(env.score())
    print(f"Greedy win rate: {np.mean(wins):.3f} (switching wins 2/3)")
    print()


if __name__ == "__main__":
    example_compare_on_grids()
    example_monty_hall()
    print("Done")
