"""
rllab - command-line driver

Usage:
    # Train Q-learning on the line world and save a snapshot
    rllab train --env line_world --algorithm q_learning --episodes 1000

    # Override hyper-parameters
    rllab train --env grid_world --algorithm dyna_q --param planning_steps=10

    # List environments and algorithms
    rllab list
"""

import argparse
import sys
from typing import List, Optional

from .envs import ENVIRONMENTS, make_environment
from .factory import ALGORITHMS, AlgorithmConfig, create_algorithm
from .io import load_snapshot, save_snapshot
from .logging import configure_logging, get_logger
from .training import rollout, train_algorithm

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rllab",
        description="rllab - tabular reinforcement learning laboratory",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  rllab train --env line_world --algorithm q_learning --episodes 1000
  rllab train --env monty_hall --algorithm monte_carlo_on_policy --no-save
  rllab list
        """,
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    train = subparsers.add_parser("train", help="Train an algorithm and run its greedy policy")
    train.add_argument(
        "--env",
        type=str,
        required=True,
        help="Environment name (see 'rllab list'), or secret_<id>",
    )
    train.add_argument(
        "--algorithm",
        type=str,
        required=True,
        choices=sorted(ALGORITHMS),
        help="Algorithm name",
    )
    train.add_argument("--episodes", type=int, default=1000, help="Training episodes")
    train.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Algorithm hyper-parameter, may be repeated",
    )
    train.add_argument("--seed", type=int, default=None, help="Training seed")
    train.add_argument(
        "--models-dir",
        type=str,
        default="models",
        help="Directory holding saved snapshots",
    )
    train.add_argument(
        "--no-save",
        action="store_true",
        help="Neither load nor save snapshots",
    )
    train.add_argument("--render", action="store_true", help="Display the greedy rollout")

    subparsers.add_parser("list", help="List environments and algorithms")
    return parser


def list_command() -> int:
    print("Environments:")
    for name in sorted(ENVIRONMENTS):
        print(f"  {name}")
    print("  secret_<id> (native library)")
    print("Algorithms:")
    for name in sorted(ALGORITHMS):
        print(f"  {name}")
    return 0


def train_command(args: argparse.Namespace) -> int:
    env = make_environment(args.env)
    config = AlgorithmConfig.from_strings(args.algorithm, args.param)
    if args.seed is not None:
        config = AlgorithmConfig(config.name, {**config.params, "seed": args.seed})
    algorithm = create_algorithm(config, env.num_states(), env.num_actions())

    loaded = not args.no_save and load_snapshot(algorithm, args.models_dir, args.env)
    if loaded:
        print(f"Loaded {algorithm.name} snapshot for {args.env}, skipping training")
    else:
        history = train_algorithm(algorithm, env, args.episodes)
        mean = history.mean_reward()
        print(
            f"Trained {algorithm.name} on {args.env} for {history.num_episodes()} episodes, "
            f"mean reward: {'n/a' if mean is None else f'{mean:.4f}'}"
        )
        if not args.no_save:
            path = save_snapshot(algorithm, args.models_dir, args.env)
            print(f"Saved snapshot to {path}")

    steps = rollout(algorithm, env, render=args.render)
    total = sum(reward for _, _, reward in steps)
    print(f"Greedy rollout: {len(steps)} steps, reward {total:.4f}")
    for state, action, reward in steps:
        print(f"  state={state} action={action} reward={reward:+.4f}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "list":
        return list_command()
    return train_command(args)


if __name__ == "__main__":
    sys.exit(main())
