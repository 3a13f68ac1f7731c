"""Headless training: run Q-learning without a window and report the result."""

import argparse
import logging
import sys
from typing import List, Optional

from .domain.environment import GridEnvironment
from .domain.errors import GridQError
from .domain.qlearning import QLearningAgent
from .domain.runner import EpisodeRunner
from .domain.types import RLConfig
from .utils.log import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    defaults = RLConfig()
    parser = argparse.ArgumentParser(description="Headless grid Q-learning training")
    parser.add_argument("--grid-size", type=int, default=defaults.grid_size, help="Width and height of the grid")
    parser.add_argument("--episodes", type=int, default=defaults.num_episodes, help="Number of episodes to train")
    parser.add_argument("--max-steps", type=int, default=defaults.max_steps_per_episode, help="Step budget per episode")
    parser.add_argument("--alpha", type=float, default=defaults.learning_rate, help="Learning rate")
    parser.add_argument("--gamma", type=float, default=defaults.discount_factor, help="Discount factor")
    parser.add_argument("--epsilon", type=float, default=defaults.exploration_rate, help="Exploration rate")
    parser.add_argument("--reward", choices=["sparse", "shaped"], default=defaults.reward_policy,
                        help="Reward policy")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible runs")
    parser.add_argument("--plot", type=str, default=None, help="Save a reward-per-episode chart to this path")
    parser.add_argument("--log-level", type=str.upper, default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], help="Logging level")
    parser.add_argument("--log-file", type=str, default=None, help="Also write logs to this file")
    return parser


def config_from_args(args: argparse.Namespace) -> RLConfig:
    return RLConfig(
        grid_size=args.grid_size,
        num_episodes=args.episodes,
        max_steps_per_episode=args.max_steps,
        learning_rate=args.alpha,
        discount_factor=args.gamma,
        exploration_rate=args.epsilon,
        reward_policy=args.reward,
        seed=args.seed,
        training_mode="background",
    ).validate()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, args.log_file)

    print("Grid Q-Learning (headless)")
    print("=" * 50)

    try:
        config = config_from_args(args)
        env = GridEnvironment.from_config(config)
        agent = QLearningAgent.from_config(config)
        runner = EpisodeRunner(agent, env, max_steps=config.max_steps_per_episode,
                               log_interval=config.log_interval)

        print(f"Grid: {config.grid_size}x{config.grid_size}, start {env.start.as_tuple()} -> goal {env.goal.as_tuple()}")
        print(f"Reward policy: {config.reward_policy}")
        print(f"Learning rate: {config.learning_rate}, discount: {config.discount_factor}, "
              f"epsilon: {config.exploration_rate}")
        print(f"Episodes: {config.num_episodes} x {config.max_steps_per_episode} steps max")

        logger.info("Starting training")
        result = runner.run(config.num_episodes)

        print("\nTraining completed!")
        print(f"   Total episodes: {result.total_episodes}")
        print(f"   Successful episodes: {result.successful_episodes}")
        print(f"   Success rate: {result.success_rate:.1%}")
        print(f"   Average reward: {result.average_reward:.2f}")
        print(f"   Average steps: {result.average_steps:.1f}")

        path = runner.greedy_path()
        if env.is_goal(path[-1]):
            print(f"Greedy path reaches the goal in {len(path) - 1} steps")
        else:
            print(f"Greedy path does not reach the goal within {config.max_steps_per_episode} steps")

        if args.plot:
            from .utils.plotting import save_reward_plot
            save_reward_plot(result.rewards, args.plot)
            print(f"Saved reward chart to {args.plot}")
        return 0

    except KeyboardInterrupt:
        print("\nTraining interrupted by user")
        return 1
    except GridQError as e:
        logger.error("Training failed: %s", e)
        print(f"\nTraining failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
