"""Reward policies for the grid environment.

A reward policy is any callable ``policy(state, next_state, goal) -> float``.
The environment holds one and delegates to it, so sparse and shaped runs
share the same environment, agent and runner.
"""

from dataclasses import dataclass
from typing import Callable

from .errors import ConfigError
from .types import RLConfig, State

RewardPolicy = Callable[[State, State, State], float]


def manhattan_distance(a: State, b: State) -> int:
    """Calculate Manhattan distance between two positions."""
    return abs(a.x - b.x) + abs(a.y - b.y)


@dataclass(frozen=True)
class SparseReward:
    """Goal reward on arrival, a fixed penalty for every other step."""
    goal_reward: float = 10.0
    step_penalty: float = -1.0

    def __call__(self, state: State, next_state: State, goal: State) -> float:
        if next_state == goal:
            return self.goal_reward
        return self.step_penalty


@dataclass(frozen=True)
class ShapedReward:
    """Goal reward on arrival, otherwise +/- shaping by distance progress.

    A step that does not strictly reduce the Manhattan distance to the goal
    (including bumping into the border) is penalised.
    """
    goal_reward: float = 10.0
    shaping: float = 0.01

    def __call__(self, state: State, next_state: State, goal: State) -> float:
        if next_state == goal:
            return self.goal_reward
        if manhattan_distance(next_state, goal) < manhattan_distance(state, goal):
            return self.shaping
        return -self.shaping


def make_reward_policy(config: RLConfig) -> RewardPolicy:
    """Build the reward policy selected by ``config.reward_policy``."""
    if config.reward_policy == "sparse":
        return SparseReward(goal_reward=config.goal_reward, step_penalty=config.step_penalty)
    if config.reward_policy == "shaped":
        return ShapedReward(goal_reward=config.goal_reward, shaping=config.shaping_reward)
    raise ConfigError(f"unknown reward policy: {config.reward_policy!r}")
