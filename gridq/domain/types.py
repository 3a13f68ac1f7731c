"""Core type definitions for the grid Q-learning demo."""

from dataclasses import dataclass, field, replace as dataclass_replace
from enum import IntEnum
from typing import Dict, List, Literal, Optional, Tuple

from .errors import ConfigError

# Coordinate delta type
Delta = Tuple[int, int]

# Reward strategies selectable from the configuration
RewardPolicyName = Literal["sparse", "shaped"]

# Training modes (UI only)
TrainingMode = Literal["background", "visual"]


@dataclass(frozen=True)
class State:
    """An agent position on the grid. Moving produces a new State."""
    x: int
    y: int

    def as_tuple(self) -> Tuple[int, int]:
        return (self.x, self.y)

    def index(self, grid_size: int) -> int:
        """Flat table key ``y * grid_size + x``."""
        return self.y * grid_size + self.x

    @classmethod
    def from_index(cls, index: int, grid_size: int) -> "State":
        y, x = divmod(index, grid_size)
        return cls(x, y)


class Action(IntEnum):
    """Actions the agent can take. Ordinals are the Q-table columns."""
    UP = 0
    DOWN = 1
    LEFT = 2
    RIGHT = 3


NUM_ACTIONS = len(Action)

ACTION_DELTAS: Dict[Action, Delta] = {
    Action.UP: (0, -1),
    Action.DOWN: (0, 1),
    Action.LEFT: (-1, 0),
    Action.RIGHT: (1, 0),
}

ACTION_ARROWS: Dict[Action, str] = {
    Action.UP: "↑",
    Action.DOWN: "↓",
    Action.LEFT: "←",
    Action.RIGHT: "→",
}


@dataclass
class RLConfig:
    """Configuration for one training run. Fixed once a run starts."""
    grid_size: int = 10
    num_episodes: int = 1000
    max_steps_per_episode: int = 100
    learning_rate: float = 0.1
    discount_factor: float = 0.9
    exploration_rate: float = 0.1
    reward_policy: RewardPolicyName = "shaped"
    goal_reward: float = 10.0
    step_penalty: float = -1.0  # sparse policy
    shaping_reward: float = 0.01  # shaped policy, +/- per step
    seed: Optional[int] = None
    log_interval: int = 100
    # Visual training configuration
    training_mode: TrainingMode = "visual"
    visual_step_delay: int = 20  # milliseconds between animated steps

    def validate(self) -> "RLConfig":
        """Raise ConfigError if any value is out of range, else return self."""
        if self.grid_size < 1:
            raise ConfigError(f"grid_size must be >= 1, got {self.grid_size}")
        if self.num_episodes < 0:
            raise ConfigError(f"num_episodes must be >= 0, got {self.num_episodes}")
        if self.max_steps_per_episode < 1:
            raise ConfigError(
                f"max_steps_per_episode must be >= 1, got {self.max_steps_per_episode}"
            )
        if not 0.0 < self.learning_rate <= 1.0:
            raise ConfigError(f"learning_rate must be in (0, 1], got {self.learning_rate}")
        if not 0.0 <= self.discount_factor <= 1.0:
            raise ConfigError(f"discount_factor must be in [0, 1], got {self.discount_factor}")
        if not 0.0 <= self.exploration_rate <= 1.0:
            raise ConfigError(f"exploration_rate must be in [0, 1], got {self.exploration_rate}")
        if self.reward_policy not in ("sparse", "shaped"):
            raise ConfigError(f"unknown reward policy: {self.reward_policy!r}")
        if self.training_mode not in ("background", "visual"):
            raise ConfigError(f"unknown training mode: {self.training_mode!r}")
        if self.visual_step_delay < 0:
            raise ConfigError(f"visual_step_delay must be >= 0, got {self.visual_step_delay}")
        return self

    def replace(self, **changes) -> "RLConfig":
        """Return a validated copy with the given fields changed."""
        return dataclass_replace(self, **changes).validate()


@dataclass(frozen=True)
class EpisodeRecord:
    """Summary of a single finished episode."""
    episode: int
    steps: int
    total_reward: float
    reached_goal: bool


@dataclass
class TrainingResult:
    """Result of a training run."""
    episodes: List[EpisodeRecord] = field(default_factory=list)

    @property
    def total_episodes(self) -> int:
        return len(self.episodes)

    @property
    def successful_episodes(self) -> int:
        return sum(1 for ep in self.episodes if ep.reached_goal)

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        return self.successful_episodes / self.total_episodes if self.total_episodes > 0 else 0.0

    @property
    def average_reward(self) -> float:
        if not self.episodes:
            return 0.0
        return sum(ep.total_reward for ep in self.episodes) / len(self.episodes)

    @property
    def average_steps(self) -> float:
        if not self.episodes:
            return 0.0
        return sum(ep.steps for ep in self.episodes) / len(self.episodes)

    @property
    def rewards(self) -> List[float]:
        """Total reward per episode, in episode order."""
        return [ep.total_reward for ep in self.episodes]
