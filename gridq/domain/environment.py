"""Deterministic grid world for Q-learning."""

from typing import Optional

import numpy as np

from .errors import ConfigError, InvalidEncodingError
from .rewards import RewardPolicy, ShapedReward, make_reward_policy
from .types import ACTION_DELTAS, NUM_ACTIONS, Action, RLConfig, State


def decode_one_hot(vector: np.ndarray) -> int:
    """Return the index of the single 1.0 entry of a one-hot vector.

    Raises:
        InvalidEncodingError: if the vector is not 1-D or does not hold
            exactly one non-zero entry equal to 1.0.
    """
    vector = np.asarray(vector)
    if vector.ndim != 1:
        raise InvalidEncodingError(f"expected a 1-D state vector, got shape {vector.shape}")

    hot = np.flatnonzero(vector)
    if hot.size == 0:
        raise InvalidEncodingError("state vector has no 1.0 entry")
    if hot.size > 1:
        raise InvalidEncodingError(
            f"state vector has {hot.size} non-zero entries, expected exactly one"
        )

    index = int(hot[0])
    if vector[index] != 1.0:
        raise InvalidEncodingError(
            f"state vector entry {index} is {vector[index]!r}, expected 1.0"
        )
    return index


class GridEnvironment:
    """Square grid with a fixed start at (0, 0) and goal at the far corner.

    Moves are clamped to the grid; bumping into the border leaves the agent
    where it is. Rewards come from the injected reward policy.
    """

    def __init__(self, grid_size: int = 10, reward_policy: Optional[RewardPolicy] = None):
        if grid_size < 1:
            raise ConfigError(f"grid_size must be >= 1, got {grid_size}")
        self.grid_size = grid_size
        self.reward_policy = reward_policy or ShapedReward()
        self.start = State(0, 0)
        self.goal = State(grid_size - 1, grid_size - 1)

    @classmethod
    def from_config(cls, config: RLConfig) -> "GridEnvironment":
        return cls(config.grid_size, make_reward_policy(config))

    @property
    def num_states(self) -> int:
        return self.grid_size * self.grid_size

    @property
    def num_actions(self) -> int:
        return NUM_ACTIONS

    def move(self, state: State, action: Action) -> State:
        """Apply a unit step in the given direction, clamped to the grid."""
        dx, dy = ACTION_DELTAS[Action(action)]
        limit = self.grid_size - 1
        return State(
            min(max(state.x + dx, 0), limit),
            min(max(state.y + dy, 0), limit),
        )

    def is_goal(self, state: State) -> bool:
        return state == self.goal

    def reward(self, state: State, next_state: State) -> float:
        return float(self.reward_policy(state, next_state, self.goal))

    def state_index(self, state: State) -> int:
        return state.index(self.grid_size)

    def encode(self, state: State) -> np.ndarray:
        """One-hot vector of length ``num_states`` for the given state."""
        vector = np.zeros(self.num_states, dtype=np.float64)
        vector[self.state_index(state)] = 1.0
        return vector

    def decode(self, vector: np.ndarray) -> State:
        """Inverse of ``encode``."""
        index = decode_one_hot(vector)
        if index >= self.num_states:
            raise InvalidEncodingError(
                f"state index {index} out of range for a {self.grid_size}x{self.grid_size} grid"
            )
        return State.from_index(index, self.grid_size)
