"""Tabular Q-learning agent with epsilon-greedy action selection."""

from typing import Optional

import numpy as np

from .environment import decode_one_hot
from .errors import ConfigError, InvalidActionError, InvalidEncodingError
from .types import NUM_ACTIONS, RLConfig
from ..utils.rng import SeededRNG


class QLearningAgent:
    """Q-learning agent owning a dense (num_states x num_actions) value table.

    States are passed in as one-hot vectors and decoded to table rows. The
    learning parameters are fixed for the lifetime of the agent.
    """

    def __init__(self, num_states: int, num_actions: int = NUM_ACTIONS,
                 learning_rate: float = 0.1, discount_factor: float = 0.9,
                 exploration_rate: float = 0.1, rng: Optional[SeededRNG] = None):
        if num_states < 1 or num_actions < 1:
            raise ConfigError(
                f"agent needs at least one state and one action, got {num_states}x{num_actions}"
            )
        if not 0.0 < learning_rate <= 1.0:
            raise ConfigError(f"learning_rate must be in (0, 1], got {learning_rate}")
        if not 0.0 <= discount_factor <= 1.0:
            raise ConfigError(f"discount_factor must be in [0, 1], got {discount_factor}")
        if not 0.0 <= exploration_rate <= 1.0:
            raise ConfigError(f"exploration_rate must be in [0, 1], got {exploration_rate}")

        self.num_states = num_states
        self.num_actions = num_actions
        self.learning_rate = learning_rate
        self.discount_factor = discount_factor
        self.exploration_rate = exploration_rate
        self.rng = rng or SeededRNG()
        self._q_table = np.zeros((num_states, num_actions), dtype=np.float64)

    @classmethod
    def from_config(cls, config: RLConfig) -> "QLearningAgent":
        """Create an agent sized for the configured grid."""
        return cls(
            num_states=config.grid_size * config.grid_size,
            num_actions=NUM_ACTIONS,
            learning_rate=config.learning_rate,
            discount_factor=config.discount_factor,
            exploration_rate=config.exploration_rate,
            rng=SeededRNG(config.seed),
        )

    @property
    def q_table(self) -> np.ndarray:
        """Read-only view of the value table."""
        view = self._q_table.view()
        view.flags.writeable = False
        return view

    def reset(self):
        """Zero the value table."""
        self._q_table.fill(0.0)

    def _state_index(self, encoded_state: np.ndarray) -> int:
        if np.asarray(encoded_state).shape != (self.num_states,):
            raise InvalidEncodingError(
                f"expected a state vector of length {self.num_states}, "
                f"got shape {np.asarray(encoded_state).shape}"
            )
        return decode_one_hot(encoded_state)

    def q_values(self, state_index: int) -> np.ndarray:
        """Copy of the value row for one state."""
        return self._q_table[state_index].copy()

    def best_action(self, state_index: int) -> int:
        """Greedy action for a state; ties go to the lowest action index."""
        # np.argmax returns the first maximum
        return int(np.argmax(self._q_table[state_index]))

    def choose_action(self, encoded_state: np.ndarray) -> int:
        """Select an action with the epsilon-greedy policy."""
        state_index = self._state_index(encoded_state)
        if self.rng.random() < self.exploration_rate:
            return self.rng.randrange(self.num_actions)
        return self.best_action(state_index)

    def learn(self, encoded_state: np.ndarray, action: int, reward: float,
              encoded_next_state: np.ndarray) -> None:
        """Apply the one-step Q-learning update in place."""
        if not 0 <= action < self.num_actions:
            raise InvalidActionError(f"action must be in [0, {self.num_actions}), got {action}")
        state_index = self._state_index(encoded_state)
        next_index = self._state_index(encoded_next_state)

        current_q = self._q_table[state_index, action]
        next_q_max = self._q_table[next_index].max()
        target = reward + self.discount_factor * next_q_max
        self._q_table[state_index, action] = current_q + self.learning_rate * (target - current_q)

    def greedy_policy(self) -> np.ndarray:
        """Best action for every state, as an int array of length num_states."""
        return np.argmax(self._q_table, axis=1).astype(np.int64)
