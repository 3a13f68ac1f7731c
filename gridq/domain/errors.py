"""Exceptions raised by the grid Q-learning domain."""


class GridQError(Exception):
    """Base class for all gridq errors."""


class ConfigError(GridQError, ValueError):
    """A configuration value is out of range or unknown."""


class InvalidEncodingError(GridQError, ValueError):
    """A state vector is not a valid one-hot encoding."""


class InvalidActionError(GridQError, ValueError):
    """An action index is outside the agent's action set."""
