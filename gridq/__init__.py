"""Grid Q-Learning - a tabular Q-learning agent learning to cross a grid.

This package implements a Q-Learning agent, a deterministic grid world with
sparse or shaped rewards, an episode runner, and a PySide6 window that
animates the agent and charts the reward per episode.
"""

__version__ = "1.0.0"
