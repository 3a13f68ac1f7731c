"""Reward-per-episode chart for headless runs."""

from collections import deque
from typing import Iterable, Sequence

import numpy as np


def moving_average(xs: Iterable[float], k: int = 100) -> np.ndarray:
    """Trailing mean over at most the last ``k`` values."""
    dq, out, s = deque(), [], 0.0
    for x in xs:
        dq.append(x)
        s += x
        if len(dq) > k:
            s -= dq.popleft()
        out.append(s / len(dq))
    return np.array(out)


def save_reward_plot(rewards: Sequence[float], path: str, title: str = "Q-Learning Performance Over Time",
                     window: int = 50) -> None:
    """Plot total reward per episode with a moving average and save it to ``path``."""
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots()
    ax.set_title(title)
    ax.set_xlabel("Episode")
    ax.set_ylabel("Total Reward")
    ax.plot(rewards, linewidth=0.8, alpha=0.5, label="Reward")
    ax.plot(moving_average(rewards, k=window), linewidth=1.5, label=f"{window}-episode average")
    ax.legend()
    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)
