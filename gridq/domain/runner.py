"""Episode runner driving the agent/environment interaction loop."""

import logging
from typing import Callable, List, Optional

from .environment import GridEnvironment
from .errors import ConfigError
from .qlearning import QLearningAgent
from .types import Action, EpisodeRecord, State, TrainingResult

logger = logging.getLogger(__name__)

StateHook = Callable[[State], None]
EpisodeHook = Callable[[int, int, float], None]


class EpisodeRunner:
    """Runs episodes of a fixed step budget over an injected agent and environment.

    The runner holds no learned state. Collaborators observe the run through
    two hooks: ``on_state_update(state)`` once per step with the current
    position, and ``on_episode_complete(episode_index, step_count,
    total_reward)`` once per finished episode.

    Episodes can be run whole with ``run_episode``/``run``, or one step at a
    time with ``start_episode``/``step`` so a caller can pace them.
    """

    def __init__(self, agent: QLearningAgent, env: GridEnvironment, max_steps: int = 100,
                 on_state_update: Optional[StateHook] = None,
                 on_episode_complete: Optional[EpisodeHook] = None,
                 log_interval: int = 100):
        if max_steps < 1:
            raise ConfigError(f"max_steps must be >= 1, got {max_steps}")
        self.agent = agent
        self.env = env
        self.max_steps = max_steps
        self.on_state_update = on_state_update
        self.on_episode_complete = on_episode_complete
        self.log_interval = log_interval

        self._episode_index = 0
        self._state: Optional[State] = None
        self._total_reward = 0.0
        self._steps = 0

    @property
    def in_episode(self) -> bool:
        return self._state is not None

    @property
    def current_state(self) -> Optional[State]:
        return self._state

    @property
    def episode_index(self) -> int:
        return self._episode_index

    def start_episode(self, episode_index: int) -> State:
        """Reset to the start cell and begin a new episode."""
        self._episode_index = episode_index
        self._state = self.env.start
        self._total_reward = 0.0
        self._steps = 0
        return self._state

    def step(self) -> Optional[EpisodeRecord]:
        """Advance the current episode by one step.

        Returns the episode record once the goal is reached or the step
        budget is spent, otherwise None.
        """
        if self._state is None:
            raise RuntimeError("step() called with no episode in progress")

        state = self._state
        if self.on_state_update is not None:
            self.on_state_update(state)

        encoded = self.env.encode(state)
        action = self.agent.choose_action(encoded)
        next_state = self.env.move(state, Action(action))
        reward = self.env.reward(state, next_state)
        self.agent.learn(encoded, action, reward, self.env.encode(next_state))

        self._total_reward += reward
        self._state = next_state
        self._steps += 1

        if self.env.is_goal(next_state) or self._steps >= self.max_steps:
            return self._finish_episode()
        return None

    def abort_episode(self):
        """Drop the current episode without emitting a record."""
        self._state = None

    def _finish_episode(self) -> EpisodeRecord:
        record = EpisodeRecord(
            episode=self._episode_index,
            steps=self._steps,
            total_reward=self._total_reward,
            reached_goal=self.env.is_goal(self._state),
        )
        self._state = None

        logger.debug("Episode %d: %d steps, reward %.2f, goal=%s",
                     record.episode, record.steps, record.total_reward, record.reached_goal)
        if self.on_episode_complete is not None:
            self.on_episode_complete(record.episode, record.steps, record.total_reward)
        return record

    def run_episode(self, episode_index: int = 0) -> EpisodeRecord:
        """Run one full episode."""
        self.start_episode(episode_index)
        try:
            while True:
                record = self.step()
                if record is not None:
                    return record
        except Exception:
            # Table updates already applied stay applied
            self.abort_episode()
            raise

    def run(self, num_episodes: int) -> TrainingResult:
        """Run ``num_episodes`` episodes and collect their records."""
        result = TrainingResult()
        for episode_index in range(num_episodes):
            result.episodes.append(self.run_episode(episode_index))

            if self.log_interval and (episode_index + 1) % self.log_interval == 0:
                recent = result.episodes[-self.log_interval:]
                successes = sum(1 for ep in recent if ep.reached_goal)
                logger.info("Episode %d: success rate %.1f%%, avg reward %.2f over last %d",
                            episode_index + 1, 100.0 * successes / len(recent),
                            sum(ep.total_reward for ep in recent) / len(recent), len(recent))
        return result

    def greedy_path(self, max_steps: Optional[int] = None) -> List[State]:
        """Follow the learned greedy policy from the start without learning.

        Returns the visited states, start included. Stops at the goal or
        after ``max_steps`` moves (defaults to the runner's step budget).
        """
        budget = self.max_steps if max_steps is None else max_steps
        state = self.env.start
        path = [state]
        for _ in range(budget):
            if self.env.is_goal(state):
                break
            action = self.agent.best_action(self.env.state_index(state))
            state = self.env.move(state, Action(action))
            path.append(state)
        return path
