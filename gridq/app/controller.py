"""Main application controller connecting UI and Q-learning domain logic."""

import logging
import time
from typing import List, Optional

import numpy as np
from PySide6.QtCore import QObject, QThread, QTimer, Signal

from ..domain.environment import GridEnvironment
from ..domain.errors import GridQError
from ..domain.qlearning import QLearningAgent
from ..domain.runner import EpisodeRunner
from ..domain.types import RLConfig, State, TrainingResult
from .fsm import RunState, RunStateMachine

logger = logging.getLogger(__name__)


class TrainingWorker(QObject):
    """Worker that runs whole episodes on a QThread without blocking the UI."""

    progress_updated = Signal(int, int)  # current_episode, total_episodes
    training_finished = Signal(object)  # TrainingResult
    error_occurred = Signal(str)

    def __init__(self, runner: EpisodeRunner, episodes: int):
        super().__init__()
        self.runner = runner
        self.episodes = episodes
        self.should_stop = False
        self.is_paused = False

    def stop(self):
        self.should_stop = True

    def pause(self):
        self.is_paused = True

    def resume(self):
        self.is_paused = False

    def run(self):
        """Run training, checking for stop/pause between episodes."""
        result = TrainingResult()
        try:
            for episode_index in range(self.episodes):
                if self.should_stop:
                    break

                while self.is_paused and not self.should_stop:
                    time.sleep(0.01)

                if self.should_stop:
                    break

                result.episodes.append(self.runner.run_episode(episode_index))
                self.progress_updated.emit(episode_index + 1, self.episodes)

            if not self.should_stop:
                self.training_finished.emit(result)

        except Exception as e:
            logger.exception("Background training failed")
            if not self.should_stop:
                self.error_occurred.emit(str(e))

        logger.debug("TrainingWorker.run() completed (stopped: %s)", self.should_stop)


class GridQController(QObject):
    """
    Controller that owns the run (agent, environment, runner) and exposes it to the UI.

    Signals:
        state_changed: Emitted when the run state changes
        state_updated: Emitted with the agent's current State once per step
        episode_completed: Emitted with (episode_index, step_count, total_reward)
        training_progress: Emitted with (current_episode, total_episodes)
        training_completed: Emitted with the TrainingResult when a run finishes
        path_found: Emitted with the greedy path (list of State)
        grid_updated: Emitted when the grid needs to be redrawn
        error_occurred: Emitted with an error message
    """

    state_changed = Signal(object)  # RunState
    state_updated = Signal(object)  # State
    episode_completed = Signal(int, int, float)
    training_progress = Signal(int, int)
    training_completed = Signal(object)  # TrainingResult
    path_found = Signal(object)  # List[State]
    grid_updated = Signal()
    error_occurred = Signal(str)

    def __init__(self, config: Optional[RLConfig] = None):
        super().__init__()

        self._config = (config or RLConfig()).validate()
        self._state_machine = RunStateMachine()
        self._env: GridEnvironment
        self._agent: QLearningAgent
        self._runner: EpisodeRunner
        self._result = TrainingResult()

        # Background training thread
        self._training_thread: Optional[QThread] = None
        self._training_worker: Optional[TrainingWorker] = None

        # Timer for visual training
        self._timer = QTimer()
        self._timer.timeout.connect(self._on_timer_tick)

        self._visual_next_episode = 0
        self._visual_total_episodes = 0

        self._setup_state_callbacks()
        self._build_run()

    def _setup_state_callbacks(self):
        for state in RunState:
            self._state_machine.on_state_enter(state, lambda context, s=state: self.state_changed.emit(s))

    def _build_run(self):
        """Create a fresh environment, agent and runner from the current config."""
        visual = self._config.training_mode == "visual"
        self._env = GridEnvironment.from_config(self._config)
        self._agent = QLearningAgent.from_config(self._config)
        self._runner = EpisodeRunner(
            self._agent,
            self._env,
            max_steps=self._config.max_steps_per_episode,
            # Per-step updates are only animated in visual mode
            on_state_update=self.state_updated.emit if visual else None,
            on_episode_complete=self.episode_completed.emit,
            log_interval=self._config.log_interval,
        )
        self._result = TrainingResult()

    # Properties

    @property
    def config(self) -> RLConfig:
        return self._config

    @property
    def environment(self) -> GridEnvironment:
        return self._env

    @property
    def agent(self) -> QLearningAgent:
        return self._agent

    @property
    def result(self) -> TrainingResult:
        return self._result

    @property
    def current_state(self) -> RunState:
        return self._state_machine.current_state

    def q_table_snapshot(self) -> Optional[np.ndarray]:
        """Copy of the value table, or None while a background worker is updating it."""
        if self._config.training_mode == "background" and self._state_machine.is_active():
            return None
        return self._agent.q_table.copy()

    # Configuration

    def update_config(self, **changes) -> bool:
        """Change configuration values. Only allowed while no run is active."""
        if self._state_machine.is_active():
            return False
        try:
            new_config = self._config.replace(**changes)
        except GridQError as e:
            self.error_occurred.emit(str(e))
            return False

        grid_changed = new_config.grid_size != self._config.grid_size
        self._config = new_config
        self._build_run()
        if grid_changed:
            self.grid_updated.emit()
        return True

    def set_step_delay(self, delay_ms: int):
        """Change the animation delay. Takes effect immediately, even mid-run."""
        self._config.visual_step_delay = max(0, delay_ms)
        self._timer.setInterval(self._config.visual_step_delay)

    # Training control

    def can_start_training(self) -> bool:
        return self._state_machine.can_start()

    def start_training(self, episodes: Optional[int] = None) -> bool:
        """Start a fresh run (background or visual based on config)."""
        if not self.can_start_training():
            return False

        episodes = self._config.num_episodes if episodes is None else episodes
        self._build_run()
        logger.info("Starting %s training: %d episodes on a %dx%d grid (%s reward)",
                    self._config.training_mode, episodes, self._config.grid_size,
                    self._config.grid_size, self._config.reward_policy)

        if self._config.training_mode == "visual":
            return self._start_visual_training(episodes)
        return self._start_background_training(episodes)

    def _start_background_training(self, episodes: int) -> bool:
        try:
            self._cleanup_training_thread()

            self._training_thread = QThread()
            self._training_thread.setObjectName("GridQ-TrainingThread")

            self._training_worker = TrainingWorker(self._runner, episodes)
            self._training_worker.moveToThread(self._training_thread)

            self._training_worker.progress_updated.connect(self.training_progress)
            self._training_worker.training_finished.connect(self._on_training_finished)
            self._training_worker.training_finished.connect(self._cleanup_training_thread)
            self._training_worker.error_occurred.connect(self._on_training_error)
            self._training_thread.started.connect(self._training_worker.run)
            self._training_thread.finished.connect(self._cleanup_training_thread)

            self._state_machine.start_training()
            self._training_thread.start()
            return True

        except Exception as e:
            logger.exception("Failed to start background training")
            self.error_occurred.emit(f"Failed to start background training: {e}")
            return False

    def _start_visual_training(self, episodes: int) -> bool:
        self._visual_next_episode = 0
        self._visual_total_episodes = episodes
        self._state_machine.start_training()

        if episodes == 0:
            self._on_training_finished(self._result)
            return True

        self._runner.start_episode(self._visual_next_episode)
        self._timer.setInterval(self._config.visual_step_delay)
        self._timer.start()
        return True

    def _on_timer_tick(self):
        """Advance the visual run by one step."""
        if self._visual_next_episode >= self._visual_total_episodes:
            self._timer.stop()
            return

        try:
            if not self._runner.in_episode:
                self._runner.start_episode(self._visual_next_episode)

            record = self._runner.step()
            if record is None:
                return

            self._result.episodes.append(record)
            self._visual_next_episode += 1
            self.training_progress.emit(self._visual_next_episode, self._visual_total_episodes)

            if self._visual_next_episode >= self._visual_total_episodes:
                self._timer.stop()
                self._on_training_finished(self._result)

        except Exception as e:
            logger.exception("Visual training step failed")
            self._timer.stop()
            self._runner.abort_episode()
            self._on_training_error(str(e))

    def step_visual_training(self) -> bool:
        """Advance one step by hand while the visual run is paused."""
        if self._config.training_mode != "visual" or not self._state_machine.is_paused():
            return False
        if self._visual_next_episode >= self._visual_total_episodes:
            return False
        self._on_timer_tick()
        return True

    def pause_training(self) -> bool:
        if self._config.training_mode == "background" and self._training_worker:
            self._training_worker.pause()
        elif self._config.training_mode == "visual":
            self._timer.stop()
        return self._state_machine.pause()

    def resume_training(self) -> bool:
        if not self._state_machine.resume():
            return False
        if self._config.training_mode == "background" and self._training_worker:
            self._training_worker.resume()
        elif self._config.training_mode == "visual" and self._visual_next_episode < self._visual_total_episodes:
            self._timer.start(self._config.visual_step_delay)
        return True

    def stop_training(self) -> bool:
        """Stop training completely."""
        if self._training_worker:
            self._training_worker.stop()
            if self._training_thread and self._training_thread.isRunning():
                self._training_thread.quit()
                if not self._training_thread.wait(2000):
                    logger.warning("Training thread did not stop within 2s, terminating")
                    self._training_thread.terminate()
                    self._training_thread.wait(500)
        self._timer.stop()
        self._runner.abort_episode()
        return self._state_machine.reset_to_idle()

    def reset_algorithm(self):
        """Discard the learned values and return to idle."""
        if self._state_machine.is_active():
            self.stop_training()
        self._build_run()
        if not self._state_machine.is_idle():
            self._state_machine.reset_to_idle()
        self.grid_updated.emit()

    def show_greedy_path(self) -> Optional[List[State]]:
        """Follow the learned policy from the start and publish the path."""
        if self._state_machine.is_active():
            return None
        path = self._runner.greedy_path()
        self.path_found.emit(path)
        return path

    def _on_training_finished(self, result: TrainingResult):
        self._result = result
        logger.info("Training finished: %d episodes, success rate %.1f%%, average reward %.2f",
                    result.total_episodes, 100.0 * result.success_rate, result.average_reward)
        self._state_machine.finish()
        self.training_completed.emit(result)
        self.grid_updated.emit()

    def _on_training_error(self, message: str):
        self._state_machine.fail_error()
        self.error_occurred.emit(message)

    def get_statistics(self) -> dict:
        """Summary values for the statistics panel."""
        result = self._result
        recent = result.episodes[-100:]
        return {
            "state_description": self._state_machine.get_state_description(),
            "episodes_completed": result.total_episodes,
            "success_rate": result.success_rate,
            "recent_success_rate": (sum(1 for ep in recent if ep.reached_goal) / len(recent)) if recent else 0.0,
            "average_reward": result.average_reward,
            "last_reward": result.episodes[-1].total_reward if result.episodes else None,
            "last_steps": result.episodes[-1].steps if result.episodes else None,
            "epsilon": self._agent.exploration_rate,
        }

    # Cleanup

    def _cleanup_training_thread(self):
        """Release the worker thread once it has finished."""
        if self._training_thread is not None:
            if self._training_thread.isRunning():
                self._training_thread.quit()
                self._training_thread.wait(1000)
            self._training_thread.deleteLater()
            self._training_thread = None
        if self._training_worker is not None:
            self._training_worker.deleteLater()
            self._training_worker = None

    def cleanup(self):
        """Stop timers and threads before the application exits."""
        self._timer.stop()
        if self._training_worker:
            self._training_worker.stop()
        self._cleanup_training_thread()
