"""Main window for the grid Q-learning demo."""

import logging
import time

from PySide6.QtWidgets import (
    QMainWindow, QVBoxLayout, QHBoxLayout, QWidget, QPushButton,
    QLabel, QSlider, QComboBox, QCheckBox, QSpinBox, QDoubleSpinBox,
    QButtonGroup, QRadioButton, QStatusBar, QGroupBox, QTextEdit, QProgressBar
)
from PySide6.QtCore import Qt
from PySide6.QtGui import QKeySequence, QShortcut, QCloseEvent

from ..app.controller import GridQController
from ..app.fsm import RunState
from .grid_view import GridView
from .reward_chart import RewardChart

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Main application window: controls, reward chart, grid and statistics."""

    def __init__(self, controller: GridQController):
        super().__init__()
        self.controller = controller

        self.setWindowTitle("Grid Q-Learning")
        self.setMinimumSize(1000, 800)

        self.training_start_time = None
        self.current_episode = 0
        self.total_episodes = 0
        self._recent_lines = []

        self._create_ui()
        self._setup_connections()
        self._setup_shortcuts()

        self._update_button_states()
        self._update_statistics_display()

    def _create_ui(self):
        central_widget = QWidget()
        self.setCentralWidget(central_widget)

        main_layout = QVBoxLayout(central_widget)
        main_layout.addLayout(self._create_controls())

        content_layout = QHBoxLayout()

        left_layout = QVBoxLayout()
        self.reward_chart = RewardChart()
        left_layout.addWidget(self.reward_chart, 2)
        self.grid_view = GridView(self.controller)
        left_layout.addWidget(self.grid_view, 3)
        content_layout.addLayout(left_layout, 3)

        content_layout.addWidget(self._create_statistics_panel(), 1)
        main_layout.addLayout(content_layout, 1)

        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)
        self._update_status_message()

    def _create_controls(self) -> QHBoxLayout:
        config = self.controller.config
        layout = QHBoxLayout()

        # Run controls
        run_group = QGroupBox("Q-Learning")
        run_layout = QVBoxLayout(run_group)

        mode_layout = QHBoxLayout()
        mode_layout.addWidget(QLabel("Training Mode:"))
        self.mode_button_group = QButtonGroup()
        self.visual_radio = QRadioButton("Visual")
        self.background_radio = QRadioButton("Background")
        self.visual_radio.setChecked(config.training_mode == "visual")
        self.background_radio.setChecked(config.training_mode == "background")
        self.mode_button_group.addButton(self.visual_radio)
        self.mode_button_group.addButton(self.background_radio)
        mode_layout.addWidget(self.visual_radio)
        mode_layout.addWidget(self.background_radio)
        mode_layout.addStretch()
        run_layout.addLayout(mode_layout)

        speed_layout = QHBoxLayout()
        speed_layout.addWidget(QLabel("Step delay:"))
        self.speed_slider = QSlider(Qt.Horizontal)
        self.speed_slider.setRange(0, 500)
        self.speed_slider.setValue(config.visual_step_delay)
        speed_layout.addWidget(self.speed_slider)
        self.speed_label = QLabel(f"{config.visual_step_delay}ms")
        self.speed_label.setMinimumWidth(50)
        speed_layout.addWidget(self.speed_label)
        run_layout.addLayout(speed_layout)

        buttons_layout = QHBoxLayout()
        self.train_btn = QPushButton("Train")
        self.pause_btn = QPushButton("Pause")
        self.step_btn = QPushButton("Step")
        self.path_btn = QPushButton("Greedy Path")
        self.reset_btn = QPushButton("Reset")
        for btn in [self.train_btn, self.pause_btn, self.step_btn, self.path_btn, self.reset_btn]:
            buttons_layout.addWidget(btn)
        run_layout.addLayout(buttons_layout)

        layout.addWidget(run_group)

        # Parameters
        params_group = QGroupBox("Parameters")
        params_layout = QHBoxLayout(params_group)

        self.grid_size_spin = QSpinBox()
        self.grid_size_spin.setRange(1, 30)
        self.grid_size_spin.setValue(config.grid_size)

        self.episodes_spin = QSpinBox()
        self.episodes_spin.setRange(1, 100000)
        self.episodes_spin.setValue(config.num_episodes)

        self.max_steps_spin = QSpinBox()
        self.max_steps_spin.setRange(1, 10000)
        self.max_steps_spin.setValue(config.max_steps_per_episode)

        self.lr_spin = QDoubleSpinBox()
        self.lr_spin.setRange(0.01, 1.0)
        self.lr_spin.setSingleStep(0.05)
        self.lr_spin.setValue(config.learning_rate)

        self.gamma_spin = QDoubleSpinBox()
        self.gamma_spin.setRange(0.0, 1.0)
        self.gamma_spin.setSingleStep(0.05)
        self.gamma_spin.setValue(config.discount_factor)

        self.eps_spin = QDoubleSpinBox()
        self.eps_spin.setRange(0.0, 1.0)
        self.eps_spin.setSingleStep(0.05)
        self.eps_spin.setValue(config.exploration_rate)

        self.reward_combo = QComboBox()
        self.reward_combo.addItems(["shaped", "sparse"])
        self.reward_combo.setCurrentText(config.reward_policy)

        for label, widget in [("Grid:", self.grid_size_spin), ("Episodes:", self.episodes_spin),
                              ("Max steps:", self.max_steps_spin), ("α:", self.lr_spin),
                              ("γ:", self.gamma_spin), ("ε:", self.eps_spin),
                              ("Reward:", self.reward_combo)]:
            params_layout.addWidget(QLabel(label))
            params_layout.addWidget(widget)

        self.show_q_values_cb = QCheckBox("Show best actions")
        params_layout.addWidget(self.show_q_values_cb)

        layout.addWidget(params_group, 1)
        return layout

    def _create_statistics_panel(self) -> QGroupBox:
        stats_group = QGroupBox("Training Statistics")
        stats_layout = QVBoxLayout(stats_group)

        self.progress_bar = QProgressBar()
        self.progress_bar.setVisible(False)
        stats_layout.addWidget(self.progress_bar)

        self.current_state_label = QLabel("State: Idle")
        self.episodes_label = QLabel("Episodes: 0")
        self.success_rate_label = QLabel("Success Rate: 0%")
        self.avg_reward_label = QLabel("Average Reward: --")
        self.last_episode_label = QLabel("Last Episode: --")
        self.epsilon_label = QLabel("Epsilon: --")
        self.elapsed_label = QLabel("Elapsed: --")

        for label in [self.current_state_label, self.episodes_label, self.success_rate_label,
                      self.avg_reward_label, self.last_episode_label, self.epsilon_label,
                      self.elapsed_label]:
            stats_layout.addWidget(label)

        self.stats_display = QTextEdit()
        self.stats_display.setReadOnly(True)
        stats_layout.addWidget(self.stats_display, 1)

        return stats_group

    def _setup_connections(self):
        self.controller.state_changed.connect(self._on_state_changed)
        self.controller.episode_completed.connect(self._on_episode_completed)
        self.controller.training_progress.connect(self._on_training_progress)
        self.controller.training_completed.connect(self._on_training_completed)
        self.controller.path_found.connect(self._on_path_found)
        self.controller.grid_updated.connect(self._on_grid_updated)
        self.controller.error_occurred.connect(self._on_error_occurred)

        self.train_btn.clicked.connect(self._on_train_clicked)
        self.pause_btn.clicked.connect(self._on_pause_clicked)
        self.step_btn.clicked.connect(self._on_step_clicked)
        self.path_btn.clicked.connect(self._on_path_clicked)
        self.reset_btn.clicked.connect(self._on_reset_clicked)

        self.speed_slider.valueChanged.connect(self._on_speed_changed)
        self.show_q_values_cb.toggled.connect(self.grid_view.set_show_q_values)
        self.visual_radio.toggled.connect(lambda checked: self._update_button_states())

    def _setup_shortcuts(self):
        QShortcut(QKeySequence("Q"), self, self.close)
        QShortcut(QKeySequence("T"), self, self._on_train_clicked)
        QShortcut(QKeySequence("Space"), self, self._on_pause_clicked)
        QShortcut(QKeySequence("R"), self, self._on_reset_clicked)

    # Controller signal handlers

    def _on_state_changed(self, state: RunState):
        self._update_button_states()
        self._update_statistics_display()
        if state == RunState.TRAINING and self.training_start_time is None:
            self.training_start_time = time.time()
        elif state in (RunState.IDLE, RunState.FINISHED, RunState.ERROR):
            self.progress_bar.setVisible(False)

    def _on_episode_completed(self, episode_index: int, steps: int, total_reward: float):
        self.reward_chart.add_episode(episode_index, steps, total_reward)
        self._recent_lines.append(f"Ep {episode_index}: {steps} steps, R={total_reward:.2f}")
        self._recent_lines = self._recent_lines[-10:]

    def _on_training_progress(self, current_episode: int, total_episodes: int):
        self.current_episode = current_episode
        self.total_episodes = total_episodes
        if self.progress_bar.maximum() != total_episodes:
            self.progress_bar.setMaximum(total_episodes)
        self.progress_bar.setValue(current_episode)
        self._update_statistics_display()
        self._update_status_message()

    def _on_training_completed(self, result):
        elapsed_time = ""
        if self.training_start_time is not None:
            elapsed = time.time() - self.training_start_time
            elapsed_time = f" in {int(elapsed // 60)}m {int(elapsed % 60)}s"
        self.training_start_time = None
        self._update_statistics_display()
        self.status_bar.showMessage(
            f"Training completed{elapsed_time}. Success rate: {result.success_rate:.1%} "
            f"({result.successful_episodes}/{result.total_episodes})"
        )

    def _on_path_found(self, path):
        if path and self.controller.environment.is_goal(path[-1]):
            self.status_bar.showMessage(f"Greedy path reaches the goal in {len(path) - 1} steps")
        else:
            self.status_bar.showMessage("Greedy path does not reach the goal - more training may be needed")

    def _on_grid_updated(self):
        self.grid_view.fit_in_view()
        self._update_button_states()

    def _on_error_occurred(self, error_msg: str):
        self.status_bar.showMessage(f"Error: {error_msg}")

    # Button handlers

    def _on_train_clicked(self):
        if not self.controller.can_start_training():
            return
        applied = self.controller.update_config(
            grid_size=self.grid_size_spin.value(),
            num_episodes=self.episodes_spin.value(),
            max_steps_per_episode=self.max_steps_spin.value(),
            learning_rate=self.lr_spin.value(),
            discount_factor=self.gamma_spin.value(),
            exploration_rate=self.eps_spin.value(),
            reward_policy=self.reward_combo.currentText(),
            training_mode="visual" if self.visual_radio.isChecked() else "background",
            visual_step_delay=self.speed_slider.value(),
        )
        if not applied:
            return

        self.reward_chart.clear()
        self._recent_lines = []
        self.current_episode = 0
        self.total_episodes = self.episodes_spin.value()
        self.training_start_time = time.time()
        self.progress_bar.setMaximum(self.total_episodes)
        self.progress_bar.setValue(0)
        self.progress_bar.setVisible(True)
        self.controller.start_training(self.total_episodes)

    def _on_pause_clicked(self):
        if self.controller.current_state == RunState.TRAINING:
            self.controller.pause_training()
        elif self.controller.current_state == RunState.PAUSED:
            self.controller.resume_training()

    def _on_step_clicked(self):
        self.controller.step_visual_training()

    def _on_path_clicked(self):
        self.controller.show_greedy_path()

    def _on_reset_clicked(self):
        self.controller.reset_algorithm()
        self.reward_chart.clear()
        self._recent_lines = []
        self.current_episode = 0
        self.total_episodes = 0
        self.training_start_time = None
        self._update_statistics_display()

    def _on_speed_changed(self, value: int):
        self.speed_label.setText(f"{value}ms")
        self.controller.set_step_delay(value)

    # Display updates

    def _update_button_states(self):
        state = self.controller.current_state
        is_training = state == RunState.TRAINING
        is_paused = state == RunState.PAUSED
        is_visual_mode = self.visual_radio.isChecked()

        can_start = self.controller.can_start_training()
        self.train_btn.setEnabled(can_start)
        self.pause_btn.setEnabled(is_training or is_paused)
        self.pause_btn.setText("Resume" if is_paused else "Pause")
        self.step_btn.setEnabled(is_paused and is_visual_mode)
        self.path_btn.setEnabled(can_start)

        for widget in [self.grid_size_spin, self.episodes_spin, self.max_steps_spin, self.lr_spin,
                       self.gamma_spin, self.eps_spin, self.reward_combo,
                       self.visual_radio, self.background_radio]:
            widget.setEnabled(can_start)

        self._update_status_message()

    def _update_status_message(self):
        state = self.controller.current_state
        if state == RunState.TRAINING:
            mode = "Visual" if self.visual_radio.isChecked() else "Background"
            if self.current_episode > 0 and self.total_episodes > 0:
                progress = (self.current_episode / self.total_episodes) * 100
                self.status_bar.showMessage(f"{mode} training in progress... ({progress:.1f}% complete)")
            else:
                self.status_bar.showMessage(f"{mode} training starting...")
        elif state == RunState.PAUSED:
            self.status_bar.showMessage("Training paused - Click 'Resume' to continue or 'Step' to advance")
        elif state == RunState.IDLE:
            self.status_bar.showMessage("Ready - Click 'Train' to start Q-Learning | Press 'Q' to quit")

    def _update_statistics_display(self):
        stats = self.controller.get_statistics()

        self.current_state_label.setText(f"State: {stats['state_description']}")
        self.episodes_label.setText(f"Episodes: {stats['episodes_completed']}")
        self.success_rate_label.setText(
            f"Success Rate: {stats['success_rate']:.1%} (last 100: {stats['recent_success_rate']:.1%})"
        )
        self.avg_reward_label.setText(f"Average Reward: {stats['average_reward']:.2f}")
        if stats["last_reward"] is not None:
            self.last_episode_label.setText(
                f"Last Episode: {stats['last_steps']} steps, R={stats['last_reward']:.2f}"
            )
        else:
            self.last_episode_label.setText("Last Episode: --")
        self.epsilon_label.setText(f"Epsilon: {stats['epsilon']:.3f}")

        if self.training_start_time is not None:
            elapsed = time.time() - self.training_start_time
            self.elapsed_label.setText(f"Elapsed: {int(elapsed // 60):02d}:{int(elapsed % 60):02d}")
        else:
            self.elapsed_label.setText("Elapsed: --")

        if self._recent_lines:
            self.stats_display.setPlainText("Recent Episodes:\n" + "\n".join(self._recent_lines))
        else:
            self.stats_display.setPlainText("No training data yet.\n\nClick 'Train' to start learning.")

    def closeEvent(self, event: QCloseEvent):
        """Stop the run before the window closes."""
        try:
            self.controller.cleanup()
        except RuntimeError as e:
            # Qt objects may already be deleted during shutdown
            logger.warning("Cleanup error on close: %s", e)
        event.accept()
