"""Finite state machine for the training run lifecycle."""

from enum import Enum, auto
from typing import Callable, Dict, Optional


class RunState(Enum):
    """States of a training run."""
    IDLE = auto()
    TRAINING = auto()
    PAUSED = auto()
    FINISHED = auto()
    ERROR = auto()


class RunStateMachine:
    """State machine for managing a training run."""

    def __init__(self):
        self.current_state = RunState.IDLE
        self._enter_callbacks: Dict[RunState, Callable[[Optional[Dict]], None]] = {}
        self._exit_callbacks: Dict[RunState, Callable[[Optional[Dict]], None]] = {}
        self._transition_callbacks: Dict[tuple, Callable[[RunState, RunState, Optional[Dict]], None]] = {}

        # Define valid state transitions
        self._valid_transitions = {
            RunState.IDLE: {RunState.TRAINING},
            RunState.TRAINING: {RunState.PAUSED, RunState.FINISHED, RunState.ERROR, RunState.IDLE},
            RunState.PAUSED: {RunState.TRAINING, RunState.FINISHED, RunState.IDLE},
            RunState.FINISHED: {RunState.TRAINING, RunState.IDLE},
            RunState.ERROR: {RunState.IDLE},
        }

    def on_state_enter(self, state: RunState, callback: Callable[[Optional[Dict]], None]):
        """Register callback for state entry."""
        self._enter_callbacks[state] = callback

    def on_state_exit(self, state: RunState, callback: Callable[[Optional[Dict]], None]):
        """Register callback for state exit."""
        self._exit_callbacks[state] = callback

    def on_transition(self, from_state: RunState, to_state: RunState,
                      callback: Callable[[RunState, RunState, Optional[Dict]], None]):
        """Register callback for state transition."""
        self._transition_callbacks[(from_state, to_state)] = callback

    def can_transition(self, to_state: RunState) -> bool:
        """Check if transition to target state is valid."""
        return to_state in self._valid_transitions.get(self.current_state, set())

    def transition(self, to_state: RunState, context: Optional[Dict] = None) -> bool:
        """Attempt to transition to target state."""
        if not self.can_transition(to_state):
            return False

        from_state = self.current_state

        if from_state in self._exit_callbacks:
            self._exit_callbacks[from_state](context)

        transition_key = (from_state, to_state)
        if transition_key in self._transition_callbacks:
            self._transition_callbacks[transition_key](from_state, to_state, context)

        self.current_state = to_state

        if to_state in self._enter_callbacks:
            self._enter_callbacks[to_state](context)

        return True

    # Convenience methods for common transitions

    def start_training(self, context: Optional[Dict] = None) -> bool:
        return self.transition(RunState.TRAINING, context)

    def pause(self, context: Optional[Dict] = None) -> bool:
        return self.transition(RunState.PAUSED, context)

    def resume(self, context: Optional[Dict] = None) -> bool:
        """Resume training from paused state."""
        if self.current_state == RunState.PAUSED:
            return self.transition(RunState.TRAINING, context)
        return False

    def finish(self, context: Optional[Dict] = None) -> bool:
        return self.transition(RunState.FINISHED, context)

    def reset_to_idle(self, context: Optional[Dict] = None) -> bool:
        return self.transition(RunState.IDLE, context)

    def fail_error(self, context: Optional[Dict] = None) -> bool:
        return self.transition(RunState.ERROR, context)

    # State checking methods

    def is_idle(self) -> bool:
        return self.current_state == RunState.IDLE

    def is_training(self) -> bool:
        return self.current_state == RunState.TRAINING

    def is_paused(self) -> bool:
        return self.current_state == RunState.PAUSED

    def is_active(self) -> bool:
        """Check if a run is in progress (training or paused)."""
        return self.current_state in {RunState.TRAINING, RunState.PAUSED}

    def can_start(self) -> bool:
        """Check if a new run can be started."""
        return self.current_state in {RunState.IDLE, RunState.FINISHED}

    def get_state_description(self) -> str:
        """Get human-readable state description."""
        descriptions = {
            RunState.IDLE: "Ready - Click Train to start learning",
            RunState.TRAINING: "Training agent with Q-Learning",
            RunState.PAUSED: "Training paused",
            RunState.FINISHED: "Training finished",
            RunState.ERROR: "Error occurred during training",
        }
        return descriptions.get(self.current_state, "Unknown state")
