import pytest

QtCore = pytest.importorskip("PySide6.QtCore")

from gridq.app.controller import GridQController
from gridq.app.fsm import RunState
from gridq.domain.types import RLConfig


@pytest.fixture(scope="module")
def qt_app():
    return QtCore.QCoreApplication.instance() or QtCore.QCoreApplication([])


def make_controller(**changes):
    params = dict(grid_size=10, num_episodes=1, max_steps_per_episode=3,
                  exploration_rate=0.0, seed=0, training_mode="visual")
    params.update(changes)
    return GridQController(RLConfig(**params))


def test_manual_step_through_last_episode_finishes_run(qt_app):
    controller = make_controller()
    completed = []
    controller.training_completed.connect(completed.append)

    assert controller.start_training()
    assert controller.pause_training()
    for _ in range(3):
        assert controller.step_visual_training()

    assert controller.current_state == RunState.FINISHED
    assert len(completed) == 1
    assert [ep.episode for ep in controller.result.episodes] == [0]
    controller.cleanup()


def test_no_episode_runs_past_the_budget(qt_app):
    controller = make_controller()
    controller.start_training()
    controller.pause_training()
    for _ in range(3):
        controller.step_visual_training()

    assert not controller.resume_training()
    assert not controller.step_visual_training()
    controller._on_timer_tick()

    assert controller.result.total_episodes == 1
    assert not controller._timer.isActive()
    controller.cleanup()


def test_visual_run_completes_on_timer_ticks(qt_app):
    controller = make_controller(num_episodes=2)
    controller.start_training()
    for _ in range(10):
        controller._on_timer_tick()

    assert controller.current_state == RunState.FINISHED
    assert [ep.episode for ep in controller.result.episodes] == [0, 1]
    controller.cleanup()


def test_q_table_snapshot_withheld_during_background_run(qt_app):
    controller = make_controller(training_mode="background")
    snapshot = controller.q_table_snapshot()
    assert snapshot is not None
    assert snapshot.flags.writeable

    controller._state_machine.start_training()
    assert controller.q_table_snapshot() is None

    controller._state_machine.finish()
    assert controller.q_table_snapshot().shape == (100, 4)


def test_q_table_snapshot_available_during_visual_run(qt_app):
    controller = make_controller()
    controller.start_training()
    assert controller.q_table_snapshot() is not None
    controller.cleanup()
