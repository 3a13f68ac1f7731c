from gridq.app.fsm import RunState, RunStateMachine


def test_starts_idle():
    fsm = RunStateMachine()
    assert fsm.is_idle()
    assert fsm.can_start()
    assert not fsm.is_active()


def test_training_lifecycle():
    fsm = RunStateMachine()
    assert fsm.start_training()
    assert fsm.is_training() and fsm.is_active()
    assert fsm.pause()
    assert fsm.is_paused() and fsm.is_active()
    assert fsm.resume()
    assert fsm.finish()
    assert fsm.current_state == RunState.FINISHED
    assert fsm.can_start()
    assert fsm.start_training()


def test_invalid_transitions_are_refused():
    fsm = RunStateMachine()
    assert not fsm.pause()
    assert not fsm.finish()
    assert not fsm.resume()
    assert fsm.is_idle()

    fsm.start_training()
    fsm.fail_error()
    assert not fsm.start_training()
    assert fsm.reset_to_idle()


def test_callbacks_fire_in_order():
    events = []
    fsm = RunStateMachine()
    fsm.on_state_exit(RunState.IDLE, lambda ctx: events.append(("exit", ctx)))
    fsm.on_transition(RunState.IDLE, RunState.TRAINING,
                      lambda a, b, ctx: events.append(("transition", a, b)))
    fsm.on_state_enter(RunState.TRAINING, lambda ctx: events.append(("enter", ctx)))

    fsm.start_training({"episodes": 3})
    assert events == [
        ("exit", {"episodes": 3}),
        ("transition", RunState.IDLE, RunState.TRAINING),
        ("enter", {"episodes": 3}),
    ]


def test_state_descriptions():
    fsm = RunStateMachine()
    assert "Ready" in fsm.get_state_description()
    fsm.start_training()
    assert "Training" in fsm.get_state_description()


def test_paused_run_can_finish():
    fsm = RunStateMachine()
    fsm.start_training()
    fsm.pause()
    assert fsm.finish()
    assert fsm.current_state == RunState.FINISHED
