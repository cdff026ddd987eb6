import pytest
from transitions import MachineError

from lovestruck.fsm import SessionFSM


def test_loads_states_from_yaml():
    fsm = SessionFSM()
    assert fsm.state == "idle"
    assert set(fsm.machine.states) == {"idle", "countdown", "review"}


def test_review_requires_complete_session():
    frames = []
    fsm = SessionFSM(frame_count=lambda: len(frames), required_frames=3)
    fsm.start()

    frames.extend([1, 2])
    assert fsm.finish() is False
    assert fsm.state == "countdown"

    frames.append(3)
    assert fsm.finish() is True
    assert fsm.state == "review"


def test_reset_from_any_state():
    fsm = SessionFSM(frame_count=lambda: 3)
    fsm.start()
    fsm.finish()
    fsm.reset()
    assert fsm.state == "idle"


def test_invalid_trigger_raises():
    fsm = SessionFSM()
    with pytest.raises(MachineError):
        fsm.finish()


def test_enter_callbacks_fire():
    entered = []
    fsm = SessionFSM(
        callbacks={
            "on_enter_countdown": lambda: entered.append("countdown"),
            "on_exit_countdown": lambda: entered.append("left countdown"),
        },
        frame_count=lambda: 3,
    )
    fsm.start()
    fsm.finish()
    assert entered == ["countdown", "left countdown"]


@pytest.mark.parametrize("callbacks", [
    {"on_enter_countdown": "not callable"},
    {"enter_countdown": lambda: None},
    {"on_enter_capturing": lambda: None},
])
def test_bad_callbacks_rejected(callbacks):
    with pytest.raises(ValueError):
        SessionFSM(callbacks=callbacks)
