import random

import numpy as np
import pytest
from transitions import MachineError

from lovestruck.errors import CaptureError
from lovestruck.pipeline.catalog import PROMPTS
from lovestruck.pipeline.clock import ManualClock
from lovestruck.pipeline.controller import SequenceController

from .conftest import FIXED_DATE


@pytest.fixture
def controller(source, clock, rng, compositor):
    return SequenceController(source=source, clock=clock, compositor=compositor, rng=rng)


def run_shot(clock):
    """One full countdown, capture and settle delay."""
    clock.advance(4.0)


class TestSession:
    def test_starts_idle(self, controller):
        assert controller.state == "idle"
        assert controller.frames == ()
        assert controller.countdown is None

    def test_full_session_reaches_review_with_three_frames(self, controller, clock, source):
        controller.start()
        for _ in range(3):
            run_shot(clock)

        assert controller.state == "review"
        assert [f.position for f in controller.frames] == [0, 1, 2]
        assert [f.captured_at for f in controller.frames] == [3.0, 7.0, 11.0]
        assert source.reads == 3
        assert controller.strip.shape == (1570, 760, 3)
        assert clock.pending == 0

    def test_countdown_timeline(self, controller, clock):
        controller.start()
        assert controller.state == "countdown"
        assert controller.countdown == 3
        assert controller.prompt in PROMPTS
        assert controller.prompt_visible

        clock.advance(1.0)
        assert controller.countdown == 2
        assert controller.prompt_visible

        clock.advance(1.0)
        assert controller.countdown == 1
        assert not controller.prompt_visible  # last second shows only the count

        clock.advance(1.0)
        assert controller.countdown == 0
        assert len(controller.frames) == 1
        assert controller.flash

        clock.advance(0.15)
        assert not controller.flash

        clock.advance(0.8)
        assert controller.iteration == 0
        clock.advance(0.05)
        assert controller.iteration == 1
        assert controller.countdown == 3

    def test_review_only_after_settle_delay(self, controller, clock):
        controller.start()
        clock.advance(11.0)
        assert len(controller.frames) == 3
        assert controller.state == "countdown"

        clock.advance(1.0)
        assert controller.state == "review"
        assert controller.countdown is None
        assert controller.prompt is None

    def test_no_capture_in_review(self, controller, clock, source):
        controller.start()
        clock.advance(12.0)
        clock.advance(60.0)
        assert source.reads == 3
        assert len(controller.frames) == 3

    def test_single_countdown_timer(self, controller, clock):
        controller.start()
        for _ in range(11):
            # one countdown timer, plus the flash timer right after a capture
            assert clock.pending <= 2
            clock.advance(1.0)

    def test_frames_are_immutable(self, controller, clock):
        controller.start()
        clock.advance(3.0)
        frame = controller.frames[0]
        with pytest.raises(ValueError):
            frame.image[0, 0] = 0
        with pytest.raises(AttributeError):
            frame.position = 5

    def test_prompts_come_from_injected_rng(self, source, compositor):
        prompts = []
        for _ in range(2):
            clock = ManualClock()
            controller = SequenceController(source, clock, compositor=compositor, rng=random.Random(7))
            controller.start()
            seen = [controller.prompt]
            for _ in range(2):
                clock.advance(4.0)
                seen.append(controller.prompt)
            prompts.append(seen)
        assert prompts[0] == prompts[1]

    def test_on_change_notified(self, source, clock, compositor):
        states = []
        controller = SequenceController(source, clock, compositor=compositor,
                                        on_change=lambda c: states.append((c.state, c.countdown)))
        controller.start()
        clock.advance(12.0)
        assert states[0] == ("countdown", 3)
        assert states[-1] == ("review", None)


class TestStateGuards:
    def test_start_twice_is_rejected(self, controller, clock):
        controller.start()
        clock.advance(3.0)
        with pytest.raises(MachineError):
            controller.start()
        assert len(controller.frames) == 1

    def test_start_from_review_is_rejected(self, controller, clock):
        controller.start()
        clock.advance(12.0)
        with pytest.raises(MachineError):
            controller.start()
        assert controller.state == "review"
        assert len(controller.frames) == 3

    def test_reset_from_review(self, controller, clock):
        controller.start()
        clock.advance(12.0)
        controller.reset()
        assert controller.state == "idle"
        assert controller.frames == ()
        assert controller.strip is None

    def test_reset_from_idle(self, controller):
        controller.reset()
        assert controller.state == "idle"


class TestCancellation:
    def test_reset_cancels_pending_countdown(self, controller, clock, source):
        controller.start()
        clock.advance(2.5)
        controller.reset()

        assert clock.pending == 0
        assert controller.countdown is None
        clock.advance(30.0)
        assert source.reads == 0
        assert controller.frames == ()

    def test_restart_does_not_leak_old_frames(self, controller, clock, source):
        controller.start()
        clock.advance(2.5)
        controller.reset()
        controller.start()

        clock.advance(0.6)  # the superseded tick would have captured here
        assert controller.frames == ()

        clock.advance(12.0 - 0.6)
        assert controller.state == "review"
        assert [f.captured_at for f in controller.frames] == [5.5, 9.5, 13.5]
        assert source.reads == 3

    def test_restart_after_capture_drops_pending_settle(self, controller, clock):
        controller.start()
        clock.advance(3.05)  # frame 0 captured, flash and settle pending
        controller.reset()
        controller.start()

        clock.advance(1.0)
        assert controller.iteration == 0
        assert controller.frames == ()
        assert not controller.flash

    def test_stale_steps_dropped_even_if_not_cancelled(self, source, compositor):
        class LeakyHandle:
            def cancel(self):
                pass

        class LeakyClock(ManualClock):
            """Clock whose handles ignore cancel()."""

            def call_later(self, delay, callback):
                super().call_later(delay, callback)
                return LeakyHandle()

        clock = LeakyClock()
        controller = SequenceController(source, clock, compositor=compositor)
        controller.start()
        clock.advance(2.5)
        controller.reset()
        controller.start()

        clock.advance(12.0)
        assert controller.state == "review"
        assert [f.captured_at for f in controller.frames] == [5.5, 9.5, 13.5]
        assert source.reads == 3


class TestCaptureFailure:
    def test_failed_capture_leaves_session_incomplete(self, source, clock, compositor):
        errors = []
        controller = SequenceController(source, clock, compositor=compositor, on_error=errors.append)
        source.ready = False
        controller.start()

        with pytest.raises(CaptureError):
            clock.advance(3.0)

        assert controller.frames == ()
        assert controller.state == "countdown"
        assert isinstance(controller.error, CaptureError)
        assert errors == [controller.error]
        assert clock.pending == 0

        source.ready = True
        clock.advance(30.0)
        assert controller.frames == ()  # no silent advance

    def test_failure_on_second_shot(self, controller, clock, source):
        controller.start()
        clock.advance(4.0)
        source.ready = False

        with pytest.raises(CaptureError):
            clock.advance(3.0)
        assert len(controller.frames) == 1
        assert controller.state == "countdown"

    def test_reset_recovers(self, controller, clock, source):
        source.ready = False
        controller.start()
        with pytest.raises(CaptureError):
            clock.advance(3.0)

        controller.reset()
        assert controller.error is None
        source.ready = True
        controller.start()
        clock.advance(12.0)
        assert controller.state == "review"


class TestSelection:
    def test_selection_rerenders_in_review(self, controller, clock):
        controller.start()
        clock.advance(12.0)
        before = controller.strip

        controller.select_filter("noir")
        assert controller.current_filter.id == "noir"
        assert not np.array_equal(before, controller.strip)

        with_filter = controller.strip
        controller.select_overlay("vignette")
        assert not np.array_equal(with_filter, controller.strip)

    def test_selection_before_session_is_used(self, controller, clock, compositor):
        controller.select_filter("bw")
        controller.select_overlay("hearts")
        controller.start()
        clock.advance(12.0)

        expected = compositor.render(
            [f.image for f in controller.frames],
            controller.current_filter,
            controller.current_overlay,
            date=FIXED_DATE,
        )
        assert np.array_equal(controller.strip, expected)

    def test_unknown_selection(self, controller):
        with pytest.raises(KeyError):
            controller.select_filter("sparkly")
        assert controller.current_filter.id == "normal"
