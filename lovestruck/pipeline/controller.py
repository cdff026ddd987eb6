import logging
import random
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np

from lovestruck.camera import FrameCapturer, VideoSource
from lovestruck.config import TimingConfig
from lovestruck.errors import CaptureError
from lovestruck.fsm import SessionFSM
from .catalog import FILTERS, OVERLAYS, PROMPTS, Filter, Overlay, Selection
from .clock import Clock
from .compositor import StripCompositor

SHOTS = 3


@dataclass(frozen=True, eq=False)
class CapturedFrame:
    """One still of a session. The pixel buffer is made read-only."""
    image: np.ndarray
    position: int
    captured_at: float

    def __post_init__(self):
        self.image.setflags(write=False)


class SequenceController:
    """
    Drives one photo booth session:
    - Runs the idle -> countdown -> review FSM
    - Counts down and picks a prompt for every shot
    - Captures three frames through the FrameCapturer
    - Renders the strip with the selected filter and overlay

    Timers come from an injected clock. Every scheduled step remembers the
    session generation it belongs to and is dropped once start() or reset()
    has moved the generation on.
    """

    def __init__(
        self,
        source: VideoSource,
        clock: Clock,
        capturer: FrameCapturer = None,
        compositor: StripCompositor = None,
        timing: TimingConfig = None,
        rng: random.Random = None,
        callbacks: dict = None,
        on_change: Callable[["SequenceController"], None] = None,
        on_error: Callable[[Exception], None] = None,
    ):
        self.log = logging.getLogger("SequenceController")

        self.source = source
        self.clock = clock
        self.capturer = capturer or FrameCapturer()
        self.compositor = compositor or StripCompositor()
        self.timing = timing or TimingConfig()
        self.rng = rng or random.Random()
        self.on_change = on_change
        self.on_error = on_error

        # --- Selections ---
        self.filters = Selection(FILTERS)
        self.overlays = Selection(OVERLAYS)

        # --- Observable UI state ---
        self.countdown: Optional[int] = None
        self.prompt: Optional[str] = None
        self.flash = False
        self.iteration = 0
        self.error: Optional[Exception] = None
        self.strip: Optional[np.ndarray] = None

        # --- Session storage ---
        self._frames = []

        # --- Scheduling ---
        self._generation = 0
        self._timer = None
        self._flash_timer = None

        # --- FSM ---
        self.fsm = SessionFSM(
            callbacks=self._fsm_callbacks(callbacks),
            frame_count=lambda: len(self._frames),
            required_frames=SHOTS,
        )

    # ----------------------------------------------------------------------
    # FSM CALLBACKS
    # ----------------------------------------------------------------------

    def _fsm_callbacks(self, user_callbacks):
        """Merge internal callbacks with user-provided ones."""
        cb = user_callbacks.copy() if user_callbacks else {}

        cb.update(
            {
                "on_enter_idle": self._on_enter_idle,
                "on_enter_countdown": self._on_enter_countdown,
                "on_enter_review": self._on_enter_review,
            }
        )
        return cb

    def _on_enter_idle(self):
        self.log.info("Booth idle")

    def _on_enter_countdown(self):
        self.log.info("Session started")
        self._begin_iteration(0)

    def _on_enter_review(self):
        self.log.info(f"Session complete with {len(self._frames)} frames")
        self.countdown = None
        self.prompt = None
        self._render()

    # ----------------------------------------------------------------------
    # SEQUENCE STEPS
    # ----------------------------------------------------------------------

    def _begin_iteration(self, index: int):
        self.iteration = index
        self.prompt = self.rng.choice(PROMPTS)
        self.countdown = self.timing.countdown_from
        self.log.info(f"Shot {index + 1}/{SHOTS}: '{self.prompt}'")

        self._schedule(self.timing.tick_seconds, self._tick)
        self._notify()

    def _tick(self):
        self.countdown -= 1

        if self.countdown > 0:
            self._schedule(self.timing.tick_seconds, self._tick)
            self._notify()
            return

        self._capture()

    def _capture(self):
        self.log.info(f"Capturing frame {self.iteration}...")

        try:
            image = self.capturer.capture(self.source)
        except CaptureError as e:
            self.log.error(f"Capture of frame {self.iteration} failed: {e}")
            self.error = e
            self._notify()
            if self.on_error:
                self.on_error(e)
            raise

        frame = CapturedFrame(image=image, position=self.iteration, captured_at=self.clock.time())
        self._frames.append(frame)

        self.flash = True
        self._flash_timer = self._call_later(self.timing.flash_seconds, self._end_flash)
        self._schedule(self.timing.settle_seconds, self._next_iteration)
        self._notify()

    def _end_flash(self):
        self._flash_timer = None
        self.flash = False
        self._notify()

    def _next_iteration(self):
        if len(self._frames) >= SHOTS:
            self.fsm.finish()
            self._notify()
        else:
            self._begin_iteration(self.iteration + 1)

    def _render(self):
        self.strip = self.compositor.render(
            [f.image for f in self._frames],
            self.filters.current,
            self.overlays.current,
        )

    # ----------------------------------------------------------------------
    # SCHEDULING
    # ----------------------------------------------------------------------

    def _call_later(self, delay: float, step: Callable[[], None]):
        generation = self._generation

        def run():
            if generation != self._generation:
                self.log.debug(f"Dropping step from superseded session {generation}")
                return
            step()

        return self.clock.call_later(delay, run)

    def _schedule(self, delay: float, step: Callable[[], None]):
        """Schedule the next countdown step; only one is ever pending."""
        self._cancel(self._timer)

        def run():
            self._timer = None
            step()

        self._timer = self._call_later(delay, run)

    @staticmethod
    def _cancel(handle):
        if handle is not None:
            handle.cancel()

    def _invalidate(self):
        """Cancel everything in flight and start a new generation."""
        self._cancel(self._timer)
        self._cancel(self._flash_timer)
        self._timer = None
        self._flash_timer = None
        self._generation += 1

    def _clear_session(self):
        self._frames = []
        self.countdown = None
        self.prompt = None
        self.flash = False
        self.iteration = 0
        self.error = None
        self.strip = None

    def _notify(self):
        if self.on_change:
            self.on_change(self)

    # ----------------------------------------------------------------------
    # PUBLIC API
    # ----------------------------------------------------------------------

    def start(self):
        """Start a new session. Only valid from idle."""
        if self.fsm.state != "idle":
            self.log.warning(f"Cannot start from state: {self.fsm.state}")
        else:
            self._invalidate()
            self._clear_session()
        self.fsm.start()

    def reset(self):
        """Abandon the current session from any state."""
        self._invalidate()
        self._clear_session()
        self.fsm.reset()
        self._notify()

    def select_filter(self, filter_id: str) -> Filter:
        flt = self.filters.select(filter_id)
        self.log.info(f"Filter -> {flt.id}")
        if self.fsm.state == "review":
            self._render()
        self._notify()
        return flt

    def select_overlay(self, overlay_id: str) -> Overlay:
        overlay = self.overlays.select(overlay_id)
        self.log.info(f"Overlay -> {overlay.id}")
        if self.fsm.state == "review":
            self._render()
        self._notify()
        return overlay

    @property
    def state(self) -> str:
        return self.fsm.state

    @property
    def frames(self) -> Tuple[CapturedFrame, ...]:
        return tuple(self._frames)

    @property
    def prompt_visible(self) -> bool:
        """The prompt is hidden during the last second before capture."""
        return self.prompt is not None and self.countdown is not None and self.countdown > 1

    @property
    def current_filter(self) -> Filter:
        return self.filters.current

    @property
    def current_overlay(self) -> Overlay:
        return self.overlays.current
