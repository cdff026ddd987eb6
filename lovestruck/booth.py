import datetime
import logging
import random
import time
from pathlib import Path
from typing import Callable, Optional

import numpy as np

from lovestruck.camera import FrameCapturer, VideoSource, open_camera
from lovestruck.config import BoothConfig, CameraConfig
from lovestruck.errors import CompositeError, DeviceError
from lovestruck.pipeline.clock import Clock
from lovestruck.pipeline.compositor import StripCompositor
from lovestruck.pipeline.controller import SequenceController
from lovestruck.pipeline.export import export_strip
from lovestruck.pipeline.filters import apply_chain
from lovestruck.pipeline.overlays import apply_overlay

DEVICE_ERROR_MESSAGE = "Unable to access camera. Please allow camera permissions to use the booth."


def configure_logging(level=logging.INFO):
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


class PhotoBooth:
    """
    Wires the camera, the capture sequence and strip export together.

    If the camera cannot be acquired the booth sits in a single blocking
    error state; reload() is the only way out.
    """

    def __init__(
        self,
        clock: Clock,
        config: BoothConfig = None,
        source_factory: Callable[[CameraConfig], VideoSource] = open_camera,
        rng: random.Random = None,
        today: Callable[[], datetime.date] = datetime.date.today,
    ):
        self.log = logging.getLogger("PhotoBooth")
        self.clock = clock
        self.config = config or BoothConfig()
        self.source_factory = source_factory
        self.rng = rng
        self.today = today

        self.capturer = FrameCapturer()
        self.source: Optional[VideoSource] = None
        self.controller: Optional[SequenceController] = None
        self.error: Optional[str] = None

    # ----------------------------------------------------------------------
    # DEVICE LIFECYCLE
    # ----------------------------------------------------------------------

    def open(self) -> bool:
        """Acquire the camera. Returns False and enters the error state on failure."""
        if self.controller is not None or self.source is not None:
            self.close()

        try:
            self.source = self.source_factory(self.config.camera)
        except DeviceError as e:
            self.log.error(f"Camera acquisition failed: {e}")
            self.source = None
            self.controller = None
            self.error = DEVICE_ERROR_MESSAGE
            return False

        compositor = StripCompositor(
            layout=self.config.layout,
            footer=self.config.footer,
            bake_textures=self.config.bake_textures,
            today=self.today,
        )
        self.controller = SequenceController(
            source=self.source,
            clock=self.clock,
            capturer=self.capturer,
            compositor=compositor,
            timing=self.config.timing,
            rng=self.rng,
        )
        self.error = None
        self.log.info("Booth ready")
        return True

    def reload(self) -> bool:
        """Full reload: drop everything and acquire the camera again."""
        self.log.info("Reloading booth")
        self.close()
        return self.open()

    def close(self):
        if self.controller is not None:
            self.controller.reset()
            self.controller = None
        if self.source is not None:
            release = getattr(self.source, "release", None)
            if release:
                release()
            self.source = None

    def _require_ready(self) -> SequenceController:
        if self.error:
            raise DeviceError(self.error)
        if self.controller is None:
            raise DeviceError("Booth has not been opened")
        return self.controller

    # ----------------------------------------------------------------------
    # PUBLIC API
    # ----------------------------------------------------------------------

    @property
    def state(self) -> str:
        """``error`` while the camera is unavailable, else the session state."""
        if self.error:
            return "error"
        if self.controller is None:
            return "closed"
        return self.controller.state

    def start(self):
        self._require_ready().start()

    def reset(self):
        self._require_ready().reset()

    def select_filter(self, filter_id: str):
        return self._require_ready().select_filter(filter_id)

    def select_overlay(self, overlay_id: str):
        return self._require_ready().select_overlay(overlay_id)

    def preview(self) -> np.ndarray:
        """
        Live view frame: mirrored, with the current filter and the overlay
        as it is displayed (textures included).
        """
        controller = self._require_ready()
        frame = self.capturer.capture(self.source)
        frame = apply_chain(frame, controller.current_filter.chain)
        return apply_overlay(frame, controller.current_overlay, bake_textures=True)

    def download(self, output_dir=None, now: Optional[float] = None) -> Path:
        """Export the reviewed strip; the filename carries the session timestamp."""
        controller = self._require_ready()
        if controller.strip is None:
            raise CompositeError("No completed strip to download")

        output_dir = output_dir or self.config.output_dir
        return export_strip(controller.strip, output_dir, now=time.time() if now is None else now)
