"""Still capture from a live video source."""

from typing import Optional, Protocol

import cv2
import numpy as np
from loguru import logger

from lovestruck.errors import CaptureError


class VideoSource(Protocol):
    """Live feed exposing its current intrinsic size and frame (RGB)."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def read(self) -> Optional[np.ndarray]: ...


class FrameCapturer:
    """
    Grabs one mirrored still from a video source.

    The still keeps the source's native resolution and stays uncompressed;
    encoding only happens at export.
    """

    def capture(self, source: VideoSource) -> np.ndarray:
        if source is None:
            raise CaptureError("No video source")

        width, height = source.width, source.height
        if width <= 0 or height <= 0:
            raise CaptureError(f"Video source not ready (intrinsic size {width}x{height})")

        frame = source.read()
        if frame is None or frame.size == 0:
            raise CaptureError("Video source returned no frame")

        if frame.ndim != 3 or frame.shape[2] != 3:
            raise CaptureError(f"Expected an RGB frame, got shape {frame.shape}")

        if frame.shape[:2] != (height, width):
            raise CaptureError(
                f"Frame is {frame.shape[1]}x{frame.shape[0]}, source reports {width}x{height}"
            )

        # flipCode=1 mirrors around the vertical axis; result is a fresh buffer
        still = cv2.flip(frame, 1)
        logger.debug("Captured {}x{} still", width, height)
        return still
