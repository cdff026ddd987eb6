"""Webcam video source backed by OpenCV.

The booth asks the device for an ideal resolution (1920x1080 by default); the
driver may settle on something else, and whatever it reports is treated as the
intrinsic size of the feed.

Frames are converted from OpenCV's BGR to RGB on read so everything
downstream works in RGB.
"""

from typing import Optional, Tuple

import cv2
import numpy as np
from loguru import logger

from lovestruck.config import CameraConfig
from lovestruck.errors import CaptureError, DeviceError


class OpenCVVideoSource:
    def __init__(self, device: int = 0, ideal_resolution: Tuple[int, int] = (1920, 1080)):
        self.device = device
        self.ideal_resolution = ideal_resolution
        self.cap: Optional[cv2.VideoCapture] = cv2.VideoCapture(device)

        if not self.cap.isOpened():
            self.cap.release()
            self.cap = None
            logger.error("Could not open camera device {}", device)
            raise DeviceError(f"Camera device {device} is unavailable or permission was denied")

        ideal_w, ideal_h = ideal_resolution
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, ideal_w)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, ideal_h)
        logger.info(
            "Camera {} opened: requested {}x{}, got {}x{}",
            device, ideal_w, ideal_h, self.width, self.height,
        )

    # -------------------- Video source contract --------------------

    @property
    def is_open(self) -> bool:
        return self.cap is not None and self.cap.isOpened()

    @property
    def width(self) -> int:
        if not self.is_open:
            return 0
        return int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))

    @property
    def height(self) -> int:
        if not self.is_open:
            return 0
        return int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))

    def read(self) -> Optional[np.ndarray]:
        """Current frame as RGB, or None when the driver has nothing yet."""
        if not self.is_open:
            raise CaptureError("Camera has been released")

        ok, frame = self.cap.read()
        if not ok or frame is None:
            logger.warning("Camera read returned no frame")
            return None
        return cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)

    # -------------------- Lifecycle --------------------

    def release(self):
        if self.cap is not None:
            self.cap.release()
            self.cap = None
            logger.info("Camera {} released", self.device)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()


def open_camera(config: CameraConfig = None) -> OpenCVVideoSource:
    """Acquire the configured webcam. Raises DeviceError when it is unavailable."""
    config = config or CameraConfig()
    return OpenCVVideoSource(device=config.device, ideal_resolution=tuple(config.ideal_resolution))
