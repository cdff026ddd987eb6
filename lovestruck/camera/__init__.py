from .capturer import FrameCapturer, VideoSource
from .webcam import OpenCVVideoSource, open_camera

__all__ = ["FrameCapturer", "VideoSource", "OpenCVVideoSource", "open_camera"]
