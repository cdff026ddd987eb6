"""
Error taxonomy for the photo booth.

Each error has a single handling path:
- DeviceError: camera unavailable at startup, the booth shows a blocking error
  state until a full reload.
- CaptureError: the video source was not ready when a countdown expired; the
  session is left incomplete until reset.
- CompositeError: the compositor was asked to render an incomplete session.
"""


class PhotoBoothError(Exception):
    """Base class for all booth errors."""


class DeviceError(PhotoBoothError):
    """Camera permission denied or device unavailable."""


class CaptureError(PhotoBoothError):
    """Video source not ready at the instant of capture."""


class CompositeError(PhotoBoothError):
    """Strip rendering requested without exactly three frames."""
