import numpy as np
from dataclasses import dataclass


@dataclass(frozen=True)
class CropRect:
    """Source crop rectangle in pixels."""
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    def is_valid(self) -> bool:
        return self.width > 0 and self.height > 0


def crop_rect(src_width: int, src_height: int, aspect: float) -> CropRect:
    """
    Largest rectangle of the given aspect ratio centred in the source.

    Wider sources lose columns symmetrically on the left and right, taller
    sources lose rows at the top and bottom. Nothing is ever stretched.
    """
    if src_width <= 0 or src_height <= 0:
        raise ValueError(f"Invalid source size {src_width}x{src_height}")
    if aspect <= 0:
        raise ValueError(f"Invalid aspect ratio {aspect}")

    src_aspect = src_width / src_height

    if src_aspect > aspect:
        height = src_height
        width = min(src_width, max(1, round(height * aspect)))
        return CropRect((src_width - width) // 2, 0, width, height)

    width = src_width
    height = min(src_height, max(1, round(width / aspect)))
    return CropRect(0, (src_height - height) // 2, width, height)


class Cropper:
    """
    Cuts frames to the aspect ratio of a strip photo cell.
    """

    def __init__(self, aspect: float = 4 / 3):
        self.aspect = aspect

    def rect_for(self, frame: np.ndarray) -> CropRect:
        h, w = frame.shape[:2]
        return crop_rect(w, h, self.aspect)

    def crop(self, frame: np.ndarray) -> np.ndarray:
        """
        Centre-crop the frame to the configured aspect ratio.
        Returns a view into ``frame``.
        """
        if frame is None or frame.size == 0:
            raise ValueError("Cannot crop an empty frame")

        rect = self.rect_for(frame)
        return frame[rect.y:rect.y + rect.height, rect.x:rect.x + rect.width]
