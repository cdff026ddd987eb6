import logging
import time
from pathlib import Path
from typing import Optional, Union

import cv2
import numpy as np

log = logging.getLogger("StripExport")


def strip_filename(now: Optional[float] = None) -> str:
    """``photo-strip-<epoch milliseconds>.png``"""
    now = time.time() if now is None else now
    return f"photo-strip-{int(now * 1000)}.png"


def export_strip(image: np.ndarray, output_dir: Union[str, Path], now: Optional[float] = None) -> Path:
    """
    Save a composited strip as PNG.

    PNG keeps the strip lossless; the image is RGB and is converted to
    OpenCV's BGR order only for writing.

    :param image: RGB strip
    :param output_dir: Destination directory, created if missing
    :param now: Session timestamp (epoch seconds) used in the filename
    :return: Path of the written file
    """
    if image is None or image.size == 0:
        raise ValueError("Cannot export an empty image")

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / strip_filename(now)

    if not cv2.imwrite(str(path), cv2.cvtColor(image, cv2.COLOR_RGB2BGR)):
        log.error(f"Failed to write strip to {path}")
        raise OSError(f"Could not write {path}")

    log.info(f"Saved strip to {path}")
    return path
