import datetime
import logging
from typing import Callable, Optional, Sequence

import cv2
import numpy as np

from lovestruck.config import FooterConfig, StripLayout
from lovestruck.errors import CompositeError
from .catalog import FILTERS, OVERLAYS, Filter, Overlay
from .crop import Cropper
from .filters import apply_chain
from .overlays import apply_overlay

BACKGROUND = (0x11, 0x11, 0x11)
SPROCKET_COLOR = (0xE5, 0xE5, 0xE5)

# Hershey glyphs laid out on a fixed pitch to get a monospaced footer;
# the pitch is the widest glyph of the string plus `spacing`
TITLE_FONT = dict(font=cv2.FONT_HERSHEY_SIMPLEX, scale=1.0, thickness=2, spacing=4)
DATE_FONT = dict(font=cv2.FONT_HERSHEY_SIMPLEX, scale=0.5, thickness=1, spacing=2)
TITLE_BASELINE = 50  # from the bottom edge
DATE_BASELINE = 25


def rounded_rect_mask(width: int, height: int, radius: int) -> np.ndarray:
    """Boolean coverage of a rounded rectangle, shape (height, width)."""
    radius = max(0, min(radius, width // 2, height // 2))
    ys = np.arange(height, dtype=np.float64) + 0.5
    xs = np.arange(width, dtype=np.float64) + 0.5

    # distance from each pixel centre to the inner (radius-shrunk) rectangle
    dy = np.maximum(np.maximum(radius - ys, ys - (height - radius)), 0.0)
    dx = np.maximum(np.maximum(radius - xs, xs - (width - radius)), 0.0)
    return dy[:, None] ** 2 + dx[None, :] ** 2 <= radius ** 2


class StripCompositor:
    """
    Renders three captured frames into a fixed-layout film strip.

    Output depends only on the frames, filter, overlay and date; rendering the
    same inputs twice gives byte-identical images.
    """

    def __init__(
        self,
        layout: StripLayout = None,
        footer: FooterConfig = None,
        bake_textures: bool = False,
        today: Callable[[], datetime.date] = datetime.date.today,
    ):
        self.log = logging.getLogger("StripCompositor")
        self.layout = layout or StripLayout()
        self.footer = footer or FooterConfig()
        self.bake_textures = bake_textures
        self.today = today
        self.cropper = Cropper(self.layout.aspect)

    # ----------------------------------------------------------------------
    # PUBLIC API
    # ----------------------------------------------------------------------

    def render(
        self,
        frames: Sequence[np.ndarray],
        flt: Filter = None,
        overlay: Overlay = None,
        date: Optional[datetime.date] = None,
    ) -> np.ndarray:
        """
        Compose the strip.

        :param frames: exactly three RGB frames, in capture order
        :param flt: active filter (identity when None)
        :param overlay: active overlay (none when None)
        :param date: footer date, defaults to ``today()``
        :return: RGB uint8 image of ``layout.height x layout.width``
        """
        frames = list(frames)
        if len(frames) != 3:
            raise CompositeError(f"A strip needs exactly 3 frames, got {len(frames)}")
        for i, frame in enumerate(frames):
            if frame is None or frame.ndim != 3 or frame.shape[2] != 3 or frame.size == 0:
                raise CompositeError(f"Frame {i} is not an RGB image")

        flt = flt or FILTERS.default
        overlay = overlay or OVERLAYS.default
        date = date or self.today()

        layout = self.layout
        self.log.info(
            f"Rendering {layout.width}x{layout.height} strip "
            f"(filter={flt.id}, overlay={overlay.id})"
        )

        canvas = np.empty((layout.height, layout.width, 3), dtype=np.uint8)
        canvas[:] = BACKGROUND

        self._draw_sprockets(canvas)
        for i, frame in enumerate(frames):
            self._draw_photo(canvas, i, frame, flt, overlay)
        self._draw_footer(canvas, date)

        return canvas

    # ----------------------------------------------------------------------
    # DRAWING STEPS
    # ----------------------------------------------------------------------

    def _draw_sprockets(self, canvas: np.ndarray):
        layout = self.layout
        height, width = canvas.shape[:2]
        mask = rounded_rect_mask(layout.sprocket_width, layout.sprocket_height, layout.sprocket_radius)

        columns = (layout.sprocket_inset, width - layout.sprocket_inset - layout.sprocket_width)
        step = layout.sprocket_height + layout.sprocket_gap

        for y in range(layout.sprocket_top, height, step):
            visible = mask[:height - y]
            for x in columns:
                region = canvas[y:y + visible.shape[0], x:x + layout.sprocket_width]
                region[visible] = SPROCKET_COLOR

    def _draw_photo(self, canvas: np.ndarray, index: int, frame: np.ndarray, flt: Filter, overlay: Overlay):
        layout = self.layout
        x, y = layout.cell_origin(index)

        cropped = self.cropper.crop(frame).copy()
        cell = cv2.resize(cropped, (layout.photo_width, layout.photo_height), interpolation=cv2.INTER_AREA)
        cell = apply_chain(cell, flt.chain)
        cell = apply_overlay(cell, overlay, bake_textures=self.bake_textures)

        canvas[y:y + layout.photo_height, x:x + layout.photo_width] = cell

    def _draw_footer(self, canvas: np.ndarray, date: datetime.date):
        height = canvas.shape[0]
        date_text = format_date(date, self.footer.date_format)

        draw_mono_text(canvas, self.footer.title, height - TITLE_BASELINE, self.footer.title_color, **TITLE_FONT)
        draw_mono_text(canvas, date_text, height - DATE_BASELINE, self.footer.date_color, **DATE_FONT)


def format_date(date: datetime.date, date_format: Optional[str] = None) -> str:
    """Footer date, upper-cased. Without a format: en-US M/D/YYYY, no zero padding."""
    if date_format is None:
        return f"{date.month}/{date.day}/{date.year}"
    return date.strftime(date_format).upper()


def mono_pitch(text: str, font, scale, thickness, spacing) -> int:
    """Cell width that fits every glyph of ``text`` with ``spacing`` between them."""
    widest = max((cv2.getTextSize(c, font, scale, thickness)[0][0] for c in text if not c.isspace()), default=0)
    return widest + spacing


def draw_mono_text(canvas: np.ndarray, text: str, baseline: int, color, font, scale, thickness, spacing):
    """Draw ``text`` horizontally centred with every character on a fixed pitch."""
    width = canvas.shape[1]
    pitch = mono_pitch(text, font, scale, thickness, spacing)
    start = (width - pitch * len(text)) // 2

    for i, char in enumerate(text):
        if char.isspace():
            continue
        (char_w, _), _ = cv2.getTextSize(char, font, scale, thickness)
        x = start + i * pitch + (pitch - char_w) // 2
        cv2.putText(canvas, char, (x, baseline), font, scale, tuple(int(c) for c in color), thickness, cv2.LINE_AA)
