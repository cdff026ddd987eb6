"""
Pixel-transform chains.

A chain is an ordered tuple of Adjustments. The same chain renders to a CSS
``filter`` value for live display and is applied to pixels when compositing,
so what is previewed is what ends up in the strip.

Pixel maths follows the CSS Filter Effects definitions, evaluated on sRGB
values in [0, 1] and clamped after every step.
"""

import math
import re
from dataclasses import dataclass
from typing import Iterable, Tuple

import numpy as np

KINDS = ("hue-rotate", "saturate", "contrast", "brightness", "grayscale", "sepia")

_CSS_FUNC = re.compile(r"([a-z-]+)\(\s*(-?[0-9.]+)\s*(%|deg)?\s*\)")


@dataclass(frozen=True)
class Adjustment:
    """One colour adjustment. ``amount`` is degrees for hue-rotate, a fraction otherwise."""
    kind: str
    amount: float

    def __post_init__(self):
        if self.kind not in KINDS:
            raise ValueError(f"Unknown adjustment '{self.kind}', expected one of {KINDS}")
        if self.kind != "hue-rotate" and self.amount < 0:
            raise ValueError(f"Negative amount for {self.kind}: {self.amount}")

    @property
    def css(self) -> str:
        if self.kind == "hue-rotate":
            return f"hue-rotate({self.amount:g}deg)"
        return f"{self.kind}({round(self.amount * 100, 4):g}%)"


Chain = Tuple[Adjustment, ...]


def parse_chain(css: str) -> Chain:
    """
    Parse a CSS filter value such as ``"sepia(30%) contrast(110%)"``.

    ``"none"`` and the empty string give the empty (identity) chain.
    """
    css = css.strip()
    if css in ("", "none"):
        return ()

    chain = []
    pos = 0
    for match in _CSS_FUNC.finditer(css):
        if css[pos:match.start()].strip():
            raise ValueError(f"Cannot parse filter: {css!r}")
        kind, value, unit = match.groups()
        value = float(value)
        if kind == "hue-rotate":
            if unit not in (None, "deg"):
                raise ValueError(f"hue-rotate expects degrees: {match.group(0)!r}")
        elif unit == "%":
            value /= 100.0
        elif unit == "deg":
            raise ValueError(f"{kind} does not take degrees: {match.group(0)!r}")
        chain.append(Adjustment(kind, value))
        pos = match.end()

    if css[pos:].strip():
        raise ValueError(f"Cannot parse filter: {css!r}")
    return tuple(chain)


def chain_css(chain: Iterable[Adjustment]) -> str:
    parts = [adj.css for adj in chain]
    return " ".join(parts) if parts else "none"


# -------------------- Colour matrices --------------------

def _grayscale_matrix(amount: float) -> np.ndarray:
    g = 1.0 - min(amount, 1.0)
    return np.array([
        [0.2126 + 0.7874 * g, 0.7152 - 0.7152 * g, 0.0722 - 0.0722 * g],
        [0.2126 - 0.2126 * g, 0.7152 + 0.2848 * g, 0.0722 - 0.0722 * g],
        [0.2126 - 0.2126 * g, 0.7152 - 0.7152 * g, 0.0722 + 0.9278 * g],
    ])


def _sepia_matrix(amount: float) -> np.ndarray:
    g = 1.0 - min(amount, 1.0)
    return np.array([
        [0.393 + 0.607 * g, 0.769 - 0.769 * g, 0.189 - 0.189 * g],
        [0.349 - 0.349 * g, 0.686 + 0.314 * g, 0.168 - 0.168 * g],
        [0.272 - 0.272 * g, 0.534 - 0.534 * g, 0.131 + 0.869 * g],
    ])


def _saturate_matrix(s: float) -> np.ndarray:
    return np.array([
        [0.213 + 0.787 * s, 0.715 - 0.715 * s, 0.072 - 0.072 * s],
        [0.213 - 0.213 * s, 0.715 + 0.285 * s, 0.072 - 0.072 * s],
        [0.213 - 0.213 * s, 0.715 - 0.715 * s, 0.072 + 0.928 * s],
    ])


def _hue_rotate_matrix(degrees: float) -> np.ndarray:
    rad = math.radians(degrees)
    c, s = math.cos(rad), math.sin(rad)
    return np.array([
        [0.213 + c * 0.787 - s * 0.213, 0.715 - c * 0.715 - s * 0.715, 0.072 - c * 0.072 + s * 0.928],
        [0.213 - c * 0.213 + s * 0.143, 0.715 + c * 0.285 + s * 0.140, 0.072 - c * 0.072 - s * 0.283],
        [0.213 - c * 0.213 - s * 0.787, 0.715 - c * 0.715 + s * 0.715, 0.072 + c * 0.928 + s * 0.072],
    ])


_MATRICES = {
    "grayscale": _grayscale_matrix,
    "sepia": _sepia_matrix,
    "saturate": _saturate_matrix,
    "hue-rotate": _hue_rotate_matrix,
}


def _apply_adjustment(values: np.ndarray, adj: Adjustment) -> np.ndarray:
    """Apply one adjustment to an (N, 3) float array in [0, 1]."""
    if adj.kind in _MATRICES:
        out = values @ _MATRICES[adj.kind](adj.amount).T
    elif adj.kind == "brightness":
        out = values * adj.amount
    else:  # contrast
        out = (values - 0.5) * adj.amount + 0.5
    return np.clip(out, 0.0, 1.0)


def apply_chain(image: np.ndarray, chain: Iterable[Adjustment]) -> np.ndarray:
    """
    Apply a pixel-transform chain to an RGB uint8 image.

    The empty chain returns the input array itself, untouched.
    """
    chain = tuple(chain)
    if not chain:
        return image

    h, w = image.shape[:2]
    values = image.reshape(-1, 3).astype(np.float64) / 255.0
    for adj in chain:
        values = _apply_adjustment(values, adj)

    return np.rint(values * 255.0).astype(np.uint8).reshape(h, w, 3)
