"""
Overlay decoration rules.

Every rule works on a single photo cell (RGB uint8) and never touches pixels
outside it. Decorations are drawn after the filter chain, so they are never
filtered themselves.

Sparkle and grain are textures in the live preview. Their pixel form here is a
procedural field generated from a fixed seed, so repeated renders stay
identical.
"""

from typing import Tuple

import numpy as np

from .catalog import Overlay

# Radial vignette: transparent inside INNER x cell height, MAX_ALPHA black at OUTER x cell height
VIGNETTE_INNER = 0.3
VIGNETTE_OUTER = 0.8
VIGNETTE_MAX_ALPHA = 0.6

HEART_COLOR = (255, 150, 150)
HEART_ALPHA = 0.7
HEART_SIZE = 30
# top-left corners relative to the cell; the second is measured from the far corner
HEART_OFFSETS = ((20, 20), (-50, -50))

SPARKLE_OPACITY = 0.3
GRAIN_OPACITY = 0.2
TEXTURE_SEED = 0x10FE


def vignette_alpha(height: int, width: int) -> np.ndarray:
    """Per-pixel darkening alpha for a cell of the given size."""
    ys = np.arange(height, dtype=np.float64) + 0.5 - height / 2.0
    xs = np.arange(width, dtype=np.float64) + 0.5 - width / 2.0
    dist = np.sqrt(ys[:, None] ** 2 + xs[None, :] ** 2)

    inner = VIGNETTE_INNER * height
    outer = VIGNETTE_OUTER * height
    ramp = np.clip((dist - inner) / (outer - inner), 0.0, 1.0)
    return ramp * VIGNETTE_MAX_ALPHA


def apply_vignette(cell: np.ndarray) -> np.ndarray:
    h, w = cell.shape[:2]
    alpha = vignette_alpha(h, w)[:, :, None]
    out = cell.astype(np.float64) * (1.0 - alpha)
    return np.rint(out).astype(np.uint8)


def heart_mask(size: int = HEART_SIZE, supersample: int = 4) -> np.ndarray:
    """
    Anti-aliased heart coverage in [0, 1], shape (size, size).

    Uses the implicit curve (x^2 + y^2 - 1)^3 - x^2 y^3 <= 0.
    """
    n = size * supersample
    coords = (np.arange(n, dtype=np.float64) + 0.5) / n
    x = (coords[None, :] - 0.5) * 2.6
    y = (0.55 - coords[:, None]) * 2.6
    inside = (x ** 2 + y ** 2 - 1.0) ** 3 - (x ** 2) * (y ** 3) <= 0.0
    return inside.reshape(size, supersample, size, supersample).mean(axis=(1, 3))


def _blend_mask(cell: np.ndarray, mask: np.ndarray, origin: Tuple[int, int], color, alpha: float) -> None:
    """Blend ``color`` into ``cell`` in place, clipped to the cell."""
    h, w = cell.shape[:2]
    x0, y0 = origin
    mh, mw = mask.shape

    cx0, cy0 = max(0, x0), max(0, y0)
    cx1, cy1 = min(w, x0 + mw), min(h, y0 + mh)
    if cx0 >= cx1 or cy0 >= cy1:
        return

    m = mask[cy0 - y0:cy1 - y0, cx0 - x0:cx1 - x0][:, :, None] * alpha
    region = cell[cy0:cy1, cx0:cx1].astype(np.float64)
    blended = region * (1.0 - m) + np.asarray(color, dtype=np.float64) * m
    cell[cy0:cy1, cx0:cx1] = np.rint(blended).astype(np.uint8)


def heart_origins(height: int, width: int) -> Tuple[Tuple[int, int], ...]:
    origins = []
    for dx, dy in HEART_OFFSETS:
        x = dx if dx >= 0 else width + dx
        y = dy if dy >= 0 else height + dy
        origins.append((x, y))
    return tuple(origins)


def apply_hearts(cell: np.ndarray) -> np.ndarray:
    out = cell.copy()
    mask = heart_mask()
    for origin in heart_origins(*cell.shape[:2]):
        _blend_mask(out, mask, origin, HEART_COLOR, HEART_ALPHA)
    return out


# -------------------- Textures --------------------

def sparkle_field(height: int, width: int, seed: int = TEXTURE_SEED) -> np.ndarray:
    """Sparse star points with short cross arms, values in [0, 1]."""
    rng = np.random.default_rng(seed)
    field = np.zeros((height, width), dtype=np.float64)

    count = max(1, (height * width) // 900)
    ys = rng.integers(0, height, count)
    xs = rng.integers(0, width, count)
    strength = rng.uniform(0.5, 1.0, count)

    field[ys, xs] = strength
    for dy, dx in ((-1, 0), (1, 0), (0, -1), (0, 1)):
        yy = np.clip(ys + dy, 0, height - 1)
        xx = np.clip(xs + dx, 0, width - 1)
        field[yy, xx] = np.maximum(field[yy, xx], strength * 0.5)
    return field


def grain_field(height: int, width: int, seed: int = TEXTURE_SEED) -> np.ndarray:
    """Mid-grey gaussian noise, values in [0, 1]."""
    rng = np.random.default_rng(seed)
    return np.clip(rng.normal(0.5, 0.15, (height, width)), 0.0, 1.0)


def _screen(base: np.ndarray, top: np.ndarray) -> np.ndarray:
    return 1.0 - (1.0 - base) * (1.0 - top)


def _overlay(base: np.ndarray, top: np.ndarray) -> np.ndarray:
    return np.where(base < 0.5, 2.0 * base * top, 1.0 - 2.0 * (1.0 - base) * (1.0 - top))


def apply_texture(cell: np.ndarray, kind: str) -> np.ndarray:
    h, w = cell.shape[:2]
    base = cell.astype(np.float64) / 255.0

    if kind == "sparkles":
        top = sparkle_field(h, w)[:, :, None]
        mixed = _screen(base, top)
        opacity = SPARKLE_OPACITY
    elif kind == "grain":
        top = grain_field(h, w)[:, :, None]
        mixed = _overlay(base, top)
        opacity = GRAIN_OPACITY
    else:
        raise ValueError(f"'{kind}' is not a texture overlay")

    out = base * (1.0 - opacity) + mixed * opacity
    return np.rint(np.clip(out, 0.0, 1.0) * 255.0).astype(np.uint8)


def apply_overlay(cell: np.ndarray, overlay: Overlay, bake_textures: bool = False) -> np.ndarray:
    """
    Apply one overlay rule to a cell and return the decorated copy.

    Texture overlays are only applied when ``bake_textures`` is set; the
    strip leaves them out by default.
    """
    if overlay.kind == "vignette":
        return apply_vignette(cell)
    if overlay.kind == "hearts":
        return apply_hearts(cell)
    if overlay.is_texture and bake_textures:
        return apply_texture(cell, overlay.kind)
    return cell
