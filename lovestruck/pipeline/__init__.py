"""
Pipeline package for the photo booth.

This package contains the components responsible for:
- Describing filters, overlays and prompts (catalog)
- Colour transforms shared by preview and strip (filters)
- Cutting frames to the photo cell aspect (crop)
- Rendering the film strip (compositor)
- Writing the strip to disk (export)
- Running the countdown/capture session (controller)
"""

from .catalog import FILTERS, OVERLAYS, PROMPTS, Catalog, Filter, Overlay, Selection
from .clock import ManualClock
from .compositor import StripCompositor
from .controller import CapturedFrame, SequenceController
from .crop import CropRect, Cropper, crop_rect
from .export import export_strip
from .filters import Adjustment, apply_chain, parse_chain


__all__ = [
    "FILTERS",
    "OVERLAYS",
    "PROMPTS",
    "Catalog",
    "Filter",
    "Overlay",
    "Selection",
    "ManualClock",
    "StripCompositor",
    "CapturedFrame",
    "SequenceController",
    "CropRect",
    "Cropper",
    "crop_rect",
    "export_strip",
    "Adjustment",
    "apply_chain",
    "parse_chain",
]
