"""
Booth configuration.

All values have defaults matching the original booth; a YAML file may
override any subset of them:

    camera:
      device: 0
      ideal_resolution: [1920, 1080]
    timing:
      countdown_from: 3
    layout:
      photo_width: 600
    output_dir: strips
"""

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Optional, Tuple, Union

import yaml


@dataclass(frozen=True)
class CameraConfig:
    """Webcam device index and the resolution requested from it."""
    device: int = 0
    ideal_resolution: Tuple[int, int] = (1920, 1080)


@dataclass(frozen=True)
class TimingConfig:
    """Countdown timing, in seconds."""
    countdown_from: int = 3
    tick_seconds: float = 1.0
    flash_seconds: float = 0.15
    settle_seconds: float = 1.0


@dataclass(frozen=True)
class StripLayout:
    """
    Fixed strip geometry in pixels.

    Canvas size is derived from these constants on every access.
    """
    photo_width: int = 600
    photo_height: int = 450  # 4:3
    gap: int = 30
    side_padding: int = 80  # room for sprocket holes
    top_padding: int = 60
    bottom_padding: int = 100

    sprocket_width: int = 20
    sprocket_height: int = 30
    sprocket_gap: int = 40
    sprocket_inset: int = 15
    sprocket_top: int = 20
    sprocket_radius: int = 4

    @property
    def width(self) -> int:
        return self.photo_width + 2 * self.side_padding

    @property
    def height(self) -> int:
        return (
            self.top_padding
            + 3 * self.photo_height
            + 2 * self.gap
            + self.bottom_padding
        )

    @property
    def aspect(self) -> float:
        return self.photo_width / self.photo_height

    def cell_origin(self, index: int) -> Tuple[int, int]:
        """Top-left (x, y) of photo cell ``index``."""
        return self.side_padding, self.top_padding + index * (self.photo_height + self.gap)


@dataclass(frozen=True)
class FooterConfig:
    title: str = "MEMORIES"
    date_format: Optional[str] = None  # None: unpadded M/D/YYYY
    title_color: Tuple[int, int, int] = (255, 255, 255)
    date_color: Tuple[int, int, int] = (0x88, 0x88, 0x88)


@dataclass(frozen=True)
class BoothConfig:
    camera: CameraConfig = field(default_factory=CameraConfig)
    timing: TimingConfig = field(default_factory=TimingConfig)
    layout: StripLayout = field(default_factory=StripLayout)
    footer: FooterConfig = field(default_factory=FooterConfig)
    output_dir: str = "strips"
    bake_textures: bool = False


_SECTIONS = {
    "camera": CameraConfig,
    "timing": TimingConfig,
    "layout": StripLayout,
    "footer": FooterConfig,
}


def _build_section(cls, values: dict):
    known = {f.name for f in fields(cls)}
    unknown = set(values) - known
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} keys: {sorted(unknown)}")

    # YAML has no tuples; every sequence field in these dataclasses is a tuple
    coerced = {k: tuple(v) if isinstance(v, list) else v for k, v in values.items()}
    return cls(**coerced)


def config_from_dict(data: Optional[dict]) -> BoothConfig:
    """Build a BoothConfig from a plain mapping, keeping defaults for missing keys."""
    data = dict(data or {})
    config = BoothConfig()

    unknown = set(data) - {f.name for f in fields(BoothConfig)}
    if unknown:
        raise ValueError(f"Unknown config keys: {sorted(unknown)}")

    overrides = {}
    for name, cls in _SECTIONS.items():
        section = data.pop(name, None)
        if section is None:
            continue
        if not isinstance(section, dict):
            raise ValueError(f"Config section '{name}' must be a mapping, got {type(section).__name__}")
        overrides[name] = _build_section(cls, section)

    overrides.update(data)
    return replace(config, **overrides)


def load_config(path: Optional[Union[str, Path]] = None) -> BoothConfig:
    """
    Load configuration from a YAML file.

    :param path: YAML file; when None the defaults are returned.
    """
    if path is None:
        return BoothConfig()

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    return config_from_dict(data)
