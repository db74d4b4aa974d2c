"""Typed renderer models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from PIL import ImageColor

RGBA = tuple[int, int, int, int]

MAX_LINES = 5
MAX_LINE_CHARS = 30

WHITE: RGBA = (255, 255, 255, 255)
BLACK: RGBA = (0, 0, 0, 255)


class AnimationKind(str, Enum):
    PULSE = "pulse"
    SPIN = "spin"
    RAINBOW = "rainbow"
    SHAKE = "shake"
    SLIDE = "slide"
    BOUNCE = "bounce"
    GROW = "grow"
    BLINK = "blink"


class PatternKind(str, Enum):
    NONE = "none"
    HEART = "heart"
    STAR = "star"
    BURST = "burst"
    BUBBLE = "bubble"


def parse_color(value: str | tuple[int, ...]) -> RGBA:
    """Parse ``#rgb``, ``#rrggbb``, ``#rrggbbaa``, names or ``hsl()`` into RGBA."""
    if isinstance(value, tuple):
        if len(value) == 3:
            return (int(value[0]), int(value[1]), int(value[2]), 255)
        if len(value) == 4:
            return (int(value[0]), int(value[1]), int(value[2]), int(value[3]))
        raise ValueError(f"Color tuple must have 3 or 4 channels: {value!r}")
    try:
        r, g, b, a = ImageColor.getcolor(value, "RGBA")
    except ValueError as exc:
        raise ValueError(f"Invalid color: {value!r}") from exc
    return (r, g, b, a)


@dataclass(frozen=True)
class PresetSize:
    id: str
    label: str
    width: int
    height: int


@dataclass(frozen=True)
class StyleConfig:
    text: str = "WOW"
    text_color: RGBA = WHITE
    background_color: RGBA = BLACK
    transparent_background: bool = True
    animation: AnimationKind = AnimationKind.PULSE
    pattern: PatternKind = PatternKind.NONE
    width: int = 128
    height: int = 128
    duration_seconds: float = 2.0
    font_size_offset: int = 0

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Canvas size must be positive, got {self.width}x{self.height}")
        if not self.duration_seconds > 0:
            raise ValueError(f"Duration must be positive, got {self.duration_seconds}")
        lines = self.text.replace("\r\n", "\n").split("\n")
        if len(lines) > MAX_LINES:
            raise ValueError(f"Text has {len(lines)} lines, at most {MAX_LINES} are allowed")
        longest = max(len(line) for line in lines)
        if longest > MAX_LINE_CHARS:
            raise ValueError(f"Line has {longest} characters, at most {MAX_LINE_CHARS} are allowed")
        # Accept plain strings from callers and config files.
        object.__setattr__(self, "animation", AnimationKind(self.animation))
        object.__setattr__(self, "pattern", PatternKind(self.pattern))
        object.__setattr__(self, "text_color", parse_color(self.text_color))
        object.__setattr__(self, "background_color", parse_color(self.background_color))

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @classmethod
    def from_preset(cls, preset: PresetSize, **kwargs) -> "StyleConfig":
        return cls(width=preset.width, height=preset.height, **kwargs)


@dataclass(frozen=True)
class LayoutResult:
    lines: tuple[str, ...]
    font_size_px: float
    line_height_px: float
    longest_line_width_px: float
    size_norm: float = 1.0

    @property
    def block_height_px(self) -> float:
        return self.line_height_px * len(self.lines)


@dataclass(frozen=True)
class Transform:
    translate_x: float = 0.0
    translate_y: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0
    rotation: float = 0.0
    alpha: float | None = None
    fill: RGBA | None = None
