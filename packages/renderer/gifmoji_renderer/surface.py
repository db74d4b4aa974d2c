"""Pillow-backed drawing surface with a canvas-style transform stack."""

from __future__ import annotations

import math
from contextlib import contextmanager
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Iterator

from PIL import Image, ImageDraw, ImageFont

from .models import RGBA

# Bold display face first, then CJK-capable faces for non-Latin text.
FONT_CHAIN: tuple[str, ...] = (
    "Outfit-Black.ttf",
    "DejaVuSans-Bold.ttf",
    "Arial Bold.ttf",
    "arialbd.ttf",
    "HiraginoSans-W8.ttc",
    "meiryob.ttc",
    "NotoSansCJK-Bold.ttc",
)

Affine = tuple[float, float, float, float, float, float]
IDENTITY: Affine = (1.0, 0.0, 0.0, 0.0, 1.0, 0.0)


def _compose(m: Affine, n: Affine) -> Affine:
    """Return ``m @ n`` for matrices stored as ``(a, b, c, d, e, f)``."""
    a, b, c, d, e, f = m
    a2, b2, c2, d2, e2, f2 = n
    return (
        a * a2 + b * d2,
        a * b2 + b * e2,
        a * c2 + b * f2 + c,
        d * a2 + e * d2,
        d * b2 + e * e2,
        d * c2 + e * f2 + f,
    )


def _invert(m: Affine) -> Affine | None:
    a, b, c, d, e, f = m
    det = a * e - b * d
    if abs(det) < 1e-9 or not math.isfinite(det):
        return None
    ia, ib, id_, ie = e / det, -b / det, -d / det, a / det
    return (ia, ib, -(ia * c + ib * f), id_, ie, -(id_ * c + ie * f))


@lru_cache(maxsize=16)
def _resolve_font_source(font_path: str | None) -> str | None:
    candidates = ((font_path,) if font_path else ()) + FONT_CHAIN
    for name in candidates:
        try:
            ImageFont.truetype(name, 12)
        except OSError:
            continue
        return name
    return None


@lru_cache(maxsize=128)
def load_font(size: int, font_path: str | None = None) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    source = _resolve_font_source(font_path)
    if source is None:
        return ImageFont.load_default(size=size)
    return ImageFont.truetype(source, size)


def resolved_font_name(font_path: str | None = None) -> str:
    return _resolve_font_source(font_path) or "pillow-default"


@dataclass(frozen=True)
class _State:
    matrix: Affine = IDENTITY
    alpha: float = 1.0


class DrawingSurface:
    """RGBA canvas with save/restore, affine transforms and text primitives.

    Text is rasterized upright on a scratch layer and mapped through the
    current transform, so scale, rotation and translation compose the way a
    2D canvas context does.
    """

    def __init__(self, width: int, height: int, font_path: str | None = None) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Surface size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.font_path = font_path
        self._image = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        self._state = _State()
        self._stack: list[_State] = []

    @property
    def image(self) -> Image.Image:
        return self._image

    @property
    def matrix(self) -> Affine:
        return self._state.matrix

    @property
    def alpha(self) -> float:
        return self._state.alpha

    def clear(self) -> None:
        self._image.paste((0, 0, 0, 0), (0, 0, self.width, self.height))

    def fill(self, color: RGBA) -> None:
        self._image.paste(tuple(color), (0, 0, self.width, self.height))

    def save(self) -> None:
        self._stack.append(self._state)

    def restore(self) -> None:
        if self._stack:
            self._state = self._stack.pop()

    @contextmanager
    def checkpoint(self) -> Iterator["DrawingSurface"]:
        self.save()
        depth = len(self._stack)
        try:
            yield self
        finally:
            del self._stack[depth:]
            self.restore()

    def translate(self, x: float, y: float) -> None:
        self._apply((1.0, 0.0, x, 0.0, 1.0, y))

    def scale(self, sx: float, sy: float) -> None:
        self._apply((sx, 0.0, 0.0, 0.0, sy, 0.0))

    def rotate(self, radians: float) -> None:
        cos, sin = math.cos(radians), math.sin(radians)
        self._apply((cos, -sin, 0.0, sin, cos, 0.0))

    def set_alpha(self, alpha: float) -> None:
        self._state = replace(self._state, alpha=max(0.0, min(1.0, float(alpha))))

    def _apply(self, op: Affine) -> None:
        self._state = replace(self._state, matrix=_compose(self._state.matrix, op))

    def font(self, size: float):
        return load_font(max(1, int(round(size))), self.font_path)

    def measure_text(self, text: str, size: float) -> float:
        if not text:
            return 0.0
        return float(self.font(size).getlength(text))

    def fill_text(
        self,
        text: str,
        x: float,
        y: float,
        size: float,
        fill: RGBA,
        stroke: RGBA | None = None,
        stroke_width: int = 0,
    ) -> bool:
        """Draw ``text`` centred on ``(x, y)`` in the current coordinate space.

        The stroke, when given, is laid down beneath the fill. Returns False
        when nothing was drawn (empty text or a collapsed transform).
        """
        if not text.strip():
            return False
        device = _compose(self._state.matrix, (1.0, 0.0, x, 0.0, 1.0, y))
        inverse = _invert(device)
        if inverse is None:
            return False

        font = self.font(size)
        sw = stroke_width if stroke is not None else 0
        left, top, right, bottom = font.getbbox(text, anchor="mm", stroke_width=sw)
        pad = 2
        scratch = Image.new("RGBA", (int(math.ceil(right - left)) + 2 * pad, int(math.ceil(bottom - top)) + 2 * pad), (0, 0, 0, 0))
        origin = (pad - left, pad - top)
        ImageDraw.Draw(scratch).text(
            origin,
            text,
            font=font,
            anchor="mm",
            fill=tuple(fill),
            stroke_width=sw,
            stroke_fill=tuple(stroke) if stroke is not None else None,
        )

        # Scratch pixel -> local text origin -> device.
        to_device = _compose(device, (1.0, 0.0, -origin[0], 0.0, 1.0, -origin[1]))
        data = _invert(to_device)
        if data is None:
            return False
        layer = scratch.transform(
            (self.width, self.height),
            Image.Transform.AFFINE,
            data,
            resample=Image.Resampling.BICUBIC,
        )
        self._composite(layer)
        return True

    def overlay(self) -> Image.Image:
        """Return a blank layer sized to the surface for device-space drawing."""
        return Image.new("RGBA", (self.width, self.height), (0, 0, 0, 0))

    def composite(self, layer: Image.Image) -> None:
        self._composite(layer)

    def _composite(self, layer: Image.Image) -> None:
        alpha = self._state.alpha
        if alpha < 1.0:
            table = [int(v * alpha + 0.5) for v in range(256)]
            layer.putalpha(layer.getchannel("A").point(table))
        self._image.alpha_composite(layer)

    def pixels(self) -> bytearray:
        return bytearray(self._image.tobytes())
