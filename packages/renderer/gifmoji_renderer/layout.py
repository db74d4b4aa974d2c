"""Fit uppercase, possibly multi-line text into the canvas."""

from __future__ import annotations

import math
from typing import Callable

from .models import AnimationKind, LayoutResult

REFERENCE_SIZE = 128
MIN_BASE_FONT = 4
MIN_FONT_PX = 6.0
FONT_FLOOR_PX = 1.0
FIT_RATIO = 0.9
LINE_HEIGHT_RATIO = 1.1
SHRINK_STEP_PX = 0.5
MAX_FIT_PASSES = 64

MeasureFn = Callable[[str, float], float]


def split_lines(text: str) -> tuple[str, ...]:
    lines = text.upper().replace("\r\n", "\n").split("\n")
    return tuple(lines) if lines else ("",)


def size_norm_factor(width: int, height: int) -> float:
    return min(width, height) / REFERENCE_SIZE


def base_font_size(lines: tuple[str, ...], font_size_offset: int = 0) -> int:
    longest = max(len(line) for line in lines)
    multi_line = len(lines) > 1

    size = 40
    if longest > 5:
        size = 30
    if longest > (10 if multi_line else 8):
        size = 20
    if longest > 20:
        size = 14

    if len(lines) > 3:
        size = min(size, 18)
    elif len(lines) > 2:
        size = min(size, 24)
    elif multi_line:
        size = min(size, 32)

    return max(MIN_BASE_FONT, size + int(font_size_offset))


def _clamp_font(size: float) -> float:
    if not math.isfinite(size) or size < MIN_FONT_PX:
        return MIN_FONT_PX
    return size


def _widest(lines: tuple[str, ...], measure: MeasureFn, font_size: float) -> float:
    return max(float(measure(line, font_size)) for line in lines)


def compute_layout(
    text: str,
    width: int,
    height: int,
    measure: MeasureFn,
    font_size_offset: int = 0,
    animation: AnimationKind | str = AnimationKind.PULSE,
) -> LayoutResult:
    """Pick font size and lines so the text block fits the canvas.

    The widest line is kept within 90% of the canvas width, except for slide,
    whose sweep carries the text past both edges on purpose. The block height
    is kept within 90% of the canvas height for every animation. Fitting may
    shrink below ``MIN_FONT_PX``; only unusable measurements (NaN or infinite
    widths) settle on it.
    """
    lines = split_lines(text)
    norm = size_norm_factor(width, height)
    font_size = _clamp_font(base_font_size(lines, font_size_offset) * norm)
    widest = _widest(lines, measure, font_size)

    if AnimationKind(animation) is not AnimationKind.SLIDE:
        max_width = FIT_RATIO * width
        passes = 0
        while not widest <= max_width and font_size > FONT_FLOOR_PX and passes < MAX_FIT_PASSES:
            candidate = font_size * max_width / widest
            if not math.isfinite(candidate) or candidate <= 0:
                # Unusable measurement: settle on the readable minimum.
                font_size = MIN_FONT_PX
                widest = _widest(lines, measure, font_size)
                break
            font_size = max(FONT_FLOOR_PX, min(candidate, font_size - SHRINK_STEP_PX))
            widest = _widest(lines, measure, font_size)
            passes += 1

    max_height = FIT_RATIO * height
    block = len(lines) * font_size * LINE_HEIGHT_RATIO
    if block > max_height:
        font_size = max(FONT_FLOOR_PX, font_size * max_height / block)
        widest = _widest(lines, measure, font_size)

    return LayoutResult(
        lines=lines,
        font_size_px=font_size,
        line_height_px=font_size * LINE_HEIGHT_RATIO,
        longest_line_width_px=widest if math.isfinite(widest) else 0.0,
        size_norm=norm,
    )
