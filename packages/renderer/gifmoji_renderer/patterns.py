"""Decorative background motifs drawn behind the text."""

from __future__ import annotations

import math
from typing import Callable

from PIL import ImageDraw

from .layout import size_norm_factor
from .models import AnimationKind, PatternKind
from .surface import DrawingSurface

BURST_RAYS = 20
BURST_RAY_SPAN = math.pi / BURST_RAYS * 0.5
SCATTER_ROWS = 4
SCATTER_COLS = 5
SCATTER_SHAPE_RATIO = 0.3
BEZIER_STEPS = 12

PATTERN_ALPHA_TRANSPARENT = 0.8
PATTERN_ALPHA_OPAQUE = 0.15

Point = tuple[float, float]

# Unit heart centred on the origin, one unit wide: start point then four
# cubic segments of (control 1, control 2, end).
HEART_START: Point = (0.0, -0.25)
HEART_SEGMENTS: tuple[tuple[Point, Point, Point], ...] = (
    ((0.0, -0.5), (-0.5, -0.5), (-0.5, -0.2)),
    ((-0.5, 0.1), (-0.2, 0.3), (0.0, 0.5)),
    ((0.2, 0.3), (0.5, 0.1), (0.5, -0.2)),
    ((0.5, -0.5), (0.0, -0.5), (0.0, -0.25)),
)


def pattern_color(transparent_background: bool) -> tuple[int, int, int, int]:
    opacity = PATTERN_ALPHA_TRANSPARENT if transparent_background else PATTERN_ALPHA_OPAQUE
    return (255, 255, 255, int(round(255 * opacity)))


def burst_rotation(t: float, animation: AnimationKind | str) -> float:
    if AnimationKind(animation) in (AnimationKind.SPIN, AnimationKind.RAINBOW):
        return (t % 1.0) * math.pi
    return 0.0


def burst_wedges(width: int, height: int, rotation: float = 0.0) -> list[list[Point]]:
    cx, cy = width / 2, height / 2
    radius = max(width, height)
    wedges = []
    for i in range(BURST_RAYS):
        start = i * 2 * math.pi / BURST_RAYS + rotation
        end = start + BURST_RAY_SPAN
        wedges.append(
            [
                (cx, cy),
                (cx + radius * math.cos(start), cy + radius * math.sin(start)),
                (cx + radius * math.cos(end), cy + radius * math.sin(end)),
            ]
        )
    return wedges


def _cubic(p0: Point, p1: Point, p2: Point, p3: Point, steps: int = BEZIER_STEPS) -> list[Point]:
    out = []
    for step in range(1, steps + 1):
        u = step / steps
        v = 1 - u
        out.append(
            (
                v**3 * p0[0] + 3 * v * v * u * p1[0] + 3 * v * u * u * p2[0] + u**3 * p3[0],
                v**3 * p0[1] + 3 * v * v * u * p1[1] + 3 * v * u * u * p2[1] + u**3 * p3[1],
            )
        )
    return out


def heart_points(cx: float, cy: float, size: float) -> list[Point]:
    """Flatten the heart outline; ``size`` is the half-width, like a star's outer radius."""

    def at(p: Point) -> Point:
        return (cx + p[0] * 2 * size, cy + p[1] * 2 * size)

    points = [at(HEART_START)]
    current = HEART_START
    for c1, c2, end in HEART_SEGMENTS:
        points.extend(_cubic(at(current), at(c1), at(c2), at(end)))
        current = end
    return points


def star_points(cx: float, cy: float, outer: float, spikes: int = 5) -> list[Point]:
    inner = outer / 2
    points = []
    for i in range(spikes * 2):
        radius = outer if i % 2 == 0 else inner
        angle = -math.pi / 2 + i * math.pi / spikes
        points.append((cx + radius * math.cos(angle), cy + radius * math.sin(angle)))
    return points


def scatter_centers(width: int, height: int) -> list[Point]:
    cell_w = width / SCATTER_COLS
    cell_h = height / SCATTER_ROWS
    centers = []
    for row in range(SCATTER_ROWS):
        offset = cell_w / 2 if row % 2 == 1 else 0.0
        for col in range(SCATTER_COLS):
            centers.append(((col + 0.5) * cell_w + offset, (row + 0.5) * cell_h))
    return centers


def _draw_burst(draw: ImageDraw.ImageDraw, width: int, height: int, t: float, animation: AnimationKind, color) -> None:
    for wedge in burst_wedges(width, height, burst_rotation(t, animation)):
        draw.polygon(wedge, fill=color)


def _draw_bubble(draw: ImageDraw.ImageDraw, width: int, height: int, t: float, animation: AnimationKind, color) -> None:
    norm = size_norm_factor(width, height)
    # 10 px at the 128 px reference size; grows with larger presets like the radius and tail.
    inset = 10 * norm
    line = max(1, int(round(2 * norm)))
    box = (inset, inset, width - inset, height - inset)
    rounded = getattr(draw, "rounded_rectangle", None)
    if rounded is not None:
        rounded(box, radius=max(1, int(round(16 * norm))), outline=color, width=line)
    else:
        draw.rectangle(box, outline=color, width=line)

    cx = width / 2
    bottom = height - inset
    tail = 8 * norm
    draw.polygon([(cx - tail, bottom), (cx, min(height - 1, bottom + tail)), (cx + tail, bottom)], fill=color)


def _draw_scatter(shape: Callable[[float, float, float], list[Point]]):
    def draw_scatter(draw: ImageDraw.ImageDraw, width: int, height: int, t: float, animation: AnimationKind, color) -> None:
        size = SCATTER_SHAPE_RATIO * min(width / SCATTER_COLS, height / SCATTER_ROWS)
        for cx, cy in scatter_centers(width, height):
            draw.polygon(shape(cx, cy, size), fill=color)

    return draw_scatter


PATTERNS = {
    PatternKind.NONE: None,
    PatternKind.BURST: _draw_burst,
    PatternKind.BUBBLE: _draw_bubble,
    PatternKind.HEART: _draw_scatter(heart_points),
    PatternKind.STAR: _draw_scatter(star_points),
}


def draw_pattern(
    surface: DrawingSurface,
    pattern: PatternKind | str,
    width: int,
    height: int,
    t: float,
    animation: AnimationKind | str,
    transparent_background: bool = True,
) -> None:
    painter = PATTERNS[PatternKind(pattern)]
    if painter is None:
        return
    layer = surface.overlay()
    painter(ImageDraw.Draw(layer), width, height, t, AnimationKind(animation), pattern_color(transparent_background))
    surface.composite(layer)
