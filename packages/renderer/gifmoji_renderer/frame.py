"""Frame composer: background, pattern, then animated text."""

from __future__ import annotations

from PIL import Image

from .animations import compute_transform
from .layout import compute_layout
from .models import BLACK, AnimationKind, LayoutResult, StyleConfig, Transform
from .patterns import draw_pattern
from .surface import DrawingSurface


def stroke_width_for(layout: LayoutResult) -> int:
    return max(1, int(round(layout.size_norm)))


def wants_stroke(style: StyleConfig) -> bool:
    return not (style.transparent_background and style.text_color[:3] == BLACK[:3])


def frame_transform(style: StyleConfig, layout: LayoutResult, width: int, t: float) -> Transform:
    return compute_transform(
        style.animation,
        t,
        size_norm=layout.size_norm,
        sweep_range=width + layout.longest_line_width_px,
    )


def render_frame(
    surface: DrawingSurface,
    style: StyleConfig,
    width: int | None = None,
    height: int | None = None,
    t: float = 0.0,
) -> LayoutResult:
    """Draw the frame for loop position ``t`` onto ``surface`` in place."""
    width = width or surface.width
    height = height or surface.height

    surface.clear()
    if not style.transparent_background:
        surface.fill(style.background_color[:3] + (255,))

    draw_pattern(surface, style.pattern, width, height, t, style.animation, style.transparent_background)

    layout = compute_layout(
        style.text,
        width,
        height,
        surface.measure_text,
        font_size_offset=style.font_size_offset,
        animation=style.animation,
    )
    transform = frame_transform(style, layout, width, t)
    fill = transform.fill if style.animation is AnimationKind.RAINBOW and transform.fill else style.text_color
    stroke = BLACK if wants_stroke(style) else None

    with surface.checkpoint():
        surface.translate(width / 2, height / 2)
        surface.translate(transform.translate_x, transform.translate_y)
        surface.rotate(transform.rotation)
        surface.scale(transform.scale_x, transform.scale_y)
        if transform.alpha is not None:
            surface.set_alpha(transform.alpha)

        y = -layout.block_height_px / 2 + layout.line_height_px / 2
        for line in layout.lines:
            surface.fill_text(line, 0.0, y, layout.font_size_px, fill, stroke=stroke, stroke_width=stroke_width_for(layout))
            y += layout.line_height_px

    return layout


class FrameRenderer:
    """Binds one surface to one style for repeated renders."""

    def __init__(self, style: StyleConfig, font_path: str | None = None) -> None:
        self.style = style
        self.surface = DrawingSurface(style.width, style.height, font_path=font_path)

    def render(self, t: float) -> Image.Image:
        render_frame(self.surface, self.style, self.style.width, self.style.height, t)
        return self.surface.image

    def pixels(self, t: float) -> bytearray:
        self.render(t)
        return self.surface.pixels()
