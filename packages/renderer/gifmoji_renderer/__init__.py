"""Renderer package for animated reaction frames."""

from .alpha import binarize_alpha
from .animations import compute_transform
from .frame import FrameRenderer, render_frame
from .layout import compute_layout, size_norm_factor
from .models import (
    AnimationKind,
    LayoutResult,
    PatternKind,
    PresetSize,
    StyleConfig,
    Transform,
    parse_color,
)
from .patterns import burst_rotation, draw_pattern
from .presets import DEFAULT_PRESET_ID, get_preset, list_presets
from .surface import DrawingSurface

__all__ = [
    "AnimationKind",
    "DEFAULT_PRESET_ID",
    "DrawingSurface",
    "FrameRenderer",
    "LayoutResult",
    "PatternKind",
    "PresetSize",
    "StyleConfig",
    "Transform",
    "binarize_alpha",
    "burst_rotation",
    "compute_layout",
    "compute_transform",
    "draw_pattern",
    "get_preset",
    "list_presets",
    "parse_color",
    "render_frame",
    "size_norm_factor",
]
