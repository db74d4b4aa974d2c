"""Per-kind animation transforms over normalized loop time."""

from __future__ import annotations

import math
from typing import Callable

from PIL import ImageColor

from .models import AnimationKind, Transform

BLINK_DIM_ALPHA = 0.2


def _pulse(t: float, size_norm: float, sweep_range: float) -> Transform:
    scale = 1 + 0.2 * math.sin(2 * math.pi * t)
    return Transform(scale_x=scale, scale_y=scale)


def _spin(t: float, size_norm: float, sweep_range: float) -> Transform:
    return Transform(rotation=2 * math.pi * t)


def _shake(t: float, size_norm: float, sweep_range: float) -> Transform:
    return Transform(
        translate_x=5 * math.sin(8 * math.pi * t) * size_norm,
        translate_y=3 * math.cos(6 * math.pi * t) * size_norm,
    )


def _rainbow(t: float, size_norm: float, sweep_range: float) -> Transform:
    r, g, b = ImageColor.getrgb(f"hsl({360 * t:.3f}, 100%, 50%)")
    return Transform(fill=(r, g, b, 255))


def _slide(t: float, size_norm: float, sweep_range: float) -> Transform:
    return Transform(translate_x=sweep_range / 2 - t * sweep_range)


def _bounce(t: float, size_norm: float, sweep_range: float) -> Transform:
    return Transform(translate_y=10 * math.sin(2 * math.pi * t) * size_norm)


def _grow(t: float, size_norm: float, sweep_range: float) -> Transform:
    scale = t * 2 if t < 0.5 else (1 - t) * 2
    return Transform(scale_x=scale, scale_y=scale)


def _blink(t: float, size_norm: float, sweep_range: float) -> Transform:
    return Transform(alpha=1.0 if t < 0.5 else BLINK_DIM_ALPHA)


ANIMATIONS: dict[AnimationKind, Callable[[float, float, float], Transform]] = {
    AnimationKind.PULSE: _pulse,
    AnimationKind.SPIN: _spin,
    AnimationKind.SHAKE: _shake,
    AnimationKind.RAINBOW: _rainbow,
    AnimationKind.SLIDE: _slide,
    AnimationKind.BOUNCE: _bounce,
    AnimationKind.GROW: _grow,
    AnimationKind.BLINK: _blink,
}


def compute_transform(
    kind: AnimationKind | str,
    t: float,
    size_norm: float = 1.0,
    sweep_range: float = 0.0,
) -> Transform:
    """Return the transform for ``kind`` at loop position ``t``.

    ``t`` is wrapped into ``[0, 1)`` so whole loops map onto the same frame.
    ``size_norm`` scales the pixel magnitudes of shake and bounce, and
    ``sweep_range`` is the full horizontal travel used by slide (surface width
    plus the widest text line).
    """
    return ANIMATIONS[AnimationKind(kind)](t % 1.0, size_norm, sweep_range)
