"""Built-in output sizes for reaction images."""

from __future__ import annotations

from .models import PresetSize

DEFAULT_PRESET_ID = "reaction"

PRESETS: dict[str, PresetSize] = {
    "reaction": PresetSize(id="reaction", label="Reaction (128x128)", width=128, height=128),
    "emoji-hd": PresetSize(id="emoji-hd", label="Emoji HD (256x256)", width=256, height=256),
    "sticker": PresetSize(id="sticker", label="Sticker (320x320)", width=320, height=320),
    "banner": PresetSize(id="banner", label="Banner (300x200)", width=300, height=200),
    "wide": PresetSize(id="wide", label="Wide (480x270)", width=480, height=270),
}


def list_presets() -> list[PresetSize]:
    return list(PRESETS.values())


def get_preset(preset_id: str | None) -> PresetSize:
    if not preset_id:
        return PRESETS[DEFAULT_PRESET_ID]
    return PRESETS.get(preset_id, PRESETS[DEFAULT_PRESET_ID])


def closest_square_preset(size: int) -> PresetSize:
    squares = [p for p in PRESETS.values() if p.width == p.height]
    return min(squares, key=lambda p: abs(p.width - size))
