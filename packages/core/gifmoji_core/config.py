"""Persistent app settings schema and load/save helpers."""

from __future__ import annotations

import json
import os
import platform
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from gifmoji_renderer import AnimationKind, PatternKind, StyleConfig, get_preset, parse_color
from gifmoji_renderer.models import MAX_LINE_CHARS
from gifmoji_renderer.presets import DEFAULT_PRESET_ID, PRESETS, closest_square_preset

CONFIG_VERSION = 2
HOME_ENV = "GIFMOJI_HOME"


@dataclass
class StyleDefaults:
    text: str = "WOW"
    text_color: str = "#ffffff"
    background_color: str = "#000000"
    transparent_background: bool = True
    animation: str = AnimationKind.PULSE.value
    pattern: str = PatternKind.NONE.value
    preset: str = DEFAULT_PRESET_ID
    duration_seconds: float = 2.0
    font_size_offset: int = 0
    font_path: str | None = None


@dataclass
class ExportConfig:
    fps: int = 20
    max_colors: int = 256
    output_dir: str | None = None


@dataclass
class PreviewConfig:
    refresh_hz: float = 30.0
    fps_min: float = 10.0
    fps_max: float = 30.0


@dataclass
class DiagnosticsConfig:
    keep_log_files: int = 7


@dataclass
class PerformanceConfig:
    cpu_percent_max: float = 25.0
    rss_mb_max: float = 300.0


@dataclass
class AppConfig:
    config_version: int = CONFIG_VERSION
    style: StyleDefaults = field(default_factory=StyleDefaults)
    export: ExportConfig = field(default_factory=ExportConfig)
    preview: PreviewConfig = field(default_factory=PreviewConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)

    def style_config(self, **overrides: Any) -> StyleConfig:
        preset = get_preset(self.style.preset)
        values: dict[str, Any] = {
            "text": self.style.text,
            "text_color": parse_color(self.style.text_color),
            "background_color": parse_color(self.style.background_color),
            "transparent_background": self.style.transparent_background,
            "animation": self.style.animation,
            "pattern": self.style.pattern,
            "width": preset.width,
            "height": preset.height,
            "duration_seconds": self.style.duration_seconds,
            "font_size_offset": self.style.font_size_offset,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return StyleConfig(**values)


DEFAULT_CONFIG = AppConfig()


def config_root() -> Path:
    override = os.environ.get(HOME_ENV)
    if override:
        return Path(override)
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "Gifmoji"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "Gifmoji"
    return Path.home() / ".config" / "gifmoji"


def config_path() -> Path:
    return config_root() / "config.json"


def _merge(dataclass_type, raw: dict[str, Any]):
    defaults = dataclass_type()  # type: ignore[misc]
    for k, v in raw.items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _valid_color(value: Any, fallback: str) -> str:
    try:
        parse_color(str(value))
    except ValueError:
        return fallback
    return str(value)


def _normalize_style(cfg: AppConfig) -> None:
    defaults = StyleDefaults()
    style = cfg.style
    if style.animation not in {kind.value for kind in AnimationKind}:
        style.animation = defaults.animation
    if style.pattern not in {kind.value for kind in PatternKind}:
        style.pattern = defaults.pattern
    if style.preset not in PRESETS:
        style.preset = defaults.preset
    style.text = "\n".join(line[:MAX_LINE_CHARS] for line in str(style.text).split("\n")[:5])
    style.text_color = _valid_color(style.text_color, defaults.text_color)
    style.background_color = _valid_color(style.background_color, defaults.background_color)
    style.duration_seconds = float(max(0.5, min(10.0, float(style.duration_seconds))))
    style.font_size_offset = max(-30, min(30, int(style.font_size_offset)))


def _normalize_export(cfg: AppConfig) -> None:
    cfg.export.fps = max(1, min(50, int(cfg.export.fps)))
    cfg.export.max_colors = max(2, min(256, int(cfg.export.max_colors)))


def _normalize_preview(cfg: AppConfig) -> None:
    cfg.preview.refresh_hz = float(max(1.0, min(120.0, cfg.preview.refresh_hz)))
    cfg.preview.fps_min = float(max(1.0, cfg.preview.fps_min))
    cfg.preview.fps_max = float(max(cfg.preview.fps_min, cfg.preview.fps_max))


def _normalize_performance(cfg: AppConfig) -> None:
    cfg.performance.cpu_percent_max = float(max(1.0, cfg.performance.cpu_percent_max))
    cfg.performance.rss_mb_max = float(max(64.0, cfg.performance.rss_mb_max))


def _migrate(raw: dict[str, Any]) -> dict[str, Any]:
    version = int(raw.get("config_version", 1))
    data = dict(raw)

    if version < 2:
        # v1 stored a single square edge length; v2 selects a preset instead.
        style = dict(data.get("style", {}) or {})
        size = style.pop("size", None)
        if size is not None:
            style.setdefault("preset", closest_square_preset(int(size)).id)
        data["style"] = style
        data.setdefault("preview", {})
        data.setdefault("performance", {})
        data["config_version"] = 2

    return data


def load_config(path: Path | None = None) -> AppConfig:
    path = path or config_path()
    if not path.exists():
        return AppConfig()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except Exception:
        return AppConfig()

    data = _migrate(raw)
    cfg = AppConfig(
        config_version=int(data.get("config_version", CONFIG_VERSION)),
        style=_merge(StyleDefaults, data.get("style", {})),
        export=_merge(ExportConfig, data.get("export", {})),
        preview=_merge(PreviewConfig, data.get("preview", {})),
        diagnostics=_merge(DiagnosticsConfig, data.get("diagnostics", {})),
        performance=_merge(PerformanceConfig, data.get("performance", {})),
    )

    _normalize_style(cfg)
    _normalize_export(cfg)
    _normalize_preview(cfg)
    _normalize_performance(cfg)
    return cfg


def save_config(cfg: AppConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path
