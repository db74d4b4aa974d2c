"""Environment report for the ``doctor`` command."""

from __future__ import annotations

import platform
from dataclasses import asdict
from datetime import datetime, timezone
from importlib import metadata
from typing import Any

from gifmoji_renderer import list_presets
from gifmoji_renderer.surface import resolved_font_name

from .config import AppConfig, config_path
from .logging_setup import log_dir


def _version(dist: str) -> str | None:
    try:
        return metadata.version(dist)
    except metadata.PackageNotFoundError:
        return None


def build_doctor_payload(cfg: AppConfig) -> dict[str, Any]:
    return {
        "ts_utc": datetime.now(timezone.utc).isoformat(),
        "platform": platform.platform(),
        "python": platform.python_version(),
        "libraries": {
            "pillow": _version("pillow"),
            "numpy": _version("numpy"),
            "psutil": _version("psutil"),
        },
        "font": resolved_font_name(cfg.style.font_path),
        "config_path": str(config_path()),
        "log_dir": str(log_dir()),
        "config": asdict(cfg),
        "presets": [asdict(p) for p in list_presets()],
    }
