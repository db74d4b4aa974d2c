"""Core app services for settings, logging, export and live preview."""

from .codec import CodecError, PillowGifCodec
from .config import AppConfig, load_config, save_config
from .diagnostics import build_doctor_payload
from .performance import BudgetStatus, PerformanceController, PerformanceTargets
from .sequencer import (
    EXPORT_FPS,
    ExportError,
    ExportJob,
    ExportState,
    ExportStatus,
    PreviewDriver,
    export_animation,
    frame_count_for,
    output_filename,
    preview_time,
)

__all__ = [
    "AppConfig",
    "BudgetStatus",
    "CodecError",
    "EXPORT_FPS",
    "ExportError",
    "ExportJob",
    "ExportState",
    "ExportStatus",
    "PerformanceController",
    "PerformanceTargets",
    "PillowGifCodec",
    "PreviewDriver",
    "build_doctor_payload",
    "export_animation",
    "frame_count_for",
    "load_config",
    "output_filename",
    "preview_time",
    "save_config",
]
