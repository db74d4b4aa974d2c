"""CLI entrypoints for exporting, previewing and inspecting reaction GIFs."""

from __future__ import annotations

import argparse
import json
import os
import tempfile
import threading
import time
from dataclasses import asdict
from pathlib import Path

from gifmoji_core import (
    ExportError,
    PerformanceController,
    PerformanceTargets,
    PreviewDriver,
    build_doctor_payload,
    export_animation,
    frame_count_for,
    load_config,
    output_filename,
)
from gifmoji_core.config import AppConfig
from gifmoji_core.logging_setup import configure_logging, get_logger
from gifmoji_renderer import AnimationKind, FrameRenderer, PatternKind, StyleConfig, get_preset, list_presets
from gifmoji_renderer.presets import PRESETS


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


def _style_from_args(cfg: AppConfig, args: argparse.Namespace) -> StyleConfig:
    width = height = None
    if args.preset:
        preset = get_preset(args.preset)
        width, height = preset.width, preset.height
    width = args.width or width
    height = args.height or height
    text = args.text.replace("\\n", "\n") if args.text is not None else None
    return cfg.style_config(
        text=text,
        text_color=args.text_color,
        background_color=args.bg_color,
        transparent_background=args.transparent,
        animation=args.animation,
        pattern=args.pattern,
        width=width,
        height=height,
        duration_seconds=args.duration,
        font_size_offset=args.font_offset,
    )


def _write_atomic(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".gifmoji-", suffix=".part", dir=str(path.parent))
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def cmd_export(args: argparse.Namespace) -> int:
    cfg = load_config()
    style = _style_from_args(cfg, args)
    fps = args.fps or cfg.export.fps

    try:
        data = export_animation(style, fps=fps, max_colors=cfg.export.max_colors, font_path=cfg.style.font_path)
    except ExportError as exc:
        _print_json({"success": False, "error": str(exc)})
        return 1

    out_dir = Path(args.out_dir or cfg.export.output_dir or ".").expanduser().resolve()
    path = Path(args.out).expanduser().resolve() if args.out else out_dir / output_filename(style)
    _write_atomic(path, data)
    _print_json(
        {
            "success": True,
            "path": str(path),
            "bytes": len(data),
            "frames": frame_count_for(style.duration_seconds, fps),
            "size": [style.width, style.height],
        }
    )
    return 0


def cmd_frame(args: argparse.Namespace) -> int:
    cfg = load_config()
    style = _style_from_args(cfg, args)
    image = FrameRenderer(style, font_path=cfg.style.font_path).render(args.t)
    path = Path(args.out).expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    image.save(path, format="PNG")
    _print_json({"success": True, "path": str(path), "t": args.t})
    return 0


def cmd_preview(args: argparse.Namespace) -> int:
    cfg = load_config()
    style = _style_from_args(cfg, args)
    budget = PerformanceController(
        PerformanceTargets(
            cpu_percent_max=cfg.performance.cpu_percent_max,
            rss_mb_max=cfg.performance.rss_mb_max,
            fps_min=cfg.preview.fps_min,
            fps_max=cfg.preview.fps_max,
        )
    )
    latest: dict[str, object] = {}
    lock = threading.Lock()

    def on_frame(image, t: float) -> None:
        with lock:
            latest["image"] = image.copy()
            latest["t"] = t

    driver = PreviewDriver(
        style,
        on_frame,
        refresh_hz=cfg.preview.refresh_hz,
        font_path=cfg.style.font_path,
        budget=budget,
    )
    driver.start()
    try:
        time.sleep(args.seconds)
    finally:
        fps = driver.fps
        driver.cancel()

    payload: dict[str, object] = {
        "seconds": args.seconds,
        "frames": driver.frames_rendered,
        "fps": fps,
        "interval_ms": driver.interval_ms,
        "budget": asdict(driver.last_budget) if driver.last_budget else None,
    }
    if args.out and "image" in latest:
        path = Path(args.out).expanduser().resolve()
        path.parent.mkdir(parents=True, exist_ok=True)
        latest["image"].save(path, format="PNG")  # type: ignore[union-attr]
        payload["path"] = str(path)
        payload["t"] = latest["t"]
    _print_json(payload)
    return 0


def cmd_presets(_args: argparse.Namespace) -> int:
    _print_json([asdict(p) for p in list_presets()])
    return 0


def cmd_doctor(_args: argparse.Namespace) -> int:
    _print_json(build_doctor_payload(load_config()))
    return 0


def _add_style_args(cmd: argparse.ArgumentParser) -> None:
    cmd.add_argument("--text", default=None, help="Message; use \\n for line breaks")
    cmd.add_argument("--text-color", default=None)
    cmd.add_argument("--bg-color", default=None)
    cmd.add_argument("--transparent", action=argparse.BooleanOptionalAction, default=None)
    cmd.add_argument("--animation", default=None, choices=[k.value for k in AnimationKind])
    cmd.add_argument("--pattern", default=None, choices=[k.value for k in PatternKind])
    cmd.add_argument("--preset", default=None, choices=sorted(PRESETS))
    cmd.add_argument("--width", type=int, default=None)
    cmd.add_argument("--height", type=int, default=None)
    cmd.add_argument("--duration", type=float, default=None, help="Loop length in seconds")
    cmd.add_argument("--font-offset", type=int, default=None, help="Additive font size bias")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gifmoji", description="Animated text reaction GIF maker")
    sub = parser.add_subparsers(dest="command", required=True)

    export_cmd = sub.add_parser("export", help="Render and save an animated GIF")
    _add_style_args(export_cmd)
    export_cmd.add_argument("--fps", type=int, default=None)
    export_cmd.add_argument("--out-dir", default=None, help="Directory for the generated file name")
    export_cmd.add_argument("--out", default=None, help="Explicit output path")
    export_cmd.set_defaults(func=cmd_export)

    frame_cmd = sub.add_parser("frame", help="Render a single frame to PNG")
    _add_style_args(frame_cmd)
    frame_cmd.add_argument("--t", type=float, default=0.0, help="Loop position in [0, 1)")
    frame_cmd.add_argument("--out", required=True)
    frame_cmd.set_defaults(func=cmd_frame)

    preview_cmd = sub.add_parser("preview", help="Run the live preview loop for a while")
    _add_style_args(preview_cmd)
    preview_cmd.add_argument("--seconds", type=float, default=3.0)
    preview_cmd.add_argument("--out", default=None, help="Save the last preview frame as PNG")
    preview_cmd.set_defaults(func=cmd_preview)

    presets_cmd = sub.add_parser("presets", help="List output size presets")
    presets_cmd.set_defaults(func=cmd_presets)

    doctor_cmd = sub.add_parser("doctor", help="Print environment diagnostics")
    doctor_cmd.set_defaults(func=cmd_doctor)

    return parser


def main(argv: list[str] | None = None) -> int:
    cfg = load_config()
    configure_logging(keep_files=cfg.diagnostics.keep_log_files, console=False)
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return int(args.func(args))
    except ValueError as exc:
        get_logger().warning(f"invalid input: {exc}", extra={"event": "invalid_input"})
        _print_json({"success": False, "error": str(exc)})
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
