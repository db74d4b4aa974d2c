"""Export and live-preview drivers over the frame renderer."""

from __future__ import annotations

import re
import threading
import time
from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Any, Callable

from PIL import Image

from gifmoji_renderer import FrameRenderer, StyleConfig, binarize_alpha

from .codec import PillowGifCodec
from .logging_setup import get_logger
from .performance import BudgetStatus, PerformanceController

EXPORT_FPS = 20
DEFAULT_MAX_COLORS = 256


class ExportError(RuntimeError):
    pass


def frame_count_for(duration_seconds: float, fps: int = EXPORT_FPS) -> int:
    return max(1, int(round(fps * duration_seconds)))


def frame_delay_ms(duration_seconds: float, frame_count: int) -> float:
    return 1000.0 * duration_seconds / frame_count


def output_filename(style: StyleConfig, day: date | None = None) -> str:
    day = day or date.today()
    slug = re.sub(r"[^a-z0-9]+", "-", style.text.lower()).strip("-") or "blank"
    return f"reaction-{slug[:24]}-{style.width}x{style.height}-{day:%Y%m%d}.gif"


def export_animation(
    style: StyleConfig,
    codec: Any = None,
    fps: int = EXPORT_FPS,
    max_colors: int = DEFAULT_MAX_COLORS,
    font_path: str | None = None,
    on_progress: Callable[[int, int], None] | None = None,
) -> bytes:
    """Render every frame of one loop and encode it.

    Frame ``i`` of ``n`` is rendered at ``t = i / n``. Any render or codec
    failure aborts the whole export with :class:`ExportError`.
    """
    logger = get_logger()
    count = frame_count_for(style.duration_seconds, fps)
    delay = frame_delay_ms(style.duration_seconds, count)
    width, height = style.width, style.height
    transparent = style.transparent_background

    logger.info(
        f"export start frames={count} size={width}x{height} animation={style.animation.value}",
        extra={"event": "export_start", "frames": count, "size": [width, height], "animation": style.animation.value},
    )
    started = time.perf_counter()
    try:
        codec = codec if codec is not None else PillowGifCodec()
        renderer = FrameRenderer(style, font_path=font_path)
        for i in range(count):
            pixels = renderer.pixels(i / count)
            if transparent:
                binarize_alpha(pixels)
            palette = codec.quantize(pixels, width, height, max_colors, transparent)
            index = codec.apply_palette(pixels, width, height, palette, transparent)
            codec.write_frame(index, width, height, palette=palette, delay_ms=delay, transparent=transparent)
            logger.debug(
                f"export frame {i + 1}/{count} colors={len(palette)}",
                extra={"event": "export_frame", "frame": i + 1, "frames": count},
            )
            if on_progress is not None:
                on_progress(i + 1, count)
        codec.finish()
        data = codec.bytes()
    except Exception as exc:
        logger.error(f"export failed: {exc}", exc_info=True, extra={"event": "export_failed"})
        raise ExportError(f"export failed: {exc}") from exc

    elapsed = round(time.perf_counter() - started, 3)
    logger.info(
        f"export done bytes={len(data)} elapsed_s={elapsed:.3f}",
        extra={"event": "export_done", "frames": count, "bytes": len(data), "elapsed_s": elapsed},
    )
    return data


class ExportState(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ExportStatus:
    state: ExportState = ExportState.IDLE
    frames_done: int = 0
    frame_count: int = 0
    bytes_written: int = 0
    last_error: str | None = None


class ExportJob:
    """Runs one export on a worker thread so callers can watch its state."""

    def __init__(
        self,
        style: StyleConfig,
        codec_factory: Callable[[], Any] = PillowGifCodec,
        fps: int = EXPORT_FPS,
        max_colors: int = DEFAULT_MAX_COLORS,
        font_path: str | None = None,
    ) -> None:
        self.style = style
        self.fps = fps
        self.max_colors = max_colors
        self.font_path = font_path
        self._codec_factory = codec_factory
        self._status = ExportStatus()
        self._lock = threading.RLock()
        self._thread: threading.Thread | None = None
        self._result: bytes | None = None
        self._error: ExportError | None = None

    @property
    def status(self) -> ExportStatus:
        with self._lock:
            return replace(self._status)

    def start(self) -> None:
        with self._lock:
            if self._status.state is ExportState.GENERATING:
                raise RuntimeError("export already running")
            self._result = None
            self._error = None
            self._status = ExportStatus(
                state=ExportState.GENERATING,
                frame_count=frame_count_for(self.style.duration_seconds, self.fps),
            )
            self._thread = threading.Thread(target=self._run, name="gifmoji-export", daemon=True)
            self._thread.start()

    def _progress(self, done: int, total: int) -> None:
        with self._lock:
            self._status.frames_done = done
            self._status.frame_count = total

    def _run(self) -> None:
        try:
            try:
                codec = self._codec_factory()
            except Exception as exc:
                get_logger().error(f"codec unavailable: {exc}", exc_info=True, extra={"event": "export_failed"})
                raise ExportError(f"codec unavailable: {exc}") from exc
            data = export_animation(
                self.style,
                codec=codec,
                fps=self.fps,
                max_colors=self.max_colors,
                font_path=self.font_path,
                on_progress=self._progress,
            )
        except ExportError as exc:
            with self._lock:
                self._error = exc
                self._status.state = ExportState.FAILED
                self._status.last_error = str(exc)
            return
        with self._lock:
            self._result = data
            self._status.bytes_written = len(data)
            self._status.state = ExportState.DONE

    def result(self, timeout: float | None = None) -> bytes:
        if self._thread is None:
            raise RuntimeError("export not started")
        self._thread.join(timeout)
        if self._thread.is_alive():
            raise TimeoutError("export still running")
        if self._error is not None:
            raise self._error
        if self._result is None:
            raise ExportError("export finished without output")
        return self._result


def preview_time(now_ms: float, duration_seconds: float) -> float:
    """Loop position from wall-clock milliseconds, kept apart from export's frame index."""
    loop_ms = duration_seconds * 1000.0
    return (now_ms % loop_ms) / loop_ms


class PreviewDriver:
    """Cancellable repeating task that keeps a persistent surface animated.

    ``on_frame`` receives the surface image after every render; the image is
    reused on the next tick, so callers that keep it must copy it.
    """

    def __init__(
        self,
        style: StyleConfig,
        on_frame: Callable[[Image.Image, float], None],
        clock: Callable[[], float] = time.time,
        refresh_hz: float = 30.0,
        font_path: str | None = None,
        budget: PerformanceController | None = None,
        sample_every: int = 30,
    ) -> None:
        self.style = style
        self.on_frame = on_frame
        self.clock = clock
        self.interval_ms = 1000.0 / max(1.0, refresh_hz)
        self.budget = budget
        self.sample_every = max(1, sample_every)
        self.frames_rendered = 0
        self.last_budget: BudgetStatus | None = None

        self._renderer = FrameRenderer(style, font_path=font_path)
        self._lock = threading.RLock()
        self._stop = threading.Event()
        self._cancelled = False
        self._thread: threading.Thread | None = None
        self._started_at = 0.0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def fps(self) -> float:
        elapsed = time.perf_counter() - self._started_at
        return self.frames_rendered / elapsed if self._started_at and elapsed > 0 else 0.0

    def start(self) -> None:
        if self._cancelled:
            raise RuntimeError("preview driver was cancelled")
        if self.running:
            return
        self._started_at = time.perf_counter()
        self._thread = threading.Thread(target=self._loop, name="gifmoji-preview", daemon=True)
        self._thread.start()
        get_logger().info("preview started", extra={"event": "preview_start"})

    def tick(self) -> bool:
        """Render one frame for the current wall-clock time unless cancelled."""
        with self._lock:
            if self._cancelled:
                return False
            t = preview_time(self.clock() * 1000.0, self.style.duration_seconds)
            image = self._renderer.render(t)
            self.frames_rendered += 1
            self.on_frame(image, t)
            return True

    def _loop(self) -> None:
        while not self._stop.is_set():
            if not self.tick():
                return
            if self.budget is not None and self.frames_rendered % self.sample_every == 0:
                self.last_budget = self.budget.sample(self.fps, self.interval_ms)
                self.interval_ms = self.last_budget.recommended_interval_ms
            self._stop.wait(self.interval_ms / 1000.0)

    def cancel(self, timeout: float | None = 2.0) -> None:
        self._stop.set()
        with self._lock:
            self._cancelled = True
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
        get_logger().info(
            f"preview cancelled frames={self.frames_rendered}",
            extra={"event": "preview_cancelled", "frames": self.frames_rendered},
        )
