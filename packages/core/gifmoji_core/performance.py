"""Runtime budget sampling and preview frame-interval hints."""

from __future__ import annotations

from dataclasses import dataclass

import psutil


@dataclass(frozen=True)
class PerformanceTargets:
    cpu_percent_max: float = 25.0
    rss_mb_max: float = 300.0
    fps_min: float = 10.0
    fps_max: float = 30.0


@dataclass(frozen=True)
class BudgetStatus:
    cpu_percent: float
    rss_mb: float
    fps: float
    overloaded: bool
    warning: str | None
    recommended_interval_ms: float


class PerformanceController:
    def __init__(self, targets: PerformanceTargets | None = None) -> None:
        self.targets = targets or PerformanceTargets()
        self._process = psutil.Process()
        # Prime non-blocking CPU measurement.
        self._process.cpu_percent(interval=None)

    @property
    def min_interval_ms(self) -> float:
        return 1000.0 / self.targets.fps_max

    @property
    def max_interval_ms(self) -> float:
        return 1000.0 / self.targets.fps_min

    def sample(self, fps: float, interval_ms: float) -> BudgetStatus:
        cpu = float(self._process.cpu_percent(interval=None))
        rss_mb = float(self._process.memory_info().rss) / (1024 * 1024)
        overloaded = cpu > self.targets.cpu_percent_max or rss_mb > self.targets.rss_mb_max

        warning = None
        interval = interval_ms
        if overloaded:
            warning = "resource_overload"
            interval = interval_ms * 1.25 + 5
        elif fps < self.targets.fps_min:
            warning = "below_fps_target"
            interval = interval_ms - 5
        elif fps > self.targets.fps_max:
            warning = "above_fps_target"
            interval = interval_ms + 5

        return BudgetStatus(
            cpu_percent=cpu,
            rss_mb=rss_mb,
            fps=float(fps),
            overloaded=overloaded,
            warning=warning,
            recommended_interval_ms=max(self.min_interval_ms, min(self.max_interval_ms, interval)),
        )
