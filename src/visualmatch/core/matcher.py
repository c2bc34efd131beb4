# -*- coding: utf-8 -*-
"""Session object tying the renderer to comparison, search and monitoring."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from visualmatch.constants import DEFAULT_THRESHOLD
from visualmatch.core.monitor import (
    ClockCallable,
    ContinuousMonitor,
    ErrorCallback,
    MonitorSession,
    SleepCallable,
    UpdateCallback,
)
from visualmatch.core.scroll_search import CandidateCallback, ScrollPositionSearcher
from visualmatch.models.comparison_result import ComparisonResult, ScreenshotComparison
from visualmatch.models.search_state import ScrollSearchState
from visualmatch.models.viewport import Viewport
from visualmatch.pipeline.comparator import ImageComparator
from visualmatch.pipeline.renderer import PageRenderer

logger = logging.getLogger(__name__)


class VisualMatcher:
    """Capture pages and compare them against reference images.

    The matcher owns a single browser, started lazily on the first capture.
    Always ``close()`` it, or use it as a context manager.
    """

    def __init__(
        self,
        viewport: Viewport | None = None,
        *,
        threshold: float = DEFAULT_THRESHOLD,
        include_aa: bool = False,
        renderer: PageRenderer | None = None,
        **renderer_options: Any,
    ) -> None:
        self.viewport = viewport or Viewport()
        self.comparator = ImageComparator(threshold=threshold, include_aa=include_aa)
        self.renderer = renderer or PageRenderer(self.viewport, **renderer_options)

    @classmethod
    def from_config(cls, config: dict[str, Any], **overrides: Any) -> VisualMatcher:
        """Build a matcher from a settings dict (see ``visualmatch.config``)."""
        viewport_cfg = config.get("viewport", {})
        browser_cfg = config.get("browser", {})
        comparison_cfg = config.get("comparison", {})
        options: dict[str, Any] = {
            "viewport": Viewport(int(viewport_cfg.get("width", 1920)), int(viewport_cfg.get("height", 1080))),
            "threshold": float(comparison_cfg.get("threshold", DEFAULT_THRESHOLD)),
            "include_aa": bool(comparison_cfg.get("include_anti_aliasing", False)),
            "headless": bool(browser_cfg.get("headless", True)),
            "engine": str(browser_cfg.get("engine", "chromium")),
        }
        if "timeout_ms" in browser_cfg:
            options["timeout_ms"] = int(browser_cfg["timeout_ms"])
        if "settle_ms" in browser_cfg:
            options["settle_ms"] = int(browser_cfg["settle_ms"])
        options.update(overrides)
        return cls(**options)

    def close(self) -> None:
        self.renderer.close()

    def __enter__(self) -> VisualMatcher:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def take_screenshot(
        self,
        url: str,
        output_path: str | Path,
        *,
        scroll_y: int | None = None,
        full_page: bool = False,
    ) -> Path:
        return self.renderer.capture(url, output_path, scroll_y=scroll_y, full_page=full_page)

    def compare_images(self, image_a: str | Path, image_b: str | Path, diff_path: str | Path) -> ComparisonResult:
        return self.comparator.compare(image_a, image_b, diff_path)

    def compare_screenshot(
        self,
        url: str,
        reference_path: str | Path,
        *,
        screenshot_path: str | Path = "./temp-screenshot.png",
        diff_path: str | Path = "./temp-diff.png",
        scroll_y: int | None = None,
    ) -> ScreenshotComparison:
        """Capture ``url`` once and compare it against the reference."""
        captured = self.take_screenshot(url, screenshot_path, scroll_y=scroll_y)
        comparison = self.compare_images(reference_path, captured, diff_path)
        return ScreenshotComparison(url=url, screenshot_path=captured, comparison=comparison)

    def _capture_for(self, url: str):
        def _capture(output_path: Path, scroll_y: int | None) -> Path:
            return self.take_screenshot(url, output_path, scroll_y=scroll_y)

        return _capture

    def find_optimal_scroll_position(
        self,
        url: str,
        reference_path: str | Path,
        *,
        start_y: int = 0,
        end_y: int = 2000,
        step: int = 50,
        output_dir: str | Path = "./temp",
        prefix: str = "scroll-test",
        on_candidate: CandidateCallback | None = None,
    ) -> ScrollSearchState:
        searcher = ScrollPositionSearcher(self._capture_for(url), self.comparator.compare)
        return searcher.search(
            reference_path,
            start_y=start_y,
            end_y=end_y,
            step=step,
            output_dir=output_dir,
            prefix=prefix,
            on_candidate=on_candidate,
        )

    def new_session(self) -> MonitorSession:
        """Create a session handle up front so it can be cancelled from elsewhere."""
        return MonitorSession()

    def continuous_match(
        self,
        url: str,
        reference_path: str | Path,
        *,
        interval: float = 15.0,
        max_iterations: int = 100,
        output_dir: str | Path = "./output",
        on_update: UpdateCallback | None = None,
        on_error: ErrorCallback | None = None,
        session: MonitorSession | None = None,
        sleep: SleepCallable | None = None,
        clock: ClockCallable | None = None,
    ) -> MonitorSession:
        """Monitor ``url`` until ``max_iterations`` results or a cancel; blocks."""
        monitor = ContinuousMonitor(self._capture_for(url), self.comparator.compare, sleep=sleep, clock=clock)
        return monitor.run(
            reference_path,
            interval=interval,
            max_iterations=max_iterations,
            output_dir=output_dir,
            on_update=on_update,
            on_error=on_error,
            session=session,
        )


def compare_screenshot(url: str, reference_path: str | Path, **options: Any) -> ScreenshotComparison:
    """One-shot capture and compare; the browser is always released."""
    screenshot_path = options.pop("screenshot_path", "./temp-screenshot.png")
    diff_path = options.pop("diff_path", "./temp-diff.png")
    scroll_y = options.pop("scroll_y", None)
    with VisualMatcher(**options) as matcher:
        return matcher.compare_screenshot(
            url,
            reference_path,
            screenshot_path=screenshot_path,
            diff_path=diff_path,
            scroll_y=scroll_y,
        )


def find_best_match(url: str, reference_path: str | Path, **options: Any) -> ScrollSearchState:
    """One-shot scroll search; the browser is always released."""
    search_keys = ("start_y", "end_y", "step", "output_dir", "prefix", "on_candidate")
    search_options = {key: options.pop(key) for key in search_keys if key in options}
    with VisualMatcher(**options) as matcher:
        return matcher.find_optimal_scroll_position(url, reference_path, **search_options)


def start_continuous_matching(url: str, reference_path: str | Path, **options: Any) -> MonitorSession:
    """Blocking monitor run with its own matcher; the browser is always released."""
    monitor_keys = ("interval", "max_iterations", "output_dir", "on_update", "on_error", "session", "sleep", "clock")
    monitor_options = {key: options.pop(key) for key in monitor_keys if key in options}
    with VisualMatcher(**options) as matcher:
        return matcher.continuous_match(url, reference_path, **monitor_options)
