# -*- coding: utf-8 -*-
"""Headless browser capture of web pages through Playwright."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from visualmatch.constants import BROWSER_ENGINES, CHROMIUM_ARGS, NAVIGATION_TIMEOUT_MS, SCROLL_SETTLE_MS
from visualmatch.errors import RenderError
from visualmatch.models.viewport import Viewport
from visualmatch.utils.file_utils import ensure_dir

logger = logging.getLogger(__name__)


class PageRenderer:
    """Own one browser and capture pages with it, one page at a time.

    The browser is started on the first capture and released by ``close()``;
    use the renderer as a context manager to guarantee the release.
    """

    def __init__(
        self,
        viewport: Viewport | None = None,
        *,
        headless: bool = True,
        engine: str = "chromium",
        timeout_ms: int = NAVIGATION_TIMEOUT_MS,
        settle_ms: int = SCROLL_SETTLE_MS,
    ) -> None:
        if engine not in BROWSER_ENGINES:
            raise ValueError(f"Unsupported browser engine: {engine}")
        self.viewport = viewport or Viewport()
        self.headless = bool(headless)
        self.engine = engine
        self.timeout_ms = int(timeout_ms)
        self.settle_ms = int(settle_ms)
        self._playwright: Any = None
        self._browser: Any = None

    @property
    def started(self) -> bool:
        return self._browser is not None

    def start(self) -> None:
        if self._browser is not None:
            return
        logger.info("Launching %s (headless=%s)", self.engine, self.headless)
        try:
            self._playwright = sync_playwright().start()
            launcher = getattr(self._playwright, self.engine)
            launch_args = {"headless": self.headless}
            if self.engine == "chromium":
                launch_args["args"] = list(CHROMIUM_ARGS)
            self._browser = launcher.launch(**launch_args)
        except PlaywrightError as exc:
            self.close()
            raise RenderError(f"Failed to launch {self.engine}: {exc}") from exc

    def close(self) -> None:
        browser, playwright = self._browser, self._playwright
        self._browser = None
        self._playwright = None
        try:
            if browser is not None:
                browser.close()
        except PlaywrightError as exc:
            logger.warning("Browser did not close cleanly: %s", exc)
        finally:
            if playwright is not None:
                playwright.stop()

    def __enter__(self) -> PageRenderer:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def capture(
        self,
        url: str,
        output_path: str | Path,
        *,
        scroll_y: int | None = None,
        full_page: bool = False,
    ) -> Path:
        """Render ``url`` and write a PNG screenshot to ``output_path``."""
        self.start()
        target = Path(output_path)
        ensure_dir(target.parent)
        try:
            page = self._browser.new_page(viewport=self.viewport.as_dict())
        except PlaywrightError as exc:
            raise RenderError(f"Failed to open a page: {exc}") from exc

        try:
            page.goto(url, wait_until="networkidle", timeout=self.timeout_ms)
            if scroll_y is not None:
                page.evaluate("(y) => window.scrollTo(0, y)", int(scroll_y))
                page.wait_for_timeout(self.settle_ms)
            page.screenshot(path=str(target), full_page=full_page)
        except PlaywrightError as exc:
            raise RenderError(f"Failed to capture {url}: {exc}") from exc
        finally:
            try:
                page.close()
            except PlaywrightError as exc:
                logger.debug("Page did not close cleanly: %s", exc)

        logger.debug("Captured %s (scroll_y=%s) to %s", url, scroll_y, target)
        return target
