# -*- coding: utf-8 -*-
"""Linear search over vertical scroll offsets for the best visual match."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from visualmatch.errors import ScrollSearchError, VisualMatchError
from visualmatch.models.comparison_result import ComparisonResult
from visualmatch.models.search_state import ScrollSearchState
from visualmatch.utils.file_utils import ensure_dir

logger = logging.getLogger(__name__)

CaptureCallable = Callable[[Path, int | None], Path]
CompareCallable = Callable[[Path, Path, Path], ComparisonResult]
CandidateCallback = Callable[[int, ComparisonResult, bool], None]


def scroll_offsets(start_y: int, end_y: int, step: int) -> range:
    """Offsets from ``start_y`` to ``end_y`` inclusive; empty when start > end."""
    if int(step) <= 0:
        raise ValueError("step must be > 0")
    return range(int(start_y), int(end_y) + 1, int(step))


class ScrollPositionSearcher:
    """Capture and compare at every offset, keeping the first best match."""

    def __init__(self, capture: CaptureCallable, compare: CompareCallable) -> None:
        self.capture = capture
        self.compare = compare

    def search(
        self,
        reference_path: str | Path,
        *,
        start_y: int = 0,
        end_y: int = 2000,
        step: int = 50,
        output_dir: str | Path = "./temp",
        prefix: str = "scroll-test",
        on_candidate: CandidateCallback | None = None,
    ) -> ScrollSearchState:
        offsets = scroll_offsets(start_y, end_y, step)
        state = ScrollSearchState()
        if not offsets:
            logger.info("Empty scroll range %s..%s, nothing to search", start_y, end_y)
            return state

        reference = Path(reference_path)
        out_dir = ensure_dir(output_dir)
        logger.info("Finding optimal scroll position from %s to %s (step: %s)", start_y, end_y, step)

        last_error: Exception | None = None
        for y in offsets:
            screenshot_path = out_dir / f"{prefix}-{y}.png"
            diff_path = out_dir / f"{prefix}-{y}-diff.png"
            try:
                captured = self.capture(screenshot_path, y)
                comparison = self.compare(reference, Path(captured), diff_path)
            except (VisualMatchError, OSError) as exc:
                logger.warning("Failed to test scroll position %s: %s", y, exc)
                state.failures[y] = str(exc)
                last_error = exc
                continue

            improved = state.consider(y, comparison, Path(captured))
            if improved:
                logger.info("New best at y=%s: %s%%", y, comparison.similarity)
            if on_candidate is not None:
                on_candidate(y, comparison, improved)

        if not state.candidates:
            raise ScrollSearchError(
                f"All {len(state.failures)} scroll positions failed; last error: {last_error}",
                last_error=last_error,
            )
        return state
