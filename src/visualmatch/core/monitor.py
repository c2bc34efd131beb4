# -*- coding: utf-8 -*-
"""Polling monitor that re-captures a page and tracks its similarity trend."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable

from visualmatch.constants import (
    CHANGE_EPSILON,
    CHANGE_IMPROVEMENT,
    CHANGE_NONE,
    CHANGE_REGRESSION,
    MONITOR_RUNNING,
    MONITOR_STOPPED,
    STATUS_BANDS,
    STATUS_MAJOR_FIXES,
)
from visualmatch.core.scroll_search import CaptureCallable, CompareCallable
from visualmatch.models.monitor_event import ChangeClassification, MonitorEvent
from visualmatch.utils.file_utils import ensure_dir, timestamp_slug

logger = logging.getLogger(__name__)

UpdateCallback = Callable[[MonitorEvent], None]
ErrorCallback = Callable[[int, Exception], None]
SleepCallable = Callable[[float], None]
ClockCallable = Callable[[], datetime]


def classify_change(current: float, previous: float) -> ChangeClassification:
    """Label the change between two similarity scores (strict 0.5 margin)."""
    delta = float(current) - float(previous)
    if delta > CHANGE_EPSILON:
        return ChangeClassification(kind=CHANGE_IMPROVEMENT, delta=delta)
    if delta < -CHANGE_EPSILON:
        return ChangeClassification(kind=CHANGE_REGRESSION, delta=delta)
    return ChangeClassification(kind=CHANGE_NONE, delta=delta)


def status_band(similarity: float) -> str:
    for minimum, status in STATUS_BANDS:
        if similarity >= minimum:
            return status
    return STATUS_MAJOR_FIXES


class MonitorSession:
    """State of one monitoring run; ``cancel()`` is safe from any thread."""

    def __init__(self) -> None:
        self.iteration = 1
        self.previous_similarity = 0
        self.state = MONITOR_RUNNING
        self.failures = 0
        self.events: list[MonitorEvent] = []
        self._cancel_event = threading.Event()

    @property
    def running(self) -> bool:
        return self.state == MONITOR_RUNNING

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def completed_iterations(self) -> int:
        return self.iteration - 1

    def cancel(self) -> None:
        logger.debug("Monitor cancellation requested")
        self._cancel_event.set()

    def wait(self, seconds: float) -> None:
        """Sleep up to ``seconds``, returning early when cancelled."""
        self._cancel_event.wait(max(0.0, float(seconds)))


class ContinuousMonitor:
    """Run capture + compare at a fixed interval until the cap or a cancel."""

    def __init__(
        self,
        capture: CaptureCallable,
        compare: CompareCallable,
        *,
        sleep: SleepCallable | None = None,
        clock: ClockCallable | None = None,
    ) -> None:
        self.capture = capture
        self.compare = compare
        self._sleep = sleep
        self._clock = clock or datetime.now

    def run(
        self,
        reference_path: str | Path,
        *,
        interval: float = 15.0,
        max_iterations: int = 100,
        output_dir: str | Path = "./output",
        on_update: UpdateCallback | None = None,
        on_error: ErrorCallback | None = None,
        session: MonitorSession | None = None,
    ) -> MonitorSession:
        if float(interval) < 0:
            raise ValueError("interval must be >= 0")
        if int(max_iterations) < 0:
            raise ValueError("max_iterations must be >= 0")

        session = session or MonitorSession()
        session.state = MONITOR_RUNNING
        sleep = self._sleep or session.wait
        reference = Path(reference_path)
        out_dir = ensure_dir(output_dir)
        logger.info("Starting continuous visual matching, every %ss", interval)

        try:
            while not self._should_stop(session, max_iterations):
                event = self._iterate(session, reference, out_dir, on_error)
                if event is not None:
                    session.events.append(event)
                    if on_update is not None:
                        on_update(event)
                    session.previous_similarity = event.similarity
                    session.iteration += 1
                    if self._should_stop(session, max_iterations):
                        break
                sleep(float(interval))
        finally:
            session.state = MONITOR_STOPPED
        return session

    def _should_stop(self, session: MonitorSession, max_iterations: int) -> bool:
        if session.cancelled:
            logger.info("Monitoring cancelled after %s iterations", session.completed_iterations)
            return True
        if session.iteration > max_iterations:
            logger.info("Reached maximum iterations (%s)", max_iterations)
            return True
        return False

    def _iterate(
        self,
        session: MonitorSession,
        reference: Path,
        out_dir: Path,
        on_error: ErrorCallback | None,
    ) -> MonitorEvent | None:
        index = session.iteration
        now = self._clock()
        stamp = timestamp_slug(now)
        screenshot_path = out_dir / f"test-{index}-{stamp}.png"
        diff_path = out_dir / f"diff-{index}-{stamp}.png"

        try:
            captured = Path(self.capture(screenshot_path, None))
            comparison = self.compare(reference, captured, diff_path)
        except Exception as exc:
            session.failures += 1
            logger.error("Test #%s failed: %s", index, exc)
            if on_error is not None:
                on_error(index, exc)
            return None

        classification = None
        if index > 1:
            classification = classify_change(comparison.similarity, session.previous_similarity)
        event = MonitorEvent(
            iteration=index,
            similarity=comparison.similarity,
            status=status_band(comparison.similarity),
            screenshot_path=captured,
            diff_path=comparison.diff_image_path,
            comparison=comparison,
            timestamp=now,
            classification=classification,
        )
        logger.info(
            "Test #%s: %s%% similar (%s)",
            index,
            comparison.similarity,
            classification.kind if classification else "baseline",
        )
        return event
