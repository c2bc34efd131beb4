# -*- coding: utf-8 -*-
"""Console presentation of comparison, search and monitor results."""

from __future__ import annotations

from pathlib import Path

import typer

from visualmatch.constants import (
    CHANGE_IMPROVEMENT,
    CHANGE_REGRESSION,
    STATUS_EXCELLENT,
    STATUS_GOOD,
    STATUS_LABELS,
    STATUS_NEEDS_IMPROVEMENT,
)
from visualmatch.models.comparison_result import ComparisonResult
from visualmatch.models.monitor_event import MonitorEvent
from visualmatch.models.search_state import ScrollSearchState

STATUS_COLORS = {
    STATUS_EXCELLENT: typer.colors.BRIGHT_GREEN,
    STATUS_GOOD: typer.colors.GREEN,
    STATUS_NEEDS_IMPROVEMENT: typer.colors.YELLOW,
}


def format_change(event: MonitorEvent) -> str:
    """Human readable change line; empty for the first iteration."""
    classification = event.classification
    if classification is None:
        return ""
    if classification.kind == CHANGE_IMPROVEMENT:
        return f"Improvement: +{classification.delta:.1f}%"
    if classification.kind == CHANGE_REGRESSION:
        return f"Regression: {classification.delta:.1f}%"
    return "No significant change"


class ConsoleReporter:
    """Echo results to the terminal; subscribes to matcher callbacks."""

    def __init__(self, color: bool | None = None) -> None:
        self.color = color

    def _echo(self, message: str = "", **style) -> None:
        typer.echo(typer.style(message, **style) if style else message, color=self.color)

    def comparison(self, result: ComparisonResult, screenshot_path: Path) -> None:
        self._echo("Comparison complete!", fg=typer.colors.GREEN, bold=True)
        self._echo(f"   Similarity: {result.similarity}%")
        self._echo(f"   Different pixels: {result.diff_pixels:,}")
        self._echo(f"   Total pixels: {result.total_pixels:,}")
        self._echo("Files generated:", fg=typer.colors.BLUE)
        self._echo(f"   Screenshot: {screenshot_path}")
        self._echo(f"   Diff image: {result.diff_image_path}")

    def candidate(self, offset: int, result: ComparisonResult, improved: bool) -> None:
        if improved:
            self._echo(f"New best at y={offset}: {result.similarity}%", fg=typer.colors.GREEN)
        else:
            self._echo(f"y={offset}: {result.similarity}%")

    def best_match(self, state: ScrollSearchState) -> None:
        if state.evaluated == 0:
            self._echo("No scroll positions evaluated.", fg=typer.colors.YELLOW)
            return
        if state.best_comparison is None:
            self._echo(f"No match at any of {state.evaluated} scroll positions (similarity 0%).", fg=typer.colors.RED)
            return
        self._echo("Best match found!", fg=typer.colors.GREEN, bold=True)
        self._echo(f"   Scroll position: y={state.best_offset}")
        self._echo(f"   Similarity: {state.best_similarity}%")
        self._echo(f"   Positions tested: {state.evaluated}")
        self._echo(f"   Screenshot: {state.screenshot_path}")
        self._echo(f"   Diff image: {state.diff_path}")
        if state.failures:
            self._echo(f"   Skipped positions: {len(state.failures)}", fg=typer.colors.YELLOW)

    def monitor_started(self, url: str, interval: float, max_iterations: int) -> None:
        self._echo("Starting continuous monitoring...", fg=typer.colors.BLUE)
        self._echo(f"URL: {url}")
        self._echo(f"Interval: {interval:g}s")
        self._echo(f"Max iterations: {max_iterations}")

    def monitor_event(self, event: MonitorEvent) -> None:
        self._echo()
        self._echo(f"Test #{event.iteration} at {event.timestamp:%H:%M:%S}", bold=True)
        self._echo("=" * 50)
        self._echo(f"Screenshot saved: {event.screenshot_path.name}")
        self._echo(f"Similarity Score: {event.similarity}%")
        change = format_change(event)
        if change:
            self._echo(change)
        color = STATUS_COLORS.get(event.status, typer.colors.RED)
        self._echo(STATUS_LABELS[event.status], fg=color)
        self._echo(f"Different pixels: {event.comparison.diff_percent:.2f}%")

    def monitor_error(self, iteration: int, exc: Exception) -> None:
        typer.echo(
            typer.style(f"Test #{iteration} failed: {exc}", fg=typer.colors.RED),
            err=True,
            color=self.color,
        )
