# -*- coding: utf-8 -*-
"""Command line interface: compare, find-best and watch."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import typer

from visualmatch.config import load_config
from visualmatch.constants import APP_NAME, APP_VERSION
from visualmatch.core.matcher import VisualMatcher
from visualmatch.cli.reporter import ConsoleReporter
from visualmatch.errors import VisualMatchError
from visualmatch.models.viewport import Viewport
from visualmatch.utils.logger import setup_session_logging

app = typer.Typer(help="Visual comparison of live web pages against reference images")
logger = logging.getLogger(__name__)


def _fail(exc: Exception) -> None:
    typer.echo(typer.style(f"Error: {type(exc).__name__}: {exc}", fg=typer.colors.RED), err=True)
    raise typer.Exit(1)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"{APP_NAME} {APP_VERSION}")
        raise typer.Exit()


def _settings(ctx: typer.Context) -> dict[str, Any]:
    return (ctx.obj or {}).get("config") or load_config()


def _build_matcher(
    config: dict[str, Any],
    width: int | None,
    height: int | None,
    **overrides: Any,
) -> VisualMatcher:
    viewport_cfg = config["viewport"]
    viewport = Viewport(width or int(viewport_cfg["width"]), height or int(viewport_cfg["height"]))
    return VisualMatcher.from_config(config, viewport=viewport, **overrides)


@app.callback()
def main(
    ctx: typer.Context,
    config: Path = typer.Option(None, "--config", help="Settings JSON file"),
    verbose: bool = typer.Option(False, "--verbose", help="Verbose output"),
    log_dir: Path = typer.Option(None, "--log-dir", help="Write a session log below this directory"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show the version and exit"
    ),
) -> None:
    """Visual comparison tool for pixel-perfect page clones."""
    if log_dir is not None:
        setup_session_logging(log_dir, APP_NAME, level=logging.DEBUG if verbose else logging.INFO)
    elif verbose:
        logging.basicConfig(level=logging.INFO)

    try:
        settings = load_config(config) if config is not None else load_config()
    except (ValueError, OSError) as exc:
        _fail(exc)
    ctx.obj = {"config": settings}


@app.command()
def compare(
    ctx: typer.Context,
    url: str = typer.Option(..., "--url", "-u", help="URL of the website to test"),
    reference: Path = typer.Option(..., "--reference", "-r", help="Path to reference image"),
    output: Path = typer.Option(Path("./output"), "--output", "-o", help="Output directory for screenshots and diffs"),
    width: int = typer.Option(None, "--width", "-w", help="Viewport width"),
    height: int = typer.Option(None, "--height", "-h", help="Viewport height"),
    scroll_y: int = typer.Option(None, "--scroll-y", help="Scroll to specific Y position"),
    threshold: float = typer.Option(None, "--threshold", help="Perceptual threshold (0-1)"),
    include_aa: bool = typer.Option(False, "--include-aa", help="Count anti-aliased pixels as differences"),
) -> None:
    """Compare a live website with a reference image."""
    config = _settings(ctx)
    reporter = ConsoleReporter()
    overrides: dict[str, Any] = {}
    if threshold is not None:
        overrides["threshold"] = threshold
    if include_aa:
        overrides["include_aa"] = True

    try:
        with _build_matcher(config, width, height, **overrides) as matcher:
            typer.echo("Taking screenshot...")
            result = matcher.compare_screenshot(
                url,
                reference,
                screenshot_path=output / "current-screenshot.png",
                diff_path=output / "comparison-diff.png",
                scroll_y=scroll_y,
            )
    except (VisualMatchError, ValueError) as exc:
        _fail(exc)
    reporter.comparison(result.comparison, result.screenshot_path)


@app.command("find-best")
def find_best(
    ctx: typer.Context,
    url: str = typer.Option(..., "--url", "-u", help="URL of the website to test"),
    reference: Path = typer.Option(..., "--reference", "-r", help="Path to reference image"),
    output: Path = typer.Option(None, "--output", "-o", help="Output directory"),
    start: int = typer.Option(None, "--start", "-s", help="Start scroll position"),
    end: int = typer.Option(None, "--end", "-e", help="End scroll position"),
    step: int = typer.Option(None, "--step", help="Step size for scroll testing"),
    width: int = typer.Option(None, "--width", "-w", help="Viewport width"),
    height: int = typer.Option(None, "--height", "-h", help="Viewport height"),
) -> None:
    """Find the scroll position that best matches the reference."""
    config = _settings(ctx)
    search_cfg = config["scroll_search"]
    reporter = ConsoleReporter()

    try:
        with _build_matcher(config, width, height) as matcher:
            state = matcher.find_optimal_scroll_position(
                url,
                reference,
                start_y=search_cfg["start_y"] if start is None else start,
                end_y=search_cfg["end_y"] if end is None else end,
                step=search_cfg["step"] if step is None else step,
                output_dir=output or Path(search_cfg["output_dir"]),
                prefix=search_cfg["prefix"],
                on_candidate=reporter.candidate,
            )
    except (VisualMatchError, ValueError) as exc:
        _fail(exc)
    reporter.best_match(state)


@app.command()
def watch(
    ctx: typer.Context,
    url: str = typer.Option(..., "--url", "-u", help="URL of the website to monitor"),
    reference: Path = typer.Option(..., "--reference", "-r", help="Path to reference image"),
    interval: float = typer.Option(None, "--interval", "-i", help="Check interval in seconds"),
    max_iterations: int = typer.Option(None, "--max", "-m", help="Maximum iterations"),
    output: Path = typer.Option(None, "--output", "-o", help="Output directory"),
    width: int = typer.Option(None, "--width", "-w", help="Viewport width"),
    height: int = typer.Option(None, "--height", "-h", help="Viewport height"),
) -> None:
    """Continuously monitor a website against the reference."""
    config = _settings(ctx)
    monitor_cfg = config["monitor"]
    interval = float(monitor_cfg["interval_seconds"] if interval is None else interval)
    max_iterations = int(monitor_cfg["max_iterations"] if max_iterations is None else max_iterations)
    reporter = ConsoleReporter()
    reporter.monitor_started(url, interval, max_iterations)

    try:
        with _build_matcher(config, width, height) as matcher:
            session = matcher.new_session()
            try:
                matcher.continuous_match(
                    url,
                    reference,
                    interval=interval,
                    max_iterations=max_iterations,
                    output_dir=output or Path(monitor_cfg["output_dir"]),
                    on_update=reporter.monitor_event,
                    on_error=reporter.monitor_error,
                    session=session,
                )
            except KeyboardInterrupt:
                session.cancel()
                typer.echo("\nMonitoring stopped.")
    except (VisualMatchError, ValueError) as exc:
        _fail(exc)
    typer.echo(f"Completed {session.completed_iterations} iterations ({session.failures} failed attempts).")


if __name__ == "__main__":
    app()
