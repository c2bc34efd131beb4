# -*- coding: utf-8 -*-
"""Tests for the command line interface."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from conftest import FakeRenderer, with_black_rows
from visualmatch.cli import main as cli_main
from visualmatch.core.matcher import VisualMatcher

runner = CliRunner()


@pytest.fixture
def fake_renderer(monkeypatch, tmp_path: Path) -> dict:
    """Route every matcher built by the CLI through a FakeRenderer."""
    monkeypatch.chdir(tmp_path)
    holder: dict = {"frames": {}, "fail_all": False, "built": []}
    real_from_config = VisualMatcher.from_config.__func__

    def _from_config(cls, config, **overrides):
        renderer = FakeRenderer(holder["frames"], fail_all=holder["fail_all"])
        overrides["renderer"] = renderer
        holder["built"].append((config, overrides))
        holder["renderer"] = renderer
        return real_from_config(cls, config, **overrides)

    monkeypatch.setattr(cli_main.VisualMatcher, "from_config", classmethod(_from_config))
    return holder


def test_compare_prints_similarity(fake_renderer: dict, reference_png: Path, tmp_path: Path) -> None:
    fake_renderer["frames"] = {None: reference_png}
    out = tmp_path / "out"
    result = runner.invoke(cli_main.app, ["compare", "-u", "http://localhost", "-r", str(reference_png), "-o", str(out)])
    assert result.exit_code == 0, result.output
    assert "Similarity: 100%" in result.output
    assert (out / "current-screenshot.png").exists()
    assert (out / "comparison-diff.png").exists()
    assert fake_renderer["renderer"].closed == 1


def test_compare_viewport_and_threshold_options(fake_renderer: dict, reference_png: Path, tmp_path: Path) -> None:
    fake_renderer["frames"] = {None: reference_png}
    result = runner.invoke(
        cli_main.app,
        ["compare", "-u", "http://x", "-r", str(reference_png), "-w", "1280", "-h", "880", "--threshold", "0.3"],
    )
    assert result.exit_code == 0, result.output
    _, overrides = fake_renderer["built"][0]
    assert overrides["viewport"].as_dict() == {"width": 1280, "height": 880}
    assert overrides["threshold"] == 0.3


def test_compare_failure_exits_non_zero(fake_renderer: dict, reference_png: Path) -> None:
    fake_renderer["fail_all"] = True
    result = runner.invoke(cli_main.app, ["compare", "-u", "http://x", "-r", str(reference_png)])
    assert result.exit_code == 1
    assert "Error: RenderError" in result.output


def test_find_best_reports_offset(fake_renderer: dict, reference_png: Path, png_factory, tmp_path: Path) -> None:
    off = png_factory("off.png", with_black_rows(192, 108, 30))
    fake_renderer["frames"] = {0: off, 10: reference_png, 20: off}
    result = runner.invoke(
        cli_main.app,
        ["find-best", "-u", "http://x", "-r", str(reference_png), "-s", "0", "-e", "20", "--step", "10",
         "-o", str(tmp_path / "scan")],
    )
    assert result.exit_code == 0, result.output
    assert "Scroll position: y=10" in result.output
    assert "Positions tested: 3" in result.output
    assert "Similarity: 100%" in result.output
    assert (tmp_path / "scan" / "scroll-test-10-diff.png").exists()


def test_find_best_all_failed(fake_renderer: dict, reference_png: Path, tmp_path: Path) -> None:
    fake_renderer["fail_all"] = True
    result = runner.invoke(
        cli_main.app,
        ["find-best", "-u", "http://x", "-r", str(reference_png), "-e", "10", "--step", "10", "-o", str(tmp_path)],
    )
    assert result.exit_code == 1
    assert "ScrollSearchError" in result.output


def test_watch_runs_configured_iterations(fake_renderer: dict, reference_png: Path, tmp_path: Path) -> None:
    fake_renderer["frames"] = {None: reference_png}
    result = runner.invoke(
        cli_main.app,
        ["watch", "-u", "http://x", "-r", str(reference_png), "-i", "0", "-m", "2", "-o", str(tmp_path / "watch")],
    )
    assert result.exit_code == 0, result.output
    assert "Test #1" in result.output
    assert "Test #2" in result.output
    assert "No significant change" in result.output
    assert "Excellent match" in result.output
    assert "Completed 2 iterations" in result.output
    assert len(list((tmp_path / "watch").glob("diff-*.png"))) == 2


def test_config_file_supplies_defaults(fake_renderer: dict, reference_png: Path, tmp_path: Path) -> None:
    fake_renderer["frames"] = {None: reference_png}
    settings = tmp_path / "custom.json"
    settings.write_text('{"monitor": {"interval_seconds": 0.01, "max_iterations": 1}}', encoding="utf-8")
    result = runner.invoke(
        cli_main.app,
        ["--config", str(settings), "watch", "-u", "http://x", "-r", str(reference_png), "-o", str(tmp_path / "w")],
    )
    assert result.exit_code == 0, result.output
    assert "Completed 1 iterations" in result.output


def test_invalid_config_rejected(fake_renderer: dict, reference_png: Path, tmp_path: Path) -> None:
    settings = tmp_path / "bad.json"
    settings.write_text('{"comparison": {"threshold": 7}}', encoding="utf-8")
    result = runner.invoke(
        cli_main.app,
        ["--config", str(settings), "compare", "-u", "http://x", "-r", str(reference_png)],
    )
    assert result.exit_code == 1
    assert "ConfigError" in result.output


def test_version_flag() -> None:
    result = runner.invoke(cli_main.app, ["--version"])
    assert result.exit_code == 0
    assert "visualmatch 0.1.0" in result.output
