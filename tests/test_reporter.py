# -*- coding: utf-8 -*-
"""Tests for console presentation of search results."""

from __future__ import annotations

from pathlib import Path

from visualmatch.cli.reporter import ConsoleReporter
from visualmatch.models.comparison_result import ComparisonResult
from visualmatch.models.search_state import ScrollSearchState


def test_empty_search_reports_nothing_evaluated(capsys) -> None:
    ConsoleReporter(color=False).best_match(ScrollSearchState())
    assert "No scroll positions evaluated." in capsys.readouterr().out


def test_all_zero_candidates_reported_separately(capsys) -> None:
    state = ScrollSearchState()
    zero = ComparisonResult(0, 100, 100, 10, 10, Path("diff.png"))
    state.consider(0, zero, Path("shot-0.png"))
    state.consider(50, zero, Path("shot-50.png"))
    ConsoleReporter(color=False).best_match(state)
    out = capsys.readouterr().out
    assert "No scroll positions evaluated." not in out
    assert "No match at any of 2 scroll positions" in out


def test_best_match_lists_offset_and_artifacts(capsys) -> None:
    state = ScrollSearchState()
    state.consider(25, ComparisonResult(97, 3, 100, 10, 10, Path("d.png")), Path("s.png"))
    ConsoleReporter(color=False).best_match(state)
    out = capsys.readouterr().out
    assert "Scroll position: y=25" in out
    assert "Similarity: 97%" in out
    assert "Diff image: d.png" in out
