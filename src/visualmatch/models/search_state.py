# -*- coding: utf-8 -*-
"""Scroll search accumulator."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from visualmatch.models.comparison_result import ComparisonResult


@dataclass
class ScrollSearchState:
    """Best scroll offset seen so far during one search.

    Starts zeroed and is only replaced by a strictly better candidate, so
    ties keep the lowest offset.
    """

    best_offset: int = 0
    best_similarity: int = 0
    best_comparison: ComparisonResult | None = None
    screenshot_path: Path | None = None
    diff_path: Path | None = None
    candidates: dict[int, int] = field(default_factory=dict)
    failures: dict[int, str] = field(default_factory=dict)

    def consider(self, offset: int, comparison: ComparisonResult, screenshot_path: Path) -> bool:
        """Record a candidate and return True when it became the new best."""
        self.candidates[offset] = comparison.similarity
        if comparison.similarity <= self.best_similarity:
            return False
        self.best_offset = offset
        self.best_similarity = comparison.similarity
        self.best_comparison = comparison
        self.screenshot_path = screenshot_path
        self.diff_path = comparison.diff_image_path
        return True

    @property
    def evaluated(self) -> int:
        return len(self.candidates)
