# -*- coding: utf-8 -*-
"""Comparison result data model."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class ComparisonResult:
    """Outcome of comparing two reconciled images."""

    similarity: int
    diff_pixels: int
    total_pixels: int
    width: int
    height: int
    diff_image_path: Path

    @property
    def dimensions(self) -> dict[str, int]:
        return {"width": self.width, "height": self.height}

    @property
    def diff_percent(self) -> float:
        """Share of differing pixels in percent (unrounded)."""
        return self.diff_pixels / self.total_pixels * 100

    def to_dict(self) -> dict[str, Any]:
        return {
            "similarity": self.similarity,
            "diff_pixels": self.diff_pixels,
            "total_pixels": self.total_pixels,
            "dimensions": self.dimensions,
            "diff_image_path": str(self.diff_image_path),
        }


@dataclass(frozen=True)
class ScreenshotComparison:
    """A live capture compared against a reference image."""

    url: str
    screenshot_path: Path
    comparison: ComparisonResult

    @property
    def similarity(self) -> int:
        return self.comparison.similarity
