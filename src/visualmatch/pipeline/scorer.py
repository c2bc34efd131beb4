# -*- coding: utf-8 -*-
"""Turn a differing-pixel count into a similarity percentage."""

from __future__ import annotations

from pathlib import Path

from visualmatch.errors import DegenerateInputError
from visualmatch.models.comparison_result import ComparisonResult


def score(diff_pixels: int, total_pixels: int) -> int:
    """Percentage of matching pixels, rounded half up."""
    total = int(total_pixels)
    diff = int(diff_pixels)
    if total <= 0:
        raise DegenerateInputError("Cannot score a comparison over zero pixels")
    if not 0 <= diff <= total:
        raise ValueError(f"diff_pixels must be in range 0..{total}, got {diff}")
    # Integer arithmetic keeps x.5 ratios from drifting below the rounding boundary.
    return (200 * (total - diff) + total) // (2 * total)


def build_result(diff_pixels: int, width: int, height: int, diff_image_path: Path) -> ComparisonResult:
    """Assemble the comparison result for a persisted diff image."""
    total_pixels = int(width) * int(height)
    return ComparisonResult(
        similarity=score(diff_pixels, total_pixels),
        diff_pixels=int(diff_pixels),
        total_pixels=total_pixels,
        width=int(width),
        height=int(height),
        diff_image_path=Path(diff_image_path),
    )
