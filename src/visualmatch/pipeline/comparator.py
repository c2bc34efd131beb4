# -*- coding: utf-8 -*-
"""Compare two image files and persist the visual diff."""

from __future__ import annotations

import logging
from pathlib import Path

from visualmatch.constants import DEFAULT_THRESHOLD
from visualmatch.models.comparison_result import ComparisonResult
from visualmatch.pipeline.differ import compare_buffers
from visualmatch.pipeline.reconciler import encode, reconcile
from visualmatch.pipeline.scorer import build_result

logger = logging.getLogger(__name__)


class ImageComparator:
    """Reconcile, diff, score and save. Reusable across many comparisons."""

    def __init__(self, threshold: float = DEFAULT_THRESHOLD, include_aa: bool = False) -> None:
        if not 0.0 <= float(threshold) <= 1.0:
            raise ValueError(f"threshold must be in range 0..1, got {threshold}")
        self.threshold = float(threshold)
        self.include_aa = bool(include_aa)

    def compare(self, image_a: str | Path, image_b: str | Path, diff_path: str | Path) -> ComparisonResult:
        buffer_a, buffer_b, width, height = reconcile(image_a, image_b)
        diff_buffer, diff_pixels = compare_buffers(
            buffer_a,
            buffer_b,
            threshold=self.threshold,
            include_aa=self.include_aa,
        )
        saved = encode(diff_buffer, diff_path)
        result = build_result(diff_pixels, width, height, saved)
        logger.debug(
            "Compared %s with %s: %s%% similar (%s/%s pixels differ)",
            image_a,
            image_b,
            result.similarity,
            result.diff_pixels,
            result.total_pixels,
        )
        return result

    __call__ = compare


def compare(
    path_a: str | Path,
    path_b: str | Path,
    diff_path: str | Path,
    threshold: float = DEFAULT_THRESHOLD,
    include_aa: bool = False,
) -> ComparisonResult:
    """Compare two image files and write the diff image to ``diff_path``."""
    return ImageComparator(threshold=threshold, include_aa=include_aa).compare(path_a, path_b, diff_path)
