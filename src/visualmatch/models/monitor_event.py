# -*- coding: utf-8 -*-
"""Monitor event data model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from visualmatch.models.comparison_result import ComparisonResult


@dataclass(frozen=True)
class ChangeClassification:
    """Label for the similarity change between two monitor iterations."""

    kind: str
    delta: float


@dataclass(frozen=True)
class MonitorEvent:
    """Result of one successful monitor iteration."""

    iteration: int
    similarity: int
    status: str
    screenshot_path: Path
    diff_path: Path
    comparison: ComparisonResult
    timestamp: datetime
    classification: ChangeClassification | None = None

    @property
    def change(self) -> float | None:
        if self.classification is None:
            return None
        return self.classification.delta
