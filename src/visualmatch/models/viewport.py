# -*- coding: utf-8 -*-
"""Viewport data model."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Viewport:
    """Pixel size of the browser window used for captures."""

    width: int = 1920
    height: int = 1080

    def __post_init__(self) -> None:
        if int(self.width) <= 0 or int(self.height) <= 0:
            raise ValueError(f"Viewport must be positive, got {self.width}x{self.height}")

    def as_dict(self) -> dict[str, int]:
        return {"width": int(self.width), "height": int(self.height)}
