# -*- coding: utf-8 -*-
"""Shared pytest fixtures."""

from __future__ import annotations

import shutil
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable

import numpy as np
import pytest
from PIL import Image


SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))


WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)


def solid(width: int, height: int, color: tuple[int, ...] = WHITE) -> np.ndarray:
    """RGBA array filled with one colour."""
    array = np.zeros((height, width, 4), dtype=np.uint8)
    array[...] = color
    return array


def with_black_rows(width: int, height: int, rows: int) -> np.ndarray:
    """White image whose first ``rows`` rows are black."""
    array = solid(width, height)
    array[:rows] = BLACK
    return array


def write_png(path: Path, array: np.ndarray) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(array).save(path, format="PNG")
    return path


class FakeCapture:
    """Stands in for the browser: copies a prepared PNG to the requested path."""

    def __init__(
        self,
        frames: dict[int | None, Path] | None = None,
        default: Path | None = None,
        failing: set[int | None] | None = None,
    ) -> None:
        self.frames = frames or {}
        self.default = default
        self.failing = failing or set()
        self.calls: list[tuple[Path, int | None]] = []

    def __call__(self, output_path: Path, scroll_y: int | None) -> Path:
        from visualmatch.errors import RenderError

        self.calls.append((Path(output_path), scroll_y))
        if scroll_y in self.failing:
            raise RenderError(f"navigation timeout at {scroll_y}")
        source = self.frames.get(scroll_y, self.default)
        if source is None:
            raise RenderError(f"no frame prepared for {scroll_y}")
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, output_path)
        return Path(output_path)

    @property
    def offsets(self) -> list[int | None]:
        return [scroll_y for _, scroll_y in self.calls]


class FakeRenderer:
    """PageRenderer double keyed by scroll offset (``None`` is the default frame)."""

    def __init__(self, frames: dict[int | None, Path], fail_all: bool = False) -> None:
        self.frames = frames
        self.fail_all = fail_all
        self.captures: list[tuple[str, int | None]] = []
        self.closed = 0

    def capture(self, url: str, output_path, *, scroll_y=None, full_page=False) -> Path:
        from visualmatch.errors import RenderError

        self.captures.append((url, scroll_y))
        if self.fail_all:
            raise RenderError("browser crashed")
        target = Path(output_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(self.frames.get(scroll_y, self.frames.get(None)), target)
        return target

    def close(self) -> None:
        self.closed += 1


class VirtualClock:
    """Records sleeps instead of waiting and advances a fake wall clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 2, 21, 21, 43, 57)
        self.sleeps: list[float] = []

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += timedelta(seconds=seconds)

    def clock(self) -> datetime:
        return self.now


@pytest.fixture
def png_factory(tmp_path: Path) -> Callable[[str, np.ndarray], Path]:
    def _make(name: str, array: np.ndarray) -> Path:
        return write_png(tmp_path / "images" / name, array)

    return _make


@pytest.fixture
def reference_png(png_factory) -> Path:
    return png_factory("reference.png", solid(192, 108))


@pytest.fixture
def virtual_clock() -> VirtualClock:
    return VirtualClock()


@pytest.fixture
def default_config() -> dict:
    from visualmatch.config import get_default_config

    return get_default_config()
