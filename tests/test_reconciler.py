# -*- coding: utf-8 -*-
"""Tests for decoding, padding and encoding images."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from conftest import BLACK, solid
from visualmatch.errors import ImageLoadError, ImageWriteError
from visualmatch.pipeline.reconciler import decode, encode, reconcile, resize_and_pad


def test_same_size_images_keep_their_pixels(png_factory) -> None:
    array = solid(20, 10, (12, 34, 56, 255))
    a = png_factory("a.png", array)
    b = png_factory("b.png", solid(20, 10))
    buffer_a, buffer_b, width, height = reconcile(a, b)
    assert (width, height) == (20, 10)
    assert np.array_equal(buffer_a, array)
    assert buffer_b.shape == (10, 20, 4)


def test_canvas_grows_to_max_of_each_axis(png_factory) -> None:
    a = png_factory("wide.png", solid(40, 10, BLACK))
    b = png_factory("tall.png", solid(10, 30, BLACK))
    buffer_a, buffer_b, width, height = reconcile(a, b)
    assert (width, height) == (40, 30)
    assert buffer_a.shape == buffer_b.shape == (30, 40, 4)


def test_padding_is_opaque_white(png_factory) -> None:
    a = png_factory("short.png", solid(40, 20, BLACK))
    b = png_factory("square.png", solid(40, 40, BLACK))
    buffer_a, _, _, _ = reconcile(a, b)
    assert tuple(buffer_a[0, 0]) == (255, 255, 255, 255)
    assert tuple(buffer_a[39, 39]) == (255, 255, 255, 255)
    assert tuple(buffer_a[20, 20]) == BLACK


def test_rgb_input_gets_opaque_alpha(tmp_path: Path) -> None:
    path = tmp_path / "rgb.png"
    Image.new("RGB", (6, 4), (1, 2, 3)).save(path)
    buffer = resize_and_pad(decode(path), 6, 4)
    assert buffer.shape == (4, 6, 4)
    assert (buffer[..., 3] == 255).all()


def test_reconciled_buffers_are_read_only(png_factory) -> None:
    a = png_factory("a.png", solid(4, 4))
    buffer_a, _, _, _ = reconcile(a, a)
    with pytest.raises(ValueError):
        buffer_a[0, 0] = BLACK


def test_reconcile_is_deterministic(png_factory) -> None:
    a = png_factory("a.png", solid(33, 17, (200, 10, 10, 255)))
    b = png_factory("b.png", solid(21, 40, (10, 10, 200, 255)))
    first = reconcile(a, b)
    second = reconcile(a, b)
    assert np.array_equal(first[0], second[0])
    assert np.array_equal(first[1], second[1])


def test_corrupt_file_raises_image_load_error(tmp_path: Path) -> None:
    broken = tmp_path / "broken.png"
    broken.write_bytes(b"not an image")
    with pytest.raises(ImageLoadError):
        decode(broken)


def test_missing_file_raises_image_load_error(tmp_path: Path, png_factory) -> None:
    good = png_factory("good.png", solid(4, 4))
    with pytest.raises(ImageLoadError):
        reconcile(good, tmp_path / "missing.png")


def test_encode_writes_png(tmp_path: Path) -> None:
    target = encode(solid(7, 3, BLACK), tmp_path / "nested" / "out.png")
    with Image.open(target) as image:
        assert image.size == (7, 3)
        assert image.mode == "RGBA"


def test_encode_to_unwritable_path_raises(tmp_path: Path) -> None:
    blocker = tmp_path / "file.txt"
    blocker.write_text("x", encoding="utf-8")
    with pytest.raises(ImageWriteError):
        encode(solid(2, 2), blocker / "out.png")


def test_oversized_image_raises_image_load_error(monkeypatch, png_factory) -> None:
    huge = png_factory("huge.png", solid(30, 30))
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
    with pytest.raises(ImageLoadError, match="too large"):
        decode(huge)
