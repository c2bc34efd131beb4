# -*- coding: utf-8 -*-
"""Decode, pad and encode images so two captures can be compared pixel by pixel."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from visualmatch.constants import PAD_COLOR
from visualmatch.errors import ImageLoadError, ImageWriteError
from visualmatch.utils.file_utils import ensure_dir

logger = logging.getLogger(__name__)


def decode(path: str | Path) -> Image.Image:
    """Open an image file and load its pixels."""
    image_path = Path(path)
    try:
        with Image.open(image_path) as handle:
            handle.load()
            image = handle.copy()
    except FileNotFoundError as exc:
        raise ImageLoadError(f"Image not found: {image_path}") from exc
    except Image.DecompressionBombError as exc:
        raise ImageLoadError(f"Image {image_path} is too large to decode: {exc}") from exc
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise ImageLoadError(f"Cannot decode image {image_path}: {exc}") from exc

    width, height = image.size
    if width <= 0 or height <= 0:
        raise ImageLoadError(f"Image {image_path} has no pixels ({width}x{height})")
    return image


def resize_and_pad(image: Image.Image, width: int, height: int) -> np.ndarray:
    """Contain-fit an image into a white canvas and return a read-only RGBA buffer."""
    rgba = image if image.mode == "RGBA" else image.convert("RGBA")
    if rgba.size == (width, height):
        fitted = rgba
    else:
        fitted = ImageOps.pad(
            rgba,
            (width, height),
            method=Image.Resampling.LANCZOS,
            color=PAD_COLOR,
            centering=(0.5, 0.5),
        )
    buffer = np.array(fitted, dtype=np.uint8)
    buffer.setflags(write=False)
    return buffer


def reconcile(
    image_a: str | Path | Image.Image,
    image_b: str | Path | Image.Image,
) -> tuple[np.ndarray, np.ndarray, int, int]:
    """Bring two images onto a shared canvas of the larger size on each axis."""
    decoded_a = image_a if isinstance(image_a, Image.Image) else decode(image_a)
    decoded_b = image_b if isinstance(image_b, Image.Image) else decode(image_b)

    for image in (decoded_a, decoded_b):
        if image.width <= 0 or image.height <= 0:
            raise ImageLoadError(f"Image has no pixels ({image.width}x{image.height})")

    width = max(decoded_a.width, decoded_b.width)
    height = max(decoded_a.height, decoded_b.height)
    if decoded_a.size != decoded_b.size:
        logger.debug(
            "Reconciling %sx%s and %sx%s onto %sx%s",
            decoded_a.width,
            decoded_a.height,
            decoded_b.width,
            decoded_b.height,
            width,
            height,
        )

    buffer_a = resize_and_pad(decoded_a, width, height)
    buffer_b = resize_and_pad(decoded_b, width, height)
    return buffer_a, buffer_b, width, height


def encode(buffer: np.ndarray, path: str | Path) -> Path:
    """Write an RGBA buffer as PNG."""
    output_path = Path(path)
    try:
        ensure_dir(output_path.parent)
        Image.fromarray(np.ascontiguousarray(buffer, dtype=np.uint8)).save(output_path, format="PNG")
    except (OSError, ValueError, TypeError) as exc:
        raise ImageWriteError(f"Cannot write image {output_path}: {exc}") from exc
    return output_path
