# -*- coding: utf-8 -*-
"""Per-pixel perceptual diff of two equally sized RGBA buffers.

Colours are blended over white, converted to YIQ and compared with a
weighted squared distance. Pixels whose distance exceeds the threshold are
counted as different, except anti-aliased edge pixels unless those are
explicitly included.
"""

from __future__ import annotations

import numpy as np

from visualmatch.constants import DEFAULT_THRESHOLD
from visualmatch.errors import DimensionMismatchError

# Largest possible YIQ distance between two colours.
MAX_YIQ_DELTA = 35215.0

DIFF_COLOR = (255, 0, 0)
AA_COLOR = (255, 255, 0)
FADE_ALPHA = 0.1

# x-major order: ties on the darkest/brightest neighbour resolve to the first one visited.
_NEIGHBOURS = [(dx, dy) for dx in (-1, 0, 1) for dy in (-1, 0, 1) if (dx, dy) != (0, 0)]


def _blend(channel: np.ndarray, alpha: np.ndarray) -> np.ndarray:
    return 255.0 + (channel - 255.0) * alpha


def _rgb2y(r: np.ndarray, g: np.ndarray, b: np.ndarray) -> np.ndarray:
    return r * 0.29889531 + g * 0.58662247 + b * 0.11448223


def _rgb2i(r: np.ndarray, g: np.ndarray, b: np.ndarray) -> np.ndarray:
    return r * 0.59597799 - g * 0.27417610 - b * 0.32180189


def _rgb2q(r: np.ndarray, g: np.ndarray, b: np.ndarray) -> np.ndarray:
    return r * 0.21147017 - g * 0.52261711 + b * 0.31114694


def _blended_channels(buffer: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    rgba = buffer.astype(np.float64)
    alpha = rgba[..., 3] / 255.0
    return _blend(rgba[..., 0], alpha), _blend(rgba[..., 1], alpha), _blend(rgba[..., 2], alpha)


def _packed(buffer: np.ndarray) -> np.ndarray:
    """View each RGBA pixel as a single uint32 so equality is one comparison."""
    return np.ascontiguousarray(buffer, dtype=np.uint8).view(np.uint32)[..., 0]


def _edge_mask(height: int, width: int) -> np.ndarray:
    mask = np.zeros((height, width), dtype=bool)
    mask[0, :] = True
    mask[-1, :] = True
    mask[:, 0] = True
    mask[:, -1] = True
    return mask


def _shifted_equal(packed: np.ndarray, dx: int, dy: int) -> np.ndarray:
    """out[y, x] is True when pixel (x, y) equals its in-bounds neighbour (x+dx, y+dy)."""
    height, width = packed.shape
    out = np.zeros((height, width), dtype=bool)
    rows = slice(max(0, -dy), height - max(0, dy))
    cols = slice(max(0, -dx), width - max(0, dx))
    n_rows = slice(max(0, dy), height - max(0, -dy))
    n_cols = slice(max(0, dx), width - max(0, -dx))
    out[rows, cols] = packed[rows, cols] == packed[n_rows, n_cols]
    return out


def _has_many_siblings(packed: np.ndarray) -> np.ndarray:
    """Pixels with more than two identical neighbours (the border counts as one)."""
    height, width = packed.shape
    count = _edge_mask(height, width).astype(np.int8)
    for dx, dy in _NEIGHBOURS:
        count += _shifted_equal(packed, dx, dy)
    return count > 2


def _antialiased(
    brightness: np.ndarray,
    siblings_own: np.ndarray,
    siblings_other: np.ndarray,
    ys: np.ndarray,
    xs: np.ndarray,
) -> np.ndarray:
    """Anti-aliasing test for the pixels at (ys, xs) of one image."""
    height, width = brightness.shape
    center = brightness[ys, xs]
    zeroes = ((xs == 0) | (xs == width - 1) | (ys == 0) | (ys == height - 1)).astype(np.int32)

    min_delta = np.zeros(len(xs))
    max_delta = np.zeros(len(xs))
    min_x, min_y = xs.copy(), ys.copy()
    max_x, max_y = xs.copy(), ys.copy()

    for dx, dy in _NEIGHBOURS:
        nx = xs + dx
        ny = ys + dy
        valid = (nx >= 0) & (nx < width) & (ny >= 0) & (ny < height)
        nx = np.clip(nx, 0, width - 1)
        ny = np.clip(ny, 0, height - 1)
        delta = np.where(valid, center - brightness[ny, nx], 0.0)
        zeroes += valid & (delta == 0)

        darker = delta < min_delta
        min_delta = np.where(darker, delta, min_delta)
        min_x = np.where(darker, nx, min_x)
        min_y = np.where(darker, ny, min_y)

        brighter = delta > max_delta
        max_delta = np.where(brighter, delta, max_delta)
        max_x = np.where(brighter, nx, max_x)
        max_y = np.where(brighter, ny, max_y)

    has_extremes = (zeroes <= 2) & (min_delta != 0) & (max_delta != 0)
    darkest_flat = siblings_own[min_y, min_x] & siblings_other[min_y, min_x]
    brightest_flat = siblings_own[max_y, max_x] & siblings_other[max_y, max_x]
    return has_extremes & (darkest_flat | brightest_flat)


def compare_buffers(
    buffer_a: np.ndarray,
    buffer_b: np.ndarray,
    threshold: float = DEFAULT_THRESHOLD,
    include_aa: bool = False,
) -> tuple[np.ndarray, int]:
    """Return the diff buffer and the number of differing pixels."""
    if buffer_a.shape != buffer_b.shape:
        raise DimensionMismatchError(
            f"Cannot compare buffers of shape {buffer_a.shape} and {buffer_b.shape}"
        )
    if buffer_a.ndim != 3 or buffer_a.shape[2] != 4:
        raise DimensionMismatchError(f"Expected an RGBA buffer, got shape {buffer_a.shape}")
    if not 0.0 <= float(threshold) <= 1.0:
        raise ValueError(f"threshold must be in range 0..1, got {threshold}")

    height, width = buffer_a.shape[:2]
    max_delta = MAX_YIQ_DELTA * float(threshold) * float(threshold)

    raw_a = buffer_a.astype(np.float64)
    fade = _blend(_rgb2y(raw_a[..., 0], raw_a[..., 1], raw_a[..., 2]), FADE_ALPHA * raw_a[..., 3] / 255.0)
    diff = np.empty((height, width, 4), dtype=np.uint8)
    diff[..., :3] = np.clip(fade, 0, 255).astype(np.uint8)[..., None]
    diff[..., 3] = 255

    packed_a = _packed(buffer_a)
    packed_b = _packed(buffer_b)
    identical = packed_a == packed_b
    if identical.all():
        return diff, 0

    r1, g1, b1 = _blended_channels(buffer_a)
    r2, g2, b2 = _blended_channels(buffer_b)
    y1 = _rgb2y(r1, g1, b1)
    y2 = _rgb2y(r2, g2, b2)
    dy = y1 - y2
    di = _rgb2i(r1, g1, b1) - _rgb2i(r2, g2, b2)
    dq = _rgb2q(r1, g1, b1) - _rgb2q(r2, g2, b2)
    delta = 0.5053 * dy * dy + 0.299 * di * di + 0.1957 * dq * dq

    ys, xs = np.nonzero(~identical & (delta > max_delta))
    if include_aa or len(ys) == 0:
        counted = np.ones(len(ys), dtype=bool)
    else:
        siblings_a = _has_many_siblings(packed_a)
        siblings_b = _has_many_siblings(packed_b)
        aa = _antialiased(y1, siblings_a, siblings_b, ys, xs) | _antialiased(y2, siblings_b, siblings_a, ys, xs)
        counted = ~aa
        diff[ys[aa], xs[aa], :3] = AA_COLOR

    diff[ys[counted], xs[counted], :3] = DIFF_COLOR
    return diff, int(np.count_nonzero(counted))
