# -*- coding: utf-8 -*-
"""Error taxonomy shared by the capture and comparison pipeline."""

from __future__ import annotations


class VisualMatchError(Exception):
    """Base class for every failure raised by visualmatch."""


class RenderError(VisualMatchError):
    """The page renderer failed (navigation timeout, browser crash)."""


class ImageLoadError(VisualMatchError):
    """An image could not be decoded or has no pixels."""


class ImageWriteError(VisualMatchError):
    """An image could not be written to disk."""


class DimensionMismatchError(VisualMatchError):
    """Pixel buffers of different shapes were handed to the comparator."""


class DegenerateInputError(VisualMatchError):
    """A comparison was requested over zero pixels."""


class ScrollSearchError(VisualMatchError):
    """Every candidate scroll offset failed."""

    def __init__(self, message: str, last_error: BaseException | None = None) -> None:
        super().__init__(message)
        self.last_error = last_error
