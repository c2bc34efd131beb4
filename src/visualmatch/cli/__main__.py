# -*- coding: utf-8 -*-
"""CLI module entry point for `python -m visualmatch.cli`."""

from __future__ import annotations

from visualmatch.cli.main import app


if __name__ == "__main__":
    app()
