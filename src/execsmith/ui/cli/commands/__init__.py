"""CLI command implementations exposed via `execsmith.ui.cli`."""

from __future__ import annotations

from .run import run


__all__ = ["run"]
