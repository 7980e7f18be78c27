"""Command line interface for semcommit."""

from __future__ import annotations

from semcommit.cli.app import app, main

__all__ = ["app", "main"]
