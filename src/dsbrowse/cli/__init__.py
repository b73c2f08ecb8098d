"""Command line interface."""

from dsbrowse.cli.main import app, main

__all__ = ["app", "main"]
