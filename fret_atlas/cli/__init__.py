"""Command-line interface for Fret Atlas."""

from .main import main

__all__ = ["main"]
