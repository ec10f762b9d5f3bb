"""Command-line interface for summarycache."""

from .main import main

__all__ = ["main"]
