"""Command-line interface for APPARAT."""

from .cli import build_parser, main

__all__ = ["build_parser", "main"]
