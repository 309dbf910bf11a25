"""Command-line interface for cookie consent management."""

from .main import app

__all__ = ["app"]
