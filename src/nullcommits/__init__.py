"""
Top-level package for nullcommits.

This package exposes the main CLI entry point via the
``nullcommits.cli`` module.
"""

__all__ = ["__version__"]

__version__ = "1.0.0"
