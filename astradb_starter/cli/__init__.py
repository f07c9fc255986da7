"""
CLI module for astradb-starter.

Provides the ``create-astradb-app`` and ``astradb-movies-demo`` entry points
installed as console scripts.
"""

from .commands import demo_main, main

__all__ = ["demo_main", "main"]
