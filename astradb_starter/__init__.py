"""
astradb-starter

Scaffold a ready-to-run Astra DB vector search demo project and run the
movie demo it contains.
"""

__version__ = "0.1.0"

from astradb_starter.core.settings import ProjectSettings

__all__ = [
    "ProjectSettings",
]
