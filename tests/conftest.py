"""Shared fixtures for the astradb-starter test suite.

Every test that touches the filesystem gets an isolated working directory
so projects created by one test never leak into another.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import pytest

from astradb_starter.core.movies import MovieRecord
from tests._fakes import unit_vector


@pytest.fixture()
def isolated_project(tmp_path: Path) -> Iterator[Path]:
    """Run the test from an empty working directory.

    Yields:
        Path to the temporary working directory.
    """
    original_cwd = Path.cwd()
    os.chdir(tmp_path)
    try:
        yield tmp_path
    finally:
        os.chdir(original_cwd)


@pytest.fixture()
def template_dir(tmp_path: Path) -> Path:
    """A small template tree with a nested directory and a binary file."""
    template = tmp_path / "_template"
    (template / "nested").mkdir(parents=True)
    (template / "app.py").write_text("print('hello')\n")
    (template / "requirements.txt").write_text("astradb-starter\n")
    (template / "nested" / "data.bin").write_bytes(bytes(range(256)))
    return template


@pytest.fixture()
def vector_movies() -> list[MovieRecord]:
    """Movies with hand-placed vectors around axis 0.

    Against ``unit_vector(0)`` the ranking is Moon Drama, Space Comedy,
    Desert Drama, Station Drama; the Western and the Romance score 0.
    """
    return [
        MovieRecord("Space Comedy", 2001, "Comedy", "Laughs in orbit.", unit_vector(0, 0.9, 1)),
        MovieRecord("Desert Drama", 1999, "Drama", "Tears in the sand.", unit_vector(0, 0.8, 2)),
        MovieRecord("Ranch Western", 1960, "Western", "Dust and revolvers.", unit_vector(1)),
        MovieRecord("Moon Drama", 2010, "Drama", "Alone on the moon.", unit_vector(0, 0.95, 3)),
        MovieRecord("Paris Romance", 1990, "Romance", "Love by the river.", unit_vector(2)),
        MovieRecord("Station Drama", 2015, "Drama", "A quiet station.", unit_vector(0, 0.6, 4)),
    ]
