"""Render movie records for the console.

Styling is pluggable: ``AnsiStyler`` colors the output, ``PlainStyler``
leaves it untouched (tests, redirected output).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from astradb_starter.core.movies import MovieRecord
from astradb_starter.helpers.helpers_logging import Colors

SEPARATOR = "\n  --\n"


class Styler(Protocol):
    def bold(self, text: str) -> str: ...

    def dim(self, text: str) -> str: ...

    def accent(self, text: str) -> str: ...


class PlainStyler:
    def bold(self, text: str) -> str:
        return text

    def dim(self, text: str) -> str:
        return text

    def accent(self, text: str) -> str:
        return text


class AnsiStyler:
    def bold(self, text: str) -> str:
        return f"{Colors.BOLD}{text}{Colors.RESET}"

    def dim(self, text: str) -> str:
        return f"{Colors.DIM}{text}{Colors.RESET}"

    def accent(self, text: str) -> str:
        return f"{Colors.MAGENTA}{text}{Colors.RESET}"


class MovieFormatter:
    """Formats one record as a header line plus an indented description."""

    def __init__(self, styler: Styler | None = None):
        self.styler = styler or AnsiStyler()

    def movie_to_string(self, movie: MovieRecord) -> str:
        s = self.styler
        header = f"{s.bold(movie.title)} {s.dim(f'({movie.genre}, {movie.year})')}"
        if movie.similarity is not None:
            header = f"{s.accent(f'{movie.similarity:.4f}')} {header}"
        return f"{header}\n    {movie.description}"

    def movies_to_string(self, movies: Sequence[MovieRecord]) -> str:
        return SEPARATOR.join(self.movie_to_string(movie) for movie in movies)
