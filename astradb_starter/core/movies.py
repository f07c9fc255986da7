"""
Movie records and the bundled dataset.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

VECTOR_DIMENSION = 1536
VECTOR_FIELD = "$vector"
SIMILARITY_FIELD = "$similarity"

GENRES = ("Comedy", "Drama", "Western", "Romance")

DATASET_FILE_NAME = "movies.json"


@dataclass
class MovieRecord:
    """One movie as stored in the ``movies`` collection."""
    title: str
    year: int
    genre: str
    description: str
    vector: list[float] | None = None  # embedding of the description
    similarity: float | None = None  # set by similarity queries only

    def to_document(self) -> dict[str, Any]:
        """Return the document inserted into the collection."""
        document: dict[str, Any] = {
            "title": self.title,
            "year": self.year,
            "genre": self.genre,
            "description": self.description,
        }
        if self.vector is not None:
            document[VECTOR_FIELD] = self.vector
        return document

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> MovieRecord:
        """Build a record from a stored document or a dataset entry.

        Raises:
            ValueError: If a field is missing or the vector has the wrong length.
        """
        try:
            title = str(document["title"])
            year = int(document["year"])
            genre = str(document["genre"])
            description = str(document["description"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid movie document {dict(document)!r}: {e}") from e

        vector = document.get(VECTOR_FIELD)
        if vector is not None:
            vector = [float(x) for x in vector]
            if len(vector) != VECTOR_DIMENSION:
                raise ValueError(
                    f"Movie '{title}' has a vector of length {len(vector)}, "
                    f"expected {VECTOR_DIMENSION}"
                )

        similarity = document.get(SIMILARITY_FIELD)
        return cls(
            title=title,
            year=year,
            genre=genre,
            description=description,
            vector=vector,
            similarity=float(similarity) if similarity is not None else None,
        )


def load_movies(path: Path) -> list[MovieRecord]:
    """Read the dataset file (a JSON array of movie objects)."""
    if not path.exists():
        raise FileNotFoundError(f"Movie dataset not found: {path}")

    raw: object = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError(f"Movie dataset {path} must contain a JSON array")

    return [MovieRecord.from_document(entry) for entry in raw]


def batched(movies: list[MovieRecord], size: int) -> list[list[MovieRecord]]:
    """Split ``movies`` into consecutive chunks of at most ``size``."""
    if size < 1:
        raise ValueError("Batch size must be at least 1")
    return [movies[i:i + size] for i in range(0, len(movies), size)]
