"""
Astra DB access for the movie demo.

``connect`` turns ``ProjectSettings`` into a ``MovieStore`` session backed by
the Data API client (``astrapy``). The demo workflow only talks to the
``MovieRepository`` protocol, so tests can swap in an in-memory store.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Any, Protocol

from astrapy import Collection, DataAPIClient, Database
from astrapy.constants import VectorMetric

from astradb_starter.core.errors import DatabaseConnectionError
from astradb_starter.core.movies import (
    VECTOR_DIMENSION,
    VECTOR_FIELD,
    MovieRecord,
    batched,
)
from astradb_starter.core.settings import ProjectSettings

COLLECTION_NAME = "movies"
INSERT_BATCH_SIZE = 20

# Fields returned by lookups; the vector itself is never sent back
MOVIE_PROJECTION = {"title": True, "genre": True, "year": True, "description": True}


class DropOutcome(Enum):
    """Result of dropping the movies collection."""
    DROPPED = "dropped"
    MISSING = "missing"


class MovieRepository(Protocol):
    """Operations the demo runs against the movies collection."""

    def drop_movies(self) -> DropOutcome:
        ...

    def create_movies(self) -> None:
        ...

    def insert_movies(
        self,
        movies: Sequence[MovieRecord],
        batch_size: int = INSERT_BATCH_SIZE,
    ) -> int:
        ...

    def find_by_genre(self, genre: str) -> MovieRecord | None:
        ...

    def find_similar(
        self,
        vector: Sequence[float],
        limit: int,
        genre: str | None = None,
    ) -> list[MovieRecord]:
        ...


class MovieStore:
    """Session on one Astra DB keyspace.

    With ``autocreate`` enabled the movies collection is created on first
    use when it does not exist yet.
    """

    def __init__(
        self,
        database: Database,
        autocreate: bool = True,
        collection_name: str = COLLECTION_NAME,
    ):
        self.database = database
        self.autocreate = autocreate
        self.collection_name = collection_name
        self._collection: Collection | None = None

    def _exists(self) -> bool:
        return self.collection_name in self.database.list_collection_names()

    @property
    def collection(self) -> Collection:
        if self._collection is not None:
            return self._collection
        if self.autocreate and not self._exists():
            return self._create_collection()
        self._collection = self.database.get_collection(self.collection_name)
        return self._collection

    def drop_movies(self) -> DropOutcome:
        """Drop the collection if it exists."""
        self._collection = None
        if not self._exists():
            return DropOutcome.MISSING
        self.database.drop_collection(self.collection_name)
        return DropOutcome.DROPPED

    def _create_collection(self) -> Collection:
        self._collection = self.database.create_collection(
            self.collection_name,
            dimension=VECTOR_DIMENSION,
            metric=VectorMetric.COSINE,
        )
        return self._collection

    def create_movies(self) -> None:
        """Create the collection with a cosine vector index."""
        self._create_collection()

    def insert_movies(
        self,
        movies: Sequence[MovieRecord],
        batch_size: int = INSERT_BATCH_SIZE,
    ) -> int:
        """Insert movies in batches to bound the request size.

        Returns:
            Number of documents inserted.
        """
        inserted = 0
        for batch in batched(list(movies), batch_size):
            result = self.collection.insert_many([movie.to_document() for movie in batch])
            inserted += len(result.inserted_ids)
        return inserted

    def find_by_genre(self, genre: str) -> MovieRecord | None:
        document = self.collection.find_one({"genre": genre}, projection=MOVIE_PROJECTION)
        if document is None:
            return None
        return MovieRecord.from_document(document)

    def find_similar(
        self,
        vector: Sequence[float],
        limit: int,
        genre: str | None = None,
    ) -> list[MovieRecord]:
        """Nearest neighbours of ``vector``, most similar first.

        Each record carries its ``similarity``. With ``genre`` set only
        movies of that genre are considered.
        """
        query_filter: dict[str, Any] = {"genre": genre} if genre is not None else {}
        cursor = self.collection.find(
            query_filter,
            projection=MOVIE_PROJECTION,
            sort={VECTOR_FIELD: list(vector)},
            limit=limit,
            include_similarity=True,
        )
        return [MovieRecord.from_document(document) for document in cursor]


def open_database(settings: ProjectSettings) -> Database:
    """Build a Data API database handle for either credential shape."""
    connection = settings.connection
    client = DataAPIClient(connection.application_token)
    if connection.keyspace:
        return client.get_database(connection.api_endpoint, keyspace=connection.keyspace)
    return client.get_database(connection.api_endpoint)


def connect(settings: ProjectSettings, autocreate: bool = True) -> MovieStore:
    """Open a session and check the database answers.

    Raises:
        DatabaseConnectionError: If the database cannot be reached.
    """
    try:
        database = open_database(settings)
        database.list_collection_names()
    except Exception as e:
        raise DatabaseConnectionError(
            f"Cannot connect to Astra DB at {settings.connection.api_endpoint}: {e}"
        ) from e
    return MovieStore(database, autocreate=autocreate)
