"""
Interactive movie demo run from a generated project.

Steps:
    0. connect to Astra DB and load ``movies.json`` into the ``movies``
       collection
    1. find a movie by genre (plain filter)
    2. find movies from a free-text description (vector search)
    3. combine both (filter + vector search)

Steps 2 and 3 need an OpenAI API key to embed the user's text; without one
they are skipped.
"""

from __future__ import annotations

import contextlib
import os
import sys
from collections.abc import Callable, Mapping
from dataclasses import replace
from pathlib import Path

import click

from astradb_starter.core import movie_store
from astradb_starter.core.embeddings import EmbeddingProvider, OpenAIEmbeddings
from astradb_starter.core.movie_store import (
    COLLECTION_NAME,
    INSERT_BATCH_SIZE,
    DropOutcome,
    MovieRepository,
    connect,
)
from astradb_starter.core.movies import (
    DATASET_FILE_NAME,
    GENRES,
    MovieRecord,
    batched,
    load_movies,
)
from astradb_starter.core.settings import (
    ASTRA_DB_API_ENDPOINT,
    ASTRA_DB_APPLICATION_TOKEN,
    OPENAI_API_KEY,
    ProjectSettings,
)
from astradb_starter.helpers.formatting import MovieFormatter
from astradb_starter.helpers.helpers_env import load_project_environ
from astradb_starter.helpers.helpers_logging import (
    bold,
    highlight,
    print_error,
    print_info,
    print_warning,
)
from astradb_starter.helpers.prompts import ClickPrompter, Prompter

SEMANTIC_SEARCH_LIMIT = 3
HYBRID_SEARCH_LIMIT = 2

# Characters of the token shown in the connection banner
TOKEN_PREVIEW_LENGTH = 13

Connector = Callable[[ProjectSettings], MovieRepository]


class MovieDemo:
    """The query patterns of the demo, bound to one store and prompt source."""

    def __init__(
        self,
        store: MovieRepository,
        prompter: Prompter,
        embeddings: EmbeddingProvider | None = None,
        formatter: MovieFormatter | None = None,
    ):
        self.store = store
        self.prompter = prompter
        self.embeddings = embeddings
        self.formatter = formatter or MovieFormatter()

    # ------------------------------------------------------------------
    # Data load
    # ------------------------------------------------------------------

    def _embed_missing_vectors(self, movies: list[MovieRecord]) -> list[MovieRecord]:
        """Fill in vectors the dataset does not carry, one request per batch."""
        if self.embeddings is None:
            return movies

        missing = [movie for movie in movies if movie.vector is None]
        if not missing:
            return movies

        print_info(f"Generating embeddings for {len(missing)} movies...")
        vectors: dict[int, list[float]] = {}
        for batch in batched(missing, INSERT_BATCH_SIZE):
            embedded = self.embeddings.embed_many([movie.description for movie in batch])
            for movie, vector in zip(batch, embedded):
                vectors[id(movie)] = vector

        return [
            replace(movie, vector=vectors[id(movie)]) if id(movie) in vectors else movie
            for movie in movies
        ]

    def load_data(self, dataset_path: Path) -> int:
        """Recreate the movies collection and insert the dataset.

        Returns:
            Number of inserted movies.
        """
        print_info(
            f"Dropping existing collection {highlight(COLLECTION_NAME)} if it exists..."
        )
        if self.store.drop_movies() is DropOutcome.MISSING:
            print_info("  (no existing collection)")

        print_info(
            f"Creating collection {highlight(COLLECTION_NAME)} and loading data "
            f"from {highlight(dataset_path.name)}..."
        )
        self.store.create_movies()

        movies = self._embed_missing_vectors(load_movies(dataset_path))
        with_vectors = sum(1 for movie in movies if movie.vector is not None)
        print_info(
            f"Inserting {len(movies)} movies ({with_vectors} with vector embeddings)...\n"
        )
        return self.store.insert_movies(movies, batch_size=INSERT_BATCH_SIZE)

    # ------------------------------------------------------------------
    # Query patterns
    # ------------------------------------------------------------------

    def _embed(self, text: str) -> list[float]:
        if self.embeddings is None:
            raise RuntimeError("Vector search needs an OpenAI API key")
        return self.embeddings.embed(text)

    def find_movie_by_genre(self) -> MovieRecord | None:
        """Filter-only lookup: first movie of the chosen genre."""
        genre = self.prompter.select("What kind of movie would you like to watch?", GENRES)

        movie = self.store.find_by_genre(genre)

        if movie is None:
            print_info(f"Sorry, I could not find any {genre} movie.\n")
        else:
            print_info(
                f"Sure! Here is an option for you:\n{self.formatter.movie_to_string(movie)}\n"
            )
        return movie

    def find_movie_by_description(self) -> list[MovieRecord]:
        """Similarity-only lookup from a free-text description."""
        prompt = self.prompter.text("Just tell me what you want to watch...")

        embedding = self._embed(prompt)
        movies = self.store.find_similar(embedding, limit=SEMANTIC_SEARCH_LIMIT)

        self._print_results("three most relevant movies", movies)
        return movies

    def find_movie_by_genre_and_description(self) -> list[MovieRecord]:
        """Hybrid lookup: genre filter plus similarity to a description."""
        genre = self.prompter.select("First, what genre are you interested in?", GENRES)
        prompt = self.prompter.text("And now describe to me what you are looking for...")

        embedding = self._embed(prompt)
        movies = self.store.find_similar(embedding, limit=HYBRID_SEARCH_LIMIT, genre=genre)

        self._print_results("two most relevant movies", movies)
        return movies

    def _print_results(self, label: str, movies: list[MovieRecord]) -> None:
        if not movies:
            print_info("Sorry, I could not find any matching movie.\n")
            return
        print_info(
            f"Here are the {label} based on your request:\n"
            f"{self.formatter.movies_to_string(movies)}\n"
        )

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------

    def run(self, dataset_path: Path) -> None:
        print_info("0️⃣  Loading the data to Astra DB (~20s)...")
        self.load_data(dataset_path)

        print_info("1️⃣  With the data loaded, I can find a movie based on your favorite genre.")
        self.find_movie_by_genre()

        if self.embeddings is None:
            print_warning(
                "I can't generate embeddings without an OpenAI API key.\n"
                f"   Please set the {bold(OPENAI_API_KEY)} environment variable "
                "or review the code to see how you can use vector search."
            )
            return

        print_info(
            "2️⃣  You can also simply describe what you are looking for, "
            "and I will find relevant movies. I will use vector search!"
        )
        self.find_movie_by_description()

        print_info("3️⃣  Finally, let's combine the two...")
        self.find_movie_by_genre_and_description()

        runner_source, store_source = example_source_paths()
        print_info(
            f"Be sure to check out {highlight(str(runner_source))} and "
            f"{highlight(str(store_source))} for code examples "
            "using the Data API.\n\nHappy Coding!"
        )


def example_source_paths() -> tuple[Path, Path]:
    """Installed locations of the demo workflow and the Data API store code."""
    return Path(__file__).resolve(), Path(movie_store.__file__).resolve()


def print_connection_banner(settings: ProjectSettings) -> None:
    token = settings.connection.application_token
    print_info(
        "0️⃣  Connecting to Astra DB using the following values from your configuration...\n"
        f"{highlight(ASTRA_DB_API_ENDPOINT)} = {settings.connection.api_endpoint}\n"
        f"{highlight(ASTRA_DB_APPLICATION_TOKEN)} = {token[:TOKEN_PREVIEW_LENGTH]}...\n"
    )


def run_demo(
    settings: ProjectSettings,
    dataset_path: Path,
    prompter: Prompter | None = None,
    connector: Connector = connect,
    embeddings: EmbeddingProvider | None = None,
    formatter: MovieFormatter | None = None,
) -> None:
    """Connect, load the dataset and walk through the query patterns.

    When ``embeddings`` is None and the settings carry an OpenAI key, an
    ``OpenAIEmbeddings`` client is created and closed afterwards.
    """
    print_connection_banner(settings)
    store = connector(settings)

    with contextlib.ExitStack() as stack:
        if embeddings is None and settings.openai_api_key:
            embeddings = stack.enter_context(OpenAIEmbeddings(settings.openai_api_key))

        demo = MovieDemo(
            store,
            prompter or ClickPrompter(),
            embeddings=embeddings,
            formatter=formatter,
        )
        demo.run(dataset_path)


def main(
    project_dir: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> int:
    """Entry point of a generated project's ``app.py``."""
    project_dir = project_dir or Path.cwd()

    try:
        merged = load_project_environ(project_dir, os.environ if environ is None else environ)
        settings = ProjectSettings.from_env(merged)
        run_demo(settings, project_dir / DATASET_FILE_NAME)
    except click.Abort:
        print("\n⚠️  Cancelled by user")
        return 130
    except Exception as e:
        print_error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
