"""Tests for the movie demo workflow against an in-memory store."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import Mock

import httpx
import pytest

from astradb_starter.cli.init_project import get_template_dir
from astradb_starter.core import demo_runner
from astradb_starter.core.demo_runner import (
    HYBRID_SEARCH_LIMIT,
    SEMANTIC_SEARCH_LIMIT,
    MovieDemo,
    run_demo,
)
from astradb_starter.core.embeddings import OpenAIEmbeddings
from astradb_starter.core.errors import DatabaseConnectionError, EmbeddingError
from astradb_starter.core.movies import MovieRecord
from astradb_starter.core.settings import EndpointConnectionConfig, ProjectSettings
from astradb_starter.helpers.formatting import MovieFormatter, PlainStyler
from tests._fakes import InMemoryMovieStore, ScriptedPrompter, StubEmbeddings, unit_vector

_SETTINGS = ProjectSettings(EndpointConnectionConfig("https://db.example", "AstraCS:0123456789abcdef"))


def _demo(
    store: InMemoryMovieStore,
    prompter: ScriptedPrompter,
    embeddings: object | None = None,
) -> MovieDemo:
    return MovieDemo(
        store,
        prompter,
        embeddings=embeddings,  # type: ignore[arg-type]
        formatter=MovieFormatter(PlainStyler()),
    )


def _write_dataset(path: Path, movies: list[dict[str, object]]) -> Path:
    dataset = path / "movies.json"
    dataset.write_text(json.dumps(movies))
    return dataset


class TestLoadData:
    def test_recreates_collection_and_inserts_in_batches(self, tmp_path: Path) -> None:
        movies = [
            {"title": f"M{i}", "year": 2000, "genre": "Drama", "description": "d"}
            for i in range(41)
        ]
        store = InMemoryMovieStore(exists=True)
        store.movies = [MovieRecord("Old", 1, "Drama", "stale")]

        inserted = _demo(store, ScriptedPrompter()).load_data(_write_dataset(tmp_path, movies))

        assert inserted == 41
        assert store.insert_batches == [20, 20, 1]
        assert "Old" not in [m.title for m in store.movies]

    def test_missing_collection_is_not_an_error(
        self,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        store = InMemoryMovieStore(exists=False)
        dataset = _write_dataset(
            tmp_path, [{"title": "A", "year": 1, "genre": "Drama", "description": "d"}]
        )

        _demo(store, ScriptedPrompter()).load_data(dataset)

        assert "no existing collection" in capsys.readouterr().out
        assert store.exists

    def test_missing_vectors_are_embedded_when_key_configured(self, tmp_path: Path) -> None:
        movies = [
            {"title": f"M{i}", "year": 2000, "genre": "Drama", "description": f"d{i}"}
            for i in range(25)
        ]
        movies[0]["$vector"] = unit_vector(5)
        store = InMemoryMovieStore()
        embeddings = StubEmbeddings(unit_vector(7))

        _demo(store, ScriptedPrompter(), embeddings).load_data(_write_dataset(tmp_path, movies))

        assert embeddings.batch_calls == [20, 4]
        assert store.movies[0].vector == unit_vector(5)
        assert all(m.vector == unit_vector(7) for m in store.movies[1:])

    def test_without_key_movies_are_inserted_without_vectors(self, tmp_path: Path) -> None:
        store = InMemoryMovieStore()
        dataset = _write_dataset(
            tmp_path, [{"title": "A", "year": 1, "genre": "Drama", "description": "d"}]
        )

        _demo(store, ScriptedPrompter()).load_data(dataset)

        assert store.movies[0].vector is None

    def test_bundled_dataset_loads(self) -> None:
        store = InMemoryMovieStore()
        inserted = _demo(store, ScriptedPrompter()).load_data(
            get_template_dir() / "movies.json"
        )

        assert inserted == len(store.movies) > 0
        assert {m.genre for m in store.movies} == {"Comedy", "Drama", "Western", "Romance"}


class TestGenreLookup:
    def test_returns_first_movie_of_genre(
        self,
        vector_movies: list[MovieRecord],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        store = InMemoryMovieStore()
        store.movies = vector_movies

        movie = _demo(store, ScriptedPrompter(select=["Western"])).find_movie_by_genre()

        assert movie is not None and movie.title == "Ranch Western"
        output = capsys.readouterr().out
        assert "Ranch Western (Western, 1960)\n    Dust and revolvers." in output

    def test_genre_without_movies_prints_no_match(
        self,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        store = InMemoryMovieStore()
        store.movies = [MovieRecord("Only Drama", 2000, "Drama", "d")]

        movie = _demo(store, ScriptedPrompter(select=["Comedy"])).find_movie_by_genre()

        assert movie is None
        assert "could not find any Comedy movie" in capsys.readouterr().out


class TestVectorLookups:
    def test_semantic_lookup_returns_top_three_by_similarity(
        self,
        vector_movies: list[MovieRecord],
    ) -> None:
        store = InMemoryMovieStore()
        store.movies = vector_movies
        embeddings = StubEmbeddings(unit_vector(0))

        movies = _demo(
            store, ScriptedPrompter(text=["lonely space"]), embeddings
        ).find_movie_by_description()

        assert len(movies) == SEMANTIC_SEARCH_LIMIT == 3
        assert [m.title for m in movies] == ["Moon Drama", "Space Comedy", "Desert Drama"]
        similarities = [m.similarity for m in movies]
        assert similarities == sorted(similarities, reverse=True)
        assert embeddings.calls == ["lonely space"]

    def test_hybrid_lookup_filters_genre_and_limits(
        self,
        vector_movies: list[MovieRecord],
    ) -> None:
        store = InMemoryMovieStore()
        store.movies = vector_movies

        movies = _demo(
            store,
            ScriptedPrompter(select=["Drama"], text=["space"]),
            StubEmbeddings(unit_vector(0)),
        ).find_movie_by_genre_and_description()

        assert len(movies) == HYBRID_SEARCH_LIMIT == 2
        assert all(m.genre == "Drama" for m in movies)
        assert [m.title for m in movies] == ["Moon Drama", "Desert Drama"]

    def test_results_are_joined_with_separator(
        self,
        vector_movies: list[MovieRecord],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        store = InMemoryMovieStore()
        store.movies = vector_movies

        _demo(
            store, ScriptedPrompter(text=["x"]), StubEmbeddings(unit_vector(0))
        ).find_movie_by_description()

        assert capsys.readouterr().out.count("\n  --\n") == 2

    def test_embedding_failure_stops_before_any_query(self) -> None:
        store = InMemoryMovieStore()
        http_client = httpx.Client(
            transport=httpx.MockTransport(lambda request: httpx.Response(500))
        )
        embeddings = OpenAIEmbeddings("sk-test", http_client=http_client)

        with pytest.raises(EmbeddingError, match="Internal Server Error"):
            _demo(store, ScriptedPrompter(text=["x"]), embeddings).find_movie_by_description()

        assert store.queries == []


class TestRun:
    def test_without_key_skips_vector_steps(
        self,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        store = InMemoryMovieStore()
        dataset = _write_dataset(
            tmp_path, [{"title": "A", "year": 1, "genre": "Drama", "description": "d"}]
        )
        prompter = ScriptedPrompter(select=["Drama"])

        run_demo(_SETTINGS, dataset, prompter=prompter, connector=lambda s: store)

        output = capsys.readouterr().out
        assert "1️⃣" in output
        assert "2️⃣" not in output
        assert "OPENAI_API_KEY" in output
        assert [kind for kind, _ in prompter.asked] == ["select"]

    def test_with_key_runs_all_steps(
        self,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        store = InMemoryMovieStore()
        dataset = _write_dataset(
            tmp_path,
            [
                {"title": "A", "year": 1, "genre": "Drama", "description": "d",
                 "$vector": unit_vector(0)},
            ],
        )
        prompter = ScriptedPrompter(select=["Drama", "Drama"], text=["one", "two"])
        settings = ProjectSettings(_SETTINGS.connection, openai_api_key="sk-test")

        run_demo(
            settings,
            dataset,
            prompter=prompter,
            connector=lambda s: store,
            embeddings=StubEmbeddings(unit_vector(0)),
        )

        output = capsys.readouterr().out
        assert "3️⃣" in output
        assert "Happy Coding!" in output
        for source in demo_runner.example_source_paths():
            assert source.is_file()
            assert str(source) in output

    def test_banner_shows_only_token_prefix(
        self,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        dataset = _write_dataset(tmp_path, [])

        run_demo(
            _SETTINGS,
            dataset,
            prompter=ScriptedPrompter(select=["Drama"]),
            connector=lambda s: InMemoryMovieStore(),
        )

        output = capsys.readouterr().out
        assert "AstraCS:01234..." in output
        assert "0123456789abcdef" not in output

    def test_connection_failure_aborts_workflow(self, tmp_path: Path) -> None:
        prompter = ScriptedPrompter()
        connector = Mock(side_effect=DatabaseConnectionError("unreachable"))

        with pytest.raises(DatabaseConnectionError):
            run_demo(_SETTINGS, tmp_path / "movies.json", prompter=prompter, connector=connector)

        assert prompter.asked == []


def test_example_sources_are_the_installed_modules() -> None:
    runner_source, store_source = demo_runner.example_source_paths()

    assert runner_source.name == "demo_runner.py"
    assert store_source.name == "movie_store.py"
    assert "def find_similar" in store_source.read_text(encoding="utf-8")


class TestMain:
    def test_missing_credentials_exit_nonzero(
        self,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        result = demo_runner.main(project_dir=tmp_path, environ={})

        assert result == 1
        assert "[ERROR]" in capsys.readouterr().out

    def test_errors_are_reported_not_raised(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        (tmp_path / ".env").write_text(
            "ASTRA_DB_API_ENDPOINT=https://db.example\nASTRA_DB_APPLICATION_TOKEN=AstraCS:x"
        )
        monkeypatch.setattr(
            demo_runner,
            "run_demo",
            Mock(side_effect=DatabaseConnectionError("Cannot connect to Astra DB")),
        )

        result = demo_runner.main(project_dir=tmp_path, environ={})

        assert result == 1
        assert "Cannot connect to Astra DB" in capsys.readouterr().out

    def test_settings_come_from_project_env_file(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        (tmp_path / ".env").write_text(
            "ASTRA_DB_API_ENDPOINT=https://db.example\n"
            "ASTRA_DB_APPLICATION_TOKEN=AstraCS:x\n"
            "OPENAI_API_KEY=sk-file"
        )
        mock_run = Mock()
        monkeypatch.setattr(demo_runner, "run_demo", mock_run)

        result = demo_runner.main(project_dir=tmp_path, environ={})

        assert result == 0
        settings, dataset = mock_run.call_args.args
        assert settings.openai_api_key == "sk-file"
        assert dataset == tmp_path / "movies.json"
