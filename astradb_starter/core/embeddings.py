"""OpenAI embeddings client used by the vector search steps of the demo."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

import httpx

from astradb_starter.core.errors import EmbeddingError
from astradb_starter.core.movies import VECTOR_DIMENSION

EMBEDDINGS_URL = "https://api.openai.com/v1/embeddings"
EMBEDDING_MODEL = "text-embedding-ada-002"


class EmbeddingProvider(Protocol):
    """Turns text into fixed-length vectors."""

    def embed(self, text: str) -> list[float]:
        ...

    def embed_many(self, texts: Sequence[str]) -> list[list[float]]:
        ...


class OpenAIEmbeddings:
    """Calls the OpenAI embeddings endpoint synchronously.

    Any response other than HTTP 200 is fatal: no retries are attempted.
    """

    def __init__(
        self,
        api_key: str,
        http_client: httpx.Client | None = None,
        model: str = EMBEDDING_MODEL,
        url: str = EMBEDDINGS_URL,
    ):
        self.model = model
        self.url = url
        self._api_key = api_key
        self._owns_client = http_client is None
        self.client = http_client or httpx.Client()

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> OpenAIEmbeddings:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _request(self, payload_input: str | list[str]) -> list[dict[str, Any]]:
        resp = self.client.post(
            self.url,
            json={"input": payload_input, "model": self.model},
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self._api_key}",
            },
        )

        if resp.status_code != 200:
            raise EmbeddingError(f"Failed to generate embedding: {resp.reason_phrase}")

        try:
            data = resp.json()["data"]
        except (ValueError, KeyError, TypeError) as e:
            raise EmbeddingError(f"Failed to generate embedding: malformed response ({e})") from e
        if not isinstance(data, list) or not data:
            raise EmbeddingError("Failed to generate embedding: empty response")
        return data

    def embed(self, text: str) -> list[float]:
        """Return the embedding of a single text."""
        data = self._request(text)
        return _vector(data[0])

    def embed_many(self, texts: Sequence[str]) -> list[list[float]]:
        """Return one embedding per text, in input order."""
        if not texts:
            return []
        data = sorted(self._request(list(texts)), key=_index)
        if len(data) != len(texts):
            raise EmbeddingError(
                f"Failed to generate embedding: expected {len(texts)} vectors, got {len(data)}"
            )
        return [_vector(item) for item in data]


def _index(item: Any) -> int:
    try:
        return int(item.get("index", 0))
    except (AttributeError, TypeError, ValueError) as e:
        raise EmbeddingError(f"Failed to generate embedding: malformed response ({e})") from e


def _vector(item: Any) -> list[float]:
    """Extract one embedding, checking it fits the collection's vector index."""
    try:
        vector = [float(x) for x in item["embedding"]]
    except (KeyError, TypeError, ValueError) as e:
        raise EmbeddingError(f"Failed to generate embedding: malformed vector ({e})") from e
    if len(vector) != VECTOR_DIMENSION:
        raise EmbeddingError(
            f"Failed to generate embedding: expected {VECTOR_DIMENSION} dimensions, "
            f"got {len(vector)}"
        )
    return vector
