"""Tests for the embedders."""

from __future__ import annotations

import json

import httpx
import numpy as np
import pytest

from agent_discover.config import Settings
from agent_discover.core.embeddings import (
    EmbeddingError,
    HashingEmbedder,
    OllamaEmbedder,
    get_embedder,
)


def _cosine(a, b) -> float:
    return float(np.dot(a, b))


class TestHashingEmbedder:
    def test_dimension_and_norm(self):
        embedder = HashingEmbedder(dimension=128)
        vec = embedder.embed_one("postgres schema migrations")
        assert vec.shape == (128,)
        assert np.linalg.norm(vec) == pytest.approx(1.0, abs=1e-5)

    def test_deterministic(self):
        a = HashingEmbedder(dimension=256).embed(["kafka consumer groups"])
        b = HashingEmbedder(dimension=256).embed(["kafka consumer groups"])
        assert a == b

    def test_stop_words_only_is_zero_vector(self):
        vec = HashingEmbedder(dimension=64).embed_one("the and of")
        assert not vec.any()

    def test_related_text_scores_higher(self):
        embedder = HashingEmbedder(dimension=512)
        query = embedder.embed_one("postgres schema migrations")
        related = embedder.embed_one("database schema migrations for postgres tables")
        unrelated = embedder.embed_one("react css layout with flexbox")
        assert _cosine(query, related) > _cosine(query, unrelated)
        assert _cosine(query, related) > 0.5

    def test_embed_returns_lists(self):
        vectors = HashingEmbedder(dimension=32).embed(["one thing", "another thing"])
        assert len(vectors) == 2
        assert isinstance(vectors[0], list)
        assert len(vectors[0]) == 32

    def test_dimension_too_small(self):
        with pytest.raises(ValueError):
            HashingEmbedder(dimension=4)


class TestOllamaEmbedder:
    def _embedder(self, handler) -> OllamaEmbedder:
        return OllamaEmbedder(
            base_url="http://ollama:11434",
            model="test-model",
            transport=httpx.MockTransport(handler),
        )

    def test_embed(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            vectors = [[0.1, 0.2, 0.3] for _ in seen["body"]["input"]]
            return httpx.Response(200, json={"embeddings": vectors})

        embedder = self._embedder(handler)
        vectors = embedder.embed(["a", "b"])
        assert vectors == [[0.1, 0.2, 0.3], [0.1, 0.2, 0.3]]
        assert seen["path"] == "/api/embed"
        assert seen["body"] == {"model": "test-model", "input": ["a", "b"]}
        assert embedder.dimension == 3

    def test_dimension_probes_server(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={"embeddings": [[0.0] * 5]})

        embedder = self._embedder(handler)
        assert embedder.dimension == 5
        assert embedder.dimension == 5
        assert len(calls) == 1

    def test_empty_input_skips_request(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        assert self._embedder(handler).embed([]) == []

    def test_server_error(self):
        embedder = self._embedder(lambda request: httpx.Response(500, text="model not found"))
        with pytest.raises(EmbeddingError, match="500"):
            embedder.embed(["a"])

    def test_vector_count_mismatch(self):
        embedder = self._embedder(lambda request: httpx.Response(200, json={"embeddings": []}))
        with pytest.raises(EmbeddingError, match="0 vectors for 1 inputs"):
            embedder.embed(["a"])

    def test_unreachable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(EmbeddingError, match="unreachable"):
            self._embedder(handler).embed(["a"])


class TestGetEmbedder:
    def test_hashing_default(self):
        embedder = get_embedder(Settings(embedding_provider="hashing", embedding_dimension=96))
        assert isinstance(embedder, HashingEmbedder)
        assert embedder.dimension == 96

    def test_ollama(self):
        embedder = get_embedder(Settings(embedding_provider="Ollama", ollama_model="mxbai"))
        assert isinstance(embedder, OllamaEmbedder)
        assert embedder.model == "mxbai"

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown embedding provider"):
            get_embedder(Settings(embedding_provider="word2vec"))
