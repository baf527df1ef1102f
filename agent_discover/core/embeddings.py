"""Text embedders.

``HashingEmbedder`` is the default: signed feature hashing over unigrams and
bigrams. It is deterministic and needs no model download.
``OllamaEmbedder`` delegates to a local Ollama server.
"""

from __future__ import annotations

import hashlib
import math
from collections import Counter
from functools import lru_cache
from typing import Protocol

import httpx
import numpy as np
import structlog

from agent_discover.config import Settings, get_settings
from agent_discover.utils.text import content_tokens

logger = structlog.get_logger()


class EmbeddingError(RuntimeError):
    """Raised when an embedding backend fails."""


class Embedder(Protocol):
    name: str

    @property
    def dimension(self) -> int: ...

    def embed(self, texts: list[str]) -> list[list[float]]: ...


class HashingEmbedder:
    """Signed feature-hashing embedder with sublinear term frequency."""

    name = "hashing"

    def __init__(self, dimension: int = 384, bigrams: bool = True) -> None:
        if dimension < 8:
            raise ValueError("Embedding dimension must be at least 8")
        self._dimension = dimension
        self.bigrams = bigrams

    @property
    def dimension(self) -> int:
        return self._dimension

    def _features(self, text: str) -> Counter:
        tokens = content_tokens(text)
        features = Counter(tokens)
        if self.bigrams:
            features.update(f"{a} {b}" for a, b in zip(tokens, tokens[1:]))
        return features

    def _bucket(self, feature: str) -> tuple[int, float]:
        digest = hashlib.blake2b(feature.encode("utf-8"), digest_size=8).digest()
        value = int.from_bytes(digest, "little")
        sign = 1.0 if value & 1 else -1.0
        return (value >> 1) % self._dimension, sign

    def embed_one(self, text: str) -> np.ndarray:
        vec = np.zeros(self._dimension, dtype=np.float32)
        for feature, count in self._features(text).items():
            idx, sign = self._bucket(feature)
            # bigrams carry half weight
            weight = 1.0 + math.log(count)
            if " " in feature:
                weight *= 0.5
            vec[idx] += sign * weight
        norm = float(np.linalg.norm(vec))
        if norm > 0:
            vec /= norm
        return vec

    def embed(self, texts: list[str]) -> list[list[float]]:
        return [self.embed_one(t).tolist() for t in texts]


class OllamaEmbedder:
    """Embeddings from an Ollama-compatible ``/api/embed`` endpoint."""

    name = "ollama"

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "nomic-embed-text",
        timeout: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)
        self._dimension: int | None = None

    @property
    def dimension(self) -> int:
        if self._dimension is None:
            self.embed(["dimension probe"])
        return self._dimension  # type: ignore[return-value]

    def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        try:
            resp = self._client.post("/api/embed", json={"model": self.model, "input": texts})
        except httpx.HTTPError as e:
            raise EmbeddingError(f"Embedding server unreachable at {self.base_url}: {e}") from e
        if resp.status_code >= 400:
            raise EmbeddingError(f"Embedding error ({resp.status_code}): {resp.text}")
        embeddings = resp.json().get("embeddings") or []
        if len(embeddings) != len(texts):
            raise EmbeddingError(
                f"Embedding server returned {len(embeddings)} vectors for {len(texts)} inputs"
            )
        self._dimension = len(embeddings[0])
        return embeddings


def get_embedder(settings: Settings) -> Embedder:
    """Build the embedder named by ``settings.embedding_provider``."""
    provider = settings.embedding_provider.lower()
    if provider == "hashing":
        return HashingEmbedder(dimension=settings.embedding_dimension)
    if provider == "ollama":
        logger.debug("embeddings.ollama", url=settings.ollama_url, model=settings.ollama_model)
        return OllamaEmbedder(base_url=settings.ollama_url, model=settings.ollama_model)
    raise ValueError(f"Unknown embedding provider '{settings.embedding_provider}'")


@lru_cache
def get_default_embedder() -> Embedder:
    """Get cached embedder built from settings."""
    return get_embedder(get_settings())
