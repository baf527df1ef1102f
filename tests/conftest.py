"""Test fixtures: an in-memory vector store and a small sample corpus."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import numpy as np
import pytest
import structlog
from fastapi.testclient import TestClient

from agent_discover.core.analyser import DomainAnalyser
from agent_discover.core.embeddings import HashingEmbedder
from agent_discover.core.indexer import CorpusIndexer
from agent_discover.core.leaderboard import Leaderboard
from agent_discover.core.retriever import CorpusRetriever
from agent_discover.db.client import VectorStoreClient
from agent_discover.db.models import Point, ScoredPoint


def _matches(payload: dict[str, Any], filters: dict[str, Any] | None) -> bool:
    for key, value in (filters or {}).items():
        actual = payload.get(key)
        if isinstance(actual, list):
            if value not in actual:
                return False
        elif actual != value:
            return False
    return True


class MockVectorStore(VectorStoreClient):
    """In-memory stand-in for the vector database with cosine search."""

    def __init__(self, collection: str = "test_corpus"):
        self.collection = collection
        self.batch_size = 64
        self._points: dict[str, Point] | None = None
        self.dimension: int | None = None
        self.upsert_calls = 0

    def collection_exists(self) -> bool:
        return self._points is not None

    def create_collection(self, dimension: int) -> None:
        self._points = {}
        self.dimension = dimension

    def delete_collection(self) -> None:
        self._points = None
        self.dimension = None

    def count(self) -> int:
        return len(self._points or {})

    def upsert(self, points: list[Point]) -> int:
        if self._points is None:
            raise AssertionError("upsert before collection was created")
        self.upsert_calls += 1
        for p in points:
            self._points[p.id] = p
        return len(points)

    def delete(self, filters: dict[str, Any]) -> None:
        if not filters:
            raise ValueError("delete requires at least one payload filter")
        if self._points is None:
            raise AssertionError("delete before collection was created")
        self._points = {
            pid: p for pid, p in self._points.items() if not _matches(p.payload, filters)
        }

    def search(
        self,
        vector: list[float],
        limit: int = 10,
        filters: dict[str, Any] | None = None,
    ) -> list[ScoredPoint]:
        query = np.asarray(vector, dtype=np.float64)
        qnorm = np.linalg.norm(query)
        scored = []
        for p in (self._points or {}).values():
            if not _matches(p.payload, filters):
                continue
            vec = np.asarray(p.vector, dtype=np.float64)
            denom = qnorm * np.linalg.norm(vec)
            score = float(query @ vec / denom) if denom else 0.0
            scored.append(ScoredPoint(id=p.id, score=score, payload=dict(p.payload)))
        scored.sort(key=lambda s: s.score, reverse=True)
        return scored[:limit]

    def scroll(self, filters: dict[str, Any] | None = None, page_size: int = 256):
        for p in (self._points or {}).values():
            if _matches(p.payload, filters):
                yield dict(p.payload)

    def close(self) -> None:
        pass


SAMPLE_CORPUS: dict[str, str] = {
    "agents/backend-architect.agent.md": """\
---
name: backend-architect
description: Designs scalable backend APIs, database schemas and microservice boundaries
tools: [codebase, search, terminal]
---

# Backend Architect

You design backend systems.

## Expertise

- REST and GraphQL API design with versioning and pagination
- PostgreSQL schema design, indexing and migrations
- Caching layers, message queues and service boundaries

## Boundaries

Frontend styling and visual design belong to the frontend designer.
""",
    "agents/security-reviewer.agent.md": """\
---
name: security-reviewer
description: Reviews code for OWASP vulnerabilities, injection flaws and leaked secrets
tools: codebase, search
subjects: [security, owasp]
---

## Expertise

- OWASP Top 10 review: injection, broken authentication, access control
- Secret scanning and credential hygiene
- Threat modelling for web applications

## Behaviours

Report each vulnerability with severity, location and a concrete fix.
""",
    "agents/frontend-designer.agent.md": """\
---
name: frontend-designer
description: Builds accessible React interfaces with responsive CSS layouts
tools: [codebase, browser]
---

## Expertise

- React components, hooks and state management
- Responsive CSS grid and flexbox layouts
- Accessibility audits with ARIA roles and keyboard navigation
""",
    ".github/instructions/python.instructions.md": """\
---
description: Python coding standards for type hints, pytest fixtures and packaging
applyTo: "**/*.py"
---

## Guidelines

- Annotate public functions with type hints
- Write pytest tests with fixtures instead of setup methods
- Package with pyproject.toml
""",
    "prompts/create-cli.prompt.md": """\
---
mode: agent
description: Scaffold a command-line tool with click argument parsing and subcommands
tools: [terminal, editFiles]
---

## Workflow

1. Ask for the command name and subcommands
2. Generate a click group with options and arguments
3. Add tests using CliRunner
""",
    "chatmodes/debug.chatmode.md": """\
---
description: Interactive debugging session that reproduces failures and bisects regressions
tools: [terminal, search, problems]
---

## Behaviour

Reproduce the failure first, then narrow down the regression with bisection and logging.
""",
    "README.md": "# Corpus\n\nThis readme is not a corpus document.\n",
}


def write_corpus(root: Path, files: dict[str, str]) -> Path:
    for rel, text in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


@pytest.fixture(autouse=True)
def _reset_structlog():
    """CLI tests point structlog at CliRunner streams; restore defaults afterwards."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def corpus_dir(tmp_path) -> Path:
    """Sample corpus covering all four document types, plus a README."""
    return write_corpus(tmp_path / "corpus", SAMPLE_CORPUS)


@pytest.fixture
def store() -> MockVectorStore:
    """Fresh in-memory vector store for each test."""
    return MockVectorStore()


@pytest.fixture
def embedder() -> HashingEmbedder:
    return HashingEmbedder(dimension=512)


@pytest.fixture
def indexer(store, embedder, corpus_dir) -> CorpusIndexer:
    return CorpusIndexer(store, embedder, max_chars=600, overlap=60, corpus_root=corpus_dir)


@pytest.fixture
def indexed_store(indexer, store, corpus_dir) -> MockVectorStore:
    """Vector store holding the ingested sample corpus."""
    indexer.ingest(corpus_dir)
    return store


@pytest.fixture
def retriever(indexed_store, embedder) -> CorpusRetriever:
    return CorpusRetriever(indexed_store, embedder)


@pytest.fixture
def app(retriever):
    """FastAPI test app with an in-memory corpus."""
    from agent_discover.core.analyser import get_analyser
    from agent_discover.core.leaderboard import get_leaderboard
    from agent_discover.core.retriever import get_retriever
    from agent_discover.main import app as _app

    _app.dependency_overrides[get_retriever] = lambda: retriever
    _app.dependency_overrides[get_leaderboard] = lambda: Leaderboard(retriever)
    _app.dependency_overrides[get_analyser] = lambda: DomainAnalyser(retriever)

    yield _app

    _app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    """HTTP test client."""
    return TestClient(app)


@pytest.fixture
def make_corpus(tmp_path):
    """Write an ad hoc corpus under tmp_path and return its root."""

    def _make(files: dict[str, str], name: str = "extra") -> Path:
        return write_corpus(tmp_path / name, files)

    return _make
