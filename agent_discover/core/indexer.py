"""Parse, chunk, embed and upsert corpus documents."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from agent_discover.core.chunker import chunk_document
from agent_discover.core.documents import (
    CorpusDocument,
    DocumentParseError,
    discover_documents,
    parse_document,
)
from agent_discover.core.embeddings import Embedder
from agent_discover.db.client import VectorStoreClient
from agent_discover.db.models import ChunkPayload, Point, point_id

logger = structlog.get_logger()


@dataclass
class IngestReport:
    """Outcome of one ingest run."""

    documents: int = 0
    chunks: int = 0
    skipped: int = 0
    failed: list[dict[str, str]] = field(default_factory=list)
    by_type: dict[str, int] = field(default_factory=dict)
    cleared: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "documents": self.documents,
            "chunks": self.chunks,
            "skipped": self.skipped,
            "failed": self.failed,
            "by_type": self.by_type,
            "cleared": self.cleared,
        }


class CorpusIndexer:
    """Embeds a corpus directory into the vector store."""

    def __init__(
        self,
        store: VectorStoreClient,
        embedder: Embedder,
        max_chars: int = 1200,
        overlap: int = 150,
        batch_size: int = 64,
        corpus_root: Path | str = ".",
    ) -> None:
        self.store = store
        self.embedder = embedder
        self.max_chars = max_chars
        self.overlap = overlap
        self.batch_size = batch_size
        self.corpus_root = Path(corpus_root).resolve()

    def source_path(self, path: Path) -> str:
        """Stored path of a corpus file: relative to the corpus root, else absolute.

        The same file maps to the same path whichever directory is ingested.
        """
        resolved = path.resolve()
        try:
            return resolved.relative_to(self.corpus_root).as_posix()
        except ValueError:
            return resolved.as_posix()

    def build_points(self, doc: CorpusDocument, source: str) -> list[Point]:
        """Chunk and embed one document into points."""
        chunks = chunk_document(doc, max_chars=self.max_chars, overlap=self.overlap)
        vectors: list[list[float]] = []
        for start in range(0, len(chunks), self.batch_size):
            batch = chunks[start : start + self.batch_size]
            vectors.extend(self.embedder.embed([c.text for c in batch]))

        points = []
        for chunk, vector in zip(chunks, vectors):
            payload = ChunkPayload(
                doc_name=doc.name,
                doc_type=doc.doc_type.value,
                description=doc.description,
                subjects=doc.subjects,
                tools=doc.tools,
                path=source,
                chunk_index=chunk.index,
                heading=chunk.heading,
                text=chunk.text,
            )
            points.append(
                Point(
                    id=point_id(source, chunk.index),
                    vector=vector,
                    payload=payload.model_dump(),
                )
            )
        return points

    def ingest(self, root: Path, clear: bool = False) -> IngestReport:
        """Ingest every corpus document under ``root``.

        Each ingested file replaces its previously stored chunks. With
        ``clear`` the collection is dropped and recreated first, so documents
        removed from disk also disappear from the index.
        """
        if not root.exists():
            raise ValueError(f"Corpus path does not exist: {root}")

        report = IngestReport(cleared=clear)
        if clear:
            self.store.delete_collection()
        self.store.ensure_collection(self.embedder.dimension)

        by_type: Counter = Counter()
        pending: list[Point] = []

        for path in discover_documents(root):
            source = self.source_path(path)
            try:
                doc = parse_document(path)
            except (DocumentParseError, UnicodeDecodeError) as e:
                logger.warning("indexer.parse_failed", path=source, error=str(e))
                report.failed.append({"path": source, "error": str(e)})
                continue

            if not clear:
                self.store.delete({"path": source})

            if not doc.body and not doc.description:
                logger.info("indexer.empty_document", path=source)
                report.skipped += 1
                continue

            points = self.build_points(doc, source)
            pending.extend(points)
            report.documents += 1
            report.chunks += len(points)
            by_type[doc.doc_type.value] += 1

            if len(pending) >= self.batch_size:
                self.store.upsert(pending)
                pending = []

        if pending:
            self.store.upsert(pending)

        report.by_type = dict(sorted(by_type.items()))
        logger.info(
            "indexer.ingested",
            root=str(root),
            documents=report.documents,
            chunks=report.chunks,
            failed=len(report.failed),
            cleared=clear,
        )
        return report
