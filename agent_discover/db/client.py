"""HTTP client for the corpus collection in a Qdrant-compatible vector database."""

from __future__ import annotations

from collections.abc import Iterator
from functools import lru_cache
from typing import Any

import httpx
import structlog

from agent_discover.config import get_settings
from agent_discover.db.models import Point, ScoredPoint

logger = structlog.get_logger()


class VectorStoreError(RuntimeError):
    """Raised when the vector database rejects a request or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def build_filter(filters: dict[str, Any] | None) -> dict[str, Any] | None:
    """Equality filters on payload keys, in Qdrant's ``must`` form."""
    if not filters:
        return None
    return {
        "must": [
            {"key": key, "match": {"value": value}}
            for key, value in filters.items()
            if value is not None
        ]
    }


class VectorStoreClient:
    """HTTP client for one collection of the vector database."""

    def __init__(
        self,
        base_url: str = "http://localhost:6333",
        collection: str = "agent_corpus",
        api_key: str | None = None,
        timeout: float = 30.0,
        batch_size: int = 64,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.collection = collection
        self.batch_size = batch_size
        headers = {}
        if api_key:
            headers["api-key"] = api_key
        self._client = httpx.Client(
            base_url=self.base_url, headers=headers, timeout=timeout, transport=transport
        )

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("vector_store.unreachable", url=self.base_url, error=str(e))
            raise VectorStoreError(
                f"Vector database unreachable at {self.base_url} ({e}). "
                "Is it running? Set AGENT_DISCOVER_QDRANT_URL or --qdrant-url."
            ) from e

    def _handle(self, resp: httpx.Response) -> Any:
        if resp.status_code >= 400:
            try:
                body = resp.json()
                detail = (body.get("status") or {}).get("error") or resp.text
            except (ValueError, AttributeError):
                detail = resp.text
            logger.warning(
                "vector_store.request_failed", status=resp.status_code, detail=detail
            )
            raise VectorStoreError(
                f"Vector store error ({resp.status_code}): {detail}", resp.status_code
            )
        return resp.json().get("result")

    @property
    def _base(self) -> str:
        return f"/collections/{self.collection}"

    # --- Collection ---

    def collection_exists(self) -> bool:
        resp = self._request("GET", self._base)
        if resp.status_code == 404:
            return False
        self._handle(resp)
        return True

    def create_collection(self, dimension: int) -> None:
        self._handle(
            self._request(
                "PUT", self._base, json={"vectors": {"size": dimension, "distance": "Cosine"}}
            )
        )
        logger.info("vector_store.collection_created", collection=self.collection, size=dimension)

    def delete_collection(self) -> None:
        resp = self._request("DELETE", self._base)
        if resp.status_code == 404:
            return
        self._handle(resp)
        logger.info("vector_store.collection_deleted", collection=self.collection)

    def ensure_collection(self, dimension: int) -> None:
        if not self.collection_exists():
            self.create_collection(dimension)

    def count(self) -> int:
        resp = self._request("POST", f"{self._base}/points/count", json={"exact": True})
        if resp.status_code == 404:
            return 0
        return int(self._handle(resp)["count"])

    # --- Points ---

    def upsert(self, points: list[Point]) -> int:
        """Upsert points in batches. Returns the number written."""
        for start in range(0, len(points), self.batch_size):
            batch = points[start : start + self.batch_size]
            self._handle(
                self._request(
                    "PUT",
                    f"{self._base}/points",
                    params={"wait": "true"},
                    json={"points": [p.to_dict() for p in batch]},
                )
            )
        return len(points)

    def delete(self, filters: dict[str, Any]) -> None:
        """Delete every point whose payload matches ``filters``."""
        query_filter = build_filter(filters)
        if not query_filter or not query_filter["must"]:
            raise ValueError("delete requires at least one payload filter")
        self._handle(
            self._request(
                "POST",
                f"{self._base}/points/delete",
                params={"wait": "true"},
                json={"filter": query_filter},
            )
        )
        logger.debug("vector_store.points_deleted", collection=self.collection, filters=filters)

    def search(
        self,
        vector: list[float],
        limit: int = 10,
        filters: dict[str, Any] | None = None,
    ) -> list[ScoredPoint]:
        body: dict[str, Any] = {"vector": vector, "limit": limit, "with_payload": True}
        query_filter = build_filter(filters)
        if query_filter:
            body["filter"] = query_filter
        result = self._handle(self._request("POST", f"{self._base}/points/search", json=body))
        points = [
            ScoredPoint(id=str(r["id"]), score=float(r["score"]), payload=r.get("payload") or {})
            for r in result or []
        ]
        return sorted(points, key=lambda p: p.score, reverse=True)

    def scroll(
        self,
        filters: dict[str, Any] | None = None,
        page_size: int = 256,
    ) -> Iterator[dict[str, Any]]:
        """Yield every stored payload matching ``filters``."""
        offset: Any = None
        while True:
            body: dict[str, Any] = {"limit": page_size, "with_payload": True, "with_vector": False}
            query_filter = build_filter(filters)
            if query_filter:
                body["filter"] = query_filter
            if offset is not None:
                body["offset"] = offset
            result = self._handle(self._request("POST", f"{self._base}/points/scroll", json=body))
            for record in result.get("points", []):
                yield record.get("payload") or {}
            offset = result.get("next_page_offset")
            if offset is None:
                break

    def close(self) -> None:
        self._client.close()


@lru_cache
def get_vector_store() -> VectorStoreClient:
    """Get cached vector store client built from settings."""
    settings = get_settings()
    return VectorStoreClient(
        base_url=settings.qdrant_url,
        collection=settings.collection,
        api_key=settings.qdrant_api_key or None,
        batch_size=settings.batch_size,
    )
