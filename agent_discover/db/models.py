"""Vector store record types.

``ChunkPayload`` mirrors the payload stored with every point in the corpus
collection.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field

POINT_NAMESPACE = uuid.UUID("6f1c8f0e-3d4b-5a8e-9c6d-2b7a1e4f9d30")


def point_id(path: str, chunk_index: int) -> str:
    """Stable point id, so re-ingesting a file overwrites its chunks."""
    return str(uuid.uuid5(POINT_NAMESPACE, f"{path}#{chunk_index}"))


class ChunkPayload(BaseModel):
    """Payload of one corpus chunk."""

    doc_name: str
    doc_type: str
    description: str = ""
    subjects: list[str] = Field(default_factory=list)
    tools: list[str] = Field(default_factory=list)
    path: str
    chunk_index: int
    heading: str = ""
    text: str


@dataclass
class Point:
    id: str
    vector: list[float]
    payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "vector": self.vector, "payload": self.payload}


@dataclass
class ScoredPoint:
    id: str
    score: float
    payload: dict[str, Any] = field(default_factory=dict)
