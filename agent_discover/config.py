"""Application configuration — reads from environment variables, .env and Docker secrets."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


def _read_secret(name: str) -> str | None:
    """Read a Docker Swarm secret from /run/secrets/."""
    secret_path = Path(f"/run/secrets/{name}")
    if secret_path.exists():
        return secret_path.read_text().strip()
    return None


class Settings(BaseSettings):
    """agent-discover settings. Every field maps to AGENT_DISCOVER_<FIELD>."""

    qdrant_url: str = "http://localhost:6333"
    qdrant_api_key: str = ""
    collection: str = "agent_corpus"
    corpus_dir: str = "."
    output_dir: str = "."

    embedding_provider: str = "hashing"
    embedding_dimension: int = 384
    ollama_url: str = "http://localhost:11434"
    ollama_model: str = "nomic-embed-text"

    chunk_max_chars: int = 1200
    chunk_overlap: int = 150
    batch_size: int = 64
    target_score: float = 0.6

    log_level: str = "WARNING"
    port: int = 8410

    model_config = {
        "env_prefix": "AGENT_DISCOVER_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Docker Swarm secret wins over an unset key
        if not self.qdrant_api_key and (secret := _read_secret("qdrant_api_key")):
            self.qdrant_api_key = secret


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
