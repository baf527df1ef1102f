"""agent-discover: embedding-backed discovery and generation for agent corpora."""

__version__ = "0.1.0"
