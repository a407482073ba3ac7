"""Artifact stores: the repository contract plus in-memory and SQL backends."""

from orderflow.kernel.store.repository import ArtifactStore, InMemoryArtifactStore
from orderflow.kernel.store.sql_store import SqlArtifactStore

__all__ = [
    "ArtifactStore",
    "InMemoryArtifactStore",
    "SqlArtifactStore",
]
