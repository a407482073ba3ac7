"""
Artifact store contract and the default in-process implementation.

The coordinator only ever talks to an ArtifactStore. Reads hand out copies,
so work on a rejected transition can never leak into stored state; writes
replace the whole order at once.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from orderflow.kernel.models.artifact import Artifact, HistoryRecord


class ArtifactStore(ABC):
    """
    Repository of orders keyed by id.

    Implementations must make put() and append_history() all-or-nothing.
    """

    @abstractmethod
    def get(self, artifact_id: str) -> Optional[Artifact]:
        """Return a copy of the stored order, or None."""

    @abstractmethod
    def put(self, artifact: Artifact) -> None:
        """Insert or replace an order, history included."""

    @abstractmethod
    def delete(self, artifact_id: str) -> bool:
        """Hard delete; True if something was removed."""

    @abstractmethod
    def append_history(self, artifact_id: str, record: HistoryRecord) -> None:
        """Append one record to a stored order's history."""

    @abstractmethod
    def list(self) -> List[Artifact]:
        """All stored orders, oldest first."""

    def commit_transition(self, artifact: Artifact, record: HistoryRecord) -> None:
        """
        Persist an accepted transition.

        artifact already carries record as its last history entry; the order
        is written without it and the record is then appended.
        """
        self.put(artifact.model_copy(update={"history": artifact.history[:-1]}))
        self.append_history(artifact.id, record)

    def close(self) -> None:
        """Release backend resources."""

    def __contains__(self, artifact_id: str) -> bool:
        return self.get(artifact_id) is not None


class InMemoryArtifactStore(ArtifactStore):
    """Process-local store used by default and in tests."""

    def __init__(self) -> None:
        self._items: Dict[str, Artifact] = {}

    def get(self, artifact_id: str) -> Optional[Artifact]:
        artifact = self._items.get(artifact_id)
        return artifact.model_copy(deep=True) if artifact else None

    def put(self, artifact: Artifact) -> None:
        self._items[artifact.id] = artifact.model_copy(deep=True)

    def delete(self, artifact_id: str) -> bool:
        return self._items.pop(artifact_id, None) is not None

    def append_history(self, artifact_id: str, record: HistoryRecord) -> None:
        artifact = self._items.get(artifact_id)
        if artifact is None:
            raise KeyError(artifact_id)
        artifact.history.append(record)

    def list(self) -> List[Artifact]:
        return [a.model_copy(deep=True) for a in self._items.values()]

    def __len__(self) -> int:
        return len(self._items)
