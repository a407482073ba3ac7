"""
Relational artifact store (SQLAlchemy).

Swappable replacement for the in-memory store. Each call runs in its own
session transaction, so a put() writes the order document and any new history
rows together or not at all.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session, sessionmaker

from orderflow.database import close_db, create_db_engine, create_session_factory, init_db
from orderflow.kernel.models.artifact import Artifact, HistoryRecord
from orderflow.kernel.models.department import Department
from orderflow.kernel.models.order_record import OrderHistoryRecord, OrderRecord
from orderflow.kernel.store.repository import ArtifactStore
from orderflow.logging_config import get_logger

logger = get_logger(__name__)


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo; everything is written in UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class SqlArtifactStore(ArtifactStore):
    """
    Orders persisted as a JSON document row plus history rows.

    Usage:
        engine = create_db_engine("sqlite:///./orders.db")
        init_db(engine)
        store = SqlArtifactStore(create_session_factory(engine))

    or, owning its engine:
        store = SqlArtifactStore.from_url("sqlite:///./orders.db")
    """

    def __init__(self, session_factory: sessionmaker[Session], engine: Optional[Engine] = None):
        self._session_factory = session_factory
        self._engine = engine

    @classmethod
    def from_url(cls, database_url: Optional[str] = None) -> "SqlArtifactStore":
        """Create the engine and tables; close() disposes the engine."""
        engine = create_db_engine(database_url)
        init_db(engine)
        return cls(create_session_factory(engine), engine=engine)

    def close(self) -> None:
        if self._engine is not None:
            close_db(self._engine)
            self._engine = None

    def get(self, artifact_id: str) -> Optional[Artifact]:
        with self._session_factory() as session:
            row = session.get(OrderRecord, artifact_id)
            if row is None:
                return None
            return self._to_artifact(row)

    def put(self, artifact: Artifact) -> None:
        with self._session_factory.begin() as session:
            row = session.get(OrderRecord, artifact.id)
            if row is None:
                row = OrderRecord(id=artifact.id)
                session.add(row)
            self._fill(row, artifact)
            # History is append-only: only the unseen tail is written
            stored = len(row.history)
            for sequence, record in enumerate(artifact.history[stored:], start=stored):
                row.history.append(self._history_row(sequence, record))

    def delete(self, artifact_id: str) -> bool:
        with self._session_factory.begin() as session:
            row = session.get(OrderRecord, artifact_id)
            if row is None:
                return False
            session.delete(row)
            logger.info("Order deleted from store", extra={"artifact_id": artifact_id})
            return True

    def append_history(self, artifact_id: str, record: HistoryRecord) -> None:
        with self._session_factory.begin() as session:
            row = session.get(OrderRecord, artifact_id)
            if row is None:
                raise KeyError(artifact_id)
            row.history.append(self._history_row(len(row.history), record))

    def commit_transition(self, artifact: Artifact, record: HistoryRecord) -> None:
        """Slot update and history row in a single transaction."""
        with self._session_factory.begin() as session:
            row = session.get(OrderRecord, artifact.id)
            if row is None:
                raise KeyError(artifact.id)
            self._fill(row, artifact)
            stored = len(row.history)
            for sequence, entry in enumerate(artifact.history[stored:], start=stored):
                row.history.append(self._history_row(sequence, entry))

    def list(self) -> List[Artifact]:
        with self._session_factory() as session:
            rows = session.scalars(
                select(OrderRecord).order_by(OrderRecord.created_at, OrderRecord.id)
            ).all()
            return [self._to_artifact(row) for row in rows]

    def _fill(self, row: OrderRecord, artifact: Artifact) -> None:
        row.document = artifact.model_dump(mode="json", exclude={"history"})
        row.commercial_state = artifact.state_of(Department.COMMERCIAL)
        row.admin_state = artifact.state_of(Department.ADMIN)
        row.workshop_state = artifact.state_of(Department.WORKSHOP)
        row.created_at = artifact.created_at
        row.updated_at = artifact.updated_at

    def _history_row(self, sequence: int, record: HistoryRecord) -> OrderHistoryRecord:
        return OrderHistoryRecord(
            sequence=sequence,
            timestamp=record.timestamp,
            department=record.department,
            from_state=record.from_state,
            to_state=record.to_state,
            owner=record.owner,
            note=record.note,
        )

    def _to_artifact(self, row: OrderRecord) -> Artifact:
        data = dict(row.document)
        data["history"] = [
            HistoryRecord(
                timestamp=_aware(h.timestamp),
                department=h.department,
                from_state=h.from_state,
                to_state=h.to_state,
                owner=h.owner,
                note=h.note,
            )
            for h in row.history
        ]
        return Artifact.model_validate(data)
