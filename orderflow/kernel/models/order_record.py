"""
Relational tables backing SqlArtifactStore.

An order is stored as one row holding its JSON document plus one row per
history record. The per-department state columns exist for ad-hoc queries
only; the document is authoritative.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from orderflow.kernel.models.base import Base, TimestampMixin


class OrderRecord(Base, TimestampMixin):
    """Persistent form of an Artifact (history excluded)."""

    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)

    commercial_state: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)
    admin_state: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)
    workshop_state: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)

    # Full artifact snapshot without its history
    document: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    history: Mapped[List["OrderHistoryRecord"]] = relationship(
        back_populates="order",
        order_by="OrderHistoryRecord.sequence",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<OrderRecord {self.id} {self.commercial_state}/{self.admin_state}/{self.workshop_state}>"


class OrderHistoryRecord(Base):
    """
    Append-only transition record.

    Rows are only ever inserted; sequence keeps the original order.
    """

    __tablename__ = "order_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)

    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    department: Mapped[str] = mapped_column(String(20), nullable=False)
    from_state: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    to_state: Mapped[str] = mapped_column(String(50), nullable=False)
    owner: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    note: Mapped[str] = mapped_column(Text, nullable=False, default="")

    order: Mapped[OrderRecord] = relationship(back_populates="history")

    __table_args__ = (
        Index("ix_order_history_order_seq", "order_id", "sequence", unique=True),
    )
