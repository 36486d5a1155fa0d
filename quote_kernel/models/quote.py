"""
Module: quote_kernel.models.quote
Responsibility: ORM persistence for a quote's lifecycle columns and its
    status change history.

Architecture position: Kernel > Models.  May import from db/base.py and
    domain value objects (for DTO conversion only).

Invariants enforced:
    - Status columns are limited to catalog values by CHECK constraints.
    - History rows are append-only (ORM listeners in db/immutability.py).

Only the lifecycle slice of a quote lives here; pricing, line items and
customer details belong to the wider application.
"""

from __future__ import annotations

from datetime import datetime
from types import MappingProxyType
from typing import Any

from sqlalchemy import JSON, CheckConstraint, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from quote_kernel.db.base import Base
from quote_kernel.domain.history import StatusChangeRecord
from quote_kernel.domain.status import QuoteStatus, coerce_status

_STATUS_VALUES = ", ".join(f"'{s.value}'" for s in QuoteStatus)


class QuoteModel(Base):
    """Lifecycle columns of a quote.

    ``sent_at`` .. ``converted_at`` are stamped each time the quote enters
    the matching status.
    """

    __tablename__ = "quotes"

    __table_args__ = (
        CheckConstraint(
            f"status IN ({_STATUS_VALUES})",
            name="ck_quotes_valid_status",
        ),
        Index("ix_quotes_status_expires", "status", "expires_at"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=QuoteStatus.DRAFT.value,
    )
    created_at: Mapped[datetime] = mapped_column(nullable=False)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)
    expires_at: Mapped[datetime | None] = mapped_column(nullable=True)
    sent_at: Mapped[datetime | None] = mapped_column(nullable=True)
    viewed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    accepted_at: Mapped[datetime | None] = mapped_column(nullable=True)
    rejected_at: Mapped[datetime | None] = mapped_column(nullable=True)
    converted_at: Mapped[datetime | None] = mapped_column(nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Quote {self.id} status={self.status}>"


class QuoteStatusHistoryModel(Base):
    """Persistent status change record. Append-only."""

    __tablename__ = "quote_status_history"

    __table_args__ = (
        CheckConstraint(
            f"from_status IN ({_STATUS_VALUES})",
            name="ck_quote_status_history_from_status",
        ),
        CheckConstraint(
            f"to_status IN ({_STATUS_VALUES})",
            name="ck_quote_status_history_to_status",
        ),
        Index("ix_quote_status_history_quote_changed", "quote_id", "changed_at"),
        Index("ix_quote_status_history_changed_at", "changed_at"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    quote_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False,
    )
    # Insertion order tiebreaker for records stamped in the same instant.
    seq: Mapped[int] = mapped_column(nullable=False)
    from_status: Mapped[str] = mapped_column(String(20), nullable=False)
    to_status: Mapped[str] = mapped_column(String(20), nullable=False)
    changed_by: Mapped[str] = mapped_column(String(255), nullable=False)
    changed_by_name: Mapped[str] = mapped_column(String(255), nullable=False)
    changed_at: Mapped[datetime] = mapped_column(nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    metadata_: Mapped[dict[str, Any] | None] = mapped_column(
        "metadata", JSON, nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<QuoteStatusHistory {self.id} quote={self.quote_id} "
            f"{self.from_status}->{self.to_status}>"
        )

    def to_dto(self) -> StatusChangeRecord:
        """Convert ORM model to frozen domain record."""
        return StatusChangeRecord(
            id=self.id,
            quote_id=self.quote_id,
            from_status=coerce_status(self.from_status),
            to_status=coerce_status(self.to_status),
            changed_by=self.changed_by,
            changed_by_name=self.changed_by_name,
            changed_at=self.changed_at,
            comment=self.comment,
            metadata=(
                MappingProxyType(dict(self.metadata_))
                if self.metadata_ is not None else None
            ),
        )

    @classmethod
    def from_dto(cls, dto: StatusChangeRecord, seq: int) -> QuoteStatusHistoryModel:
        """Create ORM model from domain record."""
        return cls(
            id=dto.id,
            quote_id=dto.quote_id,
            seq=seq,
            from_status=dto.from_status.value,
            to_status=dto.to_status.value,
            changed_by=dto.changed_by,
            changed_by_name=dto.changed_by_name,
            changed_at=dto.changed_at,
            comment=dto.comment,
            metadata_=dict(dto.metadata) if dto.metadata is not None else None,
        )
