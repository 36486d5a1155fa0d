"""
quote_services.status_store -- Persistence collaborator for status changes.

Responsibility:
    Loads a quote's current status and history, and writes a validated
    status change (history row, quote status columns, activity entry).
    Performs no validation: callers only persist records produced by a
    successful ``QuoteWorkflow.transition``.

Architecture position:
    Services layer.  Owns all ORM queries for the status workflow; the
    coordinator in ``status_service`` talks only to the
    ``QuoteStatusStore`` protocol.

Invariants enforced:
    - History rows are inserted, never updated or deleted (ORM listeners
      in ``quote_kernel.db.immutability`` back this up).
    - ``load_history`` returns records in insertion order.
    - The store never commits; the caller owns the transaction
      (``session_scope()``).
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from quote_kernel.domain.clock import Clock, SystemClock
from quote_kernel.domain.history import ActivityRecord, StatusChangeRecord
from quote_kernel.domain.status import QuoteStatus, coerce_status, status_timestamp_field
from quote_kernel.exceptions import QuoteNotFoundError
from quote_kernel.logging_config import get_logger
from quote_kernel.models.activity import ActivityModel
from quote_kernel.models.quote import QuoteModel, QuoteStatusHistoryModel

logger = get_logger("services.status_store")


@runtime_checkable
class QuoteStatusStore(Protocol):
    """What the status coordinator needs from storage."""

    def load_current_status(self, quote_id: str) -> QuoteStatus: ...

    def load_status_since(self, quote_id: str) -> datetime: ...

    def load_history(self, quote_id: str) -> tuple[StatusChangeRecord, ...]: ...

    def persist(
        self, quote_id: str, new_status: QuoteStatus, record: StatusChangeRecord,
    ) -> None: ...

    def record_activity(self, activity: ActivityRecord) -> None: ...


class SqlQuoteStatusStore:
    """``QuoteStatusStore`` backed by a SQLAlchemy session."""

    def __init__(self, session: Session, clock: Clock | None = None):
        self._session = session
        self._clock = clock or SystemClock()

    def _get_quote(self, quote_id: str) -> QuoteModel:
        quote = self._session.get(QuoteModel, quote_id)
        if quote is None:
            raise QuoteNotFoundError(quote_id)
        return quote

    def create_quote(
        self,
        quote_id: str,
        status: QuoteStatus | str = QuoteStatus.DRAFT,
        *,
        expires_at: datetime | None = None,
    ) -> QuoteModel:
        """Insert the lifecycle row for a new quote (no history row)."""
        now = self._clock.now()
        quote = QuoteModel(
            id=quote_id,
            status=coerce_status(status).value,
            created_at=now,
            updated_at=now,
            expires_at=expires_at,
        )
        self._session.add(quote)
        self._session.flush()
        logger.info(
            "quote_created",
            extra={"quote_id": quote_id, "status": quote.status},
        )
        return quote

    def load_current_status(self, quote_id: str) -> QuoteStatus:
        return coerce_status(self._get_quote(quote_id).status)

    def load_status_since(self, quote_id: str) -> datetime:
        """When the quote entered its current status.

        The status timestamp column when one is stamped, else the last
        write to the quote row (its creation time if it never changed).
        """
        quote = self._get_quote(quote_id)
        column = status_timestamp_field(quote.status)
        stamped = getattr(quote, column) if column is not None else None
        return stamped or quote.updated_at

    def load_history(self, quote_id: str) -> tuple[StatusChangeRecord, ...]:
        rows = self._session.scalars(
            select(QuoteStatusHistoryModel)
            .where(QuoteStatusHistoryModel.quote_id == quote_id)
            .order_by(QuoteStatusHistoryModel.seq)
        ).all()
        return tuple(row.to_dto() for row in rows)

    def persist(
        self, quote_id: str, new_status: QuoteStatus, record: StatusChangeRecord,
    ) -> None:
        """Append ``record`` and move the quote to ``new_status``.

        Stamps the status timestamp column for ``new_status`` and, for a
        rejection with a comment, the rejection reason.
        """
        quote = self._get_quote(quote_id)
        new_status = coerce_status(new_status)

        last_seq = self._session.scalar(
            select(func.max(QuoteStatusHistoryModel.seq))
            .where(QuoteStatusHistoryModel.quote_id == quote_id)
        )
        seq = (last_seq or 0) + 1
        self._session.add(QuoteStatusHistoryModel.from_dto(record, seq))

        quote.status = new_status.value
        quote.updated_at = record.changed_at
        column = status_timestamp_field(new_status)
        if column is not None:
            setattr(quote, column, record.changed_at)
        if new_status == QuoteStatus.REJECTED and record.comment:
            quote.rejection_reason = record.comment

        self._session.flush()
        logger.debug(
            "quote_status_persisted",
            extra={
                "quote_id": quote_id,
                "history_id": record.id,
                "to_status": new_status.value,
                "seq": seq,
            },
        )

    def record_activity(self, activity: ActivityRecord) -> None:
        self._session.add(ActivityModel.from_dto(activity))
        self._session.flush()

    def load_activities(self, quote_id: str) -> list[ActivityModel]:
        return list(self._session.scalars(
            select(ActivityModel)
            .where(ActivityModel.quote_id == quote_id)
            .order_by(ActivityModel.created_at)
        ).all())
