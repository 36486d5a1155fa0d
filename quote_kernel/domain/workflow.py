"""
Quote workflow instance (``quote_kernel.domain.workflow``).

Responsibility
--------------
Stateful wrapper bound to one quote id.  Holds the current status and the
append-only history accumulated in this session, and exposes the
transition / query operations UI handlers call.

Architecture position
---------------------
**Kernel domain layer**.  Composes the catalog, table, validator and
history recorder.  No persistence: the caller persists the returned record
after a successful ``transition()``.

Invariants enforced
-------------------
* ``current_status == history[-1].to_status`` when history is non-empty,
  else the status given at construction.
* A rejected transition leaves status and history untouched.
* Domain failures come back as ``TransitionResult`` values; only an
  out-of-catalog status raises.

Concurrency
-----------
No internal locking.  One instance must not be shared by concurrent
``transition()`` callers without external serialization.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Iterable, Mapping

from quote_kernel.domain.clock import Clock, SystemClock
from quote_kernel.domain.history import StatusChangeRecord, create_status_change_record
from quote_kernel.domain.status import QuoteStatus, coerce_status
from quote_kernel.domain.transitions import (
    QUOTE_TRANSITIONS,
    Transition,
    TransitionTable,
    get_available_transitions,
    is_valid_transition,
)
from quote_kernel.domain.validation import TransitionError, validate_transition
from quote_kernel.exceptions import HistoryMismatchError
from quote_kernel.logging_config import get_logger

logger = get_logger("domain.workflow")


@dataclass(frozen=True)
class TransitionResult:
    """Result of ``QuoteWorkflow.transition``.

    Exactly one of ``record`` / ``error`` is set.
    """

    success: bool
    record: StatusChangeRecord | None = None
    error: TransitionError | None = None

    @classmethod
    def ok(cls, record: StatusChangeRecord) -> TransitionResult:
        return cls(success=True, record=record)

    @classmethod
    def failure(cls, error: TransitionError) -> TransitionResult:
        return cls(success=False, error=error)

    def __bool__(self) -> bool:
        return self.success


class QuoteWorkflow:
    """Lifecycle state machine for a single quote.

    ``history`` resumes a quote whose earlier changes were loaded from the
    store; it must end in ``status``.  ``status_since`` is when the quote
    entered ``status`` and defaults to construction time.
    """

    def __init__(
        self,
        quote_id: str,
        status: QuoteStatus | str = QuoteStatus.DRAFT,
        history: Iterable[StatusChangeRecord] = (),
        *,
        clock: Clock | None = None,
        transitions: TransitionTable = QUOTE_TRANSITIONS,
        status_since: datetime | None = None,
    ) -> None:
        self._quote_id = quote_id
        self._status = coerce_status(status)
        self._history: list[StatusChangeRecord] = list(history)
        self._clock = clock or SystemClock()
        self._transitions = transitions
        self._created_at = self._clock.now()
        self._entered_at = status_since or self._created_at

        if self._history and self._history[-1].to_status != self._status:
            raise HistoryMismatchError(
                quote_id, self._status.value, self._history[-1].to_status.value,
            )

    def __repr__(self) -> str:
        return (
            f"<QuoteWorkflow {self._quote_id} status={self._status.value} "
            f"changes={len(self._history)}>"
        )

    @property
    def quote_id(self) -> str:
        return self._quote_id

    @property
    def current_status(self) -> QuoteStatus:
        return self._status

    @property
    def transitions(self) -> TransitionTable:
        return self._transitions

    def get_current_status(self) -> QuoteStatus:
        return self._status

    # ------------------------------------------------------------------
    # Queries (never mutate)
    # ------------------------------------------------------------------

    def get_available_transitions(self) -> list[Transition]:
        return get_available_transitions(self._status, self._transitions)

    def can_transition_to(self, to_status: QuoteStatus | str) -> bool:
        """Structural check only; role permissions are ignored."""
        return is_valid_transition(self._status, to_status, self._transitions)

    def get_history(self) -> tuple[StatusChangeRecord, ...]:
        return tuple(self._history)

    def get_last_change(self) -> StatusChangeRecord | None:
        return self._history[-1] if self._history else None

    def get_time_in_current_status(self) -> timedelta:
        """Elapsed time since the quote entered its current status.

        Measured from the later of the entry time given at construction
        and the last recorded change; clamped at zero if the clock moved
        backwards.
        """
        since = self._entered_at
        last = self.get_last_change()
        if last is not None and last.changed_at > since:
            since = last.changed_at
        return max(self._clock.now() - since, timedelta(0))

    def is_in_status_longer_than(self, threshold: timedelta) -> bool:
        return self.get_time_in_current_status() >= threshold

    def is_stale(self, thresholds: Mapping[QuoteStatus, timedelta]) -> bool:
        """True when a threshold is configured for the current status and exceeded."""
        threshold = thresholds.get(self._status)
        if threshold is None:
            return False
        return self.is_in_status_longer_than(threshold)

    # ------------------------------------------------------------------
    # Transition
    # ------------------------------------------------------------------

    def transition(
        self,
        to_status: QuoteStatus | str,
        changed_by: str,
        changed_by_name: str,
        comment: str | None = None,
        metadata: Mapping[str, Any] | None = None,
        *,
        user_role: str | None = None,
    ) -> TransitionResult:
        """Move to ``to_status`` if the move is legal for ``user_role``.

        On success the new record is appended and returned; on failure
        nothing changes and the typed error is returned.
        """
        from_status = self._status
        validation = validate_transition(
            from_status,
            to_status,
            user_role=user_role,
            transitions=self._transitions,
        )
        if not validation:
            logger.info(
                "quote_transition_rejected",
                extra={
                    "quote_id": self._quote_id,
                    "from_status": from_status,
                    "to_status": validation.error.to_status,
                    "reason": validation.error.kind,
                    "user_role": user_role,
                },
            )
            return TransitionResult.failure(validation.error)

        record = create_status_change_record(
            self._quote_id,
            from_status,
            to_status,
            changed_by,
            changed_by_name,
            comment,
            metadata,
            clock=self._clock,
        )
        self._history.append(record)
        self._status = record.to_status

        logger.info(
            "quote_transition_applied",
            extra={
                "quote_id": self._quote_id,
                "from_status": from_status,
                "to_status": record.to_status,
                "history_id": record.id,
                "changed_by": changed_by,
            },
        )
        return TransitionResult.ok(record)
