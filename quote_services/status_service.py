"""
quote_services.status_service -- Quote status change coordinator.

Responsibility:
    Runs one status change end to end: load the quote's workflow from the
    store, validate and apply the transition, persist the record, derive
    the activity entry and emit a structured trace.  Thin coordinator --
    legality and permissions are decided by the kernel workflow, storage
    by the ``QuoteStatusStore``.

Architecture position:
    Services layer.  May import from quote_kernel/ and quote_config/.

Invariants enforced:
    - Nothing is persisted when the transition is rejected.
    - Exactly one ``quote_status_transition`` trace per ``change_status``
      call that reaches validation.
"""

from __future__ import annotations

import time
from datetime import timedelta
from typing import Any, Callable, Mapping

from quote_config.bridges import build_transition_table
from quote_config.schema import WorkflowConfig
from quote_kernel.domain.actions import QuoteAction, get_quote_actions
from quote_kernel.domain.clock import Clock, SystemClock
from quote_kernel.domain.history import ActivityRecord, build_activity_record
from quote_kernel.domain.status import QuoteStatus, coerce_status
from quote_kernel.domain.transitions import QUOTE_TRANSITIONS
from quote_kernel.domain.workflow import QuoteWorkflow, TransitionResult
from quote_kernel.logging_config import LogContext, get_logger
from quote_services.status_store import QuoteStatusStore

logger = get_logger("services.status_service")

TRACE_TYPE_QUOTE_STATUS_TRANSITION = "QUOTE_STATUS_TRANSITION"
OUTCOME_SUCCESS = "success"


def _emit_status_trace(
    quote_id: str,
    from_status: QuoteStatus,
    to_status: QuoteStatus,
    outcome: str,
    reason: str,
    duration_ms: float,
    ts: str,
    actor_id: str,
    user_role: str | None = None,
    history_id: str | None = None,
    outcome_sink: Callable[[dict], None] | None = None,
) -> None:
    """Emit a structured status transition record."""
    record: dict[str, Any] = {
        "trace_type": TRACE_TYPE_QUOTE_STATUS_TRANSITION,
        "ts": ts,
        "quote_id": quote_id,
        "from_status": from_status.value,
        "to_status": to_status.value,
        "outcome": outcome,
        "reason": reason,
        "duration_ms": round(duration_ms, 3),
        "actor_id": actor_id,
    }
    if user_role is not None:
        record["user_role"] = user_role
    if history_id is not None:
        record["history_id"] = history_id
    record.update(LogContext.get_all())
    logger.info("quote_status_transition", extra=record)
    record["message"] = "quote_status_transition"
    if outcome_sink is not None:
        outcome_sink(record)


class QuoteStatusService:
    """Coordinates quote status changes against a store.

    With a ``config`` its role restrictions are overlaid on the default
    transition table and its staleness thresholds back ``is_stale``.
    """

    def __init__(
        self,
        store: QuoteStatusStore,
        clock: Clock | None = None,
        config: WorkflowConfig | None = None,
        outcome_sink: Callable[[dict], None] | None = None,
    ):
        self._store = store
        self._clock = clock or SystemClock()
        self._config = config
        self._transitions = (
            build_transition_table(config) if config is not None else QUOTE_TRANSITIONS
        )
        self._staleness: Mapping[QuoteStatus, timedelta] = (
            config.staleness_thresholds if config is not None else {}
        )
        self._outcome_sink = outcome_sink

    def open_workflow(self, quote_id: str) -> QuoteWorkflow:
        """Rebuild the workflow for ``quote_id`` from stored status and history.

        Raises:
            QuoteNotFoundError: no such quote.
            HistoryMismatchError: stored history does not end in the stored
                status.
        """
        status = self._store.load_current_status(quote_id)
        history = self._store.load_history(quote_id)
        return QuoteWorkflow(
            quote_id,
            status,
            history,
            clock=self._clock,
            transitions=self._transitions,
            status_since=self._store.load_status_since(quote_id),
        )

    def available_actions(self, quote_id: str) -> tuple[QuoteAction, ...]:
        status = self._store.load_current_status(quote_id)
        return get_quote_actions(status, self._transitions)

    def is_stale(self, quote_id: str) -> bool:
        return self.open_workflow(quote_id).is_stale(self._staleness)

    def change_status(
        self,
        quote_id: str,
        to_status: QuoteStatus | str,
        actor_id: str,
        actor_name: str,
        *,
        comment: str | None = None,
        metadata: Mapping[str, Any] | None = None,
        user_role: str | None = None,
        activity_sink: Callable[[ActivityRecord], None] | None = None,
    ) -> TransitionResult:
        """Validate, apply and persist one status change.

        Domain failures come back in the result and leave storage
        untouched.  On success the history row and quote columns are
        written, the activity entry is recorded and, if given,
        ``activity_sink`` receives it.
        """
        start = time.monotonic()
        target = coerce_status(to_status)

        with LogContext.bind(quote_id=quote_id, actor_id=actor_id, user_role=user_role):
            workflow = self.open_workflow(quote_id)
            from_status = workflow.current_status
            result = workflow.transition(
                target, actor_id, actor_name, comment, metadata,
                user_role=user_role,
            )

            if not result:
                _emit_status_trace(
                    quote_id, from_status, target,
                    outcome=result.error.kind.value,
                    reason=result.error.message,
                    duration_ms=(time.monotonic() - start) * 1000,
                    ts=self._clock.now().isoformat(),
                    actor_id=actor_id,
                    user_role=user_role,
                    outcome_sink=self._outcome_sink,
                )
                return result

            record = result.record
            self._store.persist(quote_id, record.to_status, record)
            activity = build_activity_record(record, clock=self._clock)
            self._store.record_activity(activity)
            if activity_sink is not None:
                activity_sink(activity)

            _emit_status_trace(
                quote_id, from_status, target,
                outcome=OUTCOME_SUCCESS,
                reason=f"transitioned {from_status.value} -> {target.value}",
                duration_ms=(time.monotonic() - start) * 1000,
                ts=self._clock.now().isoformat(),
                actor_id=actor_id,
                user_role=user_role,
                history_id=record.id,
                outcome_sink=self._outcome_sink,
            )
            return result
