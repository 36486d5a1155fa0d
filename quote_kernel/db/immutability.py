"""
ORM-Level Immutability Enforcement for status history.

===============================================================================
WHAT IT PROTECTS
===============================================================================

Entity                  | When Immutable          | Why
------------------------|-------------------------|------------------------------
QuoteStatusHistoryModel | ALWAYS (from creation)  | The audit trail of a quote

SQLAlchemy fires ``before_update`` / ``before_delete`` before the SQL is
emitted.  The listeners below raise ``ImmutabilityViolationError`` there,
so the flush aborts and the row is never changed.

    session.flush()
         |
         v
    [before_update] --> _check_history_immutability() --> ImmutabilityViolationError
    [before_delete] --> _check_history_delete() --------> ImmutabilityViolationError

Bulk ``UPDATE``/``DELETE`` statements and raw SQL bypass the ORM and are not
covered here.
"""

from sqlalchemy import event

from quote_kernel.exceptions import ImmutabilityViolationError
from quote_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _check_history_immutability(mapper, connection, target):
    """Prevent any updates to status history rows."""
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "QuoteStatusHistory",
            "entity_id": str(target.id),
            "operation": "UPDATE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="QuoteStatusHistory",
        entity_id=str(target.id),
        reason="Status history records are immutable and cannot be modified",
    )


def _check_history_delete(mapper, connection, target):
    """Prevent deletion of status history rows."""
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "QuoteStatusHistory",
            "entity_id": str(target.id),
            "operation": "DELETE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="QuoteStatusHistory",
        entity_id=str(target.id),
        reason="Status history records cannot be deleted",
    )


_LISTENERS = (
    ("before_update", _check_history_immutability),
    ("before_delete", _check_history_delete),
)


def register_immutability_listeners() -> None:
    """
    Register the history immutability listeners (idempotent).

    Call during application initialization, before any database
    operations begin.
    """
    from quote_kernel.models.quote import QuoteStatusHistoryModel

    for event_name, fn in _LISTENERS:
        if not event.contains(QuoteStatusHistoryModel, event_name, fn):
            event.listen(QuoteStatusHistoryModel, event_name, fn)


def unregister_immutability_listeners() -> None:
    """
    Remove the history immutability listeners.

    WARNING: Only use this in tests that must violate immutability on
    purpose.
    """
    from quote_kernel.models.quote import QuoteStatusHistoryModel

    for event_name, fn in _LISTENERS:
        if event.contains(QuoteStatusHistoryModel, event_name, fn):
            event.remove(QuoteStatusHistoryModel, event_name, fn)
