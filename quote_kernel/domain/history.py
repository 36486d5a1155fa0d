"""
Status change history (``quote_kernel.domain.history``).

Responsibility
--------------
Builds the immutable audit record for an executed transition and
classifies a status change into an activity type for the external
audit-log / notification pipeline.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  Time and ids come from an
injected ``Clock`` and ``uuid4``; nothing else touches the outside world.

Invariants enforced
-------------------
* A ``StatusChangeRecord`` is frozen; its metadata mapping is a read-only
  copy of what the caller passed.
* Optional fields (comment, metadata) are omitted from ``to_dict()``
  output when they were not supplied.
* ``create_status_change_record`` performs NO validation -- it is only
  called after ``validate_transition`` succeeded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping
from uuid import uuid4

from quote_kernel.domain.clock import Clock, SystemClock
from quote_kernel.domain.status import QuoteStatus, coerce_status

HISTORY_ID_PREFIX = "hist_"


class ActivityType(str, Enum):
    """Semantic classification of quote activity."""

    QUOTE_CREATED = "quote_created"
    QUOTE_SENT = "quote_sent"
    QUOTE_VIEWED = "quote_viewed"
    QUOTE_ACCEPTED = "quote_accepted"
    QUOTE_REJECTED = "quote_rejected"
    QUOTE_EXPIRED = "quote_expired"
    QUOTE_CONVERTED = "quote_converted"
    STATUS_CHANGED = "status_changed"


_ACTIVITY_BY_STATUS: Mapping[QuoteStatus, ActivityType] = MappingProxyType({
    QuoteStatus.DRAFT: ActivityType.QUOTE_CREATED,
    QuoteStatus.PENDING: ActivityType.STATUS_CHANGED,
    QuoteStatus.SENT: ActivityType.QUOTE_SENT,
    QuoteStatus.VIEWED: ActivityType.QUOTE_VIEWED,
    QuoteStatus.ACCEPTED: ActivityType.QUOTE_ACCEPTED,
    QuoteStatus.REJECTED: ActivityType.QUOTE_REJECTED,
    QuoteStatus.EXPIRED: ActivityType.QUOTE_EXPIRED,
    QuoteStatus.CONVERTED: ActivityType.QUOTE_CONVERTED,
})


@dataclass(frozen=True)
class StatusChangeRecord:
    """One executed status change. Immutable."""

    id: str
    quote_id: str
    from_status: QuoteStatus
    to_status: QuoteStatus
    changed_by: str
    changed_by_name: str
    changed_at: datetime
    comment: str | None = None
    metadata: Mapping[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form; absent optional fields are left out entirely."""
        data: dict[str, Any] = {
            "id": self.id,
            "quote_id": self.quote_id,
            "from_status": self.from_status.value,
            "to_status": self.to_status.value,
            "changed_by": self.changed_by,
            "changed_by_name": self.changed_by_name,
            "changed_at": self.changed_at.isoformat(),
        }
        if self.comment is not None:
            data["comment"] = self.comment
        if self.metadata is not None:
            data["metadata"] = dict(self.metadata)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StatusChangeRecord:
        changed_at = data["changed_at"]
        if isinstance(changed_at, str):
            changed_at = datetime.fromisoformat(changed_at)
        metadata = data.get("metadata")
        return cls(
            id=data["id"],
            quote_id=data["quote_id"],
            from_status=coerce_status(data["from_status"]),
            to_status=coerce_status(data["to_status"]),
            changed_by=data["changed_by"],
            changed_by_name=data["changed_by_name"],
            changed_at=changed_at,
            comment=data.get("comment"),
            metadata=MappingProxyType(dict(metadata)) if metadata is not None else None,
        )


@dataclass(frozen=True)
class ActivityRecord:
    """Activity-feed entry derived from a status change.

    Handed to the external audit / notification pipeline; delivery is not
    this package's concern.
    """

    activity_id: str
    activity_type: ActivityType
    quote_id: str
    user_id: str
    user_name: str
    description: str
    created_at: datetime
    metadata: Mapping[str, Any] = field(default_factory=dict)


def generate_history_id() -> str:
    return f"{HISTORY_ID_PREFIX}{uuid4().hex}"


def create_status_change_record(
    quote_id: str,
    from_status: QuoteStatus | str,
    to_status: QuoteStatus | str,
    changed_by: str,
    changed_by_name: str,
    comment: str | None = None,
    metadata: Mapping[str, Any] | None = None,
    *,
    clock: Clock | None = None,
    record_id: str | None = None,
) -> StatusChangeRecord:
    """Build the audit record for an already-validated transition."""
    clock = clock or SystemClock()
    return StatusChangeRecord(
        id=record_id or generate_history_id(),
        quote_id=quote_id,
        from_status=coerce_status(from_status),
        to_status=coerce_status(to_status),
        changed_by=changed_by,
        changed_by_name=changed_by_name,
        changed_at=clock.now(),
        comment=comment,
        metadata=MappingProxyType(dict(metadata)) if metadata is not None else None,
    )


def get_activity_type_for_status_change(to_status: QuoteStatus | str) -> ActivityType:
    """Classify a change by its destination status."""
    return _ACTIVITY_BY_STATUS[coerce_status(to_status)]


def describe_status_change(record: StatusChangeRecord) -> str:
    return f"Quote status changed to {record.to_status.value}"


def build_activity_record(
    record: StatusChangeRecord,
    *,
    clock: Clock | None = None,
) -> ActivityRecord:
    """Derive the activity-feed entry for ``record``."""
    clock = clock or SystemClock()
    return ActivityRecord(
        activity_id=str(uuid4()),
        activity_type=get_activity_type_for_status_change(record.to_status),
        quote_id=record.quote_id,
        user_id=record.changed_by,
        user_name=record.changed_by_name,
        description=describe_status_change(record),
        created_at=clock.now(),
        metadata=MappingProxyType({
            "history_id": record.id,
            "from_status": record.from_status.value,
            "to_status": record.to_status.value,
        }),
    )
