"""
Quote status catalog (``quote_kernel.domain.status``).

Responsibility
--------------
The closed set of quote lifecycle statuses and their static metadata
(label, description, semantic color tag, final/editable flags), plus the
read-only queries the rest of the workflow and the UI consult.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  Leaf module:
no imports from other domain modules.

Invariants enforced
-------------------
* Every ``QuoteStatus`` has exactly one ``StatusMetadata`` entry
  (checked at import time).
* Final statuses have no outgoing transitions -- this is a property of the
  transition table and is verified by tests, not here.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from quote_kernel.exceptions import UnknownStatusError


class QuoteStatus(str, Enum):
    """Quote lifecycle statuses."""

    DRAFT = "draft"
    PENDING = "pending"
    SENT = "sent"
    VIEWED = "viewed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"
    CONVERTED = "converted"


@dataclass(frozen=True)
class StatusMetadata:
    """Static, display-independent facts about one status.

    ``color_tag`` is a semantic token (``"emerald"``, ``"red"``...) that a
    rendering layer maps to its own palette.
    """

    label: str
    description: str
    color_tag: str
    is_final: bool
    is_editable: bool


STATUS_METADATA: Mapping[QuoteStatus, StatusMetadata] = MappingProxyType({
    QuoteStatus.DRAFT: StatusMetadata(
        label="Draft",
        description="Quote is being prepared",
        color_tag="slate",
        is_final=False,
        is_editable=True,
    ),
    QuoteStatus.PENDING: StatusMetadata(
        label="Pending",
        description="Quote is ready to be sent",
        color_tag="amber",
        is_final=False,
        is_editable=True,
    ),
    QuoteStatus.SENT: StatusMetadata(
        label="Sent",
        description="Quote has been sent to customer",
        color_tag="indigo",
        is_final=False,
        is_editable=False,
    ),
    QuoteStatus.VIEWED: StatusMetadata(
        label="Viewed",
        description="Customer has viewed the quote",
        color_tag="purple",
        is_final=False,
        is_editable=False,
    ),
    QuoteStatus.ACCEPTED: StatusMetadata(
        label="Accepted",
        description="Quote has been accepted by customer",
        color_tag="emerald",
        is_final=True,
        is_editable=False,
    ),
    QuoteStatus.REJECTED: StatusMetadata(
        label="Declined",
        description="Quote has been declined",
        color_tag="red",
        is_final=True,
        is_editable=False,
    ),
    QuoteStatus.EXPIRED: StatusMetadata(
        label="Expired",
        description="Quote has expired",
        color_tag="gray",
        is_final=False,
        is_editable=False,
    ),
    QuoteStatus.CONVERTED: StatusMetadata(
        label="Converted",
        description="Quote converted to order",
        color_tag="blue",
        is_final=True,
        is_editable=False,
    ),
})

if set(STATUS_METADATA) != set(QuoteStatus):
    raise RuntimeError("STATUS_METADATA must cover every QuoteStatus")

FINAL_STATUSES: frozenset[QuoteStatus] = frozenset(
    s for s, meta in STATUS_METADATA.items() if meta.is_final
)


def coerce_status(value: QuoteStatus | str) -> QuoteStatus:
    """Return ``value`` as a ``QuoteStatus``.

    Raises:
        UnknownStatusError: the value is not in the catalog.  This is a
            programmer/config error, never a user-facing condition.
    """
    if isinstance(value, QuoteStatus):
        return value
    try:
        return QuoteStatus(value)
    except ValueError:
        raise UnknownStatusError(value) from None


def get_status_metadata(status: QuoteStatus | str) -> StatusMetadata:
    return STATUS_METADATA[coerce_status(status)]


def is_final_status(status: QuoteStatus | str) -> bool:
    return get_status_metadata(status).is_final


def can_edit_quote(status: QuoteStatus | str) -> bool:
    """True only for statuses explicitly marked editable (draft, pending)."""
    return get_status_metadata(status).is_editable


def color_tag_of(status: QuoteStatus | str) -> str:
    return get_status_metadata(status).color_tag


def label_of(status: QuoteStatus | str) -> str:
    return get_status_metadata(status).label


def description_of(status: QuoteStatus | str) -> str:
    return get_status_metadata(status).description


# Quote column stamped when a quote enters the status.
STATUS_TIMESTAMP_FIELDS: Mapping[QuoteStatus, str] = MappingProxyType({
    QuoteStatus.SENT: "sent_at",
    QuoteStatus.VIEWED: "viewed_at",
    QuoteStatus.ACCEPTED: "accepted_at",
    QuoteStatus.REJECTED: "rejected_at",
    QuoteStatus.CONVERTED: "converted_at",
})


def status_timestamp_field(status: QuoteStatus | str) -> str | None:
    return STATUS_TIMESTAMP_FIELDS.get(coerce_status(status))
