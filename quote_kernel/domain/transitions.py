"""
Quote transition table (``quote_kernel.domain.transitions``).

Responsibility
--------------
The authoritative list of allowed ``(from, to, action)`` moves and the
pure graph queries over it.  Transitions are data: adding a move means
adding an entry here (or a role overlay in config), never touching the
validator.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  Depends only
on ``domain.status``.

Invariants enforced
-------------------
* Transitions reference only catalog statuses (enforced by type).
* ``sent -> sent`` ("Resend Quote") is the only self-transition.
* Final statuses and ``expired`` have no outgoing entries (verified by
  tests).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable

from quote_kernel.domain.status import QuoteStatus, coerce_status

_CONFIRM_ACCEPT = (
    "Are you sure you want to mark this quote as accepted? "
    "This action cannot be undone."
)
_CONFIRM_DECLINE = (
    "Are you sure you want to mark this quote as declined? "
    "This action cannot be undone."
)


@dataclass(frozen=True)
class Transition:
    """A valid status transition.

    ``allowed_roles=None`` means the move is not role-restricted.
    """

    from_status: QuoteStatus
    to_status: QuoteStatus
    action_label: str
    requires_confirmation: bool = False
    confirmation_message: str | None = None
    allowed_roles: frozenset[str] | None = None

    @property
    def is_self_transition(self) -> bool:
        return self.from_status == self.to_status

    def with_allowed_roles(self, roles: Iterable[str] | None) -> Transition:
        """Return a copy restricted to ``roles`` (``None`` lifts the restriction)."""
        return replace(
            self,
            allowed_roles=frozenset(roles) if roles is not None else None,
        )


TransitionTable = tuple[Transition, ...]


QUOTE_TRANSITIONS: TransitionTable = (
    # Draft
    Transition(QuoteStatus.DRAFT, QuoteStatus.SENT, "Send Quote"),
    Transition(QuoteStatus.DRAFT, QuoteStatus.PENDING, "Save as Pending"),
    # Pending
    Transition(QuoteStatus.PENDING, QuoteStatus.SENT, "Send Quote"),
    Transition(QuoteStatus.PENDING, QuoteStatus.DRAFT, "Move to Draft"),
    # Sent
    Transition(QuoteStatus.SENT, QuoteStatus.VIEWED, "Mark as Viewed"),
    Transition(
        QuoteStatus.SENT, QuoteStatus.ACCEPTED, "Mark as Accepted",
        requires_confirmation=True,
        confirmation_message=_CONFIRM_ACCEPT,
    ),
    Transition(
        QuoteStatus.SENT, QuoteStatus.REJECTED, "Mark as Declined",
        requires_confirmation=True,
        confirmation_message=_CONFIRM_DECLINE,
    ),
    Transition(QuoteStatus.SENT, QuoteStatus.EXPIRED, "Mark as Expired"),
    Transition(QuoteStatus.SENT, QuoteStatus.SENT, "Resend Quote"),
    # Viewed
    Transition(
        QuoteStatus.VIEWED, QuoteStatus.ACCEPTED, "Mark as Accepted",
        requires_confirmation=True,
        confirmation_message=_CONFIRM_ACCEPT,
    ),
    Transition(
        QuoteStatus.VIEWED, QuoteStatus.REJECTED, "Mark as Declined",
        requires_confirmation=True,
        confirmation_message=_CONFIRM_DECLINE,
    ),
    Transition(QuoteStatus.VIEWED, QuoteStatus.EXPIRED, "Mark as Expired"),
)


def find_transition(
    from_status: QuoteStatus | str,
    to_status: QuoteStatus | str,
    transitions: TransitionTable = QUOTE_TRANSITIONS,
) -> Transition | None:
    """Return the first table entry matching ``(from, to)`` exactly, if any."""
    src = coerce_status(from_status)
    dst = coerce_status(to_status)
    for t in transitions:
        if t.from_status == src and t.to_status == dst:
            return t
    return None


def is_valid_transition(
    from_status: QuoteStatus | str,
    to_status: QuoteStatus | str,
    transitions: TransitionTable = QUOTE_TRANSITIONS,
) -> bool:
    """Pure graph membership.  No permission or final-status awareness."""
    return find_transition(from_status, to_status, transitions) is not None


def get_available_transitions(
    from_status: QuoteStatus | str,
    transitions: TransitionTable = QUOTE_TRANSITIONS,
) -> list[Transition]:
    src = coerce_status(from_status)
    return [t for t in transitions if t.from_status == src]


def get_next_statuses(
    from_status: QuoteStatus | str,
    transitions: TransitionTable = QUOTE_TRANSITIONS,
) -> list[QuoteStatus]:
    return [t.to_status for t in get_available_transitions(from_status, transitions)]
