"""
Transition validation (``quote_kernel.domain.validation``).

Responsibility
--------------
Decides whether a requested status change is legal and, when the caller
supplies an actor role, whether that role may perform it.  Failures are
returned as values -- callers branch on ``result.error.kind`` to disable a
button or show a message.

Architecture position
---------------------
**Kernel domain layer** -- pure functions.  ZERO I/O.

Invariants enforced
-------------------
Checks run in order and stop at the first failure:

1. ``from`` is final                     -> ``FINAL_STATUS``
   (takes precedence over table membership, so a stray table entry out
   of a final status can never be used)
2. ``(from, to)`` not in the table       -> ``INVALID_TRANSITION``
3. role supplied, allowed roles known,
   role not among them                   -> ``PERMISSION_DENIED``

Permission enforcement is opt-in: with no user role, or no allowed roles
from either the caller or the matching table entry, step 3 is skipped.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from quote_kernel.domain.status import QuoteStatus, coerce_status, is_final_status
from quote_kernel.domain.transitions import (
    QUOTE_TRANSITIONS,
    TransitionTable,
    find_transition,
)


class TransitionErrorKind(str, Enum):
    """Kinds of expected transition failure."""

    INVALID_TRANSITION = "invalid_transition"
    FINAL_STATUS = "final_status"
    PERMISSION_DENIED = "permission_denied"


@dataclass(frozen=True)
class TransitionError:
    """
    A rejected status change.

    Contract:
        Carries the machine-readable ``kind``, a human-readable message and
        the requested pair.

    Non-goals:
        - Does NOT raise -- it IS the error representation.
    """

    kind: TransitionErrorKind
    message: str
    from_status: QuoteStatus
    to_status: QuoteStatus
    user_role: str | None = None

    @classmethod
    def final_status(cls, src: QuoteStatus, dst: QuoteStatus) -> TransitionError:
        return cls(
            kind=TransitionErrorKind.FINAL_STATUS,
            message=f'Cannot transition from final status "{src.value}"',
            from_status=src,
            to_status=dst,
        )

    @classmethod
    def invalid(cls, src: QuoteStatus, dst: QuoteStatus) -> TransitionError:
        return cls(
            kind=TransitionErrorKind.INVALID_TRANSITION,
            message=f'Invalid transition from "{src.value}" to "{dst.value}"',
            from_status=src,
            to_status=dst,
        )

    @classmethod
    def permission_denied(
        cls, src: QuoteStatus, dst: QuoteStatus, user_role: str,
    ) -> TransitionError:
        return cls(
            kind=TransitionErrorKind.PERMISSION_DENIED,
            message=f'User role "{user_role}" lacks permission for this transition',
            from_status=src,
            to_status=dst,
            user_role=user_role,
        )


@dataclass(frozen=True)
class ValidationResult:
    """
    Result of validating one requested transition.

    Guarantees:
        - ``error`` is None exactly when ``success`` is True.
        - ``bool(result) == result.success``.
    """

    success: bool
    error: TransitionError | None = None

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(success=True)

    @classmethod
    def failure(cls, error: TransitionError) -> ValidationResult:
        return cls(success=False, error=error)

    def __bool__(self) -> bool:
        return self.success


def validate_transition(
    from_status: QuoteStatus | str,
    to_status: QuoteStatus | str,
    *,
    user_role: str | None = None,
    allowed_roles: Iterable[str] | None = None,
    transitions: TransitionTable = QUOTE_TRANSITIONS,
) -> ValidationResult:
    """Validate ``from -> to``.

    ``allowed_roles`` given here takes precedence over the matching table
    entry's own ``allowed_roles``.

    Raises:
        UnknownStatusError: only for values outside the status catalog.
    """
    src = coerce_status(from_status)
    dst = coerce_status(to_status)

    if is_final_status(src):
        return ValidationResult.failure(TransitionError.final_status(src, dst))

    transition = find_transition(src, dst, transitions)
    if transition is None:
        return ValidationResult.failure(TransitionError.invalid(src, dst))

    roles = frozenset(allowed_roles) if allowed_roles is not None else transition.allowed_roles
    if roles is not None and user_role is not None and user_role not in roles:
        return ValidationResult.failure(
            TransitionError.permission_denied(src, dst, user_role)
        )

    return ValidationResult.ok()
