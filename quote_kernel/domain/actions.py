"""
Quote action projection (``quote_kernel.domain.actions``).

Turns the available transitions for a status into button descriptors for
the UI.  Carries no behaviour: executing an action still goes through
``QuoteWorkflow.transition``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from quote_kernel.domain.status import QuoteStatus
from quote_kernel.domain.transitions import (
    QUOTE_TRANSITIONS,
    Transition,
    TransitionTable,
    get_available_transitions,
)


class ActionVariant(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    DANGER = "danger"
    GHOST = "ghost"


@dataclass(frozen=True)
class QuoteAction:
    id: str
    label: str
    target_status: QuoteStatus
    variant: ActionVariant
    requires_confirmation: bool
    confirmation_message: str | None = None


def _variant_for(transition: Transition) -> ActionVariant:
    if transition.is_self_transition:
        return ActionVariant.GHOST
    if transition.to_status == QuoteStatus.ACCEPTED:
        return ActionVariant.PRIMARY
    if transition.to_status == QuoteStatus.REJECTED:
        return ActionVariant.DANGER
    return ActionVariant.SECONDARY


def get_quote_actions(
    status: QuoteStatus | str,
    transitions: TransitionTable = QUOTE_TRANSITIONS,
) -> tuple[QuoteAction, ...]:
    """Button descriptors for every move available from ``status``, in table order."""
    return tuple(
        QuoteAction(
            id=f"action_{t.to_status.value}_{index}",
            label=t.action_label,
            target_status=t.to_status,
            variant=_variant_for(t),
            requires_confirmation=t.requires_confirmation,
            confirmation_message=t.confirmation_message,
        )
        for index, t in enumerate(get_available_transitions(status, transitions))
    )
