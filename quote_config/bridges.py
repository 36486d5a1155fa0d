"""
Config-to-kernel bridges.

Translate a parsed ``WorkflowConfig`` into the inputs kernel code takes.
The kernel never imports from ``quote_config``; callers pass the bridged
values in.
"""

from __future__ import annotations

from quote_config.schema import WorkflowConfig
from quote_kernel.domain.transitions import QUOTE_TRANSITIONS, TransitionTable


def build_transition_table(
    config: WorkflowConfig,
    base: TransitionTable = QUOTE_TRANSITIONS,
) -> TransitionTable:
    """Return ``base`` with each configured role restriction applied.

    Entry order is preserved; moves without a restriction keep whatever
    ``allowed_roles`` they already had.
    """
    overlay = {
        (r.from_status, r.to_status): r.allowed_roles
        for r in config.role_restrictions
    }
    return tuple(
        t.with_allowed_roles(overlay[(t.from_status, t.to_status)])
        if (t.from_status, t.to_status) in overlay else t
        for t in base
    )
