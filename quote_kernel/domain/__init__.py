"""
Pure domain layer.

Status catalog, transition table, validator, history recorder and the
per-quote workflow instance.  No ORM, no database, no config files; time
enters only through an injected Clock.
"""

from quote_kernel.domain.actions import ActionVariant, QuoteAction, get_quote_actions
from quote_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from quote_kernel.domain.history import (
    ActivityRecord,
    ActivityType,
    StatusChangeRecord,
    build_activity_record,
    create_status_change_record,
    get_activity_type_for_status_change,
)
from quote_kernel.domain.status import (
    FINAL_STATUSES,
    STATUS_METADATA,
    QuoteStatus,
    StatusMetadata,
    can_edit_quote,
    color_tag_of,
    description_of,
    get_status_metadata,
    is_final_status,
    label_of,
)
from quote_kernel.domain.transitions import (
    QUOTE_TRANSITIONS,
    Transition,
    find_transition,
    get_available_transitions,
    get_next_statuses,
    is_valid_transition,
)
from quote_kernel.domain.validation import (
    TransitionError,
    TransitionErrorKind,
    ValidationResult,
    validate_transition,
)
from quote_kernel.domain.workflow import QuoteWorkflow, TransitionResult

__all__ = [
    "ActionVariant",
    "ActivityRecord",
    "ActivityType",
    "Clock",
    "DeterministicClock",
    "FINAL_STATUSES",
    "QUOTE_TRANSITIONS",
    "QuoteAction",
    "QuoteStatus",
    "QuoteWorkflow",
    "STATUS_METADATA",
    "StatusChangeRecord",
    "StatusMetadata",
    "SystemClock",
    "Transition",
    "TransitionError",
    "TransitionErrorKind",
    "TransitionResult",
    "ValidationResult",
    "build_activity_record",
    "can_edit_quote",
    "color_tag_of",
    "create_status_change_record",
    "description_of",
    "find_transition",
    "get_activity_type_for_status_change",
    "get_available_transitions",
    "get_next_statuses",
    "get_quote_actions",
    "get_status_metadata",
    "is_final_status",
    "is_valid_transition",
    "label_of",
    "validate_transition",
]
