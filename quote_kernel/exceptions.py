"""
Typed Exception Hierarchy for the Quote Kernel.

===============================================================================
WHAT IS (AND IS NOT) AN EXCEPTION HERE
===============================================================================

Every expected workflow failure is a VALUE, not an exception:

    result = workflow.transition(QuoteStatus.ACCEPTED, "u1", "Alice")
    if not result:
        show_message(result.error.message)    # TransitionError, never raised

The classes in this module cover the remaining cases, which are programmer
or configuration faults (an out-of-catalog status, a broken config file, a
tampered history row) or missing collaborator data (an unknown quote id).

Every exception carries a machine-readable ``code`` class attribute and its
context as attributes, so it can be logged or serialized without parsing
the message.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    QuoteWorkflowError (base)
    |
    +-- UnknownStatusError
    +-- HistoryMismatchError
    +-- WorkflowConfigError
    +-- QuoteNotFoundError
    +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                      | When Raised
--------------------------|------------------------------------------------
UNKNOWN_STATUS            | Value is not a member of the status catalog
HISTORY_MISMATCH          | Resumed history does not end in the given status
WORKFLOW_CONFIG_INVALID   | Config file names an impossible rule
QUOTE_NOT_FOUND           | Store has no quote with the given id
IMMUTABILITY_VIOLATION    | Update/delete of a status history row
"""


class QuoteWorkflowError(Exception):
    """
    Base exception for all quote kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "QUOTE_WORKFLOW_ERROR"


class UnknownStatusError(QuoteWorkflowError):
    """A value outside the status catalog reached the workflow."""

    code: str = "UNKNOWN_STATUS"

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Unknown quote status: {value!r}")


class HistoryMismatchError(QuoteWorkflowError):
    """Resumed history is inconsistent with the supplied current status."""

    code: str = "HISTORY_MISMATCH"

    def __init__(self, quote_id: str, expected_status: str, history_status: str):
        self.quote_id = quote_id
        self.expected_status = expected_status
        self.history_status = history_status
        super().__init__(
            f"History for quote {quote_id} ends in '{history_status}' "
            f"but current status is '{expected_status}'"
        )


class WorkflowConfigError(QuoteWorkflowError):
    """Workflow configuration is structurally invalid."""

    code: str = "WORKFLOW_CONFIG_INVALID"

    def __init__(self, reason: str, source: str | None = None):
        self.reason = reason
        self.source = source
        where = f" ({source})" if source else ""
        super().__init__(f"Invalid workflow config{where}: {reason}")


class QuoteNotFoundError(QuoteWorkflowError):
    """Quote with given ID was not found in the store."""

    code: str = "QUOTE_NOT_FOUND"

    def __init__(self, quote_id: str):
        self.quote_id = quote_id
        super().__init__(f"Quote not found: {quote_id}")


class ImmutabilityViolationError(QuoteWorkflowError):
    """
    Attempted to modify or delete an immutable record.

    Status history rows are append-only from the moment they are inserted.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
