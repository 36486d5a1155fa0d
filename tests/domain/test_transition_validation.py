"""Tests for transition validation and its error taxonomy."""

from itertools import product

import pytest

from quote_kernel.domain.status import FINAL_STATUSES, QuoteStatus
from quote_kernel.domain.transitions import QUOTE_TRANSITIONS, Transition
from quote_kernel.domain.validation import (
    TransitionError,
    TransitionErrorKind,
    ValidationResult,
    validate_transition,
)
from quote_kernel.exceptions import UnknownStatusError

S = QuoteStatus
TABLE_PAIRS = {(t.from_status, t.to_status) for t in QUOTE_TRANSITIONS}


class TestValidationResult:

    def test_ok_is_truthy(self):
        result = ValidationResult.ok()
        assert result
        assert result.error is None

    def test_failure_is_falsy(self):
        err = TransitionError.invalid(S.DRAFT, S.ACCEPTED)
        result = ValidationResult.failure(err)
        assert not result
        assert result.error is err


class TestFinalStatus:

    def test_accepted_to_sent_fails_with_final_status(self):
        result = validate_transition(S.ACCEPTED, S.SENT)
        assert not result.success
        assert result.error.kind == TransitionErrorKind.FINAL_STATUS
        assert "final status" in result.error.message
        assert result.error.message == 'Cannot transition from final status "accepted"'

    @pytest.mark.parametrize(
        "src,dst", list(product(sorted(FINAL_STATUSES), QuoteStatus)),
    )
    def test_every_move_out_of_final_fails(self, src, dst):
        result = validate_transition(src, dst)
        assert result.error.kind == TransitionErrorKind.FINAL_STATUS

    def test_final_check_wins_over_stray_table_entry(self):
        table = QUOTE_TRANSITIONS + (Transition(S.ACCEPTED, S.DRAFT, "Reopen"),)
        result = validate_transition(S.ACCEPTED, S.DRAFT, transitions=table)
        assert result.error.kind == TransitionErrorKind.FINAL_STATUS

    def test_final_check_applies_to_self_transition(self):
        result = validate_transition(S.REJECTED, S.REJECTED)
        assert result.error.kind == TransitionErrorKind.FINAL_STATUS


class TestInvalidTransition:

    @pytest.mark.parametrize(
        "src,dst",
        [
            (src, dst)
            for src, dst in product(QuoteStatus, QuoteStatus)
            if (src, dst) not in TABLE_PAIRS and src not in FINAL_STATUSES
        ],
    )
    def test_pairs_outside_table_fail(self, src, dst):
        result = validate_transition(src, dst)
        assert not result
        assert result.error.kind == TransitionErrorKind.INVALID_TRANSITION
        assert result.error.from_status == src
        assert result.error.to_status == dst

    def test_message(self):
        result = validate_transition(S.DRAFT, S.ACCEPTED)
        assert result.error.message == 'Invalid transition from "draft" to "accepted"'

    def test_expired_is_a_dead_end(self):
        result = validate_transition(S.EXPIRED, S.SENT)
        assert result.error.kind == TransitionErrorKind.INVALID_TRANSITION


class TestPermission:

    def test_role_not_allowed(self):
        result = validate_transition(
            S.DRAFT, S.SENT, user_role="viewer", allowed_roles=["admin", "editor"],
        )
        assert not result
        assert result.error.kind == TransitionErrorKind.PERMISSION_DENIED
        assert result.error.user_role == "viewer"
        assert result.error.message == (
            'User role "viewer" lacks permission for this transition'
        )

    def test_role_allowed(self):
        result = validate_transition(
            S.DRAFT, S.SENT, user_role="admin", allowed_roles=["admin", "editor"],
        )
        assert result.success

    def test_skipped_without_user_role(self):
        assert validate_transition(S.DRAFT, S.SENT, allowed_roles=["admin"])

    def test_skipped_without_allowed_roles(self):
        assert validate_transition(S.DRAFT, S.SENT, user_role="viewer")

    def test_table_entry_roles_used(self):
        table = tuple(
            t.with_allowed_roles({"admin"}) if t.to_status == S.ACCEPTED else t
            for t in QUOTE_TRANSITIONS
        )
        denied = validate_transition(S.SENT, S.ACCEPTED, user_role="sales", transitions=table)
        allowed = validate_transition(S.SENT, S.ACCEPTED, user_role="admin", transitions=table)
        assert denied.error.kind == TransitionErrorKind.PERMISSION_DENIED
        assert allowed.success

    def test_call_roles_override_table_roles(self):
        table = tuple(t.with_allowed_roles({"admin"}) for t in QUOTE_TRANSITIONS)
        result = validate_transition(
            S.DRAFT, S.SENT, user_role="sales", allowed_roles=["sales"], transitions=table,
        )
        assert result.success

    def test_invalid_move_reported_before_permission(self):
        result = validate_transition(
            S.DRAFT, S.ACCEPTED, user_role="viewer", allowed_roles=["admin"],
        )
        assert result.error.kind == TransitionErrorKind.INVALID_TRANSITION


class TestProgrammerErrors:

    def test_unknown_from_status_raises(self):
        with pytest.raises(UnknownStatusError):
            validate_transition("archived", S.SENT)

    def test_unknown_to_status_raises(self):
        with pytest.raises(UnknownStatusError):
            validate_transition(S.DRAFT, "archived")
