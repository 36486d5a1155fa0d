"""Tests for the quote status change coordinator."""

from datetime import timedelta

import pytest

from quote_config.schema import RoleRestriction, WorkflowConfig
from quote_kernel.domain.actions import ActionVariant
from quote_kernel.domain.history import ActivityType, create_status_change_record
from quote_kernel.domain.status import QuoteStatus
from quote_kernel.domain.validation import TransitionErrorKind
from quote_kernel.exceptions import HistoryMismatchError, QuoteNotFoundError
from quote_services.status_service import QuoteStatusService

S = QuoteStatus


@pytest.fixture
def restricted_service(store, deterministic_clock):
    config = WorkflowConfig(
        role_restrictions=(
            RoleRestriction(S.SENT, S.ACCEPTED, frozenset({"admin", "sales_manager"})),
        ),
        staleness_thresholds={S.SENT: timedelta(days=7)},
    )
    return QuoteStatusService(store, clock=deterministic_clock, config=config)


class TestOpenWorkflow:

    def test_rebuilds_from_store(self, status_service, draft_quote):
        status_service.change_status(draft_quote, S.SENT, "u1", "Alice")
        status_service.change_status(draft_quote, S.VIEWED, "u1", "Alice")

        wf = status_service.open_workflow(draft_quote)
        assert wf.current_status == S.VIEWED
        assert [r.to_status for r in wf.get_history()] == [S.SENT, S.VIEWED]

    def test_unknown_quote(self, status_service):
        with pytest.raises(QuoteNotFoundError):
            status_service.open_workflow("missing")

    def test_history_status_mismatch(self, status_service, store, sent_quote, deterministic_clock):
        # history ends in viewed while the quote row still says sent
        stray = create_status_change_record(
            sent_quote, S.SENT, S.VIEWED, "u1", "Alice", clock=deterministic_clock,
        )
        store.persist(sent_quote, S.SENT, stray)
        with pytest.raises(HistoryMismatchError):
            status_service.open_workflow(sent_quote)


class TestChangeStatus:

    def test_success_persists_everything(self, status_service, store, draft_quote):
        sunk = []
        result = status_service.change_status(
            draft_quote, S.SENT, "u1", "Alice",
            comment="first send", activity_sink=sunk.append,
        )

        assert result.success
        assert store.load_current_status(draft_quote) == S.SENT
        assert store.load_history(draft_quote) == (result.record,)
        assert len(sunk) == 1
        assert sunk[0].activity_type == ActivityType.QUOTE_SENT
        assert sunk[0].metadata["history_id"] == result.record.id
        assert [a.id for a in store.load_activities(draft_quote)] == [sunk[0].activity_id]

    def test_failure_persists_nothing(self, status_service, store, draft_quote):
        sunk = []
        result = status_service.change_status(
            draft_quote, S.ACCEPTED, "u1", "Alice", activity_sink=sunk.append,
        )

        assert not result
        assert result.error.kind == TransitionErrorKind.INVALID_TRANSITION
        assert store.load_current_status(draft_quote) == S.DRAFT
        assert store.load_history(draft_quote) == ()
        assert store.load_activities(draft_quote) == []
        assert sunk == []

    def test_final_status_blocks_further_changes(self, status_service, store, draft_quote):
        for target in (S.SENT, S.VIEWED, S.ACCEPTED):
            assert status_service.change_status(draft_quote, target, "u1", "Alice")

        result = status_service.change_status(draft_quote, S.SENT, "u1", "Alice")
        assert result.error.kind == TransitionErrorKind.FINAL_STATUS
        assert len(store.load_history(draft_quote)) == 3

    def test_config_roles_enforced(self, restricted_service, store, sent_quote):
        denied = restricted_service.change_status(
            sent_quote, S.ACCEPTED, "u2", "Bob", user_role="viewer",
        )
        assert denied.error.kind == TransitionErrorKind.PERMISSION_DENIED
        assert store.load_current_status(sent_quote) == S.SENT

        allowed = restricted_service.change_status(
            sent_quote, S.ACCEPTED, "u3", "Carol", user_role="sales_manager",
        )
        assert allowed.success
        assert store.load_current_status(sent_quote) == S.ACCEPTED

    def test_unrestricted_move_open_to_any_role(self, restricted_service, sent_quote):
        assert restricted_service.change_status(
            sent_quote, S.VIEWED, "u2", "Bob", user_role="viewer",
        )

    def test_string_target(self, status_service, draft_quote):
        assert status_service.change_status(draft_quote, "pending", "u1", "Alice").success


class TestTrace:

    def test_success_trace(self, store, draft_quote, deterministic_clock, captured_logs):
        traces = []
        service = QuoteStatusService(
            store, clock=deterministic_clock, outcome_sink=traces.append,
        )
        result = service.change_status(draft_quote, S.SENT, "u1", "Alice", user_role="sales")

        assert len(traces) == 1
        trace = traces[0]
        assert trace["trace_type"] == "QUOTE_STATUS_TRANSITION"
        assert trace["outcome"] == "success"
        assert trace["from_status"] == "draft"
        assert trace["to_status"] == "sent"
        assert trace["history_id"] == result.record.id
        assert trace["user_role"] == "sales"
        assert trace["duration_ms"] >= 0

        logs = [r for r in captured_logs() if r["message"] == "quote_status_transition"]
        assert len(logs) == 1
        assert logs[0]["quote_id"] == draft_quote
        assert logs[0]["actor_id"] == "u1"

    @pytest.mark.parametrize(
        "target,outcome",
        [
            (S.ACCEPTED, "invalid_transition"),
            (S.VIEWED, "invalid_transition"),
        ],
    )
    def test_failure_trace(self, store, draft_quote, deterministic_clock, target, outcome):
        traces = []
        service = QuoteStatusService(
            store, clock=deterministic_clock, outcome_sink=traces.append,
        )
        service.change_status(draft_quote, target, "u1", "Alice")
        assert [t["outcome"] for t in traces] == [outcome]
        assert "history_id" not in traces[0]

    def test_final_status_trace(self, store, deterministic_clock):
        traces = []
        store.create_quote("q-300", S.ACCEPTED)
        service = QuoteStatusService(
            store, clock=deterministic_clock, outcome_sink=traces.append,
        )
        result = service.change_status("q-300", S.SENT, "u1", "Alice")
        assert result.error.kind == TransitionErrorKind.FINAL_STATUS
        assert traces[0]["outcome"] == "final_status"

    def test_permission_trace(self, store, sent_quote, deterministic_clock):
        traces = []
        config = WorkflowConfig(role_restrictions=(
            RoleRestriction(S.SENT, S.REJECTED, frozenset({"admin"})),
        ))
        service = QuoteStatusService(
            store, clock=deterministic_clock, config=config, outcome_sink=traces.append,
        )
        service.change_status(sent_quote, S.REJECTED, "u1", "Alice", user_role="sales")
        assert traces[0]["outcome"] == "permission_denied"
        assert traces[0]["reason"] == 'User role "sales" lacks permission for this transition'

    def test_context_restored_after_call(self, status_service, draft_quote):
        from quote_kernel.logging_config import LogContext

        status_service.change_status(draft_quote, S.SENT, "u1", "Alice")
        assert LogContext.get_all() == {}


class TestQueries:

    def test_available_actions(self, status_service, sent_quote):
        actions = status_service.available_actions(sent_quote)
        assert actions[-1].variant == ActionVariant.GHOST
        assert {a.target_status for a in actions} == {
            S.VIEWED, S.ACCEPTED, S.REJECTED, S.EXPIRED, S.SENT,
        }

    def test_is_stale(self, restricted_service, draft_quote, deterministic_clock):
        restricted_service.change_status(draft_quote, S.SENT, "u1", "Alice")
        deterministic_clock.advance(days=6)
        assert restricted_service.is_stale(draft_quote) is False
        deterministic_clock.advance(days=1)
        assert restricted_service.is_stale(draft_quote) is True

    def test_quote_created_in_sent_ages_from_creation(
        self, restricted_service, sent_quote, deterministic_clock,
    ):
        deterministic_clock.advance(days=30)
        wf = restricted_service.open_workflow(sent_quote)
        assert wf.get_history() == ()
        assert wf.get_time_in_current_status() == timedelta(days=30)
        assert restricted_service.is_stale(sent_quote) is True

    def test_inclusive_staleness_boundary(self, restricted_service, sent_quote, deterministic_clock):
        deterministic_clock.advance(days=7)
        assert restricted_service.is_stale(sent_quote) is True

    def test_never_stale_without_config(self, status_service, draft_quote, deterministic_clock):
        status_service.change_status(draft_quote, S.SENT, "u1", "Alice")
        deterministic_clock.advance(days=365)
        assert status_service.is_stale(draft_quote) is False
