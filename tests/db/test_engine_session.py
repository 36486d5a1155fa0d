"""Tests for engine initialization and transactional session scope."""

import pytest

from quote_kernel.db import engine as db_engine
from quote_kernel.db.engine import get_engine, get_session_factory, session_scope
from quote_kernel.domain.history import create_status_change_record
from quote_kernel.domain.status import QuoteStatus
from quote_services.status_service import QuoteStatusService
from quote_services.status_store import SqlQuoteStatusStore


class TestEngineLifecycle:

    def test_uninitialized_engine_raises(self):
        db_engine.reset_engine()
        with pytest.raises(RuntimeError):
            get_engine()

    def test_factory_available_after_init(self, engine):
        assert get_engine() is engine
        session = get_session_factory()()
        try:
            assert session.bind is engine
        finally:
            session.close()


class TestSessionScope:

    def test_commit_on_success(self, engine, deterministic_clock):
        with session_scope() as session:
            store = SqlQuoteStatusStore(session, clock=deterministic_clock)
            store.create_quote("q-commit")
            QuoteStatusService(store, clock=deterministic_clock).change_status(
                "q-commit", QuoteStatus.SENT, "u1", "Alice",
            )

        with session_scope() as session:
            store = SqlQuoteStatusStore(session)
            assert store.load_current_status("q-commit") == QuoteStatus.SENT
            assert len(store.load_history("q-commit")) == 1

    def test_rollback_on_error(self, engine, deterministic_clock):
        with session_scope() as session:
            SqlQuoteStatusStore(session, clock=deterministic_clock).create_quote("q-rollback")

        with pytest.raises(RuntimeError, match="notification failed"):
            with session_scope() as session:
                store = SqlQuoteStatusStore(session, clock=deterministic_clock)
                store.persist(
                    "q-rollback", QuoteStatus.SENT,
                    create_status_change_record(
                        "q-rollback", QuoteStatus.DRAFT, QuoteStatus.SENT, "u1", "Alice",
                        clock=deterministic_clock,
                    ),
                )
                raise RuntimeError("notification failed")

        with session_scope() as session:
            store = SqlQuoteStatusStore(session)
            assert store.load_current_status("q-rollback") == QuoteStatus.DRAFT
            assert store.load_history("q-rollback") == ()
