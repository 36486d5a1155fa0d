"""
Pytest fixtures for the quote workflow test suite.

Provides:
- Deterministic clock
- SQLite in-memory database sessions with history immutability listeners
- Store / service fixtures
- Captured structured logs
"""

import json
import logging
from datetime import UTC, datetime
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from quote_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from quote_kernel.db.immutability import (
    register_immutability_listeners,
    unregister_immutability_listeners,
)
from quote_kernel.domain.clock import DeterministicClock
from quote_kernel.domain.status import QuoteStatus
from quote_kernel.domain.workflow import QuoteWorkflow
from quote_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from quote_services.status_service import QuoteStatusService
from quote_services.status_store import SqlQuoteStatusStore

T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture quote_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, workflow):
            workflow.transition(...)
            logs = captured_logs()
            assert any(r["message"] == "quote_transition_applied" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("quote_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# ---------------------------------------------------------------------------
# Clock and workflow
# ---------------------------------------------------------------------------


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(T0)


@pytest.fixture
def workflow(deterministic_clock) -> QuoteWorkflow:
    """A fresh draft quote workflow on the deterministic clock."""
    return QuoteWorkflow("q-1", clock=deterministic_clock)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture
def engine():
    """In-memory SQLite engine with all tables created."""
    eng = init_engine_from_url("sqlite:///:memory:")
    create_tables()
    register_immutability_listeners()
    yield eng
    unregister_immutability_listeners()
    drop_tables()
    reset_engine()


@pytest.fixture
def session(engine) -> Generator[Session, None, None]:
    sess = get_session()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def store(session, deterministic_clock) -> SqlQuoteStatusStore:
    return SqlQuoteStatusStore(session, clock=deterministic_clock)


@pytest.fixture
def draft_quote(store) -> str:
    store.create_quote("q-100")
    return "q-100"


@pytest.fixture
def sent_quote(store) -> str:
    store.create_quote("q-200", QuoteStatus.SENT)
    return "q-200"


@pytest.fixture
def status_service(store, deterministic_clock) -> QuoteStatusService:
    return QuoteStatusService(store, clock=deterministic_clock)
