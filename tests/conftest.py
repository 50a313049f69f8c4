"""
Pytest fixtures for the work order kernel test suite.

Provides:
- A database session per test, rolled back at teardown
- Service and selector fixtures wired to a deterministic clock
- Factories for work orders, payment methods and the default ledger

Environment Variables:
- WORKORDER_TEST_DATABASE_URL: SQLAlchemy URL of the test database.
  Defaults to an in-memory SQLite database.
"""

import json
import logging
import os
from decimal import Decimal
from io import StringIO
from typing import Generator
from uuid import UUID, uuid4

import pytest
from sqlalchemy.orm import Session

from workorder_kernel.db.engine import (
    create_tables,
    drop_tables,
    init_engine_from_url,
    reset_engine,
)
from workorder_kernel.db.immutability import (
    register_immutability_listeners,
    unregister_immutability_listeners,
)
from workorder_kernel.domain.clock import DeterministicClock
from workorder_kernel.domain.dtos import LineItemSpec
from workorder_kernel.domain.numbering import CustomerClass
from workorder_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from workorder_kernel.models.payment_method import PaymentType
from workorder_kernel.selectors.work_order_selector import WorkOrderSelector
from workorder_kernel.services.invoice_counter_service import InvoiceCounterService
from workorder_kernel.services.invoice_service import InvoiceService
from workorder_kernel.services.numbering_audit_service import NumberingAuditService
from workorder_kernel.services.payment_method_service import PaymentMethodService
from workorder_kernel.services.sequence_service import SequenceService
from workorder_kernel.services.status_ledger_service import StatusLedgerService
from workorder_kernel.services.transition_service import StatusTransitionService
from workorder_kernel.services.work_order_service import WorkOrderService

# Test actor ID for all test operations
TEST_ACTOR_ID = uuid4()

DEFAULT_TEST_DATABASE_URL = "sqlite://"


def get_database_url() -> str:
    return os.environ.get("WORKORDER_TEST_DATABASE_URL", DEFAULT_TEST_DATABASE_URL)


# =============================================================================
# Logging fixtures
# =============================================================================


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
    Capture workorder_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, sequence_service):
            sequence_service.allocate(CustomerClass.CORPORATE)
            logs = captured_logs()
            assert any(r["message"] == "invoice_number_allocated" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("workorder_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture(scope="session")
def db_engine():
    """Single engine for the entire test session."""
    eng = init_engine_from_url(get_database_url(), echo=False)
    yield eng
    reset_engine()


@pytest.fixture(scope="session")
def db_tables(db_engine):
    """Create all tables once per session, drop once at end.

    Immutability listeners are registered once and remain active.
    """
    drop_tables()
    create_tables()
    register_immutability_listeners()
    yield
    unregister_immutability_listeners()
    drop_tables()


@pytest.fixture(scope="function")
def session(db_tables, db_engine) -> Generator[Session, None, None]:
    """Provide a database session for testing.

    The session joins an outer transaction on a dedicated connection;
    ``session.commit()`` inside a test only releases a savepoint, and the
    outer transaction is rolled back at teardown.
    """
    conn = db_engine.connect()
    trans = conn.begin()
    sess = Session(bind=conn, join_transaction_mode="create_savepoint", expire_on_commit=False)
    yield sess
    try:
        sess.close()
    finally:
        try:
            trans.rollback()
        finally:
            conn.close()


@pytest.fixture
def test_actor_id() -> UUID:
    return TEST_ACTOR_ID


# =============================================================================
# Clock fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock():
    return DeterministicClock()


# =============================================================================
# Service fixtures
# =============================================================================


@pytest.fixture
def sequence_service(session, deterministic_clock) -> SequenceService:
    return SequenceService(session, deterministic_clock)


@pytest.fixture
def status_ledger_service(session, deterministic_clock) -> StatusLedgerService:
    return StatusLedgerService(session, deterministic_clock)


@pytest.fixture
def work_order_service(session, deterministic_clock) -> WorkOrderService:
    return WorkOrderService(session, deterministic_clock)


@pytest.fixture
def transition_service(session, deterministic_clock) -> StatusTransitionService:
    return StatusTransitionService(session, deterministic_clock)


@pytest.fixture
def payment_method_service(session, deterministic_clock) -> PaymentMethodService:
    return PaymentMethodService(session, deterministic_clock)


@pytest.fixture
def invoice_service(session, deterministic_clock) -> InvoiceService:
    return InvoiceService(session, deterministic_clock)


@pytest.fixture
def invoice_counter_service(session, deterministic_clock) -> InvoiceCounterService:
    return InvoiceCounterService(session, deterministic_clock)


@pytest.fixture
def numbering_audit_service(session, deterministic_clock) -> NumberingAuditService:
    return NumberingAuditService(session, deterministic_clock)


@pytest.fixture
def work_order_selector(session) -> WorkOrderSelector:
    return WorkOrderSelector(session)


# =============================================================================
# Data fixtures
# =============================================================================


@pytest.fixture
def seeded_ledger(status_ledger_service, test_actor_id):
    """The default five-status ledger."""
    return status_ledger_service.seed_defaults(test_actor_id)


@pytest.fixture
def payment_method(payment_method_service, test_actor_id):
    return payment_method_service.create(
        "Cash", PaymentType.IMMEDIATE_CASH, test_actor_id
    )


@pytest.fixture
def create_work_order(work_order_service, deterministic_clock, test_actor_id):
    """Factory fixture creating work orders one clock tick apart.

    Usage::

        wo = create_work_order()                        # next corporate number
        wo = create_work_order(CustomerClass.INDIVIDUAL, invoice_number="D00004")
    """

    def _create(
        customer_class=CustomerClass.CORPORATE,
        prices=("100.00",),
        **kwargs,
    ):
        deterministic_clock.tick()
        lines = [
            LineItemSpec(item_kind="service", price=Decimal(p), description=f"Service {i}")
            for i, p in enumerate(prices, start=1)
        ]
        return work_order_service.create_work_order(
            customer_class, lines, test_actor_id, **kwargs
        )

    return _create
