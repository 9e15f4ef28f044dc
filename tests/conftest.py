"""
Pytest fixtures for the client status tracking test suite.

Provides:
- In-memory SQLite sessions with SAVEPOINT support (one database per test)
- Structured log capture
- Lookup seeding (companies, products, status types, reasons) and client
  factories
- Access providers and caller contexts
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from io import StringIO
from typing import Generator
from uuid import UUID, uuid4

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from tracking_kernel.db.base import Base
from tracking_kernel.db.engine import enable_sqlite_savepoints
from tracking_kernel.domain.clock import DeterministicClock
from tracking_kernel.domain.dtos import BranchScope, CallerContext
from tracking_kernel.domain.period import PeriodKey
from tracking_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from tracking_kernel.models import (
    Client,
    ClientPeriodStatus,
    Company,
    Product,
    StatusReason,
    StatusType,
)
from tracking_kernel.services.access_providers import (
    StaticAuthorizationProvider,
    StaticTerritoryProvider,
)

TEST_ACTOR_ID = UUID("00000000-0000-0000-0000-000000000001")
TEST_ORG_ID = "org-test"


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
    Capture tracking_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, status_service):
            status_service.apply(...)
            logs = captured_logs()
            assert any(r["message"] == "status_updated" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("tracking_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    import tracking_kernel.models  # noqa: F401  (registers all tables)

    eng = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_savepoints(eng)
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine) -> Generator[Session, None, None]:
    sess = Session(bind=engine, expire_on_commit=False)
    yield sess
    sess.rollback()
    sess.close()


# =============================================================================
# Identity and time
# =============================================================================


@pytest.fixture
def test_actor_id() -> UUID:
    """Provide a consistent test actor ID."""
    return TEST_ACTOR_ID


@pytest.fixture
def deterministic_clock():
    """Provide a deterministic clock for testing."""
    return DeterministicClock()


@pytest.fixture
def caller(test_actor_id) -> CallerContext:
    return CallerContext(
        user_id=test_actor_id,
        org_id=TEST_ORG_ID,
        correlation_id="corr-test",
    )


@pytest.fixture
def authorization(test_actor_id) -> StaticAuthorizationProvider:
    """Test actor may update and bulk update."""
    return StaticAuthorizationProvider(
        {test_actor_id: {"status:update", "status:bulk_update"}}
    )


@pytest.fixture
def territory(test_actor_id) -> StaticTerritoryProvider:
    """Test actor sees every branch."""
    return StaticTerritoryProvider({test_actor_id: BranchScope.all()})


# =============================================================================
# Lookup data
# =============================================================================


@dataclass
class Lookups:
    """Seeded lookup rows, addressable by code."""

    companies: dict[str, Company]
    products: dict[str, Product]
    statuses: dict[str, StatusType]
    reasons: dict[str, StatusReason]

    def status_id(self, code: str) -> UUID:
        return self.statuses[code].id

    def reason_id(self, code: str) -> UUID:
        return self.reasons[code].id


@pytest.fixture
def lookups(session: Session) -> Lookups:
    """Seed the standard companies, products, status types and reasons."""
    companies = {
        code: Company(code=code, name=code) for code in ("FCASH", "PCNI")
    }
    session.add_all(companies.values())
    session.flush()

    products = {
        "FCASH_SSS": Product(
            code="FCASH_SSS", name="FCASH SSS",
            company_id=companies["FCASH"].id, tracking_cycle="monthly",
        ),
        "FCASH_GSIS": Product(
            code="FCASH_GSIS", name="FCASH GSIS",
            company_id=companies["FCASH"].id, tracking_cycle="monthly",
        ),
        "PCNI_NON_PNP": Product(
            code="PCNI_NON_PNP", name="PCNI Non-PNP",
            company_id=companies["PCNI"].id, tracking_cycle="monthly",
        ),
        "PCNI_PNP": Product(
            code="PCNI_PNP", name="PCNI PNP",
            company_id=companies["PCNI"].id, tracking_cycle="quarterly",
        ),
    }
    session.add_all(products.values())

    statuses = {
        code: StatusType(code=code, name=code.replace("_", " ").title(), sequence=seq)
        for seq, code in enumerate(
            ("PENDING", "TO_FOLLOW", "CALLED", "VISITED", "UPDATED", "DONE"),
            start=1,
        )
    }
    session.add_all(statuses.values())
    session.flush()

    done = statuses["DONE"].id
    reasons = {
        "DECEASED": StatusReason(
            code="DECEASED", name="Deceased", status_type_id=done, is_terminal=True,
        ),
        "FULLY_PAID": StatusReason(
            code="FULLY_PAID", name="Fully Paid", status_type_id=done, is_terminal=True,
        ),
        "CONFIRMED": StatusReason(
            code="CONFIRMED", name="Confirmed", status_type_id=done,
        ),
        "NOT_REACHABLE": StatusReason(
            code="NOT_REACHABLE", name="Not Reachable", status_type_id=done,
            requires_remarks=True,
        ),
    }
    session.add_all(reasons.values())
    session.flush()

    return Lookups(
        companies=companies,
        products=products,
        statuses=statuses,
        reasons=reasons,
    )


@pytest.fixture
def create_client(session: Session, lookups: Lookups):
    """Factory fixture to create test clients."""
    counter = {"n": 0}

    def _create_client(
        product_code: str = "FCASH_SSS",
        client_code: str | None = None,
        branch_id: UUID | None = None,
        deleted: bool = False,
    ) -> Client:
        counter["n"] += 1
        client = Client(
            client_code=client_code or f"C{counter['n']:04d}",
            full_name=f"Client {counter['n']}",
            branch_id=branch_id or uuid4(),
            product_id=lookups.products[product_code].id,
        )
        if deleted:
            client.deleted_at = datetime(2024, 1, 1, tzinfo=timezone.utc)
        session.add(client)
        session.flush()
        return client

    return _create_client


@pytest.fixture
def create_period_status(session: Session, lookups: Lookups):
    """Factory fixture to insert a period status row directly."""

    def _create(
        client: Client,
        period: PeriodKey,
        status_code: str = "PENDING",
        is_terminal: bool = False,
        reason_code: str | None = None,
    ) -> ClientPeriodStatus:
        row = ClientPeriodStatus.for_period(
            client.id,
            period,
            status_type_id=lookups.status_id(status_code),
            reason_id=lookups.reason_id(reason_code) if reason_code else None,
            has_payment=False,
            update_count=0,
            is_terminal=is_terminal,
        )
        session.add(row)
        session.flush()
        return row

    return _create
