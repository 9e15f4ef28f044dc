"""
Tests for tracking_batch.services.period_initializer -- PeriodInitializer.

Validates eligibility (deleted and terminal clients), skip-existing
idempotency, system failures, and writer error mapping.
"""

from uuid import uuid4

from sqlalchemy import select

from tracking_kernel.domain.period import PeriodKey
from tracking_kernel.models import ClientPeriodStatus, Company

from tracking_batch.domain.types import BatchError, BatchResult
from tracking_batch.services.period_initializer import PeriodInitializer

JAN = PeriodKey.of("monthly", 2024, 1)
FEB = PeriodKey.of("monthly", 2024, 2)


def _initialize(initializer, company_id, month=1, **kwargs):
    return initializer.initialize_period(company_id, "monthly", 2024, period_month=month, **kwargs)


class TestInitializePeriod:
    def test_seeds_every_eligible_client(self, session, lookups, create_client, test_actor_id):
        fcash = lookups.companies["FCASH"].id
        a = create_client()
        b = create_client(product_code="FCASH_GSIS")
        create_client(product_code="PCNI_NON_PNP")

        result = _initialize(PeriodInitializer(session), fcash, actor_id=test_actor_id)

        assert result.success
        assert (result.initialized, result.skipped, result.failed) == (2, 0, 0)
        assert result.errors == ()

        rows = session.execute(
            select(ClientPeriodStatus).where(*ClientPeriodStatus.period_filter(JAN))
        ).scalars().all()
        assert {r.client_id for r in rows} == {a.id, b.id}
        for row in rows:
            assert row.status_type_id == lookups.status_id("PENDING")
            assert row.has_payment is False
            assert row.update_count == 0
            assert row.is_terminal is False
            assert row.updated_by_id == test_actor_id

    def test_skips_clients_with_existing_row(self, session, lookups, create_client, create_period_status):
        fcash = lookups.companies["FCASH"].id
        a = create_client()
        create_client()
        create_period_status(a, JAN)

        result = _initialize(PeriodInitializer(session), fcash)

        assert (result.initialized, result.skipped, result.failed) == (1, 1, 0)

    def test_second_run_creates_nothing(self, session, lookups, create_client):
        fcash = lookups.companies["FCASH"].id
        create_client()
        create_client()
        initializer = PeriodInitializer(session)

        assert _initialize(initializer, fcash).initialized == 2
        second = _initialize(initializer, fcash)
        assert (second.initialized, second.skipped) == (0, 2)
        assert second.success

    def test_row_in_other_period_does_not_count(self, session, lookups, create_client, create_period_status):
        fcash = lookups.companies["FCASH"].id
        a = create_client()
        create_period_status(a, FEB)

        result = _initialize(PeriodInitializer(session), fcash)
        assert (result.initialized, result.skipped) == (1, 0)

    def test_deleted_clients_not_eligible(self, session, lookups, create_client):
        fcash = lookups.companies["FCASH"].id
        create_client()
        create_client(deleted=True)

        result = _initialize(PeriodInitializer(session), fcash)
        assert (result.initialized, result.skipped) == (1, 0)

    def test_quarterly_period(self, session, lookups, create_client):
        pcni = lookups.companies["PCNI"].id
        create_client(product_code="PCNI_PNP")

        initializer = PeriodInitializer(session)
        result = initializer.initialize_period(pcni, "quarterly", 2024, period_quarter=2)

        assert result.initialized == 1
        assert initializer.is_period_initialized(pcni, "quarterly", 2024, period_quarter=2)

    def test_logs_summary(self, session, lookups, create_client, captured_logs):
        create_client()
        _initialize(PeriodInitializer(session), lookups.companies["FCASH"].id)
        logged = [r for r in captured_logs() if r["message"] == "period_initialized"]
        assert logged[0]["period"] == "2024-01"
        assert logged[0]["initialized"] == 1


class TestTerminalExclusion:
    def test_latest_terminal_client_excluded(self, session, lookups, create_client, create_period_status):
        fcash = lookups.companies["FCASH"].id
        alive = create_client()
        deceased = create_client()
        create_period_status(deceased, JAN, status_code="DONE", is_terminal=True, reason_code="DECEASED")

        initializer = PeriodInitializer(session)
        eligible = initializer.get_clients_for_initialization(fcash)
        assert [c.id for c in eligible] == [alive.id]

        result = _initialize(initializer, fcash, month=2)
        assert (result.initialized, result.skipped) == (1, 0)

    def test_include_terminal(self, session, lookups, create_client, create_period_status):
        fcash = lookups.companies["FCASH"].id
        create_client()
        deceased = create_client()
        create_period_status(deceased, JAN, status_code="DONE", is_terminal=True)

        initializer = PeriodInitializer(session)
        assert len(initializer.get_clients_for_initialization(fcash, exclude_terminal=False)) == 2

        result = _initialize(initializer, fcash, month=2, exclude_terminal=False)
        assert result.initialized == 2


class TestSystemFailures:
    def test_missing_pending_status(self, session):
        company = Company(code="FCASH", name="FCASH")
        session.add(company)
        session.flush()

        result = _initialize(PeriodInitializer(session), company.id)

        assert not result.success
        assert (result.initialized, result.skipped, result.failed) == (0, 0, 0)
        assert len(result.errors) == 1
        assert result.errors[0].client_id == "system"
        assert result.errors[0].error == "PENDING status type not found"

    def test_invalid_period_key(self, session, lookups, create_client):
        create_client()
        result = _initialize(PeriodInitializer(session), lookups.companies["FCASH"].id, month=13)

        assert not result.success
        assert result.errors[0].client_id == "system"
        assert result.errors[0].error.startswith("Invalid period key")

    def test_non_integer_year_degrades_to_system_error(self, session, lookups, create_client):
        create_client()
        result = PeriodInitializer(session).initialize_period(
            lookups.companies["FCASH"].id, "monthly", "2024", 1,
        )

        assert not result.success
        assert len(result.errors) == 1
        assert result.errors[0].client_id == "system"
        assert "period_year must be an integer" in result.errors[0].error


class TestWriterErrorMapping:
    def test_errors_map_back_to_client_ids(self, session, lookups, create_client):
        fcash = lookups.companies["FCASH"].id
        first = create_client(client_code="A")
        create_client(client_code="B")

        class RejectFirstWriter:
            def write(self, records, to_row=None):
                return BatchResult(
                    success=False,
                    processed=len(records) - 1,
                    failed=1,
                    errors=(BatchError(index=0, error="boom", error_code="INSERT_FAILED"),),
                    chunks=1,
                )

        result = _initialize(PeriodInitializer(session, writer=RejectFirstWriter()), fcash)

        assert not result.success
        assert (result.initialized, result.failed) == (1, 1)
        assert result.errors[0].client_id == first.id
        assert result.errors[0].error == "boom"


class TestIsPeriodInitialized:
    def test_before_and_after(self, session, lookups, create_client):
        fcash = lookups.companies["FCASH"].id
        create_client()
        initializer = PeriodInitializer(session)

        assert initializer.is_period_initialized(fcash, "monthly", 2024, period_month=1) is False
        _initialize(initializer, fcash)
        assert initializer.is_period_initialized(fcash, "monthly", 2024, period_month=1) is True
        assert initializer.is_period_initialized(fcash, "monthly", 2024, period_month=2) is False

    def test_invalid_key_is_false(self, session, lookups):
        initializer = PeriodInitializer(session)
        assert initializer.is_period_initialized(uuid4(), "monthly", 2024) is False
