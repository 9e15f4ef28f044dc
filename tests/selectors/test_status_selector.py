"""
Tests for StatusSelector: current status, history, summary and the
eligibility helpers used by period initialization.
"""

from uuid import uuid4

from tracking_kernel.domain.dtos import BranchScope, StatusChangeRequest
from tracking_kernel.domain.period import PeriodKey
from tracking_kernel.models import ClientPeriodStatus
from tracking_kernel.selectors.status_selector import StatusSelector
from tracking_kernel.services.status_update_service import StatusUpdateService

JAN = PeriodKey.of("monthly", 2024, 1)
FEB = PeriodKey.of("monthly", 2024, 2)


def _change(client, lookups, code, period=JAN, **kwargs):
    return StatusChangeRequest(
        client_id=client.id,
        period_type=period.period_type,
        period_year=period.period_year,
        period_month=period.period_month,
        period_quarter=period.period_quarter,
        status_id=lookups.status_id(code),
        **kwargs,
    )


class TestCurrentStatus:
    def test_missing(self, session, lookups, create_client):
        client = create_client()
        assert StatusSelector(session).get_current_status(client.id, JAN) is None

    def test_matches_exact_period(self, session, lookups, create_client, create_period_status):
        client = create_client()
        row = create_period_status(client, JAN)

        selector = StatusSelector(session)
        current = selector.get_current_status(client.id, JAN)
        assert current.id == row.id
        assert current.period == JAN
        assert selector.get_current_status(client.id, FEB) is None


class TestHistory:
    def test_newest_first_with_names(
        self, session, lookups, create_client, deterministic_clock, test_actor_id,
    ):
        client = create_client()
        service = StatusUpdateService(session, clock=deterministic_clock)
        for code in ("TO_FOLLOW", "CALLED"):
            assert service.apply(_change(client, lookups, code), BranchScope.all(), test_actor_id).ok
            deterministic_clock.advance(60)
        assert service.apply(
            _change(client, lookups, "TO_FOLLOW", period=FEB), BranchScope.all(), test_actor_id,
        ).ok

        history = StatusSelector(session).get_client_status_history(client.id)

        assert [e.status_name for e in history] == ["To Follow", "Called", "To Follow"]
        assert [e.event_sequence for e in history] == [1, 2, 1]
        assert all(e.created_by_id == test_actor_id for e in history)
        assert history[0].reason_name is None

    def test_limit(self, session, lookups, create_client, deterministic_clock, test_actor_id):
        client = create_client()
        service = StatusUpdateService(session, clock=deterministic_clock)
        for code in ("TO_FOLLOW", "CALLED", "UPDATED"):
            service.apply(_change(client, lookups, code), BranchScope.all(), test_actor_id)
            deterministic_clock.tick()

        history = StatusSelector(session).get_client_status_history(client.id, limit=2)
        assert [e.status_name for e in history] == ["Updated", "Called"]

    def test_unknown_client(self, session, lookups):
        assert StatusSelector(session).get_client_status_history(uuid4()) == ()

    def test_next_event_sequence(self, session, lookups, create_client, create_period_status):
        client = create_client()
        row = create_period_status(client, JAN)
        assert StatusSelector(session).get_next_event_sequence(row.id) == 1


class TestPeriodSummary:
    def test_counts(
        self, session, lookups, create_client, deterministic_clock, test_actor_id,
    ):
        fcash = lookups.companies["FCASH"].id
        a = create_client()
        b = create_client()
        c = create_client()
        deleted = create_client(deleted=True)
        other = create_client(product_code="PCNI_NON_PNP")

        service = StatusUpdateService(session, clock=deterministic_clock)
        scope = BranchScope.all()
        service.apply(_change(a, lookups, "TO_FOLLOW", has_payment=True), scope, test_actor_id)
        service.apply(_change(b, lookups, "TO_FOLLOW"), scope, test_actor_id)
        service.apply(_change(other, lookups, "TO_FOLLOW"), scope, test_actor_id)

        session.add_all([
            ClientPeriodStatus.for_period(
                c.id, JAN,
                status_type_id=lookups.status_id("DONE"),
                reason_id=lookups.reason_id("DECEASED"),
                has_payment=False, update_count=1, is_terminal=True,
            ),
            ClientPeriodStatus.for_period(
                deleted.id, JAN,
                status_type_id=lookups.status_id("PENDING"),
                has_payment=True, update_count=0, is_terminal=False,
            ),
        ])
        session.flush()

        summary = StatusSelector(session).get_period_summary(fcash, JAN)

        assert summary.company_id == fcash
        assert summary.period == JAN
        assert summary.total_clients == 3
        counts = {s.status_name: s.count for s in summary.status_counts}
        assert counts == {"To Follow": 2, "Done": 1}
        assert summary.payment_count == 1
        assert summary.terminal_count == 1

    def test_empty_period(self, session, lookups, create_client):
        create_client()
        summary = StatusSelector(session).get_period_summary(lookups.companies["FCASH"].id, FEB)
        assert summary.total_clients == 1
        assert summary.status_counts == ()
        assert summary.payment_count == 0


class TestEligibilityHelpers:
    def test_client_ids_with_status(self, session, lookups, create_client, create_period_status):
        fcash = lookups.companies["FCASH"].id
        a = create_client()
        b = create_client()
        pcni = create_client(product_code="PCNI_NON_PNP")
        create_period_status(a, JAN)
        create_period_status(b, FEB)
        create_period_status(pcni, JAN)

        selector = StatusSelector(session)
        assert selector.get_client_ids_with_status(fcash, JAN) == frozenset({a.id})
        assert selector.has_period_rows(fcash, JAN) is True
        assert selector.has_period_rows(fcash, PeriodKey.of("monthly", 2024, 3)) is False

    def test_latest_terminal_uses_most_recent_period(
        self, session, lookups, create_client, create_period_status,
    ):
        fcash = lookups.companies["FCASH"].id
        recovered = create_client()
        terminal = create_client()
        never = create_client()

        create_period_status(recovered, JAN, status_code="DONE", is_terminal=True)
        create_period_status(recovered, FEB, status_code="PENDING")
        create_period_status(terminal, JAN, status_code="PENDING")
        create_period_status(terminal, FEB, status_code="DONE", is_terminal=True)

        ids = StatusSelector(session).get_latest_terminal_client_ids(fcash)
        assert ids == frozenset({terminal.id})
        assert never.id not in ids
