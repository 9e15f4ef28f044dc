"""
Tests for LookupSelector against seeded lookup tables.
"""

from uuid import uuid4

from tracking_kernel.domain.providers import LookupProvider
from tracking_kernel.selectors.lookup_selector import LookupSelector


def test_satisfies_lookup_provider(session):
    assert isinstance(LookupSelector(session), LookupProvider)


def test_company_lookups(session, lookups):
    selector = LookupSelector(session)
    fcash = lookups.companies["FCASH"]

    assert selector.get_company(fcash.id).code == "FCASH"
    assert selector.get_company_by_code("PCNI").id == lookups.companies["PCNI"].id
    assert selector.get_company(uuid4()) is None
    assert selector.get_company_by_code("NOPE") is None


def test_status_types_in_sequence_order(session, lookups):
    codes = [s.code for s in LookupSelector(session).list_status_types()]
    assert codes == ["PENDING", "TO_FOLLOW", "CALLED", "VISITED", "UPDATED", "DONE"]


def test_status_type_by_code(session, lookups):
    selector = LookupSelector(session)
    pending = selector.get_status_type_by_code("PENDING")
    assert pending.id == lookups.status_id("PENDING")
    assert pending.sequence == 1
    assert selector.get_status_type_by_code("ARCHIVED") is None


def test_reasons_for_status(session, lookups):
    selector = LookupSelector(session)
    reasons = selector.get_reasons_for_status(lookups.status_id("DONE"))
    assert [r.name for r in reasons] == ["Confirmed", "Deceased", "Fully Paid", "Not Reachable"]
    assert selector.get_reasons_for_status(lookups.status_id("CALLED")) == ()

    deceased = selector.get_reason(lookups.reason_id("DECEASED"))
    assert deceased.is_terminal is True
    assert deceased.requires_remarks is False


def test_client_and_product(session, lookups, create_client):
    selector = LookupSelector(session)
    client = create_client(product_code="PCNI_PNP")

    info = selector.get_client(client.id)
    assert info.product_id == lookups.products["PCNI_PNP"].id
    assert info.deleted_at is None
    assert selector.get_product(info.product_id).company_id == lookups.companies["PCNI"].id
    assert selector.get_client(uuid4()) is None


def test_active_clients_for_company(session, lookups, create_client):
    create_client(product_code="FCASH_GSIS", client_code="B-2")
    create_client(product_code="FCASH_SSS", client_code="A-1")
    create_client(product_code="FCASH_SSS", client_code="C-3", deleted=True)
    create_client(product_code="PCNI_PNP", client_code="D-4")

    clients = LookupSelector(session).get_active_clients_for_company(
        lookups.companies["FCASH"].id,
    )
    assert [c.client_code for c in clients] == ["A-1", "B-2"]
