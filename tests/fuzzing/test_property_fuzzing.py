"""
Hypothesis-based property tests.

Properties checked here:
- PeriodKey accepts exactly the keys its rules describe, and ordinals are
  chronological.
- validate_status_transition is valid iff neither side is hard-terminal,
  the company may use the target and the edge exists.
- BatchRecordWriter: processed + failed == len(records), and failures sit
  exactly at the repeated period keys.
"""

from uuid import uuid4

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from tracking_kernel.domain.dtos import CompanyInfo, ValidationErrorCode
from tracking_kernel.domain.period import PeriodKey
from tracking_kernel.domain.workflow import StatusWorkflow
from tracking_kernel.exceptions import InvalidPeriodKeyError
from tracking_kernel.services.status_validator import StatusTransitionValidator

from tracking_batch.domain.types import ClientPeriodStatusSeed
from tracking_batch.services.period_initializer import seed_to_row
from tracking_batch.services.record_writer import BatchRecordWriter

STANDARD = StatusWorkflow.standard()
STATUS_CODES = list(STANDARD.sequence) + sorted(STANDARD.terminal_statuses) + ["ARCHIVED"]


class InMemoryLookups:
    """LookupProvider over two companies; only company reads are used."""

    def __init__(self):
        self.companies = {
            code: CompanyInfo(id=uuid4(), code=code) for code in ("FCASH", "PCNI")
        }
        self._by_id = {c.id: c for c in self.companies.values()}

    def get_company(self, company_id):
        return self._by_id.get(company_id)

    def get_status_type(self, status_id):
        return None

    def get_status_type_by_code(self, code):
        return None

    def get_reason(self, reason_id):
        return None

    def get_reasons_for_status(self, status_id):
        return ()

    def get_client(self, client_id):
        return None

    def get_product(self, product_id):
        return None


class TestPeriodKeyProperties:
    @given(
        period_type=st.sampled_from(["monthly", "quarterly"]),
        year=st.integers(1990, 2110),
        month=st.one_of(st.none(), st.integers(-1, 14)),
        quarter=st.one_of(st.none(), st.integers(-1, 6)),
    )
    @settings(max_examples=300)
    def test_accepts_exactly_valid_keys(self, period_type, year, month, quarter):
        year_ok = 2000 <= year <= 2100
        if period_type == "monthly":
            expected = year_ok and quarter is None and month is not None and 1 <= month <= 12
        else:
            expected = year_ok and month is None and quarter is not None and 1 <= quarter <= 4

        try:
            key = PeriodKey.of(period_type, year, month, quarter)
        except InvalidPeriodKeyError:
            assert not expected
        else:
            assert expected
            assert key.period_number in (month, quarter)

    @given(
        a=st.tuples(st.integers(2000, 2100), st.integers(1, 12)),
        b=st.tuples(st.integers(2000, 2100), st.integers(1, 12)),
    )
    def test_monthly_ordinal_is_chronological(self, a, b):
        key_a = PeriodKey.of("monthly", *a)
        key_b = PeriodKey.of("monthly", *b)
        assert (key_a.ordinal < key_b.ordinal) == (a < b)


class TestTransitionProperties:
    @given(
        from_code=st.sampled_from(STATUS_CODES),
        to_code=st.sampled_from(STATUS_CODES),
        company_code=st.sampled_from(["FCASH", "PCNI"]),
    )
    @settings(max_examples=300)
    def test_valid_iff_allowed(self, from_code, to_code, company_code):
        lookups = InMemoryLookups()
        validator = StatusTransitionValidator(lookups)
        company_id = lookups.companies[company_code].id

        result = validator.validate_status_transition(from_code, to_code, company_id)

        expected = (
            not STANDARD.is_hard_terminal(from_code)
            and not STANDARD.is_hard_terminal(to_code)
            and STANDARD.allows_company(to_code, company_code)
            and STANDARD.is_edge(from_code, to_code)
        )
        assert result.is_valid == expected
        if STANDARD.is_hard_terminal(from_code):
            assert result.code == ValidationErrorCode.TERMINAL_STATUS

    @given(from_code=st.sampled_from(STATUS_CODES), to_code=st.sampled_from(STATUS_CODES))
    def test_unknown_company_never_reaches_gated_status(self, from_code, to_code):
        validator = StatusTransitionValidator(InMemoryLookups())
        result = validator.validate_status_transition(from_code, to_code, uuid4())
        if STANDARD.is_gated(to_code):
            assert not result.is_valid


class TestWriterProperties:
    @given(picks=st.lists(st.integers(0, 5), max_size=30), chunk_size=st.integers(1, 7))
    @settings(
        max_examples=40,
        deadline=None,
        suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
    )
    def test_counts_and_failure_positions(self, session, lookups, picks, chunk_size):
        pool = [uuid4() for _ in range(6)]
        period = PeriodKey.of("monthly", 2024, 1)
        seeds = [
            ClientPeriodStatusSeed(
                client_id=pool[pick],
                period=period,
                status_type_id=lookups.status_id("PENDING"),
            )
            for pick in picks
        ]

        result = BatchRecordWriter(session, chunk_size=chunk_size).write(seeds, to_row=seed_to_row)

        seen: set[int] = set()
        expected_failures = []
        for index, pick in enumerate(picks):
            if pick in seen:
                expected_failures.append(index)
            seen.add(pick)

        assert result.processed + result.failed == len(picks)
        assert [e.index for e in result.errors] == expected_failures
        assert result.chunks == -(-len(picks) // chunk_size)
