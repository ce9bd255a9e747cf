"""Tests for data models."""

import json
from datetime import date

from execbrief.models import (
    Account,
    AccountRecord,
    BillingFacts,
    PaymentMethod,
    RevenueResult,
    RevenueSource,
    RiskAssessment,
    RiskFlag,
    RiskKind,
    RiskSeverity,
    TicketSet,
)


class TestAccount:
    def test_bi_name_defaults_to_name(self) -> None:
        assert Account(name="Acme", org_id="1").bi_name == "Acme"
        assert Account(name="Acme", org_id="1", tableau_name="ACME").bi_name == "ACME"

    def test_has_ticketing(self) -> None:
        assert Account(name="Acme", org_id="1", zendesk_org="acme").has_ticketing
        assert not Account(name="Acme", org_id="1").has_ticketing
        assert not Account(name="Acme", org_id="1", zendesk_org="null").has_ticketing


class TestTicketSet:
    def test_count_tracks_results(self) -> None:
        tickets = TicketSet()
        assert tickets.count == 0
        tickets.extend([{"id": 1}, {"id": 2}])
        assert tickets.count == 2

    def test_extend_dedupes(self) -> None:
        tickets = TicketSet(results=[{"id": 1}])
        added = tickets.extend([{"id": 1}, {"id": 2}, {"id": 2}])
        assert added == 1
        assert [t["id"] for t in tickets.results] == [1, 2]

    def test_records_without_id_kept(self) -> None:
        tickets = TicketSet()
        tickets.extend([{"subject": "a"}, {"subject": "b"}])
        assert tickets.count == 2

    def test_unavailable(self) -> None:
        assert not TicketSet().unavailable
        assert TicketSet(truncated=True).unavailable
        assert not TicketSet(results=[{"id": 1}], truncated=True).unavailable

    def test_count_serialized(self) -> None:
        data = TicketSet(results=[{"id": 1}]).model_dump()
        assert data["count"] == 1


class TestBillingFacts:
    def test_utilization(self) -> None:
        assert BillingFacts(balance=-2500, credit_limit=10000).credit_utilization == 25.0
        assert BillingFacts(balance=100, credit_limit=0).credit_utilization is None
        assert BillingFacts(balance=100).credit_utilization is None

    def test_known_fields(self) -> None:
        assert BillingFacts().known_fields == 0
        facts = BillingFacts(balance=1, payment_method=PaymentMethod.WIRE, has_autorecharge=False)
        assert facts.known_fields == 3

    def test_payment_parse(self) -> None:
        assert PaymentMethod.parse("credit_card") == PaymentMethod.CREDIT_CARD
        assert PaymentMethod.parse("bitcoin") == PaymentMethod.UNKNOWN
        assert PaymentMethod.parse(None) == PaymentMethod.UNKNOWN


class TestRevenueResult:
    def test_default_is_none(self) -> None:
        result = RevenueResult()
        assert result.source == RevenueSource.NONE
        assert not result.available

    def test_available(self) -> None:
        assert RevenueResult(source=RevenueSource.FALLBACK, provider="Billing A2A", raw="{}").available


class TestRiskAssessment:
    def test_empty_is_explicitly_clear(self) -> None:
        assert RiskAssessment().no_significant_risks

    def test_info_only_is_clear(self) -> None:
        risks = RiskAssessment(flags=[
            RiskFlag(kind=RiskKind.AUTORECHARGE_UNKNOWN, severity=RiskSeverity.INFO, message="?"),
        ])
        assert risks.no_significant_risks
        assert risks.has(RiskKind.AUTORECHARGE_UNKNOWN)


class TestAccountRecord:
    def test_json_round_trip_fields(self) -> None:
        record = AccountRecord(
            account=Account(name="Acme", org_id="1"),
            period_days=90,
            billing=BillingFacts(balance=10.5, contract_end_date=date(2026, 1, 1)),
            tickets=TicketSet(results=[{"id": 1, "status": "open"}]),
        )
        data = json.loads(record.to_json())

        assert data["account"]["name"] == "Acme"
        assert data["billing"]["balance"] == 10.5
        assert data["billing"]["contract_end_date"] == "2026-01-01"
        assert data["tickets"]["count"] == 1
        assert data["revenue"]["source"] == "none"
        assert data["risks"]["no_significant_risks"] is True

    def test_has_section(self) -> None:
        record = AccountRecord(account=Account(name="A", org_id="1"), period_days=7, sections=["TLDR"])
        assert record.has_section("tldr")
        assert not record.has_section("risks")

    def test_ticket_count_when_skipped(self) -> None:
        record = AccountRecord(account=Account(name="A", org_id="1"), period_days=7)
        assert record.tickets is None
        assert record.ticket_count == 0
