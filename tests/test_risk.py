"""Tests for risk derivation."""

from __future__ import annotations

from datetime import date

import pytest

from execbrief.analyzers.risk import RiskThresholds, derive_risks
from execbrief.models.billing import BillingFacts
from execbrief.models.record import RiskKind, RiskSeverity, TicketSet


def tickets(n: int) -> TicketSet:
    return TicketSet(results=[{"id": i, "status": "open"} for i in range(n)])


class TestCreditUtilization:
    def test_fires_above_threshold(self) -> None:
        billing = BillingFacts(balance=9000, credit_limit=10000, has_autorecharge=True)
        risks = derive_risks(billing, None, period_days=90)

        assert risks.has(RiskKind.CREDIT_UTILIZATION)
        flag = risks.flags[0]
        assert flag.severity == RiskSeverity.HIGH
        assert flag.message == "Credit utilization at 90% — approaching limit"
        assert flag.metric == pytest.approx(90.0)

    def test_quiet_below_threshold(self) -> None:
        billing = BillingFacts(balance=1000, credit_limit=10000, has_autorecharge=True)
        risks = derive_risks(billing, None, period_days=90)

        assert not risks.has(RiskKind.CREDIT_UTILIZATION)
        assert risks.no_significant_risks

    def test_negative_balance_uses_absolute_value(self) -> None:
        billing = BillingFacts(balance=-8500, credit_limit=10000)
        assert derive_risks(billing, None, period_days=90).has(RiskKind.CREDIT_UTILIZATION)

    def test_zero_limit_skipped(self) -> None:
        billing = BillingFacts(balance=9000, credit_limit=0)
        assert not derive_risks(billing, None, period_days=90).has(RiskKind.CREDIT_UTILIZATION)

    def test_unknown_values_skipped(self) -> None:
        assert not derive_risks(BillingFacts(balance=9000), None, period_days=90).has(
            RiskKind.CREDIT_UTILIZATION
        )

    def test_custom_threshold(self) -> None:
        billing = BillingFacts(balance=6000, credit_limit=10000)
        risks = derive_risks(
            billing, None, period_days=90, thresholds=RiskThresholds(credit_utilization_pct=50)
        )
        assert risks.has(RiskKind.CREDIT_UTILIZATION)


class TestAutoRecharge:
    def test_disabled_flagged(self) -> None:
        risks = derive_risks(BillingFacts(has_autorecharge=False), None, period_days=90)
        assert risks.has(RiskKind.AUTORECHARGE_DISABLED)
        assert not risks.no_significant_risks

    def test_unknown_is_informational(self) -> None:
        risks = derive_risks(BillingFacts(), None, period_days=90)
        assert risks.has(RiskKind.AUTORECHARGE_UNKNOWN)
        assert not risks.has(RiskKind.AUTORECHARGE_DISABLED)
        assert risks.no_significant_risks

    def test_enabled_quiet(self) -> None:
        risks = derive_risks(BillingFacts(has_autorecharge=True), None, period_days=90)
        assert risks.flags == []
        assert risks.no_significant_risks


class TestRenewal:
    def test_any_end_date_reminds(self) -> None:
        billing = BillingFacts(has_autorecharge=True, contract_end_date=date(2030, 1, 1))
        risks = derive_risks(billing, None, period_days=90)
        assert risks.has(RiskKind.CONTRACT_RENEWAL)
        assert "2030-01-01" in risks.flags[0].message

    def test_window_gates_reminder(self) -> None:
        billing = BillingFacts(has_autorecharge=True, contract_end_date=date(2030, 1, 1))
        thresholds = RiskThresholds(renewal_window_days=60)

        far = derive_risks(billing, None, period_days=90, thresholds=thresholds, today=date(2029, 1, 1))
        near = derive_risks(billing, None, period_days=90, thresholds=thresholds, today=date(2029, 12, 1))

        assert not far.has(RiskKind.CONTRACT_RENEWAL)
        assert near.has(RiskKind.CONTRACT_RENEWAL)


class TestTicketVolume:
    def test_high_volume(self) -> None:
        risks = derive_risks(BillingFacts(has_autorecharge=True), tickets(11), period_days=30)
        assert risks.has(RiskKind.HIGH_TICKET_VOLUME)
        assert risks.flags[0].message == "High ticket volume (11 tickets in 30d) — investigate patterns"

    def test_threshold_is_exclusive(self) -> None:
        risks = derive_risks(BillingFacts(has_autorecharge=True), tickets(10), period_days=30)
        assert not risks.has(RiskKind.HIGH_TICKET_VOLUME)

    def test_skipped_tickets(self) -> None:
        risks = derive_risks(BillingFacts(has_autorecharge=True), None, period_days=30)
        assert not risks.has(RiskKind.HIGH_TICKET_VOLUME)


class TestOrdering:
    def test_all_rules_in_priority_order(self) -> None:
        billing = BillingFacts(
            balance=9500,
            credit_limit=10000,
            has_autorecharge=False,
            contract_end_date=date(2026, 6, 30),
        )
        risks = derive_risks(billing, tickets(25), period_days=90)

        assert [f.kind for f in risks.flags] == [
            RiskKind.CREDIT_UTILIZATION,
            RiskKind.AUTORECHARGE_DISABLED,
            RiskKind.CONTRACT_RENEWAL,
            RiskKind.HIGH_TICKET_VOLUME,
        ]
        assert len(risks.significant) == 4
