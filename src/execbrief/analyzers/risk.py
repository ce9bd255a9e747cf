"""
Risk deriver — turns billing facts and ticket volume into risk flags.

Rules are evaluated independently (several can fire for one account) and
reported in a fixed priority order:

1. Credit utilization above threshold
2. Auto-recharge disabled (or unknown, reported as informational)
3. Contract end date on file (renewal reminder)
4. High ticket volume in the lookback window
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from execbrief.models.billing import BillingFacts
from execbrief.models.record import (
    RiskAssessment,
    RiskFlag,
    RiskKind,
    RiskSeverity,
    TicketSet,
)


@dataclass(frozen=True)
class RiskThresholds:
    """Tunable limits for the risk rules."""

    credit_utilization_pct: float = 80.0
    ticket_volume: int = 10
    # None = remind on any contract end date, regardless of distance.
    renewal_window_days: int | None = None


def derive_risks(
    billing: BillingFacts,
    tickets: TicketSet | None,
    *,
    period_days: int,
    thresholds: RiskThresholds | None = None,
    today: date | None = None,
) -> RiskAssessment:
    """Evaluate every risk rule against one account's data."""
    limits = thresholds or RiskThresholds()
    flags: list[RiskFlag] = []

    utilization = billing.credit_utilization
    if utilization is not None and utilization > limits.credit_utilization_pct:
        flags.append(RiskFlag(
            kind=RiskKind.CREDIT_UTILIZATION,
            severity=RiskSeverity.HIGH,
            message=f"Credit utilization at {utilization:.0f}% — approaching limit",
            metric=utilization,
        ))

    if billing.has_autorecharge is False:
        flags.append(RiskFlag(
            kind=RiskKind.AUTORECHARGE_DISABLED,
            severity=RiskSeverity.MEDIUM,
            message="Auto-recharge disabled — risk of service disruption",
        ))
    elif billing.has_autorecharge is None:
        flags.append(RiskFlag(
            kind=RiskKind.AUTORECHARGE_UNKNOWN,
            severity=RiskSeverity.INFO,
            message="Auto-recharge status unknown — confirm with billing",
        ))

    end = billing.contract_end_date
    if end is not None and _within_window(end, limits.renewal_window_days, today):
        flags.append(RiskFlag(
            kind=RiskKind.CONTRACT_RENEWAL,
            severity=RiskSeverity.LOW,
            message=f"Contract end date: {end.isoformat()} — review renewal timeline",
        ))

    count = tickets.count if tickets else 0
    if count > limits.ticket_volume:
        flags.append(RiskFlag(
            kind=RiskKind.HIGH_TICKET_VOLUME,
            severity=RiskSeverity.MEDIUM,
            message=f"High ticket volume ({count} tickets in {period_days}d) — investigate patterns",
            metric=float(count),
        ))

    return RiskAssessment(flags=flags)


def _within_window(end: date, window_days: int | None, today: date | None) -> bool:
    if window_days is None:
        return True
    days_left = (end - (today or date.today())).days
    return days_left <= window_days
