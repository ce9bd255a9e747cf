"""
Shared pieces for the brief renderers: value formatting, the revenue
payload layout, and the fixed opportunity/action checklists.
"""

from __future__ import annotations

import json
from datetime import date

from execbrief.models.billing import BillingFacts, PaymentMethod
from execbrief.models.record import AccountRecord, RiskKind

NOT_AVAILABLE = "N/A"

RISK_ICONS = {
    RiskKind.CREDIT_UTILIZATION: "🔴",
    RiskKind.AUTORECHARGE_DISABLED: "🟡",
    RiskKind.AUTORECHARGE_UNKNOWN: "ℹ️",
    RiskKind.CONTRACT_RENEWAL: "📅",
    RiskKind.HIGH_TICKET_VOLUME: "🟠",
}

OPPORTUNITIES = [
    "Review product mix for upsell potential",
    "Evaluate usage trends for volume discount eligibility",
    "Check if customer is using all available product lines",
    "Consider contract renewal with favorable terms if approaching end date",
]

ACTION_ITEMS = [
    "Review revenue trends and identify growth/decline drivers",
    "Address any open support tickets with recurring patterns",
    "Confirm credit limit and auto-recharge settings are appropriate",
    "Schedule QBR if not done in last 90 days",
    "Update Salesforce with latest account notes",
]


def fmt_money(value: float | None) -> str:
    if value is None:
        return NOT_AVAILABLE
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def fmt_flag(value: bool | None) -> str:
    if value is None:
        return NOT_AVAILABLE
    return "enabled" if value else "disabled"


def fmt_date(value: date | None) -> str:
    return value.isoformat() if value else NOT_AVAILABLE


def fmt_ticket_count(record: AccountRecord) -> str:
    if record.tickets is not None and record.tickets.unavailable:
        return NOT_AVAILABLE
    return str(record.ticket_count)


def fmt_payment(value: PaymentMethod) -> str:
    if value == PaymentMethod.UNKNOWN:
        return NOT_AVAILABLE
    return value.value.replace("_", " ")


def billing_summary(billing: BillingFacts) -> dict[str, str]:
    """Display strings for every billing field, ``N/A`` where unknown."""
    return {
        "balance": fmt_money(billing.balance),
        "credit_limit": fmt_money(billing.credit_limit),
        "payment_method": fmt_payment(billing.payment_method),
        "usage": fmt_money(billing.current_month_usage),
        "mrc": fmt_money(billing.next_month_mrc),
        "daily_run_rate": fmt_money(billing.daily_run_rate),
        "autorecharge": fmt_flag(billing.has_autorecharge),
        "contract_end": fmt_date(billing.contract_end_date),
    }


def revenue_source_label(record: AccountRecord) -> str:
    return record.revenue.provider or NOT_AVAILABLE


def revenue_lines(raw: str | None) -> list[str]:
    """Lay out a revenue payload, one display line per entry.

    JSON objects become ``key: $value`` lines, arrays one line per element
    (objects inside an array expand to ``key: value``), and anything that
    is not JSON (the BI view's CSV, prose) is kept line by line.
    """
    if not raw or not raw.strip() or raw.strip() == "null":
        return []

    try:
        data = json.loads(raw)
    except ValueError:
        return [line.rstrip() for line in raw.strip().splitlines() if line.strip()]

    if isinstance(data, dict):
        return [f"{key}: ${value}" for key, value in data.items()]
    if isinstance(data, list):
        lines: list[str] = []
        for item in data:
            if isinstance(item, dict):
                lines.extend(f"{key}: {value}" for key, value in item.items())
            else:
                lines.append(str(item))
        return lines
    return [str(data)]
