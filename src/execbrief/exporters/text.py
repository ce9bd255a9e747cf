"""
Plain-text executive brief.

The boxed layout meant for terminals and Slack: a header band, then the
selected sections in fixed order, then a footer band.
"""

from __future__ import annotations

from execbrief.exporters.common import (
    ACTION_ITEMS,
    OPPORTUNITIES,
    RISK_ICONS,
    billing_summary,
    fmt_ticket_count,
    revenue_lines,
    revenue_source_label,
)
from execbrief.models.record import AccountRecord

RULE = "═" * 64
_BOX_WIDTH = 61


def _box(title: str) -> list[str]:
    return [
        "",
        "┌" + "─" * _BOX_WIDTH + "┐",
        f"│  {title}".ljust(_BOX_WIDTH + 1) + "│",
        "└" + "─" * _BOX_WIDTH + "┘",
        "",
    ]


def render_text(record: AccountRecord) -> str:
    """Render one account record as the plain-text brief."""
    if record.dry_run:
        return _render_dry_run(record)

    account = record.account
    days = record.period_days
    generated = record.generated_at.strftime("%B %d, %Y at %H:%M %Z")
    billing = billing_summary(record.billing)

    lines = [
        "",
        RULE,
        f"  EXECUTIVE BRIEF: {account.name}",
        f"  Generated: {generated}",
        f"  Period: Last {days} days | Org: {account.org_id}",
        f"  Data Sources: Revenue ({revenue_source_label(record)}), Support (Zendesk), Billing (A2A)",
        RULE,
    ]

    if record.has_section("tldr"):
        lines += _box("📋 TLDR")
        lines += [
            f"  Account balance: {billing['balance']} | Credit limit: {billing['credit_limit']}",
            f"  Current month usage: {billing['usage']} | MRC: {billing['mrc']}",
            f"  Support tickets ({days}d): {fmt_ticket_count(record)}",
            f"  Auto-recharge: {billing['autorecharge']} | Contract ends: {billing['contract_end']}",
            "",
        ]

    if record.has_section("revenue"):
        lines += _box("📈 REVENUE TRENDS")
        lines += [f"  Source: {revenue_source_label(record)}", f"  Period: Last {days} days", ""]
        payload = revenue_lines(record.revenue.raw)
        if payload:
            lines += [f"  {line}" for line in payload]
        else:
            lines.append("  ⚠️  No revenue data available")
        lines.append("")

    if record.has_section("support"):
        lines += _box("🎫 SUPPORT OVERVIEW")
        lines += _support_lines(record)

    if record.has_section("risks"):
        lines += _box("⚠️  KEY RISKS")
        for flag in record.risks.flags:
            lines.append(f"  {RISK_ICONS.get(flag.kind, '•')} {flag.message}")
        if record.risks.no_significant_risks:
            lines.append("  ✅ No significant risks identified")
        lines.append("")

    if record.has_section("opportunities"):
        lines += _box("💡 OPPORTUNITIES")
        lines.append("  Based on account data:")
        lines += [f"  • {item}" for item in OPPORTUNITIES]
        lines.append("")

    if record.has_section("actions"):
        lines += _box("✅ ACTION ITEMS")
        lines.append("  Recommended next steps:")
        lines += [f"  □ {item}" for item in ACTION_ITEMS]
        lines.append("")

    lines += [RULE, f"  End of Brief — {account.name}", RULE]
    return "\n".join(lines)


def _support_lines(record: AccountRecord) -> list[str]:
    days = record.period_days
    tickets = record.tickets
    if tickets is None:
        return ["  Ticketing not configured for this account", ""]
    if tickets.unavailable:
        return ["  ⚠️ Ticket data unavailable (collection failed)", ""]

    lines = [f"  Tickets in last {days} days: {tickets.count}", ""]
    if not tickets.count:
        lines += ["  ✅ No support tickets in this period", ""]
        return lines

    for status, count in tickets.by_status().items():
        lines.append(f"  Status: {status} — {count} ticket(s)")
    if tickets.truncated:
        lines.append("  (partial: ticket collection stopped early)")
    lines.append("")
    return lines


def _render_dry_run(record: AccountRecord) -> str:
    account = record.account
    days = record.period_days
    generated = record.generated_at.strftime("%Y-%m-%d %H:%M %Z")
    ticketing = account.zendesk_org if account.has_ticketing else "(not configured)"
    return "\n".join([
        "",
        RULE,
        f"  EXECUTIVE BRIEF: {account.name}",
        f"  Generated: {generated} (DRY RUN)",
        f"  Period: Last {days} days",
        RULE,
        "",
        "  [DRY RUN] No data fetched. Would query:",
        f'  - Tableau revenue for "{account.bi_name}"',
        f'  - Zendesk tickets for "{ticketing}" (last {days} days)',
        f"  - Billing A2A for org {account.org_id} (balance, MRC, credit)",
        "",
        f"  Sections: {','.join(record.sections)}",
        "",
    ])
