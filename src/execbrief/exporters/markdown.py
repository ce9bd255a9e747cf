"""
Markdown brief exporter.

Same content as the plain-text brief, laid out for GitHub, Notion, or any
Markdown viewer.
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


def render_markdown(record: AccountRecord) -> str:
    """Render an AccountRecord as Markdown."""
    account = record.account
    days = record.period_days
    lines: list[str] = []

    # Header
    lines.append(f"# Executive Brief — {account.name}")
    lines.append("")
    suffix = " (dry run)" if record.dry_run else ""
    lines.append(f"*Generated: {record.generated_at.strftime('%Y-%m-%d %H:%M UTC')}{suffix}*")
    lines.append(f"*Period: last {days} days | Org: {account.org_id}*")
    lines.append("")

    if record.dry_run:
        lines.append("No data fetched. Would query:")
        lines.append("")
        lines.append(f"- Tableau revenue for `{account.bi_name}`")
        if account.has_ticketing:
            lines.append(f"- Zendesk tickets for `{account.zendesk_org}` (last {days} days)")
        lines.append(f"- Billing A2A for org `{account.org_id}` (balance, MRC, credit)")
        lines.append("")
        lines.append(f"Sections: {', '.join(record.sections)}")
        lines.append("")
        return "\n".join(lines)

    billing = billing_summary(record.billing)

    if record.has_section("tldr"):
        lines.append("## 📋 TLDR")
        lines.append("")
        lines.append("| Metric | Value |")
        lines.append("|--------|-------|")
        lines.append(f"| **Balance** | {billing['balance']} |")
        lines.append(f"| **Credit Limit** | {billing['credit_limit']} |")
        lines.append(f"| **Payment Method** | {billing['payment_method']} |")
        lines.append(f"| **Current Month Usage** | {billing['usage']} |")
        lines.append(f"| **MRC** | {billing['mrc']} |")
        lines.append(f"| **Daily Run Rate** | {billing['daily_run_rate']} |")
        lines.append(f"| **Support Tickets ({days}d)** | {fmt_ticket_count(record)} |")
        lines.append(f"| **Auto-recharge** | {billing['autorecharge']} |")
        lines.append(f"| **Contract Ends** | {billing['contract_end']} |")
        lines.append("")

    if record.has_section("revenue"):
        lines.append("## 📈 Revenue Trends")
        lines.append("")
        lines.append(f"**Source:** {revenue_source_label(record)}")
        lines.append("")
        payload = revenue_lines(record.revenue.raw)
        if payload:
            lines.append("```")
            lines.extend(payload)
            lines.append("```")
        else:
            lines.append("⚠️ No revenue data available")
        lines.append("")

    if record.has_section("support"):
        lines.append("## 🎫 Support Overview")
        lines.append("")
        tickets = record.tickets
        if tickets is None:
            lines.append("Ticketing not configured for this account.")
        elif tickets.unavailable:
            lines.append("⚠️ Ticket data unavailable (collection failed).")
        elif not tickets.count:
            lines.append(f"✅ No support tickets in the last {days} days.")
        else:
            lines.append(f"**{tickets.count}** tickets in the last {days} days.")
            lines.append("")
            lines.append("| Status | Tickets |")
            lines.append("|--------|---------|")
            for status, count in tickets.by_status().items():
                lines.append(f"| {status} | {count} |")
            if tickets.truncated:
                lines.append("")
                lines.append("*Partial: ticket collection stopped early.*")
        lines.append("")

    if record.has_section("risks"):
        lines.append("## ⚠️ Key Risks")
        lines.append("")
        for flag in record.risks.flags:
            lines.append(f"- {RISK_ICONS.get(flag.kind, '•')} {flag.message}")
        if record.risks.no_significant_risks:
            lines.append("- ✅ No significant risks identified")
        lines.append("")

    if record.has_section("opportunities"):
        lines.append("## 💡 Opportunities")
        lines.append("")
        lines.extend(f"- {item}" for item in OPPORTUNITIES)
        lines.append("")

    if record.has_section("actions"):
        lines.append("## ✅ Action Items")
        lines.append("")
        lines.extend(f"- [ ] {item}" for item in ACTION_ITEMS)
        lines.append("")

    return "\n".join(lines)
