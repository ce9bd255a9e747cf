"""
Account record model — revenue, tickets, billing, and risks for one account.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, computed_field

from execbrief.models.account import Account
from execbrief.models.billing import BillingFacts

DEFAULT_SECTIONS: list[str] = ["tldr", "revenue", "support", "risks", "opportunities", "actions"]


class RevenueSource(str, Enum):
    """Which provider tier supplied the revenue data."""

    PRIMARY = "primary"  # BI provider
    FALLBACK = "fallback"  # financial agent
    NONE = "none"  # nobody answered


class RevenueResult(BaseModel):
    """Revenue payload with its provenance.

    ``provider`` is the display name of the provider that answered, so the
    brief can disclose where the numbers came from.
    """

    source: RevenueSource = RevenueSource.NONE
    provider: str | None = None
    raw: str | None = None

    @property
    def available(self) -> bool:
        return self.source != RevenueSource.NONE and bool(self.raw)


class TicketSet(BaseModel):
    """Tickets accumulated across pages of a search."""

    results: list[dict[str, Any]] = Field(default_factory=list)
    truncated: bool = Field(default=False, description="Collection stopped early on a page failure")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def count(self) -> int:
        return len(self.results)

    @property
    def unavailable(self) -> bool:
        """Collection failed before any ticket arrived; the count is unknown, not zero."""
        return self.truncated and not self.results

    def extend(self, records: list[dict[str, Any]]) -> int:
        """Append records not seen before (by ``id``). Returns how many were added."""
        seen = {r.get("id") for r in self.results if r.get("id") is not None}
        added = 0
        for record in records:
            ticket_id = record.get("id")
            if ticket_id is not None:
                if ticket_id in seen:
                    continue
                seen.add(ticket_id)
            self.results.append(record)
            added += 1
        return added

    def by_status(self) -> dict[str, int]:
        """Ticket counts grouped by status, in first-seen order."""
        counts: dict[str, int] = {}
        for ticket in self.results:
            status = ticket.get("status") or "unknown"
            counts[status] = counts.get(status, 0) + 1
        return counts


class RiskSeverity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


class RiskKind(str, Enum):
    """Risk rules, in display priority order."""

    CREDIT_UTILIZATION = "credit_utilization"
    AUTORECHARGE_DISABLED = "autorecharge_disabled"
    AUTORECHARGE_UNKNOWN = "autorecharge_unknown"
    CONTRACT_RENEWAL = "contract_renewal"
    HIGH_TICKET_VOLUME = "high_ticket_volume"


class RiskFlag(BaseModel):
    """A single derived risk signal."""

    kind: RiskKind
    severity: RiskSeverity
    message: str
    metric: float | None = None


class RiskAssessment(BaseModel):
    """Ordered risk flags for one account.

    An assessment with no flags above informational severity is an explicit
    "no significant risks" result, not a missing evaluation.
    """

    flags: list[RiskFlag] = Field(default_factory=list)

    @property
    def significant(self) -> list[RiskFlag]:
        return [f for f in self.flags if f.severity != RiskSeverity.INFO]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def no_significant_risks(self) -> bool:
        return not self.significant

    def has(self, kind: RiskKind) -> bool:
        return any(f.kind == kind for f in self.flags)


class AccountRecord(BaseModel):
    """Everything gathered for one account in one run.

    Handed read-only to the renderers; a record whose every field is unknown
    is still a valid, reportable outcome.
    """

    account: Account
    period_days: int
    sections: list[str] = Field(default_factory=lambda: list(DEFAULT_SECTIONS))
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    revenue: RevenueResult = Field(default_factory=RevenueResult)
    tickets: TicketSet | None = None
    billing: BillingFacts = Field(default_factory=BillingFacts)
    risks: RiskAssessment = Field(default_factory=RiskAssessment)
    dry_run: bool = False

    @property
    def ticket_count(self) -> int:
        return self.tickets.count if self.tickets else 0

    def has_section(self, section: str) -> bool:
        return section.lower() in (s.lower() for s in self.sections)

    def to_text(self) -> str:
        """Export the record as the plain-text executive brief."""
        from execbrief.exporters.text import render_text

        return render_text(self)

    def to_markdown(self) -> str:
        """Export the record as Markdown."""
        from execbrief.exporters.markdown import render_markdown

        return render_markdown(self)

    def to_json(self) -> str:
        """Export the record as JSON."""
        return self.model_dump_json(indent=2)

    def to_dict(self) -> dict[str, Any]:
        """Export the record as a dictionary."""
        return self.model_dump(mode="json")
