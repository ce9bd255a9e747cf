"""
Account aggregator — gathers one consolidated record per account.

For each account, in order and one await at a time:

1. Revenue (BI view, else billing agent)
2. Support tickets for the lookback window (only with a ticketing alias)
3. Three billing questions to the agent, each read through a field table
4. Risk derivation over the result

Every step degrades to "missing" on failure; ``aggregate`` always returns
exactly one record.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, TypeVar

from execbrief.analyzers.extraction import FieldKind, FieldPattern, extract_fields
from execbrief.analyzers.revenue import RevenueResolver
from execbrief.analyzers.risk import RiskThresholds, derive_risks
from execbrief.auth.session import TableauSession
from execbrief.connectors.a2a_connector import A2AConnector
from execbrief.connectors.zendesk_connector import ZendeskConnector
from execbrief.models.account import Account
from execbrief.models.billing import BillingFacts, PaymentMethod
from execbrief.models.record import DEFAULT_SECTIONS, AccountRecord, RevenueResult, TicketSet

logger = logging.getLogger("execbrief.aggregator")

T = TypeVar("T")


@dataclass(frozen=True)
class BillingQuery:
    """One question to the billing agent and the fields read from its answer."""

    key: str
    question: str
    fields: tuple[FieldPattern, ...]


BILLING_QUERIES: tuple[BillingQuery, ...] = (
    BillingQuery(
        key="balance",
        question="What is the current balance, credit limit, and payment method for org {org_id}?",
        fields=(
            FieldPattern("balance", FieldKind.NUMBER, "balance"),
            FieldPattern("credit_limit", FieldKind.NUMBER, "credit.limit"),
            FieldPattern("payment_method", FieldKind.CHOICE, "credit.card|wire|ach|paypal|invoice|prepaid"),
        ),
    ),
    BillingQuery(
        key="usage",
        question="What is the current month usage, MRC, and daily run rate for org {org_id}?",
        fields=(
            FieldPattern("current_month_usage", FieldKind.NUMBER, "usage|total.usage"),
            FieldPattern("next_month_mrc", FieldKind.NUMBER, "mrc|monthly.recurring|recurring.charge"),
            FieldPattern("daily_run_rate", FieldKind.NUMBER, "daily|run.rate"),
        ),
    ),
    BillingQuery(
        key="contract",
        question="Does org {org_id} have auto-recharge enabled? What is the contract end date?",
        fields=(
            FieldPattern("has_autorecharge", FieldKind.FLAG, "auto.?recharge"),
            FieldPattern("contract_end_date", FieldKind.DATE),
        ),
    ),
)


class AccountAggregator:
    """Build ``AccountRecord`` objects from the three providers.

    Usage::

        aggregator = AccountAggregator(session, resolver, zendesk, a2a)
        records = await aggregator.aggregate_all(config.customers, days=90)
    """

    def __init__(
        self,
        session: TableauSession,
        resolver: RevenueResolver,
        zendesk: ZendeskConnector,
        a2a: A2AConnector,
        *,
        thresholds: RiskThresholds | None = None,
        reauth_every: int = 5,
        queries: tuple[BillingQuery, ...] = BILLING_QUERIES,
    ) -> None:
        self.session = session
        self.resolver = resolver
        self.zendesk = zendesk
        self.a2a = a2a
        self.thresholds = thresholds or RiskThresholds()
        self.reauth_every = reauth_every
        self.queries = queries

    # ------------------------------------------------------------------
    # Whole run
    # ------------------------------------------------------------------

    async def aggregate_all(
        self,
        accounts: Iterable[Account],
        *,
        days: int,
        sections: list[str] | None = None,
        customer: str | None = None,
        today: date | None = None,
    ) -> list[AccountRecord]:
        """Aggregate every account in configured order.

        ``customer`` keeps only the account with exactly that name. The BI
        session is refreshed before every ``reauth_every``-th processed
        account while it is still available.
        """
        records: list[AccountRecord] = []
        processed = 0
        for account in accounts:
            if customer and account.name != customer:
                continue

            logger.info("Processing %s (%s)", account.name, account.org_id)
            if processed > 0 and processed % self.reauth_every == 0 and self.session.available:
                logger.info("Re-authenticating Tableau (every %d customers)", self.reauth_every)
                await self.session.refresh()

            records.append(await self.aggregate(account, days=days, sections=sections, today=today))
            processed += 1

        if customer and not records:
            logger.warning("No configured customer named %r", customer)
        return records

    def plan(
        self, account: Account, *, days: int, sections: list[str] | None = None
    ) -> AccountRecord:
        """Dry-run record: what would be queried, with no network call."""
        return AccountRecord(
            account=account,
            period_days=days,
            sections=list(sections or DEFAULT_SECTIONS),
            dry_run=True,
        )

    def plan_all(
        self,
        accounts: Iterable[Account],
        *,
        days: int,
        sections: list[str] | None = None,
        customer: str | None = None,
    ) -> list[AccountRecord]:
        return [
            self.plan(account, days=days, sections=sections)
            for account in accounts
            if not customer or account.name == customer
        ]

    # ------------------------------------------------------------------
    # One account
    # ------------------------------------------------------------------

    async def aggregate(
        self,
        account: Account,
        *,
        days: int,
        sections: list[str] | None = None,
        today: date | None = None,
    ) -> AccountRecord:
        """Collect revenue, tickets, and billing for one account."""
        today = today or date.today()

        revenue = await self._guard(
            "revenue", account, self.resolver.resolve(account), RevenueResult()
        )

        tickets = None
        if account.has_ticketing:
            assert account.zendesk_org is not None
            since = today - timedelta(days=days)
            tickets = await self._guard(
                "tickets",
                account,
                self.zendesk.collect(account.zendesk_org, since),
                TicketSet(truncated=True),
            )
            if tickets.unavailable:
                logger.warning("Ticket data unavailable for %s", account.name)
            elif not tickets.count:
                logger.info("No Zendesk tickets for %s", account.name)

        billing = await self._collect_billing(account)
        risks = derive_risks(billing, tickets, period_days=days, thresholds=self.thresholds, today=today)

        record = AccountRecord(
            account=account,
            period_days=days,
            sections=list(sections or DEFAULT_SECTIONS),
            revenue=revenue,
            tickets=tickets,
            billing=billing,
            risks=risks,
        )
        logger.info(
            "Record for %s: revenue=%s tickets=%d billing fields=%d risks=%d",
            account.name,
            revenue.source.value,
            record.ticket_count,
            billing.known_fields,
            len(risks.significant),
        )
        return record

    async def _collect_billing(self, account: Account) -> BillingFacts:
        """Ask every billing question and fold the extracted fields together."""
        values: dict[str, Any] = {}
        answers: dict[str, str | None] = {}
        spans: dict[str, str] = {}

        for query in self.queries:
            question = query.question.format(org_id=account.org_id)
            answer = await self._guard(f"billing {query.key}", account, self.a2a.query(question), None)
            answers[query.key] = answer
            if answer is None:
                logger.warning("Billing query %r unanswered for %s", query.key, account.name)
                continue

            for name, extraction in extract_fields(answer, query.fields).items():
                if extraction.span:
                    spans[name] = extraction.span
                if extraction.found:
                    values[name] = extraction.value

        if "payment_method" in values:
            values["payment_method"] = PaymentMethod.parse(values["payment_method"])

        return BillingFacts(**values, answers=answers, spans=spans)

    @staticmethod
    async def _guard(step: str, account: Account, awaitable: Awaitable[T], default: T) -> T:
        """Await one sub-fetch, degrading any unexpected error to ``default``."""
        try:
            return await awaitable
        except Exception as e:
            logger.error("%s step failed for %s: %s", step, account.name, e, exc_info=True)
            return default
