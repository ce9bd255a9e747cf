"""
Revenue resolver — BI view first, billing agent as fallback.

Revenue has two providers in priority order. The first one that returns a
non-blank payload wins, and each is consulted at most once per account, so
a BI failure never loops back to the BI provider after the fallback ran.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from execbrief.connectors.a2a_connector import A2AConnector
from execbrief.connectors.tableau_connector import TableauConnector
from execbrief.models.account import Account
from execbrief.models.record import RevenueResult, RevenueSource

logger = logging.getLogger("execbrief.analyzers.revenue")

FALLBACK_REVENUE_QUESTION = (
    "For org {org_id}, provide monthly revenue for the last 6 months broken down "
    "by product/service. Include totals, MoM changes, and service-level breakdown. "
    "Return as JSON."
)


@dataclass(frozen=True)
class RevenueProvider:
    """One row of the revenue decision table."""

    name: str
    source: RevenueSource
    is_available: Callable[[], bool]
    fetch: Callable[[Account], Awaitable[str | None]]


class RevenueResolver:
    """Resolve revenue for an account through an ordered provider table.

    Usage::

        resolver = RevenueResolver.default(tableau, a2a)
        result = await resolver.resolve(account)
        result.source  # PRIMARY, FALLBACK or NONE
    """

    def __init__(self, providers: list[RevenueProvider]) -> None:
        self.providers = providers

    @classmethod
    def default(cls, tableau: TableauConnector, a2a: A2AConnector) -> RevenueResolver:
        """Tableau view, then the billing agent."""

        async def ask_agent(account: Account) -> str | None:
            return await a2a.query(FALLBACK_REVENUE_QUESTION.format(org_id=account.org_id))

        return cls([
            RevenueProvider(
                name="Tableau",
                source=RevenueSource.PRIMARY,
                is_available=lambda: tableau.available,
                fetch=tableau.fetch_revenue,
            ),
            RevenueProvider(
                name="Billing A2A",
                source=RevenueSource.FALLBACK,
                is_available=lambda: True,
                fetch=ask_agent,
            ),
        ])

    async def resolve(self, account: Account) -> RevenueResult:
        """First non-blank payload in provider order, or a NONE result."""
        for provider in self.providers:
            if not provider.is_available():
                logger.debug("%s unavailable for %s, skipping", provider.name, account.name)
                continue

            try:
                raw = await provider.fetch(account)
            except Exception as e:
                logger.warning("%s revenue fetch failed for %s: %s", provider.name, account.name, e)
                continue

            if raw and raw.strip():
                logger.info("Revenue for %s from %s", account.name, provider.name)
                return RevenueResult(source=provider.source, provider=provider.name, raw=raw)

            if provider.source == RevenueSource.PRIMARY:
                logger.info("No %s data for %s, trying fallback", provider.name, account.name)

        logger.warning("No revenue data available for %s", account.name)
        return RevenueResult()
