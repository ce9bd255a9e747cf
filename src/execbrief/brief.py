"""
ExecBrief — main orchestrator.

The ExecBrief class is the top-level entry point: it wires the providers
around one shared retrying transport, runs the account loop, renders the
records, and delivers the result.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from execbrief.aggregator import AccountAggregator
from execbrief.analyzers.revenue import RevenueResolver
from execbrief.analyzers.risk import RiskThresholds
from execbrief.auth.session import TableauSession
from execbrief.config import ExecBriefConfig, Secrets
from execbrief.connectors.a2a_connector import A2AConnector
from execbrief.connectors.base import BaseConnector
from execbrief.connectors.slack_connector import SlackConnector
from execbrief.connectors.tableau_connector import TableauConnector
from execbrief.connectors.transport import RetryingTransport, RetryPolicy
from execbrief.connectors.zendesk_connector import ZendeskConnector
from execbrief.exporters import render_briefs
from execbrief.models.record import AccountRecord

logger = logging.getLogger("execbrief")


@dataclass
class ExecBrief:
    """Top-level orchestrator for ExecBrief.

    Usage::

        from execbrief import ExecBrief

        brief = ExecBrief.from_config("config/config.yaml")
        records = await brief.run(customer="Acme Corp", days=30)
        print(brief.render(records))
        await brief.close()

    ExecBrief coordinates:
    - **Session**: Tableau sign-in, 401 re-auth, and cadence refresh.
    - **Connectors**: Tableau, Zendesk, the billing agent, and Slack.
    - **Aggregator**: One risk-annotated record per account.
    - **Exporters**: Text, Markdown, and JSON briefs.
    """

    config: ExecBriefConfig
    secrets: Secrets = field(default_factory=Secrets.from_env)
    transport: RetryingTransport | None = None
    session: TableauSession | None = field(default=None, init=False, repr=False)
    slack: SlackConnector | None = field(default=None, init=False, repr=False)
    _connectors: list[BaseConnector] = field(default_factory=list, init=False, repr=False)
    _aggregator: AccountAggregator | None = field(default=None, init=False, repr=False)

    @classmethod
    def from_config(cls, config_path: str | None = None, **overrides: Any) -> ExecBrief:
        """Create an ExecBrief from a config file; secrets come from the environment.

        Raises:
            ConfigInvalid: Before any network call, when the config is unusable.
        """
        config = ExecBriefConfig.load(config_path, **overrides)
        instance = cls(config=config)
        instance._setup()
        return instance

    def _setup(self) -> None:
        """Build the transport, session, connectors, and aggregator."""
        retry = self.config.retry
        if self.transport is None:
            self.transport = RetryingTransport(policy=RetryPolicy(
                max_attempts=retry.max_attempts,
                base_delay=retry.base_delay,
                backoff_multiplier=retry.backoff_multiplier,
                connect_timeout=retry.connect_timeout,
                total_timeout=retry.total_timeout,
            ))

        self.session = TableauSession(self.config.tableau, self.secrets.tableau_pat_secret, self.transport)
        tableau = TableauConnector(self.session, self.config.tableau.revenue_view_id)
        zendesk = ZendeskConnector(self.config.zendesk, self.secrets.zendesk_api_token, self.transport)
        a2a = A2AConnector(self.config.a2a, self.transport)
        self.slack = SlackConnector(self.secrets.slack_bot_token, self.transport)
        self._connectors = [tableau, zendesk, a2a, self.slack]

        risks = self.config.risks
        self._aggregator = AccountAggregator(
            self.session,
            RevenueResolver.default(tableau, a2a),
            zendesk,
            a2a,
            thresholds=RiskThresholds(
                credit_utilization_pct=risks.credit_utilization_threshold,
                ticket_volume=risks.ticket_volume_threshold,
                renewal_window_days=risks.renewal_window_days,
            ),
            reauth_every=self.config.tableau.reauth_every,
        )
        logger.info("ExecBrief initialized with %d customers", len(self.config.customers))

    async def run(
        self,
        customer: str | None = None,
        days: int | None = None,
        sections: list[str] | None = None,
        dry_run: bool = False,
    ) -> list[AccountRecord]:
        """Build one record per configured (and selected) account.

        Args:
            customer: Only the account with exactly this name.
            days: Lookback window; defaults to ``output.default_days``.
            sections: Brief sections to render; defaults to ``output.sections``.
            dry_run: Plan only; no network call at all.

        Returns:
            Records in configured order. Provider failures show up as
            unknown values inside the records, never as exceptions.
        """
        if self._aggregator is None:
            self._setup()
        assert self._aggregator is not None and self.session is not None

        days = days or self.config.output.default_days
        sections = sections or self.config.output.sections
        customers = self.config.customers

        if dry_run:
            logger.info("Dry run: skipping data fetch")
            return self._aggregator.plan_all(customers, days=days, sections=sections, customer=customer)

        await self.session.authenticate()
        records = await self._aggregator.aggregate_all(
            customers, days=days, sections=sections, customer=customer
        )
        logger.info("Executive Brief completed for %d customer(s)", len(records))
        return records

    def run_sync(self, **kwargs: Any) -> list[AccountRecord]:
        """Synchronous wrapper around :meth:`run`."""
        return asyncio.run(self.run(**kwargs))

    def render(self, records: list[AccountRecord], fmt: str | None = None) -> str:
        """Render records in ``fmt`` (defaults to ``output.format``)."""
        return render_briefs(records, fmt or self.config.output.format)

    async def deliver(self, text: str) -> bool:
        """Post the rendered brief to the configured Slack channel, if any."""
        channel = self.config.slack.channel
        if not channel:
            return False
        if self.slack is None:
            self._setup()
        assert self.slack is not None
        logger.info("Posting brief to Slack channel %s", channel)
        return await self.slack.post_message(channel, text)

    def health(self) -> list[dict[str, Any]]:
        """Configuration status of every connector (no network call)."""
        if self._aggregator is None:
            self._setup()
        return [connector.health_check() for connector in self._connectors]

    async def close(self) -> None:
        """Release the shared HTTP client."""
        if self.transport is not None:
            await self.transport.close()
