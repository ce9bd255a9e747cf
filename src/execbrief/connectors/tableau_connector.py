"""
Tableau Connector — revenue view data from the BI provider.

Reads the configured revenue view filtered to one account, via the REST
API's view-data endpoint (CSV). Authentication and 401 handling live in
``TableauSession``; this connector only knows which view to read.

Tableau REST API docs:
  https://help.tableau.com/current/api/rest_api/en-us/REST/rest_api_ref_workbooks_and_views.htm
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from execbrief.connectors.base import BaseConnector

if TYPE_CHECKING:
    from execbrief.auth.session import TableauSession
    from execbrief.models.account import Account

logger = logging.getLogger("execbrief.connectors.tableau")

# View filter parameter for the account dimension.
_ACCOUNT_FILTER = "vf_Account Name"


class TableauConnector(BaseConnector):
    """Pull revenue rows for an account from a Tableau view.

    Usage::

        connector = TableauConnector(session, view_id="a1b2c3")
        csv_text = await connector.fetch_revenue(account)
    """

    name = "tableau"
    description = "Revenue view data from Tableau"

    def __init__(self, session: TableauSession, view_id: str | None) -> None:
        super().__init__(session.transport)
        self.session = session
        self.view_id = view_id

    def validate_credentials(self) -> bool:
        return self.session.has_credentials and bool(self.view_id)

    @property
    def available(self) -> bool:
        """Whether a read can be attempted right now."""
        return self.session.available and bool(self.view_id)

    async def fetch_revenue(self, account: Account) -> str | None:
        """Revenue view data for ``account``, or None when unavailable or empty."""
        if not self.available:
            return None

        resp = await self.session.call_with_reauth(
            f"views/{self.view_id}/data",
            params={_ACCOUNT_FILTER: account.bi_name},
        )
        if resp is None:
            logger.warning("Tableau revenue read failed for %s", account.bi_name)
            return None

        text = resp.text.strip()
        return text or None
