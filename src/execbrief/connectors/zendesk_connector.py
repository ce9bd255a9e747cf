"""
Zendesk Connector — ticket volume for an organization via the Search API.

Walks the search results page by page (100 per page), following the
``next_page`` URL until there is none. Support data is optional: missing
credentials return an empty set, and a failed page keeps whatever was
collected before it.

Zendesk Search API docs:
  https://developer.zendesk.com/api-reference/ticketing/ticket-management/search/
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from execbrief.config import ZendeskConfig
from execbrief.connectors.base import BaseConnector
from execbrief.connectors.transport import RetryableRequest, RetryingTransport
from execbrief.models.record import TicketSet

logger = logging.getLogger("execbrief.connectors.zendesk")

# Max results per search page
_PAGE_SIZE = 100


class ZendeskConnector(BaseConnector):
    """Collect tickets for one organization created since a date.

    Usage::

        connector = ZendeskConnector(config.zendesk, api_token, transport)
        tickets = await connector.collect("acme", since=date(2025, 1, 1))
        tickets.count
    """

    name = "zendesk"
    description = "Support tickets from Zendesk"

    def __init__(
        self,
        config: ZendeskConfig,
        api_token: str | None,
        transport: RetryingTransport,
    ) -> None:
        super().__init__(transport)
        self.subdomain = config.subdomain
        self.email = config.email
        self.api_token = api_token

    def validate_credentials(self) -> bool:
        return bool(self.api_token and self.email and self.email != "null" and self.subdomain)

    @property
    def _search_url(self) -> str:
        return f"https://{self.subdomain}.zendesk.com/api/v2/search.json"

    @staticmethod
    def build_query(org: str, since: date) -> str:
        return f"type:ticket organization:{org} created>{since.isoformat()}"

    async def collect(self, org: str, since: date) -> TicketSet:
        """All tickets for ``org`` created after ``since``.

        Returns an empty set without a network call when credentials are
        missing. A page failure truncates the result at the last good page;
        a failure on the first page leaves it empty and ``unavailable``.
        """
        tickets = TicketSet()
        if not self.validate_credentials():
            logger.debug("Zendesk credentials not configured, skipping tickets")
            return tickets

        auth = (f"{self.email}/token", self.api_token or "")
        url: str | None = self._search_url
        params: dict[str, Any] | None = {
            "per_page": _PAGE_SIZE,
            "query": self.build_query(org, since),
        }
        visited: set[str] = set()
        page = 0

        while url:
            visited.add(url)
            page += 1
            result = await self.transport.execute(
                RetryableRequest("GET", url, params=params, auth=auth)
            )
            data = self._json_body(result)
            if not isinstance(data, dict):
                logger.warning(
                    "Zendesk page %d failed, keeping %d tickets collected so far",
                    page, tickets.count,
                )
                tickets.truncated = True
                break

            tickets.extend(data.get("results") or [])

            # next_page is a complete URL with the query already encoded
            next_page = data.get("next_page")
            if not next_page or next_page == "null" or next_page in visited:
                break
            url, params = next_page, None

        logger.info("Zendesk: %d tickets for %s across %d page(s)", tickets.count, org, page)
        return tickets
