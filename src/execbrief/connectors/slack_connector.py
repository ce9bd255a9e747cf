"""
Slack Connector — posts finished briefs to a channel.

Uses the Web API ``chat.postMessage`` method with a bot token. Slack
answers HTTP 200 even for failures, so success is the ``ok`` field of the
body.

Slack API docs:
  https://api.slack.com/methods/chat.postMessage
"""

from __future__ import annotations

import logging

from execbrief.connectors.base import BaseConnector
from execbrief.connectors.transport import RetryableRequest, RetryingTransport

logger = logging.getLogger("execbrief.connectors.slack")

SLACK_API_BASE = "https://slack.com/api"


class SlackConnector(BaseConnector):
    """Post plain-text messages to Slack."""

    name = "slack"
    description = "Brief delivery to a Slack channel"

    def __init__(self, bot_token: str | None, transport: RetryingTransport) -> None:
        super().__init__(transport)
        self.bot_token = bot_token

    def validate_credentials(self) -> bool:
        return bool(self.bot_token)

    async def post_message(self, channel: str, text: str) -> bool:
        """Post ``text`` to ``channel``. Returns True when Slack accepted it."""
        if not self.validate_credentials():
            logger.warning("SLACK_BOT_TOKEN not set, skipping Slack post")
            return False

        result = await self.transport.execute(RetryableRequest(
            "POST",
            f"{SLACK_API_BASE}/chat.postMessage",
            json={"channel": channel, "text": text, "unfurl_links": False},
            headers={
                "Authorization": f"Bearer {self.bot_token}",
                "Content-Type": "application/json; charset=utf-8",
            },
        ))

        body = self._json_body(result)
        if not isinstance(body, dict):
            logger.warning("Slack post to %s failed", channel)
            return False
        if not body.get("ok"):
            logger.warning("Slack post to %s failed: %s", channel, body.get("error", "unknown"))
            return False

        logger.info("Posted brief to Slack %s", channel)
        return True
