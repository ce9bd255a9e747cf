"""
A2A Connector — natural-language questions to the billing agent.

The billing agent speaks agent-to-agent (A2A) JSON-RPC: one ``message/send``
call per question, answered with free-form text. Each call is a single
round trip through the shared transport; an unusable answer is ``None``.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Any

from execbrief.config import A2AConfig
from execbrief.connectors.base import BaseConnector
from execbrief.connectors.transport import RetryableRequest, RetryingTransport

logger = logging.getLogger("execbrief.connectors.a2a")


def new_message_id() -> str:
    """Message id unique per call: seconds plus a 15-bit random suffix."""
    return f"exec-brief-{int(time.time())}-{random.randint(0, 32767)}"


def build_envelope(question: str, message_id: str) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": message_id,
        "method": "message/send",
        "params": {
            "message": {
                "messageId": message_id,
                "role": "user",
                "parts": [{"kind": "text", "text": question}],
            }
        },
    }


def _first_part_text(container: Any) -> str | None:
    if not isinstance(container, dict):
        return None
    parts = container.get("parts")
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
        return None
    text = parts[0].get("text")
    return text if isinstance(text, str) and text.strip() else None


def parse_answer(body: Any) -> str | None:
    """Pull the answer text out of a JSON-RPC response body.

    Checked in order: first artifact's first part, the reply message's first
    part, then a bare ``parts`` list on the result.
    """
    if not isinstance(body, dict):
        return None
    result = body.get("result")
    if not isinstance(result, dict):
        return None

    artifacts = result.get("artifacts")
    if isinstance(artifacts, list) and artifacts:
        text = _first_part_text(artifacts[0])
        if text:
            return text

    return _first_part_text(result.get("message")) or _first_part_text(result)


class A2AConnector(BaseConnector):
    """Ask the billing agent a question and get its text answer.

    Usage::

        connector = A2AConnector(config.a2a, transport)
        answer = await connector.query("What is the balance for org 42?")
    """

    name = "a2a"
    description = "Billing agent over A2A JSON-RPC"

    def __init__(self, config: A2AConfig, transport: RetryingTransport) -> None:
        super().__init__(transport)
        self.url = config.billing_url

    def validate_credentials(self) -> bool:
        # The agent is an internal endpoint; no credentials involved.
        return bool(self.url)

    async def query(self, question: str) -> str | None:
        """Send one question. Returns the answer text or None."""
        message_id = new_message_id()
        result = await self.transport.execute(RetryableRequest(
            "POST",
            self.url,
            json=build_envelope(question, message_id),
            headers={"Content-Type": "application/json"},
        ))

        body = self._json_body(result)
        if body is None:
            logger.warning("A2A query %s returned no usable response", message_id)
            return None

        if isinstance(body, dict) and body.get("error"):
            logger.warning("A2A query %s error: %s", message_id, body["error"])
            return None

        answer = parse_answer(body)
        if answer is None:
            logger.debug("A2A query %s: no answer text in response", message_id)
        return answer
