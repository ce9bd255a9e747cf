"""Connectors package — provider integrations behind one retrying transport."""
from execbrief.connectors.a2a_connector import A2AConnector
from execbrief.connectors.base import BaseConnector
from execbrief.connectors.slack_connector import SlackConnector
from execbrief.connectors.tableau_connector import TableauConnector
from execbrief.connectors.transport import (
    RequestFailed,
    RetryableRequest,
    RetryingTransport,
    RetryPolicy,
)
from execbrief.connectors.zendesk_connector import ZendeskConnector

__all__ = [
    "A2AConnector",
    "BaseConnector",
    "RequestFailed",
    "RetryPolicy",
    "RetryableRequest",
    "RetryingTransport",
    "SlackConnector",
    "TableauConnector",
    "ZendeskConnector",
]
