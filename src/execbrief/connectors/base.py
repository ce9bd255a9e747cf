"""
Base connector — shared shape for every external provider client.

Connectors are the bridge between ExecBrief and the services it reads
from (BI, ticketing, financial agent) or posts to (notifications). All of
them send through the same ``RetryingTransport`` and report failure as
"no data" rather than raising.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import httpx

from execbrief.connectors.transport import RequestFailed, RetryingTransport


class BaseConnector(ABC):
    """Abstract base class for provider connectors.

    Subclasses set ``name``/``description`` and implement
    ``validate_credentials()``; the data-fetching methods differ per
    provider.
    """

    name: str = "base"
    description: str = "Base connector"

    def __init__(self, transport: RetryingTransport) -> None:
        self.transport = transport

    @abstractmethod
    def validate_credentials(self) -> bool:
        """Whether enough configuration is present to attempt a call."""
        ...

    def health_check(self) -> dict[str, Any]:
        """Report whether the connector is configured (no network call)."""
        return {"connector": self.name, "configured": self.validate_credentials()}

    @staticmethod
    def _json_body(result: httpx.Response | RequestFailed) -> Any:
        """Decoded JSON of a 2xx response, or None for anything else."""
        if isinstance(result, RequestFailed) or not result.is_success:
            return None
        try:
            return result.json()
        except ValueError:
            return None
