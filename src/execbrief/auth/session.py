"""
Tableau session manager — sign-in, token lifetime, and re-authentication.

Tableau's REST API issues a short-lived credentials token from a personal
access token (PAT). The session object owns that token for the run:

- ``authenticate()`` signs in (or fails fast, without a network call, when
  the PAT is not configured).
- ``call_with_reauth()`` performs an authenticated read and, on HTTP 401
  only, signs in again once and repeats the read once.
- ``refresh()`` forces a new sign-in on a fixed cadence chosen by the caller.

A failed re-authentication leaves the session ``UNAVAILABLE`` for the rest
of the run so callers fall back to other providers.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import httpx

from execbrief.config import TableauConfig
from execbrief.connectors.transport import RequestFailed, RetryableRequest, RetryingTransport
from execbrief.errors import AuthUnavailable

logger = logging.getLogger("execbrief.auth.session")


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    UNAVAILABLE = "unavailable"


@dataclass
class SessionToken:
    """Credentials token plus the site it is scoped to."""

    token: str
    site_id: str
    acquired_at: float = field(default_factory=time.time)

    @property
    def age(self) -> float:
        """Seconds since the token was issued."""
        return time.time() - self.acquired_at

    @classmethod
    def from_signin_response(cls, data: dict[str, Any]) -> SessionToken | None:
        """Parse a ``/auth/signin`` JSON body; ``None`` when it carries no token."""
        credentials = data.get("credentials") or {}
        token = credentials.get("token")
        if not token:
            return None
        site = credentials.get("site") or {}
        return cls(token=token, site_id=site.get("id", ""))


class TableauSession:
    """Owns the Tableau credentials token for one run.

    Usage::

        session = TableauSession(config.tableau, secret, transport)
        if await session.authenticate():
            resp = await session.call_with_reauth(f"views/{view_id}/data")
    """

    def __init__(
        self,
        config: TableauConfig,
        pat_secret: str | None,
        transport: RetryingTransport,
    ) -> None:
        self.config = config
        self.pat_secret = pat_secret
        self.transport = transport
        self.state = SessionState.UNAUTHENTICATED
        self._token: SessionToken | None = None
        self.signins = 0

    @property
    def available(self) -> bool:
        return self.state == SessionState.AUTHENTICATED and self._token is not None

    @property
    def has_credentials(self) -> bool:
        name = self.config.pat_name
        return bool(self.pat_secret and name and name != "null" and self.config.server)

    @property
    def _api_base(self) -> str:
        return f"https://{self.config.server}/api/{self.config.api_version}"

    # ------------------------------------------------------------------
    # Sign-in
    # ------------------------------------------------------------------

    async def authenticate(self) -> bool:
        """Sign in with the configured PAT.

        Returns False without touching the network when the PAT is missing,
        so the caller's fallback kicks in without spending a retry budget.
        """
        if not self.has_credentials:
            logger.warning("Tableau PAT not configured, will use A2A fallback")
            self._mark_unavailable()
            return False

        payload = {
            "credentials": {
                "personalAccessTokenName": self.config.pat_name,
                "personalAccessTokenSecret": self.pat_secret,
                "site": {"contentUrl": self.config.site},
            }
        }
        result = await self.transport.execute(RetryableRequest(
            "POST",
            f"{self._api_base}/auth/signin",
            json=payload,
            headers={"Accept": "application/json", "Content-Type": "application/json"},
        ))
        self.signins += 1

        if isinstance(result, RequestFailed) or not result.is_success:
            logger.warning("Tableau auth failed")
            self._mark_unavailable()
            return False

        try:
            token = SessionToken.from_signin_response(result.json())
        except ValueError:
            token = None
        if token is None:
            logger.warning("Tableau auth returned no token")
            self._mark_unavailable()
            return False

        self._token = token
        self.state = SessionState.AUTHENTICATED
        logger.info("Tableau authenticated")
        return True

    async def refresh(self) -> bool:
        """Force a new sign-in, replacing the current token.

        Failure degrades the session to unavailable; it never raises.
        """
        if self._token is not None:
            logger.info("Re-authenticating Tableau (token age %.0fs)", self._token.age)
        self.invalidate()
        return await self.authenticate()

    def invalidate(self) -> None:
        """Drop the current token."""
        self._token = None
        if self.state == SessionState.AUTHENTICATED:
            self.state = SessionState.UNAUTHENTICATED

    def _mark_unavailable(self) -> None:
        self._token = None
        self.state = SessionState.UNAVAILABLE

    def _auth_headers(self) -> dict[str, str]:
        if not self.available or self._token is None:
            raise AuthUnavailable("No Tableau session token")
        return {"X-Tableau-Auth": self._token.token, "Accept": "application/json"}

    # ------------------------------------------------------------------
    # Authenticated reads
    # ------------------------------------------------------------------

    async def call_with_reauth(
        self, endpoint: str, params: dict[str, Any] | None = None
    ) -> httpx.Response | None:
        """GET a site-scoped endpoint, re-authenticating once on HTTP 401.

        Returns the 2xx response, or None for any failure. Non-401 errors
        are not retried here; the transport has already retried what was
        transient.
        """
        try:
            resp = await self._get(endpoint, params)
        except AuthUnavailable:
            return None

        if isinstance(resp, httpx.Response) and resp.status_code == 401:
            logger.info("Tableau 401, re-authenticating...")
            self.invalidate()
            if not await self.authenticate():
                return None
            try:
                resp = await self._get(endpoint, params)
            except AuthUnavailable:
                return None

        if isinstance(resp, RequestFailed) or not resp.is_success:
            return None
        return resp

    async def _get(
        self, endpoint: str, params: dict[str, Any] | None
    ) -> httpx.Response | RequestFailed:
        headers = self._auth_headers()
        assert self._token is not None
        return await self.transport.execute(RetryableRequest(
            "GET",
            f"{self._api_base}/sites/{self._token.site_id}/{endpoint.lstrip('/')}",
            params=params,
            headers=headers,
        ))
