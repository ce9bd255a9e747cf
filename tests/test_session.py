"""Tests for the Tableau session manager and revenue view reader."""

from __future__ import annotations

import json

import httpx
import pytest

from execbrief.auth.session import SessionState, SessionToken, TableauSession
from execbrief.config import TableauConfig
from execbrief.connectors.tableau_connector import TableauConnector
from execbrief.connectors.transport import RetryingTransport
from execbrief.models.account import Account

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def tableau_config() -> TableauConfig:
    return TableauConfig(
        server="https://tableau.example.com",
        site="finance",
        pat_name="exec-brief",
        revenue_view_id="view-1",
    )


class FakeTableau:
    """Minimal Tableau REST server: sign-in plus one view."""

    def __init__(self, *, unauthorized_reads: int = 0, signin_status: int = 200) -> None:
        self.unauthorized_reads = unauthorized_reads
        self.signin_status = signin_status
        self.signins = 0
        self.reads: list[httpx.Request] = []
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/auth/signin"):
            self.signins += 1
            if self.signin_status != 200:
                return httpx.Response(self.signin_status)
            return httpx.Response(200, json={
                "credentials": {"token": f"tok-{self.signins}", "site": {"id": "site-1"}}
            })

        self.reads.append(request)
        if self.unauthorized_reads > 0:
            self.unauthorized_reads -= 1
            return httpx.Response(401)
        return httpx.Response(200, text="Month,Revenue\n2025-01,1000\n")


def make_session(config: TableauConfig, server: FakeTableau, secret: str | None = "s3cret") -> TableauSession:
    async def no_sleep(seconds: float) -> None:
        return None

    transport = RetryingTransport(
        sleep=no_sleep,
        client=httpx.AsyncClient(transport=httpx.MockTransport(server)),
    )
    return TableauSession(config, secret, transport)


# ---------------------------------------------------------------------------
# SessionToken
# ---------------------------------------------------------------------------


class TestSessionToken:
    def test_from_signin_response(self) -> None:
        token = SessionToken.from_signin_response(
            {"credentials": {"token": "abc", "site": {"id": "site-9"}}}
        )
        assert token is not None
        assert token.token == "abc"
        assert token.site_id == "site-9"
        assert token.age >= 0

    def test_missing_token(self) -> None:
        assert SessionToken.from_signin_response({"credentials": {}}) is None
        assert SessionToken.from_signin_response({}) is None


# ---------------------------------------------------------------------------
# TableauSession
# ---------------------------------------------------------------------------


class TestTableauSession:
    def test_server_scheme_stripped(self, tableau_config: TableauConfig) -> None:
        assert tableau_config.server == "tableau.example.com"

    @pytest.mark.asyncio
    async def test_authenticate(self, tableau_config: TableauConfig) -> None:
        server = FakeTableau()
        session = make_session(tableau_config, server)

        assert await session.authenticate() is True
        assert session.state == SessionState.AUTHENTICATED
        assert session.available

        body = json.loads(server.requests[0].content)
        assert body["credentials"]["personalAccessTokenName"] == "exec-brief"
        assert body["credentials"]["personalAccessTokenSecret"] == "s3cret"
        assert body["credentials"]["site"]["contentUrl"] == "finance"
        assert str(server.requests[0].url) == "https://tableau.example.com/api/3.24/auth/signin"

    @pytest.mark.asyncio
    async def test_missing_secret_fails_fast(self, tableau_config: TableauConfig) -> None:
        server = FakeTableau()
        session = make_session(tableau_config, server, secret=None)

        assert await session.authenticate() is False
        assert session.state == SessionState.UNAVAILABLE
        assert server.requests == []
        assert session.signins == 0

    @pytest.mark.asyncio
    async def test_null_pat_name_fails_fast(self) -> None:
        config = TableauConfig(server="tableau.example.com", pat_name="null")
        server = FakeTableau()
        session = make_session(config, server)

        assert await session.authenticate() is False
        assert server.requests == []

    @pytest.mark.asyncio
    async def test_signin_rejected(self, tableau_config: TableauConfig) -> None:
        server = FakeTableau(signin_status=403)
        session = make_session(tableau_config, server)

        assert await session.authenticate() is False
        assert session.state == SessionState.UNAVAILABLE
        assert not session.available

    @pytest.mark.asyncio
    async def test_signin_without_token_is_failure(self, tableau_config: TableauConfig) -> None:
        session = make_session(
            tableau_config,
            lambda request: httpx.Response(200, json={"credentials": {"site": {"id": "x"}}}),  # type: ignore[arg-type]
        )
        assert await session.authenticate() is False
        assert session.state == SessionState.UNAVAILABLE

    @pytest.mark.asyncio
    async def test_read_uses_token_and_site(self, tableau_config: TableauConfig) -> None:
        server = FakeTableau()
        session = make_session(tableau_config, server)
        await session.authenticate()

        resp = await session.call_with_reauth("views/view-1/data")

        assert resp is not None
        read = server.reads[0]
        assert read.url.path == "/api/3.24/sites/site-1/views/view-1/data"
        assert read.headers["X-Tableau-Auth"] == "tok-1"

    @pytest.mark.asyncio
    async def test_401_triggers_one_reauth_and_one_retry(self, tableau_config: TableauConfig) -> None:
        server = FakeTableau(unauthorized_reads=1)
        session = make_session(tableau_config, server)
        await session.authenticate()

        resp = await session.call_with_reauth("views/view-1/data")

        assert resp is not None
        assert server.signins == 2
        assert len(server.reads) == 2
        assert server.reads[1].headers["X-Tableau-Auth"] == "tok-2"

    @pytest.mark.asyncio
    async def test_repeated_401_gives_up(self, tableau_config: TableauConfig) -> None:
        server = FakeTableau(unauthorized_reads=5)
        session = make_session(tableau_config, server)
        await session.authenticate()

        resp = await session.call_with_reauth("views/view-1/data")

        assert resp is None
        assert server.signins == 2
        assert len(server.reads) == 2

    @pytest.mark.asyncio
    async def test_read_without_session_returns_none(self, tableau_config: TableauConfig) -> None:
        server = FakeTableau()
        session = make_session(tableau_config, server)

        assert await session.call_with_reauth("views/view-1/data") is None
        assert server.requests == []

    @pytest.mark.asyncio
    async def test_refresh_replaces_token(self, tableau_config: TableauConfig) -> None:
        server = FakeTableau()
        session = make_session(tableau_config, server)
        await session.authenticate()

        assert await session.refresh() is True
        assert server.signins == 2
        await session.call_with_reauth("views/view-1/data")
        assert server.reads[0].headers["X-Tableau-Auth"] == "tok-2"

    @pytest.mark.asyncio
    async def test_failed_refresh_degrades(self, tableau_config: TableauConfig) -> None:
        server = FakeTableau()
        session = make_session(tableau_config, server)
        await session.authenticate()
        server.signin_status = 500

        assert await session.refresh() is False
        assert session.state == SessionState.UNAVAILABLE

    def test_invalidate(self, tableau_config: TableauConfig) -> None:
        session = make_session(tableau_config, FakeTableau())
        session.state = SessionState.AUTHENTICATED
        session.invalidate()
        assert session.state == SessionState.UNAUTHENTICATED
        assert not session.available


# ---------------------------------------------------------------------------
# TableauConnector
# ---------------------------------------------------------------------------


class TestTableauConnector:
    @pytest.mark.asyncio
    async def test_fetch_revenue_filters_by_bi_name(self, tableau_config: TableauConfig) -> None:
        server = FakeTableau()
        session = make_session(tableau_config, server)
        await session.authenticate()
        connector = TableauConnector(session, tableau_config.revenue_view_id)

        account = Account(name="Acme Corp", org_id="42", tableau_name="ACME Inc")
        data = await connector.fetch_revenue(account)

        assert data is not None and data.startswith("Month,Revenue")
        assert server.reads[0].url.params["vf_Account Name"] == "ACME Inc"

    @pytest.mark.asyncio
    async def test_unavailable_session_skips(self, tableau_config: TableauConfig) -> None:
        server = FakeTableau()
        session = make_session(tableau_config, server, secret=None)
        await session.authenticate()
        connector = TableauConnector(session, tableau_config.revenue_view_id)

        assert await connector.fetch_revenue(Account(name="Acme", org_id="1")) is None
        assert server.requests == []

    @pytest.mark.asyncio
    async def test_blank_view_is_none(self, tableau_config: TableauConfig) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/auth/signin"):
                return httpx.Response(200, json={"credentials": {"token": "t", "site": {"id": "s"}}})
            return httpx.Response(200, text="   \n")

        session = make_session(tableau_config, handler)  # type: ignore[arg-type]
        await session.authenticate()
        connector = TableauConnector(session, tableau_config.revenue_view_id)

        assert await connector.fetch_revenue(Account(name="Acme", org_id="1")) is None

    def test_validate_credentials(self, tableau_config: TableauConfig) -> None:
        session = make_session(tableau_config, FakeTableau())
        assert TableauConnector(session, "view-1").validate_credentials() is True
        assert TableauConnector(session, None).validate_credentials() is False
        assert TableauConnector(session, "view-1").health_check() == {
            "connector": "tableau",
            "configured": True,
        }
