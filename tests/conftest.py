"""Shared test fixtures for the token server."""

from collections.abc import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient

from m2m_auth.core.app import create_app
from m2m_auth.core.context import ServerContext
from m2m_auth.core.logging import configure_logging
from m2m_auth.crypto.keys import RSAKeyPair, generate_key_pair

ISSUER = "oauth2-server"
CLIENTS = {"sho": "test123", "svc-reporting": "r3p0rt!ng:secret"}


@pytest.fixture(scope="session", autouse=True)
def _logging() -> None:
    """Route structured logs through stdlib logging instead of stdout."""
    configure_logging("debug")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host settings out of the tests."""
    for name in (
        "AUTH_SIGNING_KEY",
        "JWT_SIGNATURE_KEY",
        "AUTH_SIGNING_KEY_FILE",
        "AUTH_CLIENTS",
        "AUTH_ISSUER",
        "AUTH_CORS_ORIGINS",
        "AUTH_KEYS_DIR",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(scope="session")
def key_pair() -> RSAKeyPair:
    """One RSA-2048 pair shared by the whole run; generation is slow."""
    return generate_key_pair(2048)


@pytest.fixture(scope="session")
def other_key_pair() -> RSAKeyPair:
    """A second, unrelated RSA-2048 pair."""
    return generate_key_pair(2048)


@pytest.fixture
def context(key_pair: RSAKeyPair) -> ServerContext:
    """Server context over the shared key pair and test clients."""
    return ServerContext(key_pair=key_pair, credentials=CLIENTS, issuer=ISSUER)


@pytest.fixture
async def client(context: ServerContext) -> AsyncIterator[AsyncClient]:
    """Create an httpx test client for an app built from ``context``."""
    app = create_app(context)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
