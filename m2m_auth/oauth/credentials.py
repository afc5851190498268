"""HTTP Basic client authentication for the token endpoint."""

import base64
import binascii
import secrets
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict

from m2m_auth.core.logging import get_logger

BASIC_SCHEME = "Basic"

logger = get_logger(__name__)


class ClientCredentials(BaseModel):
    """A client id and secret that matched the credential store."""

    model_config = ConfigDict(frozen=True)

    client_id: str
    secret: str

    def __repr__(self) -> str:
        return f"ClientCredentials(client_id={self.client_id!r})"

    def __str__(self) -> str:
        return f"client_id={self.client_id!r}"


class CredentialError(Exception):
    """Client authentication failed."""

    error = "invalid_client"
    description = "Authentication failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.description)


class MissingHeaderError(CredentialError):
    description = "Authorization header required"


class MalformedHeaderError(CredentialError):
    description = "Invalid authorization header format"


class InvalidEncodingError(CredentialError):
    description = "Invalid credentials encoding"


class MalformedCredentialsError(CredentialError):
    description = "Invalid credentials format"


class InvalidCredentialsError(CredentialError):
    description = "Invalid client id or secret"


def _decode_payload(encoded: str) -> str:
    try:
        return base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, ValueError) as exc:
        raise InvalidEncodingError() from exc


def validate_basic_auth(
    header: str | None, credentials: Mapping[str, str]
) -> ClientCredentials:
    """Parse a Basic ``Authorization`` header and check it against the store."""
    if not header:
        raise MissingHeaderError()

    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != BASIC_SCHEME:
        raise MalformedHeaderError()

    client_id, sep, secret = _decode_payload(parts[1]).partition(":")
    if not sep:
        raise MalformedCredentialsError()

    expected = credentials.get(client_id)
    # Unknown clients still go through one comparison.
    matched = secrets.compare_digest(
        (expected if expected is not None else secret + "\0").encode("utf-8"),
        secret.encode("utf-8"),
    )
    if expected is None or not matched:
        logger.warning("client_authentication_failed", client_id=client_id)
        raise InvalidCredentialsError()

    return ClientCredentials(client_id=client_id, secret=secret)
