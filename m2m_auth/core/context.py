"""Immutable server state shared by every request handler."""

from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_validator

from m2m_auth.core.logging import get_logger
from m2m_auth.core.settings import DEFAULT_ISSUER, AuthSettings
from m2m_auth.crypto.errors import KeyLoadError
from m2m_auth.crypto.keys import KeyPair, parse_private_key_pem

logger = get_logger(__name__)


class ConfigurationError(Exception):
    """Startup configuration is missing or unusable."""


class ServerContext(BaseModel):
    """Signing key, credential store and issuer fixed at startup."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key_pair: KeyPair | None = None
    credentials: Mapping[str, str] = Field(default_factory=lambda: MappingProxyType({}))
    issuer: str = DEFAULT_ISSUER

    @field_validator("credentials", mode="after")
    @classmethod
    def _freeze_credentials(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(value))


def _read_signing_key(settings: AuthSettings) -> str:
    if settings.signing_key:
        return settings.signing_key
    if settings.signing_key_file:
        try:
            return Path(settings.signing_key_file).read_text()
        except OSError as exc:
            raise ConfigurationError(
                f"cannot read signing key file {settings.signing_key_file}"
            ) from exc
    raise ConfigurationError(
        "a signing key is required: set AUTH_SIGNING_KEY or AUTH_SIGNING_KEY_FILE"
    )


def build_context(settings: AuthSettings) -> ServerContext:
    """Load the signing key and credential store described by ``settings``."""
    pem = _read_signing_key(settings)
    try:
        key_pair = parse_private_key_pem(pem)
    except KeyLoadError as exc:
        raise ConfigurationError(f"failed to parse signing key: {exc}") from exc
    logger.info(
        "signing_key_loaded",
        key_id=key_pair.key_id,
        clients=len(settings.clients),
    )
    return ServerContext(
        key_pair=key_pair,
        credentials=settings.clients,
        issuer=settings.issuer,
    )
