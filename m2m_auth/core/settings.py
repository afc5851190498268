"""Application settings loaded from environment variables."""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from m2m_auth.core.userpool import default_clients
from m2m_auth.crypto.jwt_manager import DEFAULT_ISSUER

DEFAULT_KEYS_DIR = "keys"


class AuthSettings(BaseSettings):
    """Token server settings."""

    model_config = SettingsConfigDict(env_prefix="AUTH_", populate_by_name=True)

    issuer: str = DEFAULT_ISSUER
    signing_key: str = Field(
        default="",
        validation_alias=AliasChoices("AUTH_SIGNING_KEY", "JWT_SIGNATURE_KEY"),
    )
    signing_key_file: str = ""
    clients: dict[str, str] = Field(default_factory=default_clients)
    keys_dir: str = DEFAULT_KEYS_DIR
    log_level: str = "info"
    log_json: bool = True
    cors_origins: str = ""

    def get_cors_origin_list(self) -> list[str]:
        """Parse comma-separated CORS origins."""
        if not self.cors_origins:
            return []
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
