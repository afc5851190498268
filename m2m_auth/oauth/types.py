"""Type definitions for OAuth token endpoints."""

from pydantic import BaseModel


class TokenResponse(BaseModel):
    """OAuth token endpoint response."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int


class OAuthErrorResponse(BaseModel):
    """OAuth2 error body (RFC 6749 section 5.2)."""

    error: str
    error_description: str | None = None


class IntrospectionResponse(BaseModel):
    """Token introspection response (RFC 7662 section 2.2)."""

    active: bool
    token_type: str | None = None
    sub: str | None = None
    iss: str | None = None
    exp: int | None = None
    iat: int | None = None
    nbf: int | None = None
