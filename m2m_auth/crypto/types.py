"""Type definitions for JWKS and JWT operations."""

from pydantic import BaseModel, ConfigDict


class JWKEntry(BaseModel):
    """Single JWK entry in a JWKS response."""

    kty: str = "RSA"
    use: str = "sig"
    kid: str
    alg: str = "RS256"
    n: str
    e: str


class JWKSResponse(BaseModel):
    """JSON Web Key Set response."""

    keys: list[JWKEntry]


class TokenClaims(BaseModel):
    """Registered claims embedded in an access token."""

    model_config = ConfigDict(frozen=True)

    iss: str
    sub: str
    iat: int
    nbf: int
    exp: int


class DecodedToken(BaseModel):
    """Verified JWT claims."""

    model_config = ConfigDict(extra="ignore")

    iss: str
    sub: str
    iat: int
    nbf: int
    exp: int
