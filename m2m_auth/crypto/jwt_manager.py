"""JWT creation and verification with the RSA signature family."""

from datetime import UTC, datetime

import jwt
from jwt.types import Options

from m2m_auth.core.logging import get_logger
from m2m_auth.crypto.errors import EmptyIdentityError, InvalidSigningKeyError
from m2m_auth.crypto.keys import KeyPair
from m2m_auth.crypto.types import DecodedToken, TokenClaims

ACCESS_TOKEN_TTL = 3600
DEFAULT_ISSUER = "oauth2-server"
ALLOWED_ALGORITHMS = ["RS256", "RS384", "RS512"]
REQUIRED_CLAIMS = ["iss", "sub", "iat", "nbf", "exp"]

logger = get_logger(__name__)


def build_claims(
    subject: str,
    issuer: str = DEFAULT_ISSUER,
    *,
    now: datetime | None = None,
    ttl_seconds: int = ACCESS_TOKEN_TTL,
) -> TokenClaims:
    """Build the registered claims for a token issued at ``now``."""
    if not subject:
        raise EmptyIdentityError("subject cannot be empty")
    issued = int((now or datetime.now(UTC)).timestamp())
    return TokenClaims(
        iss=issuer,
        sub=subject,
        iat=issued,
        nbf=issued,
        exp=issued + ttl_seconds,
    )


class JWTManager:
    """Signs and verifies compact JWS tokens for one key pair."""

    def __init__(self, key_pair: KeyPair | None, issuer: str = DEFAULT_ISSUER) -> None:
        self._key_pair = key_pair
        self._issuer = issuer

    @property
    def issuer(self) -> str:
        return self._issuer

    def create_access_token(self, subject: str) -> str:
        """Create a signed access token for ``subject``."""
        if self._key_pair is None or self._key_pair.signing_key() is None:
            logger.error("signing_key_missing")
            raise InvalidSigningKeyError("private key cannot be None")
        try:
            self._key_pair.validate()
        except ValueError as exc:
            logger.error("signing_key_invalid", error=str(exc))
            raise InvalidSigningKeyError(f"invalid private key: {exc}") from exc

        claims = build_claims(subject, self._issuer)
        return jwt.encode(
            claims.model_dump(),
            self._key_pair.signing_key(),
            algorithm=self._key_pair.algorithm,
            headers={"kid": self._key_pair.key_id},
        )

    def verify_token(self, token: str) -> DecodedToken:
        """Verify the signature and temporal claims of ``token``.

        Only RSA signature algorithms are accepted; a token declaring any
        other algorithm is rejected before a key is consulted.
        """
        if self._key_pair is None or self._key_pair.verification_key() is None:
            raise jwt.InvalidKeyError("no verification key configured")
        header = jwt.get_unverified_header(token)
        if header.get("alg") not in ALLOWED_ALGORITHMS:
            raise jwt.InvalidAlgorithmError(
                f"algorithm {header.get('alg')!r} is not allowed"
            )
        opts: Options = {
            "require": REQUIRED_CLAIMS,
            "verify_signature": True,
            "verify_exp": True,
            "verify_nbf": True,
            "verify_iat": True,
            "verify_aud": False,
        }
        raw = jwt.decode(
            token,
            self._key_pair.verification_key(),
            algorithms=ALLOWED_ALGORITHMS,
            options=opts,
            leeway=0,
        )
        return DecodedToken.model_validate(raw)
