"""JSON Web Key Set rendering."""

from m2m_auth.crypto.keys import KeyPair, key_pair_to_jwk_entry
from m2m_auth.crypto.types import JWKSResponse

READ_METHODS = frozenset({"GET", "HEAD"})


class KeySetError(Exception):
    """The key set cannot be rendered for this request."""


class KeySetUnavailableError(KeySetError):
    """No public key is configured."""


class MethodNotAllowedError(KeySetError):
    """The key set is only served for read requests."""


def build_jwks(key_pair: KeyPair | None, method: str = "GET") -> JWKSResponse:
    """Render the configured public key as a one-entry key set."""
    if method.upper() not in READ_METHODS:
        raise MethodNotAllowedError(f"method {method} not allowed")
    if key_pair is None or key_pair.verification_key() is None:
        raise KeySetUnavailableError("no signing key configured")
    return JWKSResponse(keys=[key_pair_to_jwk_entry(key_pair)])
