"""RSA key pair generation, validation, PEM encoding and JWK conversion."""

import base64
from abc import ABC, abstractmethod

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.rsa import (
    RSAPrivateKey,
    RSAPublicKey,
    RSAPublicNumbers,
)

from m2m_auth.core.logging import get_logger
from m2m_auth.crypto.errors import (
    InvalidKeySizeError,
    KeyGenerationError,
    KeyLoadError,
)
from m2m_auth.crypto.types import JWKEntry

MIN_RSA_KEY_SIZE = 2048
RSA_PUBLIC_EXPONENT = 65537
KEY_ID_PREFIX_BYTES = 8
SIGNING_ALGORITHM = "RS256"

logger = get_logger(__name__)


class KeyPair(ABC):
    """Signing and verification capability over one asymmetric key pair."""

    @property
    @abstractmethod
    def key_id(self) -> str:
        """Stable identifier derived from the public key."""

    @property
    @abstractmethod
    def algorithm(self) -> str:
        """JWS algorithm tag used when signing with this pair."""

    @abstractmethod
    def signing_key(self) -> RSAPrivateKey | None:
        """Private key handed to the signing operation."""

    @abstractmethod
    def verification_key(self) -> RSAPublicKey | None:
        """Public key used to verify signatures."""

    @abstractmethod
    def public_numbers(self) -> RSAPublicNumbers:
        """Public modulus and exponent."""

    @abstractmethod
    def validate(self) -> None:
        """Raise ValueError if the pair is not structurally sound."""


class RSAKeyPair(KeyPair):
    """An immutable RSA key pair addressed by a modulus-derived key ID."""

    __slots__ = ("_key_id", "_private_key", "_public_key")

    def __init__(
        self,
        private_key: RSAPrivateKey | None,
        public_key: RSAPublicKey | None = None,
        key_id: str | None = None,
    ) -> None:
        if public_key is None and private_key is not None:
            public_key = private_key.public_key()
        self._private_key = private_key
        self._public_key = public_key
        if key_id is None and public_key is not None:
            key_id = derive_key_id(public_key.public_numbers().n)
        self._key_id = key_id or ""

    def __repr__(self) -> str:
        return f"RSAKeyPair(key_id={self._key_id!r})"

    @property
    def key_id(self) -> str:
        return self._key_id

    @property
    def algorithm(self) -> str:
        return SIGNING_ALGORITHM

    @property
    def key_size(self) -> int:
        if self._public_key is None:
            return 0
        return self._public_key.key_size

    def signing_key(self) -> RSAPrivateKey | None:
        return self._private_key

    def verification_key(self) -> RSAPublicKey | None:
        return self._public_key

    def public_numbers(self) -> RSAPublicNumbers:
        if self._public_key is None:
            raise ValueError("public key is missing")
        return self._public_key.public_numbers()

    def validate(self) -> None:
        if self._private_key is None or self._public_key is None:
            raise ValueError("private or public key is missing")
        check_private_key(self._private_key)
        own_public = self._private_key.public_key().public_numbers()
        if own_public != self._public_key.public_numbers():
            raise ValueError("public key does not match private key")
        if self._public_key.key_size < MIN_RSA_KEY_SIZE:
            raise ValueError(f"modulus shorter than {MIN_RSA_KEY_SIZE} bits")


def derive_key_id(modulus: int) -> str:
    """Hex-encode the leading bytes of the big-endian modulus."""
    raw = modulus.to_bytes((modulus.bit_length() + 7) // 8, byteorder="big")
    return raw[:KEY_ID_PREFIX_BYTES].hex()


def check_private_key(private_key: RSAPrivateKey) -> None:
    """Verify the modulus, exponent and prime relationship of a private key."""
    numbers = private_key.private_numbers()
    public = numbers.public_numbers
    p, q, d = numbers.p, numbers.q, numbers.d
    if p <= 1 or q <= 1 or p * q != public.n:
        raise ValueError("primes do not multiply to the modulus")
    for prime in (p, q):
        if (d * public.e) % (prime - 1) != 1:
            raise ValueError("private exponent is inconsistent with primes")


def generate_key_pair(bits: int = MIN_RSA_KEY_SIZE) -> RSAKeyPair:
    """Generate a new RSA key pair of at least 2048 bits."""
    if bits < MIN_RSA_KEY_SIZE:
        raise InvalidKeySizeError(
            f"invalid key size {bits}: must be at least {MIN_RSA_KEY_SIZE} bits"
        )
    try:
        private_key = rsa.generate_private_key(
            public_exponent=RSA_PUBLIC_EXPONENT,
            key_size=bits,
        )
    except (ValueError, UnsupportedAlgorithm) as exc:
        logger.error("rsa_key_generation_failed", bits=bits, error=str(exc))
        raise KeyGenerationError("failed to generate RSA key pair") from exc
    return RSAKeyPair(private_key)


def private_key_to_pem(private_key: RSAPrivateKey) -> bytes:
    """Encode a private key as unencrypted PKCS#1 PEM."""
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )


def public_key_to_pem(public_key: RSAPublicKey) -> bytes:
    """Encode a public key as PKCS#1 PEM."""
    return public_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.PKCS1,
    )


def _as_bytes(data: bytes | str) -> bytes:
    return data.encode() if isinstance(data, str) else data


def parse_private_key_pem(data: bytes | str) -> RSAKeyPair:
    """Parse a PKCS#1 or PKCS#8 PEM private key into a validated key pair.

    Shared by startup configuration and the on-disk key store so both read
    key material the same way.
    """
    try:
        loaded = serialization.load_pem_private_key(_as_bytes(data), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise KeyLoadError("failed to decode private key PEM") from exc
    if not isinstance(loaded, RSAPrivateKey):
        raise KeyLoadError("private key is not an RSA key")
    pair = RSAKeyPair(loaded)
    try:
        pair.validate()
    except ValueError as exc:
        raise KeyLoadError(f"invalid private key: {exc}") from exc
    return pair


def parse_public_key_pem(data: bytes | str) -> RSAPublicKey:
    """Parse a PKCS#1 or SubjectPublicKeyInfo PEM public key."""
    try:
        loaded = serialization.load_pem_public_key(_as_bytes(data))
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise KeyLoadError("failed to decode public key PEM") from exc
    if not isinstance(loaded, RSAPublicKey):
        raise KeyLoadError("public key is not an RSA key")
    return loaded


def _int_to_base64url(value: int) -> str:
    """Encode an integer as base64url without padding."""
    byte_length = max(1, (value.bit_length() + 7) // 8)
    raw = value.to_bytes(byte_length, byteorder="big")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def key_pair_to_jwk_entry(key_pair: KeyPair) -> JWKEntry:
    """Convert a key pair's public half to JWK format."""
    numbers = key_pair.public_numbers()
    return JWKEntry(
        kid=key_pair.key_id,
        alg=key_pair.algorithm,
        n=_int_to_base64url(numbers.n),
        e=_int_to_base64url(numbers.e),
    )
