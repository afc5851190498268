"""Exceptions raised by key management and token signing."""


class KeyManagementError(Exception):
    """Base class for operator-side key lifecycle failures."""


class InvalidKeySizeError(KeyManagementError):
    """Requested RSA modulus is shorter than the allowed minimum."""


class KeyGenerationError(KeyManagementError):
    """The RSA backend failed to produce a key pair."""


class KeySaveError(KeyManagementError):
    """A key pair could not be written to the key store."""


class KeyLoadError(KeyManagementError):
    """A key pair could not be read, decoded or validated."""


class KeyNotFoundError(KeyManagementError):
    """One or both halves of a key pair are missing."""


class InvalidPathError(KeyManagementError):
    """A key directory or key ID cannot be mapped to a safe path."""


class TokenSigningError(Exception):
    """Base class for failures while issuing a token."""


class InvalidSigningKeyError(TokenSigningError):
    """The signing key is absent or structurally invalid."""


class EmptyIdentityError(TokenSigningError):
    """A token was requested for an empty subject."""
