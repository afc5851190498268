"""File-backed storage for RSA key pairs.

Each pair lives in two PEM files under the key directory:

- ``<key_id>.private.pem`` -- PKCS#1 private key, mode 0600
- ``<key_id>.public.pem`` -- PKCS#1 public key, mode 0644

Only the operator tool uses this module; the server receives its key as PEM
text through configuration.
"""

import os
from pathlib import Path

from m2m_auth.core.logging import get_logger
from m2m_auth.crypto.errors import (
    InvalidPathError,
    KeyLoadError,
    KeyManagementError,
    KeyNotFoundError,
    KeySaveError,
)
from m2m_auth.crypto.keys import (
    RSAKeyPair,
    parse_private_key_pem,
    parse_public_key_pem,
    private_key_to_pem,
    public_key_to_pem,
)

PRIVATE_SUFFIX = ".private.pem"
PUBLIC_SUFFIX = ".public.pem"
PRIVATE_KEY_MODE = 0o600
PUBLIC_KEY_MODE = 0o644
KEYS_DIR_MODE = 0o700

logger = get_logger(__name__)


def _write_file(path: Path, data: bytes, mode: int) -> None:
    """Write ``data`` to ``path`` so that it is never readable beyond ``mode``."""
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    with os.fdopen(fd, "wb") as handle:
        os.fchmod(handle.fileno(), mode)
        handle.write(data)


class KeyManager:
    """Generates paths for, saves, loads, lists and deletes key pairs."""

    def __init__(self, keys_dir: str | Path) -> None:
        if not str(keys_dir):
            raise InvalidPathError("keys directory cannot be empty")
        self._keys_dir = Path(keys_dir)
        try:
            self._keys_dir.mkdir(mode=KEYS_DIR_MODE, parents=True, exist_ok=True)
        except OSError as exc:
            raise KeySaveError(f"failed to create keys directory: {exc}") from exc

    @property
    def keys_dir(self) -> Path:
        return self._keys_dir

    def paths_for(self, key_id: str) -> tuple[Path, Path]:
        """Return the (private, public) file paths for ``key_id``."""
        if not key_id:
            raise InvalidPathError("key ID cannot be empty")
        if key_id.startswith(".") or "/" in key_id or os.sep in key_id:
            raise InvalidPathError(f"key ID {key_id!r} is not a plain file name")
        return (
            self._keys_dir / f"{key_id}{PRIVATE_SUFFIX}",
            self._keys_dir / f"{key_id}{PUBLIC_SUFFIX}",
        )

    def save(self, key_pair: RSAKeyPair | None) -> tuple[Path, Path]:
        """Persist both halves of ``key_pair``.

        The private file is written first. If the public file cannot be
        written the private file is removed again so a half pair is never
        left behind.
        """
        if key_pair is None:
            raise KeySaveError("key pair cannot be None")
        try:
            key_pair.validate()
        except ValueError as exc:
            raise KeySaveError(f"invalid key pair: {exc}") from exc

        private_key = key_pair.signing_key()
        public_key = key_pair.verification_key()
        assert private_key is not None and public_key is not None
        private_path, public_path = self.paths_for(key_pair.key_id)

        try:
            _write_file(private_path, private_key_to_pem(private_key), PRIVATE_KEY_MODE)
        except OSError as exc:
            logger.error(
                "private_key_save_failed", key_id=key_pair.key_id, error=str(exc)
            )
            raise KeySaveError("failed to save private key") from exc

        try:
            _write_file(public_path, public_key_to_pem(public_key), PUBLIC_KEY_MODE)
        except OSError as exc:
            logger.error(
                "public_key_save_failed", key_id=key_pair.key_id, error=str(exc)
            )
            try:
                private_path.unlink(missing_ok=True)
            except OSError as cleanup_exc:
                logger.error(
                    "private_key_rollback_failed",
                    key_id=key_pair.key_id,
                    error=str(cleanup_exc),
                )
            raise KeySaveError("failed to save public key") from exc

        logger.info("key_pair_saved", key_id=key_pair.key_id)
        return private_path, public_path

    def load(self, key_id: str) -> RSAKeyPair:
        """Read a stored key pair back and check both halves agree."""
        private_path, public_path = self.paths_for(key_id)
        try:
            private_pem = private_path.read_bytes()
            public_pem = public_path.read_bytes()
        except OSError as exc:
            logger.error("key_pair_read_failed", key_id=key_id, error=str(exc))
            raise KeyLoadError(f"failed to read key pair {key_id}") from exc

        private_pair = parse_private_key_pem(private_pem)
        public_key = parse_public_key_pem(public_pem)
        key_pair = RSAKeyPair(private_pair.signing_key(), public_key, key_id=key_id)
        try:
            key_pair.validate()
        except ValueError as exc:
            logger.error("key_pair_invalid", key_id=key_id, error=str(exc))
            raise KeyLoadError(f"invalid key pair {key_id}: {exc}") from exc
        return key_pair

    def list_key_ids(self) -> list[str]:
        """Return the sorted, distinct key IDs present in the key directory."""
        if not self._keys_dir.is_dir():
            return []
        key_ids: set[str] = set()
        for entry in self._keys_dir.iterdir():
            if not entry.is_file():
                continue
            for suffix in (PRIVATE_SUFFIX, PUBLIC_SUFFIX):
                if entry.name.endswith(suffix):
                    key_id = entry.name[: -len(suffix)]
                    if key_id and "." not in key_id:
                        key_ids.add(key_id)
        return sorted(key_ids)

    def delete(self, key_id: str) -> None:
        """Remove both files of a key pair.

        A failure on the second removal is reported but the first file is
        not restored.
        """
        private_path, public_path = self.paths_for(key_id)
        if not private_path.is_file():
            raise KeyNotFoundError(f"private key for {key_id} not found")
        if not public_path.is_file():
            raise KeyNotFoundError(f"public key for {key_id} not found")

        try:
            private_path.unlink()
        except OSError as exc:
            logger.error("private_key_delete_failed", key_id=key_id, error=str(exc))
            raise KeyManagementError("failed to delete private key") from exc
        try:
            public_path.unlink()
        except OSError as exc:
            logger.error("public_key_delete_failed", key_id=key_id, error=str(exc))
            raise KeyManagementError("failed to delete public key") from exc

        logger.info("key_pair_deleted", key_id=key_id)
