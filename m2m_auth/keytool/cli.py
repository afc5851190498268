"""Operator command-line tool for managing RSA signing key pairs.

Usage:
    m2m-keytool generate [--bits 2048]   # Create and store a new pair
    m2m-keytool list                     # Show stored key IDs
    m2m-keytool show --id KEY_ID         # Print the JWK for a stored pair
    m2m-keytool delete --id KEY_ID       # Remove both files of a pair
    m2m-keytool --dir /etc/keys list     # Use another key directory
"""

import argparse
import json
import sys

from m2m_auth.core.logging import configure_logging, get_logger
from m2m_auth.core.settings import AuthSettings
from m2m_auth.crypto.errors import KeyManagementError
from m2m_auth.crypto.key_store import KeyManager
from m2m_auth.crypto.keys import (
    MIN_RSA_KEY_SIZE,
    generate_key_pair,
    key_pair_to_jwk_entry,
)

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one sub-command per operation."""
    parser = argparse.ArgumentParser(
        prog="m2m-keytool",
        description="Manage RSA key pairs used to sign access tokens.",
    )
    keys_dir = AuthSettings().keys_dir
    parser.add_argument(
        "--dir",
        default=keys_dir,
        help=f"Directory to store keys (default: {keys_dir}, set by AUTH_KEYS_DIR)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    generate = commands.add_parser("generate", help="Generate and save a key pair")
    generate.add_argument(
        "--bits",
        type=int,
        default=MIN_RSA_KEY_SIZE,
        help=f"RSA modulus size in bits (minimum {MIN_RSA_KEY_SIZE})",
    )

    commands.add_parser("list", help="List stored key pairs")

    show = commands.add_parser("show", help="Print the public JWK of a key pair")
    show.add_argument("--id", dest="key_id", required=True, help="Key ID to show")

    delete = commands.add_parser("delete", help="Delete a key pair")
    delete.add_argument("--id", dest="key_id", required=True, help="Key ID to delete")

    return parser


def handle_generate(manager: KeyManager, bits: int) -> None:
    """Generate a key pair and write it to the key directory."""
    key_pair = generate_key_pair(bits)
    private_path, public_path = manager.save(key_pair)
    logger.info(
        "key_pair_generated",
        key_id=key_pair.key_id,
        bits=bits,
        private_key=str(private_path),
        public_key=str(public_path),
    )
    print(key_pair.key_id)


def handle_list(manager: KeyManager) -> None:
    """Print every stored key ID with its file paths."""
    key_ids = manager.list_key_ids()
    if not key_ids:
        logger.info("no_key_pairs_found", keys_dir=str(manager.keys_dir))
        return
    for key_id in key_ids:
        private_path, public_path = manager.paths_for(key_id)
        print(f"{key_id}\t{private_path}\t{public_path}")


def handle_show(manager: KeyManager, key_id: str) -> None:
    """Print the JWK of a stored key pair."""
    key_pair = manager.load(key_id)
    print(json.dumps(key_pair_to_jwk_entry(key_pair).model_dump(), indent=2))


def handle_delete(manager: KeyManager, key_id: str) -> None:
    """Delete a stored key pair."""
    manager.delete(key_id)
    print(f"deleted {key_id}")


def run(argv: list[str] | None = None) -> int:
    """Execute one command and return the process exit status."""
    args = build_parser().parse_args(argv)
    try:
        manager = KeyManager(args.dir)
        if args.command == "generate":
            handle_generate(manager, args.bits)
        elif args.command == "list":
            handle_list(manager)
        elif args.command == "show":
            handle_show(manager, args.key_id)
        elif args.command == "delete":
            handle_delete(manager, args.key_id)
    except KeyManagementError as exc:
        logger.error(
            "key_command_failed",
            command=args.command,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return 1
    return 0


def main() -> None:
    """Main entry point."""
    configure_logging("info", json_output=False)
    sys.exit(run())


if __name__ == "__main__":
    main()
