"""CLI entry point for nostrid.

Manages the identity held in the durable store and prints NIP-98 headers
for scripted uploads.

Examples:
    ```bash
    nostrid derive nsec1...
    nostrid save nsec1...
    nostrid whoami
    nostrid header https://example.com/upload --method PUT
    nostrid logout
    python -m nostrid --config config/nostrid.yaml --log-level DEBUG whoami
    ```
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

from nostrid.core.config import IdentityConfig
from nostrid.core.exceptions import NostridError
from nostrid.core.logger import Logger, StructuredFormatter
from nostrid.core.yaml import load_yaml
from nostrid.services.context import IdentityContext
from nostrid.utils.keys import derive_public_key


DEFAULT_CONFIG = Path("config") / "nostrid.yaml"
DEFAULT_STORE = Path("~") / ".nostrid" / "store.json"

logger = Logger("cli")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="nostrid",
        description="Nostr identity and NIP-98 auth header tool",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG,
        help=f"Config path (default: {DEFAULT_CONFIG})",
    )

    parser.add_argument(
        "--store",
        type=Path,
        help=f"Durable store file (default: storage.path from config, else {DEFAULT_STORE})",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Log level (default: WARNING)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    derive = commands.add_parser("derive", help="Print the public key of a secret key")
    derive.add_argument("nsec", help="Secret key (nsec1...)")

    save = commands.add_parser("save", help="Validate and store a secret key")
    save.add_argument("nsec", help="Secret key (nsec1...)")

    commands.add_parser("whoami", help="Print the restored identity")

    header = commands.add_parser("header", help="Print a NIP-98 Authorization header")
    header.add_argument("url", help="Absolute URL of the request")
    header.add_argument("--method", default="POST", help="HTTP method (default: POST)")

    commands.add_parser("logout", help="Clear the stored identity")

    return parser.parse_args(argv)


def setup_logging(level: str) -> None:
    """Configure the root logger with structured formatting.

    Installs a ``StructuredFormatter`` on a stderr handler so ``Logger``
    output and plain ``logging.getLogger()`` records share one format and
    never mix with command output on stdout.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter())
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level))


def load_config(config_path: Path, store_path: Path | None) -> IdentityConfig:
    """Load the config file (defaults when missing) and apply CLI overrides."""
    config_dict: dict[str, Any] = {}
    if config_path.exists():
        config_dict = load_yaml(config_path)
    else:
        logger.debug("config_not_found", path=str(config_path))

    storage = config_dict.setdefault("storage", {})
    if store_path is not None:
        storage["path"] = str(store_path)
    elif not storage.get("path"):
        storage["path"] = str(DEFAULT_STORE)
    return IdentityConfig.from_dict(config_dict)


def _print_identity(pubkey_hex: str, npub: str, nprofile: str) -> None:
    print(f"hex:      {pubkey_hex}")
    print(f"npub:     {npub}")
    print(f"nprofile: {nprofile}")


async def run_command(args: argparse.Namespace, context: IdentityContext) -> int:
    """Execute one subcommand against *context*.

    Returns:
        Exit code: 0 for success, 1 for failure.
    """
    if args.command == "save":
        result = context.auth.authenticate_with_nsec(args.nsec)
        if not result.success:
            logger.error("save_failed", error=result.error)
            return 1
        identity = context.identity
        _print_identity(identity.hex, identity.npub, identity.nprofile)
        return 0

    if args.command == "logout":
        result = context.auth.logout()
        if not result.success:
            logger.error("logout_failed", error=result.error)
            return 1
        return 0

    init = context.auth.initialize()

    if args.command == "whoami":
        if not init.has_auth:
            print("no identity")
            return 1
        identity = context.identity
        _print_identity(identity.hex, identity.npub, identity.nprofile)
        print(f"source:   {identity.source}")
        return 0

    if args.command == "header":
        print(await context.nostr_auth.build_auth_header(args.url, args.method))
        return 0

    raise ValueError(f"unknown command: {args.command}")


async def main(argv: list[str] | None = None) -> int:
    """Main entry point: parse args, build the identity context, run the command."""
    args = parse_args(argv)
    setup_logging(args.log_level)

    if args.command == "derive":
        data = derive_public_key(args.nsec.strip())
        if data.is_empty:
            logger.error("derive_failed", reason="invalid secret key")
            return 1
        _print_identity(data.hex, data.npub, data.nprofile)
        return 0

    try:
        config = load_config(args.config, args.store)
        context = IdentityContext(config)
        context.wire()
        return await run_command(args, context)
    except NostridError as e:
        logger.error(f"{args.command}_failed", error=str(e), error_type=e.error_type)
        return 1
    except KeyboardInterrupt:
        logger.info("interrupted")
        return 130


def cli() -> None:
    """Synchronous entry point for console_scripts."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
