"""Operator tool for inspecting and pruning the passwordless token store.

Settings are loaded the same way the store loads them (environment plus an
optional ``.env`` file), so the tool operates on exactly the namespace the
application uses.

Example usages::

    # Validate configuration without touching Redis.
    python -m scripts.token_admin check --env-file /opt/app/.env

    # Number of token records (expired ones not yet evicted included).
    python -m scripts.token_admin count

    # Force a user to request a new login link.
    python -m scripts.token_admin invalidate --uid alice@example.com

    # Drop every token in the namespace. SCANs the whole database.
    python -m scripts.token_admin clear --yes
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Awaitable, Callable

from pydantic import ValidationError

from passwordless_redis.core.config import TokenStoreSettings
from passwordless_redis.core.logging import configure_logging
from passwordless_redis.errors import TokenStoreError
from passwordless_redis.services import RedisTokenStore

EXIT_OK = 0
EXIT_USAGE_ERROR = 1
EXIT_VALIDATION_ERROR = 2
EXIT_STORE_ERROR = 5

logger = logging.getLogger(__name__)

StoreFactory = Callable[[TokenStoreSettings], RedisTokenStore]


def _load_settings(env_file: Path | None) -> TokenStoreSettings:
    """Build settings, reading ``env_file`` when one is supplied."""
    if env_file is None:
        return TokenStoreSettings()
    if not env_file.exists():
        raise FileNotFoundError(
            f"Environment file {env_file} does not exist. "
            "Ensure the path is correct or omit --env-file."
        )
    return TokenStoreSettings(_env_file=env_file)  # type: ignore[call-arg]


async def _count(store: RedisTokenStore, args: argparse.Namespace) -> int:
    print(await store.length())
    return EXIT_OK


async def _invalidate(store: RedisTokenStore, args: argparse.Namespace) -> int:
    await store.invalidate_user(args.uid)
    print(f"Invalidated token for {args.uid}.")
    return EXIT_OK


async def _clear(store: RedisTokenStore, args: argparse.Namespace) -> int:
    if not args.yes:
        print(
            "Refusing to clear every token without --yes.",
            file=sys.stderr,
        )
        return EXIT_USAGE_ERROR
    await store.clear()
    print(f"Cleared all tokens under {store.namespace.prefix!r}.")
    return EXIT_OK


_HANDLERS: dict[str, Callable[[RedisTokenStore, argparse.Namespace], Awaitable[int]]] = {
    "count": _count,
    "invalidate": _invalidate,
    "clear": _clear,
}


async def _run(
    store: RedisTokenStore,
    args: argparse.Namespace,
) -> int:
    try:
        return await _HANDLERS[args.command](store, args)
    finally:
        await store.aclose()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Inspect and prune the passwordless token store."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common_arguments(subparser: argparse.ArgumentParser) -> None:
        subparser.add_argument(
            "--env-file",
            default=None,
            type=Path,
            help="Optional environment file to read settings from.",
        )

    check_parser = subparsers.add_parser(
        "check",
        help="Validate settings without connecting to Redis.",
    )
    add_common_arguments(check_parser)

    count_parser = subparsers.add_parser(
        "count",
        help="Print the number of stored token records.",
    )
    add_common_arguments(count_parser)

    invalidate_parser = subparsers.add_parser(
        "invalidate",
        help="Remove the token of a single user.",
    )
    add_common_arguments(invalidate_parser)
    invalidate_parser.add_argument("--uid", required=True, help="User identifier.")

    clear_parser = subparsers.add_parser(
        "clear",
        help="Remove every token in the configured namespace.",
    )
    add_common_arguments(clear_parser)
    clear_parser.add_argument(
        "--yes",
        action="store_true",
        help="Confirm that all tokens should be removed.",
    )

    return parser


def main(
    argv: list[str] | None = None,
    *,
    store_factory: StoreFactory = RedisTokenStore.from_settings,
) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        settings = _load_settings(args.env_file)
    except FileNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_USAGE_ERROR
    except ValidationError as exc:
        print(
            "Settings validation failed. Missing or invalid values detected:\n"
            f"{exc.json(indent=2)}",
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR

    configure_logging(settings.log_level, settings.log_format, stream=sys.stderr)

    if args.command == "check":
        print("Token store settings OK.")
        return EXIT_OK

    try:
        store = store_factory(settings)
        return asyncio.run(_run(store, args))
    except TokenStoreError as exc:
        logger.error("Token store command %s failed: %s", args.command, exc)
        print(f"Token store error: {exc}", file=sys.stderr)
        return EXIT_STORE_ERROR


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
