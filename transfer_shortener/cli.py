#!/usr/bin/env python3
"""
Command-line interface for the transfer shortener token store.

Usage:
    transfer-shortener-cli init-db
    transfer-shortener-cli shorten <url>
    transfer-shortener-cli resolve <token>
    transfer-shortener-cli show <token> [--ttl-hours N]
    transfer-shortener-cli health
"""

import argparse
import asyncio
import json
import os
import sys
from datetime import timedelta
from typing import List, Optional

from .database import RedisCache, create_token_store
from .service import ShortLinkService
from .tokens import TokenMinter
from .common.logging_config import setup_logging
from .errors import ShortenerError, TokenNotFoundError


def _print_json(payload: dict, error: bool = False) -> None:
    print(json.dumps(payload, indent=2), file=sys.stderr if error else sys.stdout)


class ShortenerCLI:
    """Command-line interface over the short-link service."""

    def __init__(
        self,
        db_url: str,
        redis_url: Optional[str] = None,
        token_length: int = TokenMinter.DEFAULT_LENGTH,
        verbose: bool = False,
    ):
        self.db_url = db_url
        self.redis_url = redis_url
        self.token_length = token_length
        self.logger = setup_logging(level="DEBUG" if verbose else "WARNING")
        self.store = None
        self.service: Optional[ShortLinkService] = None

    async def initialize(self, create_tables: bool = False):
        """Open the store (and cache) and build the service."""
        self.store = create_token_store(self.db_url, create_tables=create_tables, logger=self.logger)
        await self.store.initialize()

        cache = None
        if self.redis_url:
            cache = RedisCache(redis_url=self.redis_url, logger=self.logger)
            await cache.connect()

        self.service = ShortLinkService(
            store=self.store,
            cache=cache,
            token_minter=TokenMinter(default_length=self.token_length),
            logger=self.logger,
        )

    async def cleanup(self):
        if self.service:
            await self.service.close()

    async def init_db(self) -> int:
        """Report success; the schema is created by ``initialize``."""
        healthy = await self.store.health_check()
        _print_json({"success": healthy, "database_url": self.db_url}, error=not healthy)
        return 0 if healthy else 1

    async def shorten(self, url: str) -> int:
        """Create a short link for a URL."""
        try:
            link = await self.service.create_short_link(url)
        except ShortenerError as e:
            _print_json({"success": False, "error": str(e)}, error=True)
            return 1

        _print_json({"success": True, **link.to_dict()})
        return 0

    async def resolve(self, token: str) -> int:
        """Print the URL stored under a token."""
        try:
            target_url = await self.service.resolve_token(token)
        except TokenNotFoundError:
            _print_json({"success": False, "error": f"Token '{token}' not found"}, error=True)
            return 1
        except ShortenerError as e:
            _print_json({"success": False, "error": str(e)}, error=True)
            return 1

        _print_json({"success": True, "token": token, "target_url": target_url})
        return 0

    async def show(self, token: str, ttl_hours: Optional[float] = None) -> int:
        """Print the full stored record, optionally with advisory expiry."""
        try:
            link = await self.store.find_by_token(token)
        except TokenNotFoundError:
            _print_json({"success": False, "error": f"Token '{token}' not found"}, error=True)
            return 1
        except ShortenerError as e:
            _print_json({"success": False, "error": str(e)}, error=True)
            return 1

        result = {"success": True, **link.to_dict()}
        if ttl_hours is not None:
            result["expired"] = link.is_expired(timedelta(hours=ttl_hours))
        _print_json(result)
        return 0

    async def health(self) -> int:
        """Check store and cache health."""
        health_status = await self.service.health_check()
        _print_json({"success": health_status["overall"], "health": health_status})
        return 0 if health_status["overall"] else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Transfer Shortener CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create the schema
  %(prog)s init-db

  # Shorten a URL
  %(prog)s shorten https://t.example.com/abc12/file.txt

  # Resolve a token
  %(prog)s resolve xyz1

  # Show a stored link and whether it is older than a week
  %(prog)s show xyz1 --ttl-hours 168
        """
    )

    parser.add_argument(
        "--db-url",
        default=os.getenv("DATABASE_URL", "sqlite:///data/shortener.db"),
        help="Token store URL (default: from DATABASE_URL env or sqlite:///data/shortener.db)"
    )
    parser.add_argument(
        "--redis-url",
        default=os.getenv("REDIS_URL"),
        help="Redis connection URL (optional, default: from REDIS_URL env)"
    )
    parser.add_argument(
        "--token-length",
        type=int,
        default=int(os.getenv("TOKEN_LENGTH", TokenMinter.DEFAULT_LENGTH)),
        help="Length of generated tokens"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    subparsers.add_parser("init-db", help="Create the short link table")

    shorten_parser = subparsers.add_parser("shorten", help="Shorten a URL")
    shorten_parser.add_argument("url", help="Absolute URL to shorten")

    resolve_parser = subparsers.add_parser("resolve", help="Resolve a token")
    resolve_parser.add_argument("token", help="Token to resolve")

    show_parser = subparsers.add_parser("show", help="Show a stored short link")
    show_parser.add_argument("token", help="Token to show")
    show_parser.add_argument("--ttl-hours", type=float, help="Report whether the link is older than this")

    subparsers.add_parser("health", help="Check store health")

    return parser


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    cli = ShortenerCLI(
        db_url=args.db_url,
        redis_url=args.redis_url,
        token_length=args.token_length,
        verbose=args.verbose,
    )

    try:
        try:
            await cli.initialize(create_tables=args.command == "init-db")
        except ShortenerError as e:
            _print_json({"success": False, "error": str(e)}, error=True)
            return 1

        if args.command == "init-db":
            return await cli.init_db()
        elif args.command == "shorten":
            return await cli.shorten(args.url)
        elif args.command == "resolve":
            return await cli.resolve(args.token)
        elif args.command == "show":
            return await cli.show(args.token, args.ttl_hours)
        elif args.command == "health":
            return await cli.health()
        else:
            parser.print_help()
            return 1

    finally:
        await cli.cleanup()


def run() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
