"""Command line entry point: ``python -m aiocastbridge``."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence

from .app import connect_session, load_backend
from .bot import CastBridgeBot
from .config import BridgeConfig, load_config
from .errors import ConfigurationError

logger = logging.getLogger("aiocastbridge")

EXIT_CONFIG_ERROR = 2


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="aiocastbridge",
        description="Cast a streaming connect session into a Discord voice channel.",
    )
    parser.add_argument(
        "--config",
        "-c",
        help="JSON config file; environment variables override its values",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    return parser.parse_args(argv)


async def _run(config: BridgeConfig) -> None:
    backend = load_backend(config)
    session = await connect_session(config, backend)
    bot = CastBridgeBot(config, backend, session)
    async with bot:
        await bot.start(config.discord_token)
    if bot.startup_error is not None:
        raise bot.startup_error


def main(argv: Sequence[str] | None = None) -> int:
    """Run the bridge until interrupted, returning the process exit status."""
    args = _parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = load_config(args.config)
        asyncio.run(_run(config))
    except ConfigurationError as err:
        logger.error("Configuration error: %s", err)
        return EXIT_CONFIG_ERROR
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(main())
