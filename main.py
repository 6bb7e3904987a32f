"""
Main entry point for the responder bot.

Loads configuration, compiles every responder and starts the configured
listeners. Any configuration or pattern error stops the process before a
single event is accepted.
"""
from __future__ import annotations

import asyncio
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)

from core.config import BotConfig, ConfigError, load_config
from core.constants import ListenerName
from responders import (
    DispatchEngine,
    Listener,
    PatternCompileError,
    RegistrationError,
    ResponderRegistry,
    build_filters,
)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("hearhear")

# Suppress verbose third-party library logs unless LOG_LEVEL is DEBUG
if LOG_LEVEL.upper() != "DEBUG":
    logging.getLogger("discord").setLevel(logging.WARNING)
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)


def build_listener(config: BotConfig) -> Listener:
    """Compile all configured responders and wire them to a Listener."""
    registry = ResponderRegistry(config.identity)
    registry.load(config.responders)
    engine = DispatchEngine(config.max_concurrency)
    logger.info(
        "Loaded %d responder(s), dispatch concurrency %d",
        len(registry),
        engine.max_concurrency,
    )
    return Listener(registry, engine, build_filters(config.require_message_type))


async def main() -> int:
    try:
        config = await load_config()
        listener = build_listener(config)
    except (ConfigError, PatternCompileError, RegistrationError) as e:
        logger.error("Startup failed: %s", e)
        return 1

    if not config.listeners:
        logger.error("No listeners configured; nothing to do.")
        return 1

    web_server = None
    bot = None
    try:
        if ListenerName.WEB in config.listeners:
            from web import run_web_server

            web_server = await run_web_server(listener, config.web_host, config.web_port)

        if ListenerName.DISCORD in config.listeners:
            if not config.discord_token:
                logger.error("Missing bot token. Set DISCORD_BOT_TOKEN in .env or environment.")
                return 1
            from bot import HearBot

            bot = HearBot(listener)
            await bot.start(config.discord_token)
        else:
            await asyncio.Event().wait()
    finally:
        if bot is not None and not bot.is_closed():
            await bot.close()
        if web_server is not None:
            await web_server.stop()
        await listener.drain()
    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        pass
