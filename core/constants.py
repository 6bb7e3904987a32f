"""
Constant vocabularies shared across the responder engine.

Using constants instead of string literals provides:
- Typo protection (caught at import time)
- Single source of truth for key names
"""
from __future__ import annotations


class ConfigKey:
    """All keys accepted in the bot configuration file."""

    # Identity
    PREFERRED_NAME = "preferred_name"
    ALIAS = "alias"

    # Wiring
    RESPONDERS = "responders"
    LISTENERS = "listeners"

    # Dispatch
    MAX_CONCURRENCY = "max_concurrency"
    REQUIRE_MESSAGE_TYPE = "require_message_type"

    # Listener modules
    WEB_HOST = "web_host"
    WEB_PORT = "web_port"
    DISCORD_TOKEN = "discord_token"


class CaptureMode:
    """How captures of a compiled pattern are exposed to handlers."""
    NAMED = "named"
    INDEXED = "indexed"


class ResponderKind:
    """Hear responders match anywhere, respond responders need the mention prefix."""
    HEAR = "hear"
    RESPOND = "respond"


class EventType:
    """Inbound event discriminators."""
    MESSAGE = "message"


class ListenerName:
    """Listener modules that can be enabled in configuration."""
    DISCORD = "discord"
    WEB = "web"

    ALL = (DISCORD, WEB)
