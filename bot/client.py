"""
Discord listener - turns Discord messages into responder events.

The client only translates; filtering and dispatch belong to the Listener.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import discord

from core.constants import EventType
from responders.listener import Listener

logger = logging.getLogger("hearhear.bot")


def message_to_event(message: discord.Message) -> dict[str, Any]:
    """Build a responder event from a Discord message."""
    return {
        "type": EventType.MESSAGE,
        "text": message.content or "",
        "user": str(message.author),
        "user_id": message.author.id,
        "channel_id": message.channel.id,
        "guild_id": message.guild.id if message.guild else None,
        "message_id": message.id,
        "reply": message.channel.send,
    }


class HearBot(discord.Client):
    """Discord client that feeds every human message to a Listener."""

    def __init__(self, listener: Listener) -> None:
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(intents=intents)
        self.listener = listener
        self.ready_once = False

    async def on_ready(self) -> None:
        if not self.ready_once:
            logger.info("Bot ready as %s", self.user)
            self.ready_once = True

    async def on_message(self, message: discord.Message) -> Optional[Any]:
        """Handle incoming messages."""
        if message.author.bot:
            return None
        return self.listener.listen(message_to_event(message))

    async def close(self) -> None:
        """Wait for in-flight messages before disconnecting."""
        await self.listener.drain()
        await super().close()
