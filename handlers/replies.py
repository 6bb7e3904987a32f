"""
Reply helpers for handlers.

Listener modules attach a ``reply`` coroutine function to each event when
their platform can answer; handlers go through reply() so they work the same
whichever listener delivered the message.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping

logger = logging.getLogger("hearhear.handlers")


async def reply(message: Mapping[str, Any], text: str) -> bool:
    """Send text back to where message came from. Returns False if it cannot."""
    send = message.get("reply")
    if send is None:
        logger.info("No reply channel for message, dropping: %s", text)
        return False
    await send(text)
    return True
