"""
Basic responders.

Small, dependency-free handlers that double as examples of the builder API.
"""
from __future__ import annotations

from responders.registry import ResponderModule

from .replies import reply

responder = ResponderModule(__name__)

responder.add_usage("ping - reply with pong")


@responder.hear(r"^ping$", name="ping")
async def ping(msg):
    await reply(msg, "pong")


@responder.hear(r"(?i)i like (?<subject>\w+)", usage="i like <thing> - agree with you")
async def likes(msg):
    await reply(msg, f"I like {msg['matches']['subject']} too!")


@responder.respond(r"status$", usage="{name}: status - report that the bot is alive")
async def status(msg):
    await reply(msg, "All systems go.")


@responder.respond(r"echo (.+)$", usage="{name}: echo <text> - repeat text back")
async def echo(msg):
    await reply(msg, msg["matches"][1])
