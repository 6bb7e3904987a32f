"""Tests for event intake and per-message isolation."""

import asyncio
import logging

import pytest

from responders.engine import DispatchEngine
from responders.listener import Listener, build_filters, has_text, is_message_event
from responders.registry import ResponderRegistry


def _listener(builder, identity, **kwargs):
    registry = ResponderRegistry(identity)
    registry.register(builder)
    return Listener(registry, DispatchEngine(), **kwargs)


class FailingEngine:
    def __init__(self):
        self.calls = 0

    async def dispatch(self, responders, message):
        self.calls += 1
        if message["text"] == "explode":
            raise RuntimeError("dispatch blew up")


class TestFilters:
    def test_has_text(self):
        assert has_text({"text": "hi"})
        assert has_text({"text": ""})
        assert not has_text({"text": None})
        assert not has_text({})

    def test_is_message_event(self):
        assert is_message_event({"type": "message"})
        assert not is_message_event({"type": "reaction"})
        assert not is_message_event({})

    def test_build_filters(self):
        assert build_filters(False) == (has_text,)
        assert build_filters(True) == (has_text, is_message_event)


class TestAccepts:
    def test_default_only_needs_text(self, builder, zen):
        listener = _listener(builder, zen)
        assert listener.accepts({"text": "ping"})
        assert listener.accepts({"type": "reaction", "text": "ping"})
        assert not listener.accepts({"type": "message"})

    def test_non_mapping_rejected(self, builder, zen):
        listener = _listener(builder, zen)
        assert not listener.accepts("ping")
        assert not listener.accepts(None)

    def test_type_filter_variant(self, builder, zen):
        listener = _listener(builder, zen, filters=build_filters(True))
        assert listener.accepts({"type": "message", "text": "ping"})
        assert not listener.accepts({"type": "reaction", "text": "ping"})


class TestListen:
    @pytest.mark.asyncio
    async def test_accepted_event_is_dispatched(self, builder, zen):
        seen = []

        @builder.hear("ping")
        async def ping(msg):
            seen.append(msg["matches"])

        listener = _listener(builder, zen)
        task = listener.listen({"text": "ping"})
        assert task is not None
        await listener.drain()
        assert seen == [{0: "ping"}]
        assert listener.in_flight == 0

    @pytest.mark.asyncio
    async def test_rejected_event_invokes_nothing(self, builder, zen):
        seen = []

        @builder.hear("ping")
        async def ping(msg):
            seen.append(msg)

        listener = _listener(builder, zen, filters=build_filters(True))
        assert listener.listen({"type": "reaction", "text": "ping"}) is None
        await listener.drain()
        assert seen == []

    @pytest.mark.asyncio
    async def test_listen_does_not_wait_for_handlers(self, builder, zen):
        release = asyncio.Event()
        finished = []

        @builder.hear("slow")
        async def slow(msg):
            await release.wait()
            finished.append(True)

        listener = _listener(builder, zen)
        task = listener.listen({"text": "slow"})
        await asyncio.sleep(0)
        assert not task.done()
        assert listener.in_flight == 1

        release.set()
        await listener.drain()
        assert finished == [True]

    @pytest.mark.asyncio
    async def test_failed_message_does_not_stop_listener(self, builder, zen, caplog):
        registry = ResponderRegistry(zen)
        engine = FailingEngine()
        listener = Listener(registry, engine)

        with caplog.at_level(logging.ERROR, logger="hearhear.listener"):
            listener.listen({"text": "explode"})
            await listener.drain()

        assert "dispatch blew up" in caplog.text

        listener.listen({"text": "fine"})
        await listener.drain()
        assert engine.calls == 2

    @pytest.mark.asyncio
    async def test_messages_processed_independently(self, builder, zen):
        seen = []

        @builder.respond(r"echo (\w+)")
        async def echo(msg):
            seen.append(msg["matches"][1])

        listener = _listener(builder, zen)
        listener.listen({"text": "zen echo one"})
        listener.listen({"text": "zen: echo two"})
        listener.listen({"text": "echo three"})
        await listener.drain()
        assert sorted(seen) == ["one", "two"]
