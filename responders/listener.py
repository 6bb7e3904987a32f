"""
Listener - intake for inbound events.

Accepted events are processed in their own task so the ingestion path never
waits for handlers. Filters are plain predicates; the default only requires
a usable text field, the message-type check is an optional extra stage.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any, Callable, Iterable, Optional

from core.constants import EventType

from .engine import DispatchEngine
from .registry import ResponderRegistry

logger = logging.getLogger("hearhear.listener")

EventFilter = Callable[[Mapping[str, Any]], bool]


def has_text(event: Mapping[str, Any]) -> bool:
    return isinstance(event.get("text"), str)


def is_message_event(event: Mapping[str, Any]) -> bool:
    return event.get("type") == EventType.MESSAGE


DEFAULT_FILTERS: tuple[EventFilter, ...] = (has_text,)


def build_filters(require_message_type: bool) -> tuple[EventFilter, ...]:
    if require_message_type:
        return DEFAULT_FILTERS + (is_message_event,)
    return DEFAULT_FILTERS


class Listener:
    def __init__(
        self,
        registry: ResponderRegistry,
        engine: DispatchEngine,
        filters: Optional[Iterable[EventFilter]] = None,
    ) -> None:
        self.registry = registry
        self.engine = engine
        self.filters = tuple(filters) if filters is not None else DEFAULT_FILTERS
        self._tasks: set[asyncio.Task] = set()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def accepts(self, event: Any) -> bool:
        if not isinstance(event, Mapping):
            return False
        return all(check(event) for check in self.filters)

    def listen(self, event: Any) -> Optional[asyncio.Task]:
        """
        Hand an event to a new processing task.

        Returns the task, or None when the event was filtered out. Must be
        called from within a running event loop.
        """
        if not self.accepts(event):
            logger.debug("Ignoring event without usable text: type=%s", _event_type(event))
            return None
        task = asyncio.create_task(self.process(event))
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    async def process(self, event: Mapping[str, Any]) -> None:
        await self.engine.dispatch(self.registry.responders, event)

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Message processing failed: %s", exc, exc_info=exc)

    async def drain(self) -> None:
        """Wait for every message currently being processed."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


def _event_type(event: Any) -> Optional[str]:
    if isinstance(event, Mapping):
        return event.get("type")
    return type(event).__name__
