"""
Dispatch engine - fans a message out to every registered responder.

Each responder gets its own unit of work. A unit matches the pattern,
extracts captures into a private copy of the message and invokes the
handler. Units run concurrently up to a worker limit, and a failing
handler never affects its siblings or the caller.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Iterable, Mapping, Optional

from core.types import ResponderSpec
from core.utils import positive_or_default

from .matching import extract_captures, find_match

logger = logging.getLogger("hearhear.engine")


class HandlerRuntimeError(RuntimeError):
    """A handler raised while processing a message."""

    def __init__(self, spec: ResponderSpec, cause: BaseException) -> None:
        super().__init__(f"Handler {spec.label} raised: {cause!r}")
        self.spec = spec
        self.cause = cause


async def invoke_handler(handler: Any, message: dict[str, Any]) -> Any:
    """
    Invoke a handler with a message.

    Coroutine functions run on the event loop; plain callables run in a worker
    thread so a blocking handler cannot stall other units.
    """
    if inspect.iscoroutinefunction(handler):
        return await handler(message)
    result = await asyncio.to_thread(handler, message)
    if inspect.isawaitable(result):
        return await result
    return result


class DispatchEngine:
    def __init__(self, max_concurrency: Optional[int] = None) -> None:
        self.max_concurrency = positive_or_default(max_concurrency)

    async def dispatch(self, responders: Iterable[ResponderSpec], message: Mapping[str, Any]) -> None:
        """
        Run every responder against message and wait until all have settled.

        Units are started in registration order; with a limit of one they
        also complete in that order.
        """
        text = message.get("text")
        slots = asyncio.Semaphore(self.max_concurrency)
        units = [
            asyncio.create_task(self._run_unit(spec, message, text, slots))
            for spec in responders
        ]
        if not units:
            return

        outcomes = await asyncio.gather(*units, return_exceptions=True)
        failures = 0
        matched = 0
        for outcome in outcomes:
            if isinstance(outcome, HandlerRuntimeError):
                failures += 1
                matched += 1
                logger.error("%s", outcome, exc_info=outcome.cause)
            elif isinstance(outcome, BaseException):
                failures += 1
                logger.error("Responder unit failed: %s", outcome, exc_info=outcome)
            elif outcome:
                matched += 1
        logger.debug(
            "Dispatched to %d responder(s): %d matched, %d failed",
            len(units),
            matched,
            failures,
        )

    async def _run_unit(
        self,
        spec: ResponderSpec,
        message: Mapping[str, Any],
        text: Any,
        slots: asyncio.Semaphore,
    ) -> bool:
        async with slots:
            match = find_match(spec.pattern, text)
            if match is None:
                return False
            local = dict(message)
            local["matches"] = extract_captures(match, spec.capture_mode)
            try:
                await invoke_handler(spec.handler, local)
            except Exception as exc:
                raise HandlerRuntimeError(spec, exc) from exc
            return True
