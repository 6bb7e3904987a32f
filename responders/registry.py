"""
Responder registration.

Handler modules declare their responders on a ResponderModule builder while
they are imported. The registry loads the configured modules, asks each one
for its compiled responders and keeps the combined list for dispatch.
"""
from __future__ import annotations

import importlib
import logging
from typing import Any, Callable, Iterable, Optional

from core.config import ConfigError
from core.constants import ResponderKind
from core.types import BotIdentity, ResponderSpec

from .compiler import PatternSource, compile_hear, compile_respond

logger = logging.getLogger("hearhear.registry")

HANDLER_NAMESPACE = "handlers"
USAGE_NAME_PLACEHOLDER = "{name}"

Handler = Callable[[dict[str, Any]], Any]


class RegistrationError(ValueError):
    pass


class ResponderModule:
    """
    Builder for the responders of one handler module.

    Example::

        responder = ResponderModule(__name__)

        @responder.hear(r"(hi|hello)")
        async def greet(msg):
            ...

    Declarations are collected until the first call to get_responders, which
    compiles them and freezes the builder.
    """

    def __init__(self, owner: str) -> None:
        self.owner = owner
        self._declarations: list[tuple[str, PatternSource, str, Handler]] = []
        self._usage: list[str] = []
        # One compiled tuple per identity; declarations are frozen after the first.
        self._compiled: dict[Optional[BotIdentity], tuple[ResponderSpec, ...]] = {}
        self._finalized = False

    @property
    def finalized(self) -> bool:
        return self._finalized

    def _declare(self, kind: str, pattern: PatternSource, name: Optional[str], usage: Optional[str]):
        def decorator(func: Handler) -> Handler:
            if self.finalized:
                raise RegistrationError(f"{self.owner}: responders are already finalized")
            handler_id = name or getattr(func, "__name__", None)
            if not handler_id:
                raise RegistrationError(f"{self.owner}: handler needs a name")
            if any(existing == handler_id for _, _, existing, _ in self._declarations):
                raise RegistrationError(f"{self.owner}: duplicate handler id {handler_id!r}")
            self._declarations.append((kind, pattern, handler_id, func))
            if usage:
                self.add_usage(usage)
            return func

        return decorator

    def hear(self, pattern: PatternSource, *, name: Optional[str] = None, usage: Optional[str] = None):
        """Register a handler for messages matching pattern anywhere."""
        return self._declare(ResponderKind.HEAR, pattern, name, usage)

    def respond(self, pattern: PatternSource, *, name: Optional[str] = None, usage: Optional[str] = None):
        """Register a handler for messages addressed to the bot by name or alias."""
        return self._declare(ResponderKind.RESPOND, pattern, name, usage)

    def add_usage(self, text: str) -> None:
        self._usage.append(text)

    def get_responders(self, identity: Optional[BotIdentity]) -> tuple[ResponderSpec, ...]:
        cached = self._compiled.get(identity)
        if cached is not None:
            return cached

        ordered = [d for d in self._declarations if d[0] == ResponderKind.HEAR]
        ordered += [d for d in self._declarations if d[0] == ResponderKind.RESPOND]

        specs: list[ResponderSpec] = []
        for kind, pattern, handler_id, func in ordered:
            if kind == ResponderKind.RESPOND:
                compiled = compile_respond(pattern, identity)
            else:
                compiled = compile_hear(pattern)
            specs.append(
                ResponderSpec(
                    pattern=compiled,
                    owner=self.owner,
                    handler_id=handler_id,
                    handler=func,
                    kind=kind,
                )
            )

        self._finalized = True
        self._compiled[identity] = tuple(specs)
        return self._compiled[identity]

    def usage(self, identity: Optional[BotIdentity]) -> list[str]:
        name = identity.preferred_name if identity else ""
        return [text.strip().replace(USAGE_NAME_PLACEHOLDER, name) for text in self._usage]


def _normalize_module_path(path: str) -> Optional[str]:
    """Normalize a configured module path into the handler namespace."""
    if not path:
        return None
    raw = path.strip().strip(".")
    if not raw:
        return None
    if not raw.startswith(f"{HANDLER_NAMESPACE}."):
        raw = f"{HANDLER_NAMESPACE}.{raw}"
    return raw


class ResponderRegistry:
    """
    Ordered collection of compiled responders.

    Loading happens once at startup. Any failure here (unknown module,
    malformed pattern, respond pattern without a configured name) is raised
    to the caller so the process can stop before accepting traffic.
    """

    def __init__(self, identity: Optional[BotIdentity]) -> None:
        self.identity = identity
        self._modules: list[Any] = []
        self._responders: tuple[ResponderSpec, ...] = ()
        self._keys: set[tuple[str, str, str]] = set()

    @property
    def responders(self) -> tuple[ResponderSpec, ...]:
        return self._responders

    def __len__(self) -> int:
        return len(self._responders)

    def register(self, module: Any) -> tuple[ResponderSpec, ...]:
        """Add the responders of a builder or of a module exposing one."""
        source = getattr(module, "responder", module)
        if isinstance(source, ResponderModule):
            specs = source.get_responders(self.identity)
        elif callable(getattr(source, "get_responders", None)):
            specs = tuple(source.get_responders())
        else:
            raise ConfigError(f"{module!r} does not expose any responders")

        for spec in specs:
            if not isinstance(spec, ResponderSpec):
                raise RegistrationError(f"{module!r} returned {spec!r}, expected a ResponderSpec")

        keys: list[tuple[str, str, str]] = []
        for spec in specs:
            key = (spec.owner, spec.pattern.pattern, spec.handler_id)
            if key in self._keys or key in keys:
                raise RegistrationError(f"duplicate responder {spec.label} for pattern {key[1]!r}")
            keys.append(key)

        self._keys.update(keys)
        self._modules.append(source)
        self._responders = self._responders + tuple(specs)
        logger.info(
            "Registered %d responder(s) from %s",
            len(specs),
            getattr(source, "owner", None) or getattr(source, "__name__", repr(source)),
        )
        return tuple(specs)

    def load(self, paths: Iterable[str]) -> tuple[ResponderSpec, ...]:
        for path in paths:
            module_name = _normalize_module_path(path)
            if module_name is None:
                raise ConfigError(f"Invalid responder module path: {path!r}")
            try:
                module = importlib.import_module(module_name)
            except ImportError as exc:
                raise ConfigError(f"Cannot import responder module {module_name}: {exc}") from exc
            self.register(module)
        return self._responders

    def usage(self) -> list[str]:
        lines: list[str] = []
        for source in self._modules:
            if isinstance(source, ResponderModule):
                lines.extend(source.usage(self.identity))
            elif callable(getattr(source, "usage", None)):
                lines.extend(source.usage())
        return lines
