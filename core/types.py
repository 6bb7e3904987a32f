"""
Type definitions for the responder engine.

Both types are created once at startup and are read-only afterwards, so
they are frozen and safe to share between concurrent dispatch units.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .constants import CaptureMode, ResponderKind


def capture_mode_for(pattern: re.Pattern) -> str:
    """Named patterns expose captures by name, all others by position."""
    return CaptureMode.NAMED if pattern.groupindex else CaptureMode.INDEXED


@dataclass(frozen=True)
class BotIdentity:
    """Name (and optional alias) the bot answers to."""
    preferred_name: str
    alias: Optional[str] = None

    def __post_init__(self) -> None:
        from .config import ConfigError

        if not isinstance(self.preferred_name, str) or not self.preferred_name.strip():
            raise ConfigError("preferred_name must be a non-empty string")
        if self.alias is not None and (not isinstance(self.alias, str) or not self.alias.strip()):
            raise ConfigError("alias must be a non-empty string or null")
        object.__setattr__(self, "preferred_name", self.preferred_name.strip())
        if self.alias is not None:
            object.__setattr__(self, "alias", self.alias.strip())


@dataclass(frozen=True)
class ResponderSpec:
    """A compiled pattern bound to the handler it triggers."""
    pattern: re.Pattern
    owner: str
    handler_id: str
    handler: Callable[[dict[str, Any]], Any] = field(compare=False, repr=False)
    kind: str = ResponderKind.HEAR
    # Derived from the pattern once, never passed in.
    capture_mode: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "capture_mode", capture_mode_for(self.pattern))

    @property
    def label(self) -> str:
        return f"{self.owner}:{self.handler_id}"
