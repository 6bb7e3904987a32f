"""
Core infrastructure shared by the responder engine and listener modules.

This package contains:
- config: Configuration loading and validation
- constants: Configuration keys and vocabularies
- io_utils: File I/O helpers
- paths: Path resolution
- types: Frozen dataclasses for identity and compiled responders
- utils: General utilities
"""
from .constants import CaptureMode, ConfigKey, EventType, ListenerName, ResponderKind
from .types import BotIdentity, ResponderSpec

__all__ = [
    # Constants
    "CaptureMode",
    "ConfigKey",
    "EventType",
    "ListenerName",
    "ResponderKind",
    # Types
    "BotIdentity",
    "ResponderSpec",
]
