"""
Responder engine - pattern compilation, registration and dispatch.

This package routes chat messages to regex-based handlers.
"""
from .compiler import PatternCompileError, compile_hear, compile_respond
from .engine import DispatchEngine, HandlerRuntimeError
from .listener import Listener, build_filters, has_text, is_message_event
from .matching import capture_mode_for, extract_captures
from .registry import RegistrationError, ResponderModule, ResponderRegistry

__all__ = [
    "DispatchEngine",
    "HandlerRuntimeError",
    "Listener",
    "PatternCompileError",
    "RegistrationError",
    "ResponderModule",
    "ResponderRegistry",
    "build_filters",
    "capture_mode_for",
    "compile_hear",
    "compile_respond",
    "extract_captures",
    "has_text",
    "is_message_event",
]
