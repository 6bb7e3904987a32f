"""
Pattern compilation for hear and respond responders.

Hear patterns are used as written. Respond patterns are rewritten so they
only match when the message opens with the bot's name or alias.
"""
from __future__ import annotations

import re
from typing import Optional, Union

from core.config import ConfigError
from core.types import BotIdentity

PatternSource = Union[str, re.Pattern]

# "(?<name>" as written in PCRE-flavoured patterns; lookbehinds are "(?<=" / "(?<!"
_PCRE_NAMED_GROUP_RE = re.compile(r"(?<!\\)((?:\\\\)*)\(\?<(?=[A-Za-z_])")
_LEADING_FLAGS_RE = re.compile(r"^(?:\(\?[aiLmsux]+\))+")


class PatternCompileError(ValueError):
    pass


def _normalize_source(source: str) -> str:
    return _PCRE_NAMED_GROUP_RE.sub(r"\1(?P<", source)


def _split_source(pattern: PatternSource) -> tuple[str, int]:
    if isinstance(pattern, re.Pattern):
        if not isinstance(pattern.pattern, str):
            raise PatternCompileError("bytes patterns are not supported")
        return pattern.pattern, pattern.flags
    if isinstance(pattern, str):
        return pattern, 0
    raise PatternCompileError(f"pattern must be a string or compiled regex, got {type(pattern).__name__}")


def _compile(source: str, flags: int) -> re.Pattern:
    try:
        return re.compile(source, flags)
    except re.error as exc:
        raise PatternCompileError(f"invalid pattern {source!r}: {exc}") from exc


def compile_hear(pattern: PatternSource) -> re.Pattern:
    """A hear pattern matches anywhere in the text, unmodified."""
    source, flags = _split_source(pattern)
    normalized = _normalize_source(source)
    if isinstance(pattern, re.Pattern) and normalized == source:
        return pattern
    return _compile(normalized, flags)


def mention_prefix(identity: BotIdentity) -> str:
    """
    Build the mention prefix for an identity.

    With an alias the longer of the two names is tried first, so a name that
    is a prefix of the other can never leave part of it unconsumed.
    """
    name = re.escape(identity.preferred_name)
    alias: Optional[str] = identity.alias
    if not alias:
        return rf"\A\s*@?{name}[:,]?\s+"
    alias = re.escape(alias)
    if len(identity.preferred_name) >= len(identity.alias):
        first, second = name, alias
    else:
        first, second = alias, name
    return rf"\A\s*@?(?:{first}[:,]?|{second}[:,]?)\s+"


def compile_respond(pattern: PatternSource, identity: Optional[BotIdentity]) -> re.Pattern:
    """Rewrite a pattern so it only matches text addressed to the bot."""
    if identity is None:
        raise ConfigError("preferred_name must be configured to compile respond patterns")
    source, flags = _split_source(pattern)
    source = _normalize_source(source)
    # Validate the pattern on its own first so errors point at the user's source.
    inner = _compile(source, flags)

    leading = _LEADING_FLAGS_RE.match(source)
    inline_flags = ""
    if leading:
        inline_flags = leading.group(0)
        source = source[leading.end():]
    # A trailing verbose-mode comment would otherwise swallow the closing paren.
    closing = "\n)" if inner.flags & re.VERBOSE else ")"
    return _compile(f"{inline_flags}{mention_prefix(identity)}(?:{source}{closing}", flags)
