"""
Capture extraction for matched responders.

Matching and extraction are kept separate: the engine runs the pattern
once and hands the resulting match object over, so the regex is never
evaluated twice for the same message.
"""
from __future__ import annotations

import re
from typing import Optional, Union

from core.constants import CaptureMode
from core.types import capture_mode_for

CaptureMapping = Union[dict[str, str], dict[int, Optional[str]]]


def find_match(pattern: re.Pattern, text: str) -> Optional[re.Match]:
    """Unanchored search, like a hear responder expects."""
    if not isinstance(text, str):
        return None
    return pattern.search(text)


def extract_captures(match: re.Match, mode: Optional[str] = None) -> CaptureMapping:
    """
    Build the capture mapping for a confirmed match.

    Named mode: group name -> captured text, omitting groups that did not
    take part in the match.

    Indexed mode: 0 -> full match, then one entry per group in source
    order. Groups that did not take part map to None so they can be told
    apart from an empty capture.
    """
    if mode is None:
        mode = capture_mode_for(match.re)
    if mode == CaptureMode.NAMED:
        return {
            name: value
            for name, value in match.groupdict().items()
            if value is not None
        }
    captures: dict[int, Optional[str]] = {0: match.group(0)}
    for index in range(1, match.re.groups + 1):
        captures[index] = match.group(index)
    return captures
