"""
General utility functions.

Provides validation helpers shared by configuration and registration code.
"""
from __future__ import annotations

import os
from typing import Any, Optional


def is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def default_concurrency() -> int:
    return os.cpu_count() or 1


def positive_or_default(value: Optional[int]) -> int:
    if value is not None and is_int(value) and value > 0:
        return value
    return default_concurrency()
