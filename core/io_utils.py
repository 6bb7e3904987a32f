from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any


async def read_json(path: Path, default: Any = None) -> Any:
    def _read() -> Any:
        try:
            with path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except FileNotFoundError:
            return default

    return await asyncio.to_thread(_read)
