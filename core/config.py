"""
Bot configuration loading and validation.

Configuration is read once at startup from a JSON file plus environment
overrides, validated against a schema, and frozen into a BotConfig that is
passed by reference to the registry, compiler and listeners.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .constants import ConfigKey, ListenerName
from .io_utils import read_json
from .paths import BASE_DIR, resolve_repo_path
from .types import BotIdentity
from .utils import is_int

DEFAULT_CONFIG_PATH = BASE_DIR / "config.json"
CONFIG_PATH_ENV = "HEARHEAR_CONFIG"

DEFAULT_CONFIG: Dict[str, Any] = {
    ConfigKey.PREFERRED_NAME: None,
    ConfigKey.ALIAS: None,
    ConfigKey.RESPONDERS: [],
    ConfigKey.LISTENERS: [ListenerName.WEB],
    ConfigKey.MAX_CONCURRENCY: None,
    ConfigKey.REQUIRE_MESSAGE_TYPE: False,
    ConfigKey.WEB_HOST: "127.0.0.1",
    ConfigKey.WEB_PORT: 8080,
    ConfigKey.DISCORD_TOKEN: None,
}

CONFIG_SCHEMA: Dict[str, Tuple[str, bool]] = {
    ConfigKey.PREFERRED_NAME: ("name_or_none", False),
    ConfigKey.ALIAS: ("name_or_none", False),
    ConfigKey.RESPONDERS: ("list_str", False),
    ConfigKey.LISTENERS: ("list_listener", False),
    ConfigKey.MAX_CONCURRENCY: ("pos_int_or_none", False),
    ConfigKey.REQUIRE_MESSAGE_TYPE: ("bool", False),
    ConfigKey.WEB_HOST: ("str", False),
    ConfigKey.WEB_PORT: ("port", False),
    ConfigKey.DISCORD_TOKEN: ("str_or_none", False),
}

# Environment variable -> (config key, type used to coerce the raw string)
ENV_OVERRIDES: Dict[str, Tuple[str, str]] = {
    "BOT_NAME": (ConfigKey.PREFERRED_NAME, "str"),
    "BOT_ALIAS": (ConfigKey.ALIAS, "str"),
    "DISCORD_BOT_TOKEN": (ConfigKey.DISCORD_TOKEN, "str"),
    "WEB_HOST": (ConfigKey.WEB_HOST, "str"),
    "WEB_PORT": (ConfigKey.WEB_PORT, "int"),
    "MAX_CONCURRENCY": (ConfigKey.MAX_CONCURRENCY, "int"),
}


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class BotConfig:
    identity: Optional[BotIdentity]
    responders: Tuple[str, ...]
    listeners: Tuple[str, ...]
    max_concurrency: Optional[int]
    require_message_type: bool
    web_host: str
    web_port: int
    discord_token: Optional[str]


def validate_and_normalize_config(data: Mapping[str, Any]) -> Dict[str, Any]:
    errors: List[str] = []
    normalized: Dict[str, Any] = {}

    unknown = sorted(key for key in data if key not in CONFIG_SCHEMA)
    for key in unknown:
        errors.append(f"Unknown config key: {key}")

    for key, (type_name, required) in CONFIG_SCHEMA.items():
        if key not in data:
            if required:
                errors.append(f"Missing required config key: {key}")
            else:
                normalized[key] = DEFAULT_CONFIG.get(key)
            continue
        value = data[key]
        if type_name == "name_or_none":
            if value is None:
                normalized[key] = None
            elif isinstance(value, str) and value.strip():
                normalized[key] = value.strip()
            else:
                errors.append(f"{key} must be a non-empty string or null")
        elif type_name == "str":
            if not isinstance(value, str) or not value.strip():
                errors.append(f"{key} must be a non-empty string")
            else:
                normalized[key] = value.strip()
        elif type_name == "str_or_none":
            if value is None or isinstance(value, str):
                normalized[key] = value or None
            else:
                errors.append(f"{key} must be a string or null")
        elif type_name == "bool":
            if not isinstance(value, bool):
                errors.append(f"{key} must be a boolean")
            else:
                normalized[key] = value
        elif type_name == "pos_int_or_none":
            if value is None:
                normalized[key] = None
            elif not is_int(value) or value <= 0:
                errors.append(f"{key} must be a positive integer or null")
            else:
                normalized[key] = int(value)
        elif type_name == "port":
            if not is_int(value) or not 0 < value < 65536:
                errors.append(f"{key} must be a TCP port number")
            else:
                normalized[key] = int(value)
        elif type_name == "list_str":
            if not isinstance(value, list) or any(
                not isinstance(item, str) or not item.strip() for item in value
            ):
                errors.append(f"{key} must be a list of non-empty strings")
                continue
            normalized[key] = [item.strip() for item in value]
        elif type_name == "list_listener":
            if not isinstance(value, list) or any(item not in ListenerName.ALL for item in value):
                errors.append(
                    f"{key} must be a list drawn from: {', '.join(ListenerName.ALL)}"
                )
                continue
            normalized[key] = list(dict.fromkeys(value))

    if errors:
        raise ConfigError("; ".join(errors))
    return normalized


def apply_env_overrides(
    data: Mapping[str, Any],
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    env = os.environ if environ is None else environ
    merged = dict(data)
    for var, (key, type_name) in ENV_OVERRIDES.items():
        raw = env.get(var)
        if raw is None or not raw.strip():
            continue
        if type_name == "int":
            try:
                merged[key] = int(raw.strip())
            except ValueError as exc:
                raise ConfigError(f"{var} must be an integer") from exc
        else:
            merged[key] = raw.strip()
    return merged


def build_config(
    data: Mapping[str, Any],
    environ: Optional[Mapping[str, str]] = None,
) -> BotConfig:
    """Validate raw configuration data and freeze it into a BotConfig."""
    if not isinstance(data, Mapping):
        raise ConfigError("Configuration root must be a JSON object")
    config = validate_and_normalize_config(apply_env_overrides(data, environ))

    name = config[ConfigKey.PREFERRED_NAME]
    alias = config[ConfigKey.ALIAS]
    if alias is not None and name is None:
        raise ConfigError("alias is set but preferred_name is missing")
    identity = BotIdentity(name, alias) if name is not None else None

    return BotConfig(
        identity=identity,
        responders=tuple(config[ConfigKey.RESPONDERS]),
        listeners=tuple(config[ConfigKey.LISTENERS]),
        max_concurrency=config[ConfigKey.MAX_CONCURRENCY],
        require_message_type=config[ConfigKey.REQUIRE_MESSAGE_TYPE],
        web_host=config[ConfigKey.WEB_HOST],
        web_port=config[ConfigKey.WEB_PORT],
        discord_token=config[ConfigKey.DISCORD_TOKEN],
    )


def config_path_from_env(environ: Optional[Mapping[str, str]] = None) -> Path:
    env = os.environ if environ is None else environ
    raw = env.get(CONFIG_PATH_ENV)
    if raw and raw.strip():
        return resolve_repo_path(raw.strip())
    return DEFAULT_CONFIG_PATH


async def load_config(
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> BotConfig:
    """
    Load the bot configuration.

    A missing file is treated as an empty object so the bot can be configured
    from the environment alone; a file that is not valid JSON is fatal.
    """
    path = path or config_path_from_env(environ)
    try:
        data = await read_json(path, default={})
    except ValueError as exc:
        raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc
    return build_config(data, environ)
