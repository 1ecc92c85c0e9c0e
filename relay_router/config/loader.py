"""
Router configuration loader.

Reads the proxy's JSON config file and builds an immutable RouterConfig.
The file layout is the one the proxy already uses::

    {
      "Providers": [{"name": "...", "api_base_url": "...", "models": [...],
                     "transformer": {"use": ["responses-api"]}}],
      "Router": {"default": "openai,gpt-4o", "longContext": "...",
                 "longContextThreshold": 60000},
      "CUSTOM_ROUTER_PATH": "~/.relay-router/router.py"
    }

String values may reference environment variables as ``$VAR`` or
``${VAR}``. A ``.env`` file is loaded before overrides are applied.
"""

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional, Union

from dotenv import load_dotenv
from pydantic import ValidationError

from ..errors import ConfigError
from .constants import (
    DEFAULT_CONFIG_DIR,
    DEFAULT_CONFIG_FILE,
    ENV_CONFIG_PATH,
    ENV_CUSTOM_ROUTER_PATH,
    ENV_CUSTOM_ROUTER_TIMEOUT,
    ENV_LONG_CONTEXT_THRESHOLD,
)
from .models import RouterConfig

logger = logging.getLogger(__name__)

_ENV_REF = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


def interpolate_env_vars(value: Any) -> Any:
    """Replace ``$VAR`` / ``${VAR}`` references in every string of ``value``.

    Unset variables are left as written.
    """
    if isinstance(value, str):
        def _sub(match):
            name = match.group(1) or match.group(2)
            return os.environ.get(name, match.group(0))
        return _ENV_REF.sub(_sub, value)
    if isinstance(value, dict):
        return {k: interpolate_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [interpolate_env_vars(v) for v in value]
    return value


def default_config_path() -> Path:
    return Path(os.path.expanduser(DEFAULT_CONFIG_DIR)) / DEFAULT_CONFIG_FILE


def config_from_dict(raw: Dict[str, Any]) -> RouterConfig:
    """Build a RouterConfig from the proxy config file structure."""
    raw = interpolate_env_vars(raw)
    router_section = dict(raw.get("Router") or raw.get("routes") or {})

    threshold = router_section.pop("longContextThreshold", None)
    if threshold is None:
        threshold = raw.get("long_context_threshold")

    data: Dict[str, Any] = {
        "routes": router_section,
        "providers": raw.get("Providers") or raw.get("providers") or (),
    }
    if threshold is not None:
        data["long_context_threshold"] = threshold

    custom_path = raw.get("CUSTOM_ROUTER_PATH") or raw.get("custom_router_path")
    if custom_path:
        data["custom_router_path"] = os.path.expanduser(custom_path)

    for key in ("custom_router_timeout", "subagent_tag", "lightweight_markers"):
        if raw.get(key) is not None:
            data[key] = raw[key]

    data.update(_env_overrides())

    try:
        return RouterConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid router configuration: {e}")


def _env_overrides() -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    threshold = os.getenv(ENV_LONG_CONTEXT_THRESHOLD)
    if threshold:
        overrides["long_context_threshold"] = threshold
    custom_path = os.getenv(ENV_CUSTOM_ROUTER_PATH)
    if custom_path:
        overrides["custom_router_path"] = os.path.expanduser(custom_path)
    timeout = os.getenv(ENV_CUSTOM_ROUTER_TIMEOUT)
    if timeout:
        overrides["custom_router_timeout"] = timeout
    return overrides


def load_router_config(path: Optional[Union[str, Path]] = None) -> RouterConfig:
    """Load the router configuration.

    Args:
        path: Config file path. Falls back to ``$RELAY_ROUTER_CONFIG`` and then
            to ``~/.relay-router/config.json``.

    Returns:
        RouterConfig snapshot

    Raises:
        ConfigError: If the file is missing, unreadable or invalid
    """
    load_dotenv()

    if path is None:
        path = os.getenv(ENV_CONFIG_PATH) or default_config_path()
    config_path = Path(os.path.expanduser(str(path)))

    try:
        with open(config_path, "r", encoding="utf-8") as fh:
            raw = json.load(fh)
    except FileNotFoundError:
        raise ConfigError("Config file not found", path=str(config_path))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Could not read config: {e}", path=str(config_path))

    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a JSON object", path=str(config_path))

    config = config_from_dict(raw)
    logger.debug(
        f"Loaded router config from {config_path}: "
        f"{len(config.routes)} routes, {len(config.providers)} providers"
    )
    return config
