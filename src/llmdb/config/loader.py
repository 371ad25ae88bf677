"""Configuration loading.

Sources are applied in increasing precedence: the YAML file, then
``LLMDB_*`` environment variables. ``${VAR}`` placeholders in string values
are resolved last.
"""

import os
import re
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from llmdb._internal.exceptions import ConfigError
from llmdb.config.schema import LLMDbConfig

DEFAULT_CONFIG_FILE = "llmdb.yaml"

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)\}")

# Variables under the prefix that are not configuration paths.
_RESERVED_ENV_KEYS = frozenset({"CONFIG", "CACHE_DIR"})

_ENV_KEY_PATHS = {
    "LOGGING_LEVEL": ["logging", "level"],
    "ALLOW": ["allow"],
    "PREFER": ["prefer"],
}

_LIST_PATHS = (("prefer",),)

# Per-provider glob lists: LLMDB_ALLOW__OPENAI="gpt-4*,o1*".
_FILTER_KEYS = frozenset({"allow", "deny"})

# Values passed through as strings.
_RAW_PATHS = (("logging", "level"),)


def merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge dictionaries; ``override`` wins on conflicts."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


def resolve_env_vars(value: Any) -> Any:
    """Replace ``${VAR}`` patterns in nested strings with environment values.

    Unset variables resolve to the empty string.
    """
    if isinstance(value, dict):
        return {key: resolve_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [resolve_env_vars(item) for item in value]
    if isinstance(value, str) and "${" in value:
        return _ENV_VAR_RE.sub(lambda match: os.environ.get(match.group(1), ""), value)
    return value


def load_yaml_file(path: str) -> Dict[str, Any]:
    """Load configuration from a YAML file.

    Returns:
        The parsed mapping, or an empty dict if the file does not exist.

    Raises:
        ConfigError: If the file cannot be read, parsed, or is not a mapping.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        return {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Error reading {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Configuration file must contain a mapping", context={"path": path})
    return data


def _env_key_path(env_key: str) -> List[str]:
    if env_key in _ENV_KEY_PATHS:
        return _ENV_KEY_PATHS[env_key]
    return env_key.lower().split("__")


def _is_list_path(path: List[str]) -> bool:
    return tuple(path) in _LIST_PATHS or (len(path) == 2 and path[0] in _FILTER_KEYS)


def _typed(value: str) -> Any:
    lowered = value.lower()
    if lowered in ("true", "yes"):
        return True
    if lowered in ("false", "no"):
        return False
    if value.isdigit():
        return int(value)
    return value


def load_from_env(prefix: str = "LLMDB") -> Dict[str, Any]:
    """Load configuration from ``{prefix}_*`` environment variables.

    ``LLMDB_LOGGING_LEVEL`` maps to ``logging.level``; ``LLMDB_PREFER`` takes a
    comma-separated provider list, and ``LLMDB_ALLOW__<PROVIDER>`` /
    ``LLMDB_DENY__<PROVIDER>`` take comma-separated globs. Other nested paths
    use a double underscore, e.g. ``LLMDB_LOGGING__LEVEL``.
    """
    result: Dict[str, Any] = {}
    prefix_upper = f"{prefix.upper()}_"

    for key, value in os.environ.items():
        if not key.startswith(prefix_upper):
            continue
        env_key = key[len(prefix_upper):]
        if not env_key or env_key in _RESERVED_ENV_KEYS:
            continue

        path = _env_key_path(env_key)
        if _is_list_path(path):
            typed_value: Any = [item.strip() for item in value.split(",") if item.strip()]
        elif tuple(path) in _RAW_PATHS:
            typed_value = value
        else:
            typed_value = _typed(value)

        current = result
        for part in path[:-1]:
            current = current.setdefault(part, {})
        current[path[-1]] = typed_value

    return result


def load_config(file_path: Optional[str] = None, env_prefix: str = "LLMDB") -> LLMDbConfig:
    """Load and validate the catalog configuration.

    Args:
        file_path: Path to a YAML file (defaults to ``$LLMDB_CONFIG`` or
            ``llmdb.yaml`` in the working directory; a missing default file is
            not an error).
        env_prefix: Prefix for environment variable overrides.

    Raises:
        ConfigError: On loading or validation failure.
    """
    path = file_path or os.environ.get(f"{env_prefix}_CONFIG", DEFAULT_CONFIG_FILE)
    if file_path and not os.path.exists(file_path):
        raise ConfigError("Configuration file not found", context={"path": file_path})

    config_data: Dict[str, Any] = {}
    if os.path.exists(path):
        config_data = merge_dicts(config_data, load_yaml_file(path))

    env_config = load_from_env(env_prefix)
    if env_config:
        config_data = merge_dicts(config_data, env_config)

    config_data = resolve_env_vars(config_data)

    try:
        return LLMDbConfig.model_validate(config_data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}", context={"path": path}) from e
