"""Coerce heterogeneous raw layer data into the canonical record shape.

Sources hand over loosely shaped dictionaries: keys may be capitalised or
carry upstream spellings, provider identifiers may be strings with hyphens or
enum members, and capability flags may be plain booleans where the schema
expects nested objects. Normalization fixes the shape only; it never decides
whether a record is valid (that is the validator's job).
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from llmdb._internal.exceptions import BadProviderError

PROVIDER_ID_MAX_LENGTH = 255
_PROVIDER_ID_RE = re.compile(r"^[A-Za-z0-9_]+$")

PROVIDER_FIELDS = frozenset(
    {
        "id",
        "name",
        "base_url",
        "env",
        "config_schema",
        "doc",
        "exclude_models",
        "region_prefixes",
        "extra",
    }
)
MODEL_FIELDS = frozenset(
    {
        "id",
        "provider",
        "provider_model_id",
        "name",
        "family",
        "aliases",
        "modalities",
        "capabilities",
        "limits",
        "cost",
        "tags",
        "deprecated",
        "extra",
    }
)

_KEY_ALIASES = {
    "deprecated?": "deprecated",
    "base-url": "base_url",
    "api": "base_url",
    "limit": "limits",
}

# Boolean shorthand -> the nested flag it stands for.
_CAPABILITY_SHORTHAND = {
    "reasoning": "enabled",
    "tools": "enabled",
    "json": "native",
    "streaming": "text",
}


def normalize_provider_id(value: Any) -> str:
    """Return the canonical form of a provider identifier.

    Hyphens become underscores; the result must be non-empty, at most 255
    characters, and consist of ASCII letters, digits, and underscores.

    Raises:
        BadProviderError: If the value is not a well-formed identifier.

    Examples:
        >>> normalize_provider_id("google-vertex")
        'google_vertex'
    """
    if isinstance(value, Enum):
        value = value.value
    if not isinstance(value, str):
        raise BadProviderError(
            "Provider identifier must be a string",
            context={"value_type": type(value).__name__},
        )
    candidate = value.strip().replace("-", "_")
    if not candidate or len(candidate) > PROVIDER_ID_MAX_LENGTH:
        raise BadProviderError(
            "Provider identifier must be 1-255 characters", context={"value": value[:64]}
        )
    if not _PROVIDER_ID_RE.match(candidate):
        raise BadProviderError(
            "Provider identifier contains invalid characters", context={"value": value}
        )
    return candidate


def normalize_providers(records: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Normalize a layer's provider records."""

    normalized = []
    for record in records:
        data = _normalize_keys(record, PROVIDER_FIELDS)
        if "id" in data:
            data["id"] = _coerce_provider_id(data["id"])
        for field in ("env", "exclude_models", "region_prefixes"):
            if field in data:
                data[field] = _coerce_str_list(data[field])
        normalized.append(data)
    return normalized


def normalize_models(records: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Normalize a layer's model records."""

    normalized = []
    for record in records:
        data = _normalize_keys(record, MODEL_FIELDS)
        if "provider" in data:
            data["provider"] = _coerce_provider_id(data["provider"])
        if isinstance(data.get("id"), (str, int, float)):
            data["id"] = str(data["id"]).strip()
        if "aliases" in data:
            data["aliases"] = _dedupe(_coerce_str_list(data["aliases"]))
        if "tags" in data:
            data["tags"] = _coerce_str_list(data["tags"])
        if isinstance(data.get("modalities"), Mapping):
            data["modalities"] = {
                str(key).lower(): [str(item).lower() for item in _coerce_str_list(values)]
                for key, values in data["modalities"].items()
            }
        if isinstance(data.get("capabilities"), Mapping):
            data["capabilities"] = _normalize_capabilities(data["capabilities"])
        normalized.append(data)
    return normalized


def flatten_source_data(data: Mapping[str, Any]) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """Split a source payload into flat provider and model record lists.

    Source payloads are keyed by provider; each provider entry carries its own
    metadata plus a ``models`` list (or mapping keyed by model id). Models
    lacking a ``provider`` field inherit the owning provider's identifier.
    """

    providers: List[Dict[str, Any]] = []
    models: List[Dict[str, Any]] = []
    for provider_key, provider_data in data.items():
        if not isinstance(provider_data, Mapping):
            continue
        provider = {k: v for k, v in provider_data.items() if k not in ("models", "Models")}
        provider.setdefault("id", provider_key)
        raw_models = provider_data.get("models", provider_data.get("Models", []))
        if isinstance(raw_models, Mapping):
            raw_models = list(raw_models.values())
        providers.append(provider)
        for model in raw_models or []:
            if not isinstance(model, Mapping):
                continue
            entry = dict(model)
            if "provider" not in entry and "Provider" not in entry:
                entry["provider"] = provider["id"]
            models.append(entry)
    return providers, models


def _normalize_keys(record: Mapping[str, Any], known: frozenset[str]) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    extra: Dict[str, Any] = {}
    for raw_key, value in record.items():
        key = str(raw_key.value if isinstance(raw_key, Enum) else raw_key).strip()
        lowered = key.lower()
        lowered = _KEY_ALIASES.get(lowered, lowered)
        if lowered in known:
            data[lowered] = value
        else:
            extra[key] = value
    if extra:
        existing = data.get("extra")
        merged = dict(existing) if isinstance(existing, Mapping) else {}
        merged.update(extra)
        data["extra"] = merged
    return data


def _coerce_provider_id(value: Any) -> Any:
    try:
        return normalize_provider_id(value)
    except BadProviderError:
        # Leave the raw value in place; the validator drops the record.
        return value


def _coerce_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple, set, frozenset)):
        return [str(item) for item in value if item is not None]
    return [str(value)]


def _dedupe(values: Iterable[str]) -> List[str]:
    seen: set[str] = set()
    result = []
    for value in values:
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


def _normalize_capabilities(capabilities: Mapping[str, Any]) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for raw_key, value in capabilities.items():
        key = str(raw_key).strip().lower()
        flag = _CAPABILITY_SHORTHAND.get(key)
        if flag is not None and isinstance(value, bool):
            result[key] = {flag: value}
        elif isinstance(value, Mapping):
            result[key] = {str(k).strip().lower(): v for k, v in value.items()}
        else:
            result[key] = value
    return result


__all__ = [
    "PROVIDER_FIELDS",
    "MODEL_FIELDS",
    "normalize_provider_id",
    "normalize_providers",
    "normalize_models",
    "flatten_source_data",
]
