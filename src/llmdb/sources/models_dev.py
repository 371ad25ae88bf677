"""models.dev source (https://models.dev/api.json).

``pull`` downloads the payload with ``requests`` and caches it together with
a manifest holding the response's ``ETag``/``Last-Modified`` headers, which
are replayed as conditional headers on the next pull. ``load`` reads only the
cached file.

Options:
    url: API endpoint (default :data:`DEFAULT_URL`).
    cache_dir: Cache directory (default ``$LLMDB_CACHE_DIR`` or
        ``~/.cache/llmdb/remote``).
    timeout: Request timeout in seconds for ``pull``.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import requests

from llmdb._internal.exceptions import SourceError
from llmdb.sources.base import Source, SourceData

logger = logging.getLogger(__name__)

DEFAULT_URL = "https://models.dev/api.json"
DEFAULT_TIMEOUT = 30.0

# models.dev boolean flags -> nested capability objects.
_CAPABILITY_FLAGS = {
    "reasoning": ("reasoning", "enabled"),
    "tool_call": ("tools", "enabled"),
}


class ModelsDevSource(Source):
    """Catalog layer backed by a cached models.dev payload."""

    name = "models_dev"
    supports_pull = True

    def load(self, options: Mapping[str, Any]) -> SourceData:
        path = cache_path(options)
        if not path.exists():
            raise SourceError(
                "models.dev cache is missing; pull it first", context={"path": str(path)}
            )
        try:
            content = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise SourceError(f"Cannot read models.dev cache {path}: {exc}") from exc
        return normalize_payload(content)

    def pull(self, options: Mapping[str, Any]) -> Optional[str]:
        url = options.get("url", DEFAULT_URL)
        path = cache_path(options)
        manifest = manifest_path(options)

        headers = conditional_headers(manifest)
        try:
            response = requests.get(
                url, headers=headers, timeout=options.get("timeout", DEFAULT_TIMEOUT)
            )
        except requests.RequestException as exc:
            raise SourceError(f"Failed to fetch {url}: {exc}") from exc

        if response.status_code == 304:
            logger.info("models.dev: not modified")
            return None
        if response.status_code != 200:
            raise SourceError(
                "Unexpected response from models.dev",
                context={"url": url, "status": response.status_code},
            )

        body = response.content
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(body)
        manifest.write_text(
            json.dumps(
                {
                    "source_url": url,
                    "etag": response.headers.get("ETag"),
                    "last_modified": response.headers.get("Last-Modified"),
                    "sha256": hashlib.sha256(body).hexdigest(),
                    "size_bytes": len(body),
                    "downloaded_at": datetime.now(UTC).isoformat(),
                },
                indent=2,
            ),
            encoding="utf-8",
        )
        logger.info("models.dev: cached %d bytes to %s", len(body), path)
        return str(path)


def cache_dir(options: Mapping[str, Any]) -> Path:
    configured = options.get("cache_dir") or os.environ.get("LLMDB_CACHE_DIR")
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".cache" / "llmdb" / "remote"


def cache_path(options: Mapping[str, Any]) -> Path:
    return cache_dir(options) / f"models-dev-{_url_hash(options)}.json"


def manifest_path(options: Mapping[str, Any]) -> Path:
    return cache_dir(options) / f"models-dev-{_url_hash(options)}.manifest.json"


def conditional_headers(manifest: Path) -> Dict[str, str]:
    """Build ``If-None-Match``/``If-Modified-Since`` headers from a manifest."""

    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return {}
    if not isinstance(data, Mapping):
        return {}
    headers = {}
    if isinstance(data.get("etag"), str):
        headers["If-None-Match"] = data["etag"]
    if isinstance(data.get("last_modified"), str):
        headers["If-Modified-Since"] = data["last_modified"]
    return headers


def normalize_payload(content: Any) -> Dict[str, Dict[str, Any]]:
    """Convert the models.dev layout into the provider-keyed source layout.

    models.dev nests models in a mapping keyed by model id and uses flat
    boolean flags (``tool_call``, ``reasoning``) for capabilities.
    """

    if not isinstance(content, Mapping):
        return {}
    result: Dict[str, Dict[str, Any]] = {}
    for provider_id, provider_data in content.items():
        if not isinstance(provider_data, Mapping):
            continue
        provider = {k: v for k, v in provider_data.items() if k != "models"}
        provider.setdefault("id", provider_id)
        raw_models = provider_data.get("models") or {}
        if isinstance(raw_models, Mapping):
            raw_models = list(raw_models.values())
        models: List[Dict[str, Any]] = []
        for model in raw_models:
            if isinstance(model, Mapping):
                models.append(_convert_model(model, provider_id))
        provider["models"] = models
        result[str(provider_id)] = provider
    return result


def _convert_model(model: Mapping[str, Any], provider_id: str) -> Dict[str, Any]:
    converted = dict(model)
    converted["provider"] = provider_id
    capabilities: Dict[str, Any] = dict(converted.get("capabilities") or {})
    for flag, (group, field) in _CAPABILITY_FLAGS.items():
        if isinstance(converted.get(flag), bool):
            capabilities.setdefault(group, {})[field] = converted.pop(flag)
    if capabilities:
        converted["capabilities"] = capabilities
    return converted


def _url_hash(options: Mapping[str, Any]) -> str:
    url = options.get("url", DEFAULT_URL)
    return hashlib.sha256(url.encode("utf-8")).hexdigest()[:8]


__all__ = [
    "DEFAULT_URL",
    "ModelsDevSource",
    "cache_path",
    "conditional_headers",
    "manifest_path",
    "normalize_payload",
]
