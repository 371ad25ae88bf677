"""Local data sources: in-memory payloads and JSON/YAML files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping

import yaml

from llmdb._internal.exceptions import SourceError
from llmdb.sources.base import Source, SourceData

logger = logging.getLogger(__name__)

DATA_SUFFIXES = (".json", ".yaml", ".yml")


class InlineSource(Source):
    """Serves the payload passed in ``options["data"]``.

    Used for packaged catalogs, configuration-declared overrides, and tests.
    """

    name = "inline"

    def load(self, options: Mapping[str, Any]) -> SourceData:
        data = options.get("data")
        if data is None:
            raise SourceError("Inline source requires a 'data' option")
        if not isinstance(data, Mapping):
            raise SourceError(
                "Inline source data must be a mapping keyed by provider",
                context={"value_type": type(data).__name__},
            )
        return data


class FileSource(Source):
    """Reads provider payloads from a JSON/YAML file or a directory of them.

    Options:
        path: File or directory path.

    A file holds either a provider-keyed payload or a single provider entry
    (a mapping with ``id`` and ``models``). In a directory, files are read in
    name order; a file that fails to parse is skipped with a warning, and a
    provider appearing in several files accumulates their models.
    """

    name = "file"

    def load(self, options: Mapping[str, Any]) -> SourceData:
        raw_path = options.get("path")
        if not raw_path:
            raise SourceError("File source requires a 'path' option")
        path = Path(raw_path).expanduser()

        if path.is_dir():
            files = sorted(p for p in path.iterdir() if p.suffix.lower() in DATA_SUFFIXES)
            if not files:
                raise SourceError("No data files found", context={"path": str(path)})
        elif path.is_file():
            files = [path]
        else:
            raise SourceError("Data path does not exist", context={"path": str(path)})

        combined: Dict[str, Dict[str, Any]] = {}
        loaded = 0
        for file_path in files:
            try:
                payload = read_data_file(file_path)
            except SourceError as exc:
                if len(files) == 1:
                    raise
                logger.warning("Skipping %s: %s", file_path, exc)
                continue
            _combine(combined, payload)
            loaded += 1

        if not loaded:
            raise SourceError("No data file could be read", context={"path": str(path)})
        return combined


def read_data_file(path: Path) -> Mapping[str, Any]:
    """Parse one JSON or YAML data file into a provider-keyed mapping.

    Raises:
        SourceError: If the file cannot be read or parsed, or is not a mapping.
    """

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SourceError(f"Cannot read {path}: {exc}") from exc

    try:
        if path.suffix.lower() == ".json":
            payload = json.loads(text)
        else:
            payload = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise SourceError(f"Invalid data in {path}: {exc}") from exc

    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise SourceError("Data file must contain a mapping", context={"path": str(path)})
    if "id" in payload and "models" in payload:
        return {str(payload["id"]): payload}
    return payload


def _combine(target: Dict[str, Dict[str, Any]], payload: Mapping[str, Any]) -> None:
    for provider_key, provider_data in payload.items():
        if not isinstance(provider_data, Mapping):
            logger.warning("Ignoring non-mapping entry for provider '%s'", provider_key)
            continue
        entry = target.setdefault(str(provider_key), {})
        models: List[Any] = list(entry.get("models", []))
        incoming = provider_data.get("models", [])
        if isinstance(incoming, Mapping):
            incoming = list(incoming.values())
        models.extend(incoming or [])
        entry.update({k: v for k, v in provider_data.items() if k != "models"})
        entry["models"] = models


__all__ = ["DATA_SUFFIXES", "FileSource", "InlineSource", "read_data_file"]
