"""Registry for catalog data sources."""

from __future__ import annotations

from typing import Dict

from llmdb.sources.base import Source

_REGISTRY: Dict[str, Source] = {}


def register_source(source: Source) -> None:
    """Register a source implementation under its ``name``."""

    _REGISTRY[source.name] = source


def get_source(name: str) -> Source:
    """Return a previously registered source."""

    try:
        return _REGISTRY[name]
    except KeyError as exc:
        available = ", ".join(sorted(_REGISTRY)) or "<none>"
        raise KeyError(f"Source '{name}' not registered. Known: {available}") from exc


def list_sources() -> list[str]:
    """Return the names of registered sources."""

    return sorted(_REGISTRY)


__all__ = ["register_source", "get_source", "list_sources"]
