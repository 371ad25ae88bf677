"""Runtime filter and preference overrides on an existing snapshot.

Overrides re-run only the filter and index steps against the snapshot's
pre-filter ``base_models``; sources are not reloaded. An override may
therefore widen the catalog back to models an earlier filter excluded.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Mapping, Optional

from llmdb._internal.exceptions import ConfigValueError
from llmdb.catalog.engine import normalize_prefer
from llmdb.catalog.filters import apply_filters, compile_filters, ensure_not_emptied
from llmdb.catalog.index import build_indexes
from llmdb.catalog.snapshot import Snapshot, SnapshotMeta

logger = logging.getLogger(__name__)

_OVERRIDE_KEYS = frozenset({"filters", "prefer"})


def apply_runtime_overrides(snapshot: Snapshot, overrides: Optional[Mapping[str, Any]]) -> Snapshot:
    """Return a new snapshot with ``overrides`` applied.

    Args:
        snapshot: The snapshot to derive from; it is not modified.
        overrides: ``{"filters": {"allow": ..., "deny": ...}, "prefer": [...]}``.
            Either key may be omitted. A missing ``allow`` or ``deny`` keeps the
            snapshot's current side.

    Raises:
        ConfigValueError: If the overrides are malformed or ``prefer`` names
            an unknown provider.
        CatalogBuildError: If the new filters remove every model.
    """

    if not overrides:
        return snapshot
    if not isinstance(overrides, Mapping):
        raise ConfigValueError(
            "Runtime overrides must be a mapping",
            context={"value_type": type(overrides).__name__},
        )
    unexpected = sorted(set(overrides) - _OVERRIDE_KEYS)
    if unexpected:
        raise ConfigValueError("Unsupported runtime override keys", context={"keys": unexpected})

    updates: dict = {}
    if "filters" in overrides:
        updates.update(_refilter(snapshot, overrides["filters"]))
    if "prefer" in overrides:
        prefer = normalize_prefer(overrides["prefer"] or ())
        unknown = [provider for provider in prefer if provider not in snapshot.providers_by_id]
        if unknown:
            raise ConfigValueError("prefer references unknown providers", context={"providers": unknown})
        updates["prefer"] = prefer

    updates["meta"] = SnapshotMeta(source_generated_at=snapshot.meta.source_generated_at)
    return dataclasses.replace(snapshot, **updates)


def _refilter(snapshot: Snapshot, spec: Any) -> dict:
    if not isinstance(spec, Mapping):
        raise ConfigValueError(
            "filters override must be a mapping with 'allow' and/or 'deny'",
            context={"value_type": type(spec).__name__},
        )
    allow = spec["allow"] if "allow" in spec else snapshot.filters.allow_globs
    deny = spec["deny"] if "deny" in spec else snapshot.filters.deny_globs

    filters, unknown = compile_filters(allow, deny, snapshot.providers_by_id)
    if unknown:
        logger.warning("Runtime filters reference unknown providers: %s", ", ".join(unknown))

    kept = apply_filters(snapshot.base_models, filters)
    ensure_not_emptied(snapshot.base_models, kept, filters, allow, deny)
    indexes = build_indexes(snapshot.providers, kept)
    logger.info("Runtime filters kept %d of %d models", len(kept), len(snapshot.base_models))
    return {
        "filters": filters,
        "models_by_key": indexes.models_by_key,
        "models_by_provider": indexes.models_by_provider,
        "aliases_by_key": indexes.aliases_by_key,
    }


__all__ = ["apply_runtime_overrides"]
