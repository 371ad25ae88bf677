"""Catalog build engine.

Runs the full build pipeline over a ranked list of sources and returns an
unpublished :class:`~llmdb.catalog.snapshot.Snapshot`::

    ingest -> normalize -> validate -> merge -> filter -> enrich -> index

Every step is a pure function over in-memory records. The only fatal
condition is a non-universal allow list that filters out every model;
everything else (failing sources, invalid records, orphan models) is logged
and the build continues.
"""

from __future__ import annotations

import logging
from typing import (
    Any,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    TypedDict,
    Union,
)

from pydantic import ValidationError

from llmdb._internal.exceptions import BadProviderError, ConfigValueError, SourceError
from llmdb.catalog.enrich import enrich_models, enrich_providers
from llmdb.catalog.filters import (
    ALL,
    AllowSpec,
    DenySpec,
    FilterSet,
    apply_filters,
    compile_excludes,
    compile_filters,
    ensure_not_emptied,
)
from llmdb.catalog.index import build_alias_index, build_indexes
from llmdb.catalog.merge import merge_layers
from llmdb.catalog.normalize import (
    flatten_source_data,
    normalize_models,
    normalize_provider_id,
    normalize_providers,
)
from llmdb.catalog.snapshot import Snapshot, SnapshotMeta
from llmdb.catalog.validate import RecordValidator, validate_models, validate_providers
from llmdb.schemas import Model, Provider
from llmdb.sources.base import Source

logger = logging.getLogger(__name__)

SourceEntry = Union[Source, Tuple[Source, Mapping[str, Any]]]


class Layer(TypedDict):
    """One ranked contribution of provider and model records."""

    name: str
    providers: List[Dict[str, Any]]
    models: List[Dict[str, Any]]


def build_snapshot(
    sources: Sequence[SourceEntry] = (),
    *,
    allow: Optional[AllowSpec] = ALL,
    deny: Optional[DenySpec] = None,
    prefer: Iterable[str] = (),
    validator: Optional[RecordValidator] = None,
) -> Snapshot:
    """Build a snapshot from ``sources`` ranked lowest to highest precedence.

    Args:
        sources: Source instances, or ``(source, options)`` pairs.
        allow: :data:`~llmdb.catalog.filters.ALL` or provider -> globs.
        deny: Provider -> globs.
        prefer: Provider preference order recorded for selection.
        validator: Record validator; defaults to the schema validator.

    Returns:
        A snapshot whose ``meta.epoch`` is unset until it is published.

    Raises:
        ConfigValueError: If the filter configuration is malformed.
        CatalogBuildError: If filtering removed every model under a
            non-universal allow list.
    """

    layers = [prepare_layer(layer, validator) for layer in ingest(sources)]
    providers, models = merge_layers(layers)
    return finalize(providers, models, allow=allow, deny=deny, prefer=prefer)


def build_from_records(
    providers: Iterable[Mapping[str, Any]],
    models: Iterable[Mapping[str, Any]],
    *,
    allow: Optional[AllowSpec] = ALL,
    deny: Optional[DenySpec] = None,
    prefer: Iterable[str] = (),
    validator: Optional[RecordValidator] = None,
    source_generated_at: Optional[str] = None,
) -> Snapshot:
    """Build a snapshot from already-flat provider and model records."""

    layer = prepare_layer(
        Layer(name="records", providers=list(providers), models=list(models)), validator
    )
    merged_providers, merged_models = merge_layers([layer])
    return finalize(
        merged_providers,
        merged_models,
        allow=allow,
        deny=deny,
        prefer=prefer,
        source_generated_at=source_generated_at,
    )


def ingest(sources: Sequence[SourceEntry]) -> List[Layer]:
    """Load every source into a raw layer; a failing source yields an empty one."""

    if not sources:
        logger.warning("No sources configured; the catalog will be empty")

    layers: List[Layer] = []
    for entry in sources:
        source, options = _unpack(entry)
        try:
            data = source.load(options)
        except SourceError as exc:
            logger.warning("Source '%s' failed to load: %s", source.name, exc)
            data = {}
        providers, models = flatten_source_data(data or {})
        logger.debug(
            "Source '%s' contributed %d providers and %d models",
            source.name,
            len(providers),
            len(models),
        )
        layers.append(Layer(name=source.name, providers=providers, models=models))
    return layers


def prepare_layer(layer: Layer, validator: Optional[RecordValidator] = None) -> Layer:
    """Normalize and validate one layer's records."""

    providers, dropped_providers = validate_providers(
        normalize_providers(layer["providers"]), validator
    )
    models, dropped_models = validate_models(normalize_models(layer["models"]), validator)
    if dropped_providers or dropped_models:
        logger.warning(
            "Layer '%s': dropped %d invalid providers and %d invalid models",
            layer["name"],
            dropped_providers,
            dropped_models,
        )
    return Layer(name=layer["name"], providers=providers, models=models)


def finalize(
    providers: Iterable[Mapping[str, Any]],
    models: Iterable[Mapping[str, Any]],
    *,
    allow: Optional[AllowSpec] = ALL,
    deny: Optional[DenySpec] = None,
    prefer: Iterable[str] = (),
    source_generated_at: Optional[str] = None,
) -> Snapshot:
    """Turn merged records into an indexed snapshot."""

    provider_objs = enrich_providers(_materialize(Provider, providers, "provider"))
    known = {provider.id for provider in provider_objs}

    model_objs: List[Model] = []
    for model in _materialize(Model, models, "model"):
        if model.provider not in known:
            logger.warning(
                "Dropping model '%s': provider '%s' is not in the catalog",
                model.id,
                model.provider,
            )
            continue
        model_objs.append(model)

    filters, unknown = compile_filters(allow, deny, known)
    if unknown:
        logger.warning("Filters reference unknown providers: %s", ", ".join(unknown))

    base = enrich_models(apply_filters(model_objs, FilterSet(), compile_excludes(provider_objs)))
    kept = apply_filters(base, filters)
    ensure_not_emptied(base, kept, filters, allow, deny)

    if not provider_objs or not kept:
        logger.warning(
            "Catalog is empty (%d providers, %d models)", len(provider_objs), len(kept)
        )

    return Snapshot.from_indexes(
        tuple(provider_objs),
        build_indexes(provider_objs, kept),
        base_models=tuple(base),
        base_aliases_by_key=build_alias_index(base),
        filters=filters,
        prefer=normalize_prefer(prefer),
        meta=SnapshotMeta(source_generated_at=source_generated_at),
    )


def normalize_prefer(prefer: Iterable[Any]) -> Tuple[str, ...]:
    """Normalize a provider preference list, dropping duplicates.

    Raises:
        ConfigValueError: If an entry is not a provider identifier.
    """

    if isinstance(prefer, (str, bytes)):
        raise ConfigValueError("prefer must be a list of provider identifiers")
    ordered: List[str] = []
    for entry in prefer:
        try:
            provider = normalize_provider_id(entry)
        except BadProviderError as exc:
            raise ConfigValueError(
                "prefer entries must be provider identifiers", context={"value": entry}
            ) from exc
        if provider not in ordered:
            ordered.append(provider)
    return tuple(ordered)


def _materialize(schema, records, kind: str) -> List[Any]:
    built = []
    for record in records:
        try:
            built.append(schema.model_validate(record))
        except ValidationError as exc:
            # Valid layers can still merge into an invalid record.
            logger.warning("Dropping merged %s %r: %s", kind, record.get("id"), exc)
    return built


def _unpack(entry: SourceEntry) -> Tuple[Source, Mapping[str, Any]]:
    if isinstance(entry, tuple):
        source, options = entry
        return source, options or {}
    return entry, {}


__all__ = [
    "Layer",
    "SourceEntry",
    "build_from_records",
    "build_snapshot",
    "finalize",
    "ingest",
    "normalize_prefer",
    "prepare_layer",
]
