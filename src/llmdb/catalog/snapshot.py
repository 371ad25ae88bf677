"""The immutable, indexed catalog aggregate published for reads."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Iterator, List, Mapping, Optional, Tuple

from llmdb.catalog.filters import FilterSet
from llmdb.catalog.index import CatalogIndexes
from llmdb.schemas import Model, Provider


@dataclass(frozen=True)
class SnapshotMeta:
    """Build metadata; ``epoch`` is assigned by the store on publication."""

    generated_at: str = field(default_factory=lambda: datetime.now(UTC).isoformat())
    epoch: Optional[int] = None
    source_generated_at: Optional[str] = None


@dataclass(frozen=True)
class Snapshot:
    """Providers, models, their indexes, and the filters that produced them.

    Attributes:
        providers: Providers in merge order.
        providers_by_id: Provider id -> provider.
        models_by_key: ``(provider, canonical id)`` -> model.
        models_by_provider: Provider id -> that provider's models.
        aliases_by_key: ``(provider, alias)`` -> canonical id.
        base_models: Models before allow/deny filtering, kept so runtime
            filter changes can widen as well as narrow the catalog.
        base_aliases_by_key: Alias index over ``base_models``; maps an alias
            of a filtered-out model to its canonical id.
        filters: Compiled filters applied to ``base_models``.
        prefer: Provider preference order used by selection.
        meta: Generation timestamp and publication epoch.
    """

    providers: Tuple[Provider, ...]
    providers_by_id: Mapping[str, Provider]
    models_by_key: Mapping[Tuple[str, str], Model]
    models_by_provider: Mapping[str, Tuple[Model, ...]]
    aliases_by_key: Mapping[Tuple[str, str], str]
    base_models: Tuple[Model, ...] = ()
    base_aliases_by_key: Mapping[Tuple[str, str], str] = field(default_factory=lambda: MappingProxyType({}))
    filters: FilterSet = field(default_factory=FilterSet)
    prefer: Tuple[str, ...] = ()
    meta: SnapshotMeta = field(default_factory=SnapshotMeta)

    @classmethod
    def from_indexes(
        cls,
        providers: Tuple[Provider, ...],
        indexes: CatalogIndexes,
        *,
        base_models: Tuple[Model, ...] = (),
        base_aliases_by_key: Optional[Mapping[Tuple[str, str], str]] = None,
        filters: Optional[FilterSet] = None,
        prefer: Tuple[str, ...] = (),
        meta: Optional[SnapshotMeta] = None,
    ) -> "Snapshot":
        return cls(
            providers=providers,
            providers_by_id=indexes.providers_by_id,
            models_by_key=indexes.models_by_key,
            models_by_provider=indexes.models_by_provider,
            aliases_by_key=indexes.aliases_by_key,
            base_models=base_models,
            base_aliases_by_key=MappingProxyType(dict(base_aliases_by_key or {})),
            filters=filters or FilterSet(),
            prefer=prefer,
            meta=meta or SnapshotMeta(),
        )

    def iter_models(self) -> Iterator[Model]:
        for models in self.models_by_provider.values():
            yield from models

    def all_models(self) -> List[Model]:
        return list(self.iter_models())

    def with_epoch(self, epoch: int) -> "Snapshot":
        return dataclasses.replace(self, meta=dataclasses.replace(self.meta, epoch=epoch))


__all__ = ["Snapshot", "SnapshotMeta"]
