"""Lookup indexes that make every catalog read O(1)."""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping, NamedTuple, Tuple

from llmdb._internal.exceptions import CatalogBuildError

if TYPE_CHECKING:
    from llmdb.schemas import Model, Provider


class CatalogIndexes(NamedTuple):
    """Read-only lookup structures over one set of providers and models."""

    providers_by_id: Mapping[str, "Provider"]
    models_by_key: Mapping[Tuple[str, str], "Model"]
    models_by_provider: Mapping[str, Tuple["Model", ...]]
    aliases_by_key: Mapping[Tuple[str, str], str]


def build_indexes(providers: Iterable["Provider"], models: Iterable["Model"]) -> CatalogIndexes:
    """Build the provider, model, grouping, and alias indexes.

    Raises:
        CatalogBuildError: If two models share a ``(provider, id)`` key.
    """

    providers_by_id = {provider.id: provider for provider in providers}

    models_by_key: Dict[Tuple[str, str], "Model"] = {}
    grouped: Dict[str, List["Model"]] = {}
    for model in models:
        key = (model.provider, model.id)
        if key in models_by_key:
            raise CatalogBuildError(
                "Duplicate model key in merged catalog",
                context={"provider": model.provider, "id": model.id},
            )
        models_by_key[key] = model
        grouped.setdefault(model.provider, []).append(model)

    return CatalogIndexes(
        providers_by_id=MappingProxyType(providers_by_id),
        models_by_key=MappingProxyType(models_by_key),
        models_by_provider=MappingProxyType({p: tuple(ms) for p, ms in grouped.items()}),
        aliases_by_key=MappingProxyType(build_alias_index(models_by_key.values())),
    )


def build_alias_index(models: Iterable["Model"]) -> Dict[Tuple[str, str], str]:
    """Map every ``(provider, alias)`` to the owning model's canonical id."""

    return {
        (model.provider, alias): model.id
        for model in models
        for alias in model.aliases
    }


__all__ = ["CatalogIndexes", "build_alias_index", "build_indexes"]
