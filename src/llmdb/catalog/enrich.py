"""Derive fields and defaults that upstream data leaves out."""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from llmdb.schemas import Model, Provider

logger = logging.getLogger(__name__)

# Routing prefixes for providers that publish regional inference profiles.
DEFAULT_REGION_PREFIXES: Mapping[str, Tuple[str, ...]] = {
    "bedrock": ("us.", "eu.", "ap.", "ca.", "global."),
    "amazon_bedrock": ("us.", "eu.", "ap.", "ca.", "global."),
}

_FAMILY_SUFFIX_RES = (
    re.compile(r"@[^@]+$"),  # Vertex version pin: claude-haiku-4-5@20251001
    re.compile(r":\d+$"),  # Bedrock revision: ...-v1:0
    re.compile(r"-v\d+$"),
    re.compile(r"-(?:latest|preview|exp|experimental)$"),
    re.compile(r"-\d{4}-\d{2}-\d{2}$"),
    re.compile(r"-\d{8}$"),
    re.compile(r"-\d{4}$"),
)


def derive_family(model_id: str) -> Optional[str]:
    """Strip release qualifiers (dates, revisions, ``-latest``) from a model id.

    Examples:
        >>> derive_family("claude-3-5-sonnet-20241022")
        'claude-3-5-sonnet'
        >>> derive_family("gpt-4o-mini-2024-07-18")
        'gpt-4o-mini'
    """

    family = model_id
    changed = True
    while changed:
        changed = False
        for pattern in _FAMILY_SUFFIX_RES:
            stripped = pattern.sub("", family)
            if stripped and stripped != family:
                family = stripped
                changed = True
    return family or None


def enrich_providers(providers: Iterable[Provider]) -> List[Provider]:
    """Apply default region prefixes to providers that do not declare any."""

    enriched = []
    for provider in providers:
        defaults = DEFAULT_REGION_PREFIXES.get(provider.id)
        if defaults and not provider.region_prefixes:
            provider = provider.model_copy(update={"region_prefixes": defaults})
        enriched.append(provider)
    return enriched


def enrich_models(models: Iterable[Model]) -> List[Model]:
    """Fill ``family`` and ``provider_model_id`` and reconcile alias namespaces."""

    enriched = []
    for model in models:
        updates: Dict[str, object] = {}
        if not model.family:
            updates["family"] = derive_family(model.id)
        if not model.provider_model_id:
            updates["provider_model_id"] = model.id
        enriched.append(model.model_copy(update=updates) if updates else model)
    return reconcile_aliases(enriched)


def reconcile_aliases(models: List[Model]) -> List[Model]:
    """Keep each provider's alias namespace disjoint from its canonical ids.

    An alias equal to any canonical id under the same provider is dropped. An
    alias already claimed by an earlier model of the provider is dropped from
    the later one.
    """

    canonical: Dict[str, Set[str]] = defaultdict(set)
    for model in models:
        canonical[model.provider].add(model.id)

    claimed: Dict[Tuple[str, str], str] = {}
    result = []
    for model in models:
        kept = []
        for alias in model.aliases:
            if alias in canonical[model.provider]:
                continue
            owner = claimed.get((model.provider, alias))
            if owner is not None and owner != model.id:
                logger.warning(
                    "Alias '%s' under provider '%s' already belongs to '%s'; dropping it from '%s'",
                    alias,
                    model.provider,
                    owner,
                    model.id,
                )
                continue
            claimed[(model.provider, alias)] = model.id
            if alias not in kept:
                kept.append(alias)
        if tuple(kept) != model.aliases:
            model = model.model_copy(update={"aliases": tuple(kept)})
        result.append(model)
    return result


__all__ = [
    "DEFAULT_REGION_PREFIXES",
    "derive_family",
    "enrich_models",
    "enrich_providers",
    "reconcile_aliases",
]
