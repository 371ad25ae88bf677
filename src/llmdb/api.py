"""Query facade over the published catalog snapshot.

Typical use::

    import llmdb

    llmdb.load(llmdb.load_config())
    llmdb.model("openai:gpt-4o-mini")
    llmdb.select(require={"tools": True}, prefer=["anthropic"])

Every query reads the snapshot once, so a concurrent reload never mixes two
catalogs within one call. With no snapshot loaded, queries return ``None``,
``False`` or an empty list instead of raising.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from llmdb import store
from llmdb._internal.exceptions import BadProviderError, ConfigError, ResolutionError
from llmdb._internal.logging import set_component_level
from llmdb.catalog.engine import SourceEntry, build_from_records, build_snapshot
from llmdb.catalog.filters import is_allowed
from llmdb.catalog.normalize import normalize_provider_id
from llmdb.catalog.overrides import apply_runtime_overrides
from llmdb.catalog.snapshot import Snapshot
from llmdb.catalog.validate import RecordValidator
from llmdb.config import LLMDbConfig, load_config
from llmdb.schemas import Capabilities, Model, Provider
from llmdb.selection import candidates, select
from llmdb.sources import get_source
from llmdb.spec import SpecPair, parse_spec, resolve, split_region_prefix

logger = logging.getLogger(__name__)

ConfigInput = Union[None, str, Mapping[str, Any], LLMDbConfig]
ModelSpec = Union[str, Tuple[Any, str], Model]


def load(
    config: ConfigInput = None,
    *,
    sources: Optional[Sequence[SourceEntry]] = None,
    allow: Any = None,
    deny: Optional[Mapping[str, Sequence[str]]] = None,
    prefer: Optional[Iterable[str]] = None,
    runtime_overrides: Optional[Mapping[str, Any]] = None,
    validator: Optional[RecordValidator] = None,
) -> Snapshot:
    """Build the catalog and publish it.

    Keyword arguments override the corresponding ``config`` values.

    Args:
        config: An :class:`LLMDbConfig`, a mapping validated into one, or a
            path to a YAML configuration file.
        sources: Source entries replacing ``config.sources``.
        allow: Allow filter replacing ``config.allow``.
        deny: Deny filter replacing ``config.deny``.
        prefer: Provider preference replacing ``config.prefer``.
        runtime_overrides: Filter/prefer overrides applied after the build.
        validator: Record validator for the build.

    Returns:
        The published snapshot.

    Raises:
        ConfigError: If the configuration is invalid.
        CatalogBuildError: If filters remove every model.
    """

    cfg = _coerce_config(config)
    if cfg.logging.level:
        set_component_level("llmdb", cfg.logging.level)

    if sources is None:
        sources = _configured_sources(cfg)

    snapshot = build_snapshot(
        sources,
        allow=cfg.allow if allow is None else allow,
        deny=cfg.deny if deny is None else deny,
        prefer=cfg.prefer if prefer is None else prefer,
        validator=validator,
    )
    snapshot = apply_runtime_overrides(snapshot, runtime_overrides)
    return store.publish(snapshot)


def load_empty() -> Snapshot:
    """Publish a catalog with no providers or models."""

    return store.publish(build_from_records([], []))


def snapshot() -> Optional[Snapshot]:
    return store.current()


def epoch() -> int:
    return store.epoch()


def providers() -> List[Provider]:
    """All providers, sorted by id."""

    snap = store.current()
    if snap is None:
        return []
    return [snap.providers_by_id[pid] for pid in sorted(snap.providers_by_id)]


def provider(provider_id: Any) -> Optional[Provider]:
    snap = store.current()
    if snap is None:
        return None
    try:
        return snap.providers_by_id.get(normalize_provider_id(provider_id))
    except BadProviderError:
        return None


def models(provider_id: Any = None) -> List[Model]:
    """All models, or one provider's models when ``provider_id`` is given."""

    snap = store.current()
    if snap is None:
        return []
    if provider_id is None:
        return snap.all_models()
    try:
        return list(snap.models_by_provider.get(normalize_provider_id(provider_id), ()))
    except BadProviderError:
        return []


def model(spec: Any, model_id: Optional[str] = None, *, scope: Any = None) -> Optional[Model]:
    """Look up a model by spec, by ``(provider, model_id)``, or by bare id.

    Returns:
        The model, or ``None`` if the spec does not resolve.
    """

    target = (spec, model_id) if model_id is not None else spec
    try:
        return resolve(target, scope).model
    except ResolutionError as exc:
        logger.debug("Model lookup for %r failed: %s", target, exc)
        return None


def allowed(spec: ModelSpec) -> bool:
    """Whether the current filters admit ``spec``.

    Aliases and region prefixes are resolved to the canonical id before the
    filters are evaluated. Unparseable specs are not allowed.
    """

    snap = store.current()
    if snap is None:
        return False
    if isinstance(spec, Model):
        provider_id, model_id = spec.provider, spec.id
    else:
        try:
            provider_id, model_id = parse_spec(spec, snapshot=snap)
        except ResolutionError:
            return False
    lookup_id, _ = split_region_prefix(snap, provider_id, model_id)
    # Filtered-out models keep their aliases here, so an alias is judged as its model.
    canonical = snap.base_aliases_by_key.get((provider_id, lookup_id), lookup_id)
    return is_allowed(snap.filters, provider_id, canonical)


def capabilities(spec: ModelSpec) -> Optional[Capabilities]:
    if isinstance(spec, Model):
        return spec.capabilities
    found = model(spec)
    return found.capabilities if found is not None else None


def parse(spec: Any) -> SpecPair:
    """Parse a spec into ``(provider, model_id)``; see :func:`llmdb.spec.parse_spec`."""

    return parse_spec(spec)


def _coerce_config(config: ConfigInput) -> LLMDbConfig:
    if config is None:
        return LLMDbConfig()
    if isinstance(config, LLMDbConfig):
        return config
    if isinstance(config, str):
        return load_config(config)
    if isinstance(config, Mapping):
        try:
            return LLMDbConfig.model_validate(dict(config))
        except ValueError as exc:
            raise ConfigError(f"Invalid configuration: {exc}") from exc
    raise ConfigError(
        "config must be an LLMDbConfig, a mapping, or a file path",
        context={"value_type": type(config).__name__},
    )


def _configured_sources(cfg: LLMDbConfig) -> List[SourceEntry]:
    entries: List[SourceEntry] = []
    for source_cfg in cfg.sources:
        try:
            source = get_source(source_cfg.name)
        except KeyError as exc:
            raise ConfigError(str(exc), context={"source": source_cfg.name}) from exc
        entries.append((source, source_cfg.options))
    return entries


__all__ = [
    "allowed",
    "candidates",
    "capabilities",
    "epoch",
    "load",
    "load_empty",
    "model",
    "models",
    "parse",
    "provider",
    "providers",
    "resolve",
    "select",
    "snapshot",
]
