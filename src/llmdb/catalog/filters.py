"""Allow/deny filter compilation and evaluation.

Filters are configured per provider as lists of glob strings where ``*``
matches any run of characters and the whole model id must match. ``allow``
may also be the universal sentinel :data:`ALL`; ``deny`` is always a mapping.

Evaluation rules, in order:

1. A model whose id matches a deny pattern for its provider is excluded.
2. Under ``allow == ALL`` every remaining model is included.
3. A non-empty allow map is exhaustive: providers it does not mention keep
   nothing. An empty allow map restricts nobody.
4. A provider mapped to an empty list keeps all of its models; otherwise a
   model is kept iff its id matches one of the provider's allow patterns.

Examples:
    >>> filters, _ = compile_filters({"openai": ["gpt-4*"]}, {})
    >>> is_allowed(filters, "openai", "gpt-4-turbo"), is_allowed(filters, "openai", "gpt-3.5-turbo")
    (True, False)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import (
    TYPE_CHECKING,
    Any,
    Iterable,
    List,
    Mapping,
    Optional,
    Pattern,
    Sequence,
    Tuple,
    Union,
)

from llmdb._internal.exceptions import BadProviderError, CatalogBuildError, ConfigValueError
from llmdb.catalog.normalize import normalize_provider_id

if TYPE_CHECKING:
    from llmdb.schemas import Model, Provider

ALL = "all"

CompiledPatterns = Mapping[str, Tuple[Pattern[str], ...]]
AllowSpec = Union[str, Mapping[str, Sequence[str]]]
DenySpec = Mapping[str, Sequence[str]]


@dataclass(frozen=True)
class FilterSet:
    """Compiled allow/deny patterns keyed by provider id.

    ``allow_globs`` and ``deny_globs`` keep the normalized glob text the
    patterns were compiled from.
    """

    allow: Union[str, CompiledPatterns] = ALL
    deny: CompiledPatterns = field(default_factory=lambda: MappingProxyType({}))
    allow_globs: Union[str, Mapping[str, Tuple[str, ...]]] = ALL
    deny_globs: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def is_universal(self) -> bool:
        return self.allow == ALL


def compile_pattern(glob: str) -> Pattern[str]:
    """Compile a ``*`` glob into a fully anchored regular expression."""

    if not isinstance(glob, str):
        raise ConfigValueError(
            "Filter patterns must be strings", context={"value": glob, "value_type": type(glob).__name__}
        )
    parts = (re.escape(part) for part in glob.split("*"))
    return re.compile(rf"\A{'.*'.join(parts)}\Z", re.DOTALL)


def compile_filters(
    allow: Optional[AllowSpec],
    deny: Optional[DenySpec],
    known_providers: Optional[Iterable[str]] = None,
) -> Tuple[FilterSet, List[str]]:
    """Compile filter configuration.

    Args:
        allow: :data:`ALL` (or ``None``) or a mapping of provider id to globs.
        deny: Mapping of provider id to globs (``None`` means no deny rules).
        known_providers: Provider ids present in the catalog. When given,
            filter keys outside this set are reported back.

    Returns:
        The compiled :class:`FilterSet` and the sorted list of unknown provider
        keys. Unknown keys are still compiled.

    Raises:
        ConfigValueError: If either side has the wrong shape.
    """

    if allow is None or allow == ALL:
        compiled_allow: Union[str, CompiledPatterns] = ALL
        allow_globs: Union[str, Mapping[str, Tuple[str, ...]]] = ALL
    elif isinstance(allow, Mapping):
        compiled_allow, allow_globs = _compile_side(allow, "allow")
    else:
        raise ConfigValueError(
            "filters.allow must be 'all' or a mapping of provider to patterns",
            context={"value_type": type(allow).__name__},
        )

    if deny is None:
        deny = {}
    if not isinstance(deny, Mapping):
        raise ConfigValueError(
            "filters.deny must be a mapping of provider to patterns",
            context={"value_type": type(deny).__name__},
        )
    compiled_deny, deny_globs = _compile_side(deny, "deny")

    unknown: List[str] = []
    if known_providers is not None:
        known = set(known_providers)
        mentioned = set(compiled_deny)
        if isinstance(compiled_allow, Mapping):
            mentioned.update(compiled_allow)
        unknown = sorted(mentioned - known)

    filters = FilterSet(
        allow=compiled_allow,
        deny=compiled_deny,
        allow_globs=allow_globs,
        deny_globs=deny_globs,
    )
    return filters, unknown


def compile_excludes(providers: Iterable["Provider"]) -> CompiledPatterns:
    """Compile each provider's ``exclude_models`` globs."""

    return MappingProxyType(
        {
            provider.id: tuple(compile_pattern(glob) for glob in provider.exclude_models)
            for provider in providers
            if provider.exclude_models
        }
    )


def matches_any(model_id: str, patterns: Sequence[Pattern[str]]) -> bool:
    return any(pattern.match(model_id) for pattern in patterns)


def is_allowed(filters: FilterSet, provider: str, model_id: str) -> bool:
    """Evaluate the filter rules for a single ``(provider, model_id)`` pair."""

    if matches_any(model_id, filters.deny.get(provider, ())):
        return False
    if filters.is_universal:
        return True
    allow = filters.allow
    if not isinstance(allow, Mapping):
        raise ConfigValueError(
            "Allow filter must be 'all' or a provider mapping", context={"value": allow}
        )
    if provider not in allow:
        return not allow
    patterns = allow[provider]
    return not patterns or matches_any(model_id, patterns)


def apply_filters(
    models: Iterable["Model"],
    filters: FilterSet,
    excludes: Optional[CompiledPatterns] = None,
) -> List["Model"]:
    """Return the models that pass ``filters`` and provider exclusions."""

    excludes = excludes or {}
    kept = []
    for model in models:
        if matches_any(model.id, excludes.get(model.provider, ())):
            continue
        if is_allowed(filters, model.provider, model.id):
            kept.append(model)
    return kept


def ensure_not_emptied(
    before: Sequence[Any],
    after: Sequence[Any],
    filters: FilterSet,
    allow: Optional[AllowSpec] = None,
    deny: Optional[DenySpec] = None,
) -> None:
    """Fail the build when a restrictive allow list removed every model.

    Raises:
        CatalogBuildError: If ``before`` was non-empty, ``after`` is empty, and
            ``allow`` is not universal.
    """

    if filters.is_universal or not before or after:
        return
    raise CatalogBuildError(
        "Filters eliminated all models; widen 'allow' (use 'all') or remove deny patterns",
        context={
            "allow": summarize_filter(allow if allow is not None else filters.allow_globs),
            "deny": summarize_filter(deny if deny is not None else filters.deny_globs),
            "models_before": len(before),
        },
    )


def summarize_filter(value: Any) -> str:
    """Render filter configuration compactly for error messages."""

    if value is None or value == ALL:
        return ALL
    if isinstance(value, Mapping):
        if not value:
            return "{}"
        keys = sorted(str(key) for key in value)
        if len(keys) > 5:
            return f"{keys[:5]} ... ({len(keys)} providers total)"
        return repr({key: _pattern_sources(value[key]) for key in sorted(value)})
    return repr(value)


def _pattern_sources(patterns: Iterable[Any]) -> List[str]:
    return [p.pattern if isinstance(p, re.Pattern) else str(p) for p in patterns]


def _compile_side(
    spec: Mapping[Any, Any], side: str
) -> Tuple[CompiledPatterns, Mapping[str, Tuple[str, ...]]]:
    compiled = {}
    globs_by_provider = {}
    for raw_provider, globs in spec.items():
        try:
            provider = normalize_provider_id(raw_provider)
        except BadProviderError as exc:
            raise ConfigValueError(
                f"filters.{side} keys must be provider identifiers",
                context={"key": raw_provider},
            ) from exc
        if isinstance(globs, str):
            globs = [globs]
        if not isinstance(globs, (list, tuple, set, frozenset)):
            raise ConfigValueError(
                f"filters.{side}.{provider} must be a list of patterns",
                context={"value_type": type(globs).__name__},
            )
        compiled[provider] = tuple(compile_pattern(glob) for glob in globs)
        globs_by_provider[provider] = tuple(globs)
    return MappingProxyType(compiled), MappingProxyType(globs_by_provider)


__all__ = [
    "ALL",
    "FilterSet",
    "apply_filters",
    "compile_excludes",
    "compile_filters",
    "compile_pattern",
    "ensure_not_emptied",
    "is_allowed",
    "matches_any",
    "summarize_filter",
]
