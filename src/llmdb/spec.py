"""Model spec parsing, formatting, and resolution.

A *spec* names one model. Four input forms are accepted:

* ``"provider:model"`` (colon form)
* ``"model@provider"`` (at form)
* a bare model id, optionally with an explicit ``scope`` provider
* a ``(provider, model_id)`` pair, which bypasses string parsing

Model ids routinely contain the other form's separator (Bedrock revisions
such as ``...-v1:0``, Vertex pins such as ``...@20251001``), so only the
provider segment is checked for separator characters.

When a string contains both ``:`` and ``@`` and no explicit format is
requested, the separator that occurs first decides the split. If that split
yields a provider segment that is malformed or not in the catalog, the other
split is tried and used only if it succeeds::

    >>> parse_spec("openai:model@ambiguous")  # doctest: +SKIP
    ('openai', 'model@ambiguous')
    >>> parse_spec("model:version@google_vertex")  # doctest: +SKIP
    ('google_vertex', 'model:version')

Resolution maps aliases to canonical ids and handles provider-declared region
prefixes: for ``bedrock`` the id ``us.anthropic.claude-...`` is looked up as
``anthropic.claude-...`` and returned with the ``us.`` prefix re-attached to
the canonical id.

All failures raise a :class:`~llmdb._internal.exceptions.ResolutionError`
subclass whose ``code`` attribute carries the error tag.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, List, NamedTuple, Optional, Tuple, Union

from llmdb import store
from llmdb._internal.exceptions import (
    AmbiguousModelError,
    BadProviderError,
    EmptySegmentError,
    InvalidCharsError,
    InvalidFormatError,
    ModelNotFoundError,
    ResolutionError,
    UnknownProviderError,
)
from llmdb.catalog.normalize import normalize_provider_id
from llmdb.catalog.snapshot import Snapshot
from llmdb.schemas import Model

COLON = "colon"
AT = "at"

PROVIDER_COLON_MODEL = "provider_colon_model"
MODEL_AT_PROVIDER = "model_at_provider"
FILENAME_SAFE = "filename_safe"

SpecPair = Tuple[str, str]
SpecInput = Union[str, Tuple[Any, Any]]

# Errors on the first split that allow trying the other separator.
_FALLBACK_ERRORS = (InvalidCharsError, BadProviderError, UnknownProviderError)


class ResolvedModel(NamedTuple):
    """Result of :func:`resolve`.

    ``model_id`` is the canonical id, with any region prefix from the input
    re-attached; ``model.id`` is always the bare canonical id.
    """

    provider: str
    model_id: str
    model: Model


def parse_provider(value: Any, *, snapshot: Optional[Snapshot] = None) -> str:
    """Normalize a provider identifier and check it exists in the catalog.

    Args:
        value: Provider identifier (``"google-vertex"`` and ``"google_vertex"``
            are equivalent).
        snapshot: Snapshot to check against; defaults to the published one.

    Raises:
        BadProviderError: If the identifier is malformed.
        UnknownProviderError: If it is well formed but not in the catalog, or
            no catalog is loaded.
    """

    provider = normalize_provider_id(value)
    snap = snapshot if snapshot is not None else store.current()
    if snap is None or provider not in snap.providers_by_id:
        raise UnknownProviderError("Unknown provider", context={"provider": provider})
    return provider


def parse_spec(
    spec: SpecInput,
    format: Optional[str] = None,
    *,
    snapshot: Optional[Snapshot] = None,
) -> SpecPair:
    """Parse a spec string (or pair) into ``(provider, model_id)``.

    Args:
        spec: ``"provider:model"``, ``"model@provider"``, or a pair.
        format: ``"colon"`` or ``"at"`` to force one form and skip separator
            disambiguation. ``"colon"`` splits at the first ``:`` and ``"at"``
            at the last ``@``, so model ids may contain either separator.
            Ignored for pairs.
        snapshot: Snapshot providing the known providers.

    Raises:
        InvalidFormatError: If the input has no separator or is not a spec.
        EmptySegmentError: If either side of the separator is blank.
        InvalidCharsError: If the provider segment contains ``:`` or ``@``.
        BadProviderError: If the provider segment is malformed.
        UnknownProviderError: If the provider is not in the catalog.
        ValueError: If ``format`` is not recognized.
    """

    if isinstance(spec, tuple):
        provider, model_id = _check_pair(spec)
        return parse_provider(provider, snapshot=snapshot), model_id
    if not isinstance(spec, str):
        raise InvalidFormatError(
            "Spec must be a string or a (provider, model_id) pair",
            context={"value_type": type(spec).__name__},
        )

    if format is not None:
        if format not in (COLON, AT):
            raise ValueError(f"Unknown spec format: {format!r}")
        if (":" if format == COLON else "@") not in spec:
            raise InvalidFormatError(f"Spec has no separator for format '{format}'", context={"spec": spec})
        return _split(spec, format, snapshot)

    colon, at = spec.find(":"), spec.find("@")
    if colon < 0 and at < 0:
        raise InvalidFormatError(
            "Spec must be 'provider:model' or 'model@provider'", context={"spec": spec}
        )
    if at < 0 or 0 <= colon < at:
        primary, alternate = COLON, AT
    else:
        primary, alternate = AT, COLON

    try:
        return _split(spec, primary, snapshot)
    except _FALLBACK_ERRORS as exc:
        if colon < 0 or at < 0:
            raise
        primary_error = exc
    try:
        return _split(spec, alternate, snapshot)
    except ResolutionError:
        raise primary_error from None


def format_spec(pair: Tuple[Any, str], format: str = PROVIDER_COLON_MODEL) -> str:
    """Render ``(provider, model_id)`` as a spec string.

    ``format`` is ``"provider_colon_model"`` (default), ``"model_at_provider"``,
    or ``"filename_safe"`` (the at form, which avoids ``:`` in file names).

    Raises:
        ValueError: If ``format`` is not recognized.
    """

    provider, model_id = pair
    if isinstance(provider, Enum):
        provider = provider.value
    if format == PROVIDER_COLON_MODEL:
        return f"{provider}:{model_id}"
    if format in (MODEL_AT_PROVIDER, FILENAME_SAFE):
        return f"{model_id}@{provider}"
    raise ValueError(f"Unknown spec format: {format!r}")


def normalize_spec(spec: SpecInput, *, snapshot: Optional[Snapshot] = None) -> SpecPair:
    """Return ``spec`` as a ``(provider, model_id)`` pair.

    Pairs are returned with the provider id normalized; the catalog is not
    consulted for them.
    """

    if isinstance(spec, tuple):
        provider, model_id = _check_pair(spec)
        return normalize_provider_id(provider), model_id
    return parse_spec(spec, snapshot=snapshot)


def build_spec(
    spec: SpecInput,
    format: str = PROVIDER_COLON_MODEL,
    *,
    snapshot: Optional[Snapshot] = None,
) -> str:
    """Convert a spec in any accepted form into ``format``."""

    return format_spec(normalize_spec(spec, snapshot=snapshot), format)


def resolve(
    spec: Any,
    scope: Any = None,
    *,
    snapshot: Optional[Snapshot] = None,
) -> ResolvedModel:
    """Resolve a spec to its provider, canonical id, and model record.

    Args:
        spec: Spec string, bare model id, or ``(provider, model_id)`` pair.
        scope: Provider to search when ``spec`` is a bare id. Ignored for
            pairs and for strings that parse as full specs. A string whose
            provider segment is invalid or unknown is retried as a bare id.
        snapshot: Snapshot to resolve against; defaults to the published one.

    Raises:
        InvalidFormatError: If ``spec`` is neither a string nor a valid pair.
        ModelNotFoundError: If nothing matches (including when no catalog is
            loaded and the input names no provider).
        AmbiguousModelError: If a bare id matches under several providers.
        ResolutionError: Any parse error for full spec strings.
    """

    snap = snapshot if snapshot is not None else store.current()

    if isinstance(spec, tuple):
        provider, model_id = _check_pair(spec)
        try:
            provider = normalize_provider_id(provider)
        except BadProviderError as exc:
            raise InvalidFormatError("Malformed (provider, model_id) pair", context={"spec": spec}) from exc
        return _lookup_or_raise(snap, provider, model_id)

    if not isinstance(spec, str):
        raise InvalidFormatError(
            "Spec must be a string or a (provider, model_id) pair",
            context={"value_type": type(spec).__name__},
        )

    if ":" in spec or "@" in spec:
        try:
            provider, model_id = parse_spec(spec, snapshot=snap)
        except _FALLBACK_ERRORS as exc:
            # Bare ids may contain separators (Bedrock "...-v1:0", Vertex "...@20251001").
            if scope is not None:
                return _lookup_or_raise(snap, normalize_provider_id(scope), spec.strip())
            try:
                return _resolve_bare(snap, spec.strip())
            except ModelNotFoundError:
                raise exc from None
        return _lookup_or_raise(snap, provider, model_id)

    model_id = spec.strip()
    if scope is not None:
        return _lookup_or_raise(snap, normalize_provider_id(scope), model_id)
    return _resolve_bare(snap, model_id)


def lookup(snapshot: Optional[Snapshot], provider: str, model_id: str) -> Optional[ResolvedModel]:
    """Find ``model_id`` (canonical, alias, or region-prefixed) under ``provider``."""

    if snapshot is None or not model_id:
        return None
    lookup_id, prefix = split_region_prefix(snapshot, provider, model_id)
    canonical = snapshot.aliases_by_key.get((provider, lookup_id), lookup_id)
    model = snapshot.models_by_key.get((provider, canonical))
    if model is None:
        return None
    return ResolvedModel(provider, prefix + canonical, model)


def split_region_prefix(snapshot: Snapshot, provider: str, model_id: str) -> Tuple[str, str]:
    """Return ``(lookup_id, prefix)``; ``prefix`` is empty when none applies."""

    entry = snapshot.providers_by_id.get(provider)
    if entry is None:
        return model_id, ""
    for prefix in entry.region_prefixes:
        if model_id.startswith(prefix) and len(model_id) > len(prefix):
            return model_id[len(prefix):], prefix
    return model_id, ""


def _resolve_bare(snapshot: Optional[Snapshot], model_id: str) -> ResolvedModel:
    matches: List[ResolvedModel] = []
    if snapshot is not None:
        for provider in snapshot.providers_by_id:
            match = lookup(snapshot, provider, model_id)
            if match is not None:
                matches.append(match)
    if not matches:
        raise ModelNotFoundError("Model not found", context={"model": model_id})
    if len(matches) > 1:
        raise AmbiguousModelError(
            "Model id matches under several providers; pass a scope or a full spec",
            context={"model": model_id, "providers": sorted(m.provider for m in matches)},
        )
    return matches[0]


def _lookup_or_raise(snapshot: Optional[Snapshot], provider: str, model_id: str) -> ResolvedModel:
    match = lookup(snapshot, provider, model_id)
    if match is None:
        raise ModelNotFoundError("Model not found", context={"provider": provider, "model": model_id})
    return match


def _split(spec: str, form: str, snapshot: Optional[Snapshot]) -> SpecPair:
    if form == COLON:
        provider, _, model_id = spec.partition(":")
    else:
        model_id, _, provider = spec.rpartition("@")
    provider, model_id = provider.strip(), model_id.strip()
    if not provider or not model_id:
        raise EmptySegmentError("Spec has an empty provider or model segment", context={"spec": spec})
    if ":" in provider or "@" in provider:
        raise InvalidCharsError(
            "Provider segment contains a separator character",
            context={"spec": spec, "provider": provider},
        )
    return parse_provider(provider, snapshot=snapshot), model_id


def _check_pair(spec: Tuple[Any, ...]) -> Tuple[Any, str]:
    if len(spec) != 2 or not isinstance(spec[1], str) or not isinstance(spec[0], (str, Enum)):
        raise InvalidFormatError("Expected a (provider, model_id) pair of strings", context={"spec": spec})
    return spec[0], spec[1]


__all__ = [
    "AT",
    "COLON",
    "FILENAME_SAFE",
    "MODEL_AT_PROVIDER",
    "PROVIDER_COLON_MODEL",
    "ResolvedModel",
    "build_spec",
    "format_spec",
    "lookup",
    "normalize_spec",
    "parse_provider",
    "parse_spec",
    "resolve",
    "split_region_prefix",
]
