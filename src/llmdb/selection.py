"""Capability-based model selection over a snapshot."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from llmdb import store
from llmdb._internal.exceptions import NoMatchError
from llmdb.catalog.normalize import normalize_provider_id
from llmdb.catalog.snapshot import Snapshot
from llmdb.schemas import Capabilities, Model

# Capability key -> path into ``Capabilities.model_dump(by_alias=True)``.
CAPABILITY_PATHS: Mapping[str, Tuple[str, ...]] = {
    "chat": ("chat",),
    "embeddings": ("embeddings",),
    "reasoning": ("reasoning", "enabled"),
    "tools": ("tools", "enabled"),
    "tools_streaming": ("tools", "streaming"),
    "tools_strict": ("tools", "strict"),
    "tools_parallel": ("tools", "parallel"),
    "json_native": ("json", "native"),
    "json_schema": ("json", "schema"),
    "json_strict": ("json", "strict"),
    "streaming_text": ("streaming", "text"),
    "streaming_tool_calls": ("streaming", "tool_calls"),
}

Requirements = Mapping[str, Any]


def capability_value(capabilities: Capabilities, key: str) -> Any:
    """Read the flag a capability key refers to.

    Raises:
        ValueError: If ``key`` is not a known capability key.
    """

    try:
        path = CAPABILITY_PATHS[key]
    except KeyError:
        raise ValueError(
            f"Unknown capability key {key!r}; expected one of {sorted(CAPABILITY_PATHS)}"
        ) from None
    value: Any = capabilities.model_dump(by_alias=True)
    for part in path:
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


def matches(model: Model, require: Optional[Requirements] = None, forbid: Optional[Requirements] = None) -> bool:
    """True when every ``require`` entry holds and no ``forbid`` entry does."""

    for key, expected in (require or {}).items():
        if capability_value(model.capabilities, key) != expected:
            return False
    for key, expected in (forbid or {}).items():
        if capability_value(model.capabilities, key) == expected:
            return False
    return True


def provider_order(
    snapshot: Optional[Snapshot],
    prefer: Optional[Iterable[str]] = None,
    scope: Optional[str] = None,
) -> List[str]:
    """Providers to search, preferred ones first and the rest sorted by id."""

    if scope is not None:
        return [normalize_provider_id(scope)]
    if snapshot is None:
        return []
    preferred = list(snapshot.prefer) if prefer is None else [normalize_provider_id(p) for p in prefer]
    known = sorted(snapshot.providers_by_id)
    ordered = [p for p in preferred if p in snapshot.providers_by_id]
    return ordered + [p for p in known if p not in ordered]


def candidates(
    require: Optional[Requirements] = None,
    forbid: Optional[Requirements] = None,
    prefer: Optional[Iterable[str]] = None,
    scope: Optional[str] = None,
    *,
    snapshot: Optional[Snapshot] = None,
) -> List[Tuple[str, str]]:
    """All ``(provider, model_id)`` pairs matching the requirements.

    Args:
        require: Capability key -> value every result must have.
        forbid: Capability key -> value no result may have.
        prefer: Provider order; defaults to the snapshot's ``prefer`` list.
        scope: Restrict the search to one provider.
        snapshot: Snapshot to search; defaults to the published one.
    """

    snap = snapshot if snapshot is not None else store.current()
    if snap is None:
        return []
    _check_keys(require)
    _check_keys(forbid)
    found = []
    for provider in provider_order(snap, prefer, scope):
        for model in snap.models_by_provider.get(provider, ()):
            if matches(model, require, forbid):
                found.append((provider, model.id))
    return found


def select(
    require: Optional[Requirements] = None,
    forbid: Optional[Requirements] = None,
    prefer: Optional[Iterable[str]] = None,
    scope: Optional[str] = None,
    *,
    snapshot: Optional[Snapshot] = None,
) -> Tuple[str, str]:
    """Return the first matching ``(provider, model_id)`` in preference order.

    Raises:
        NoMatchError: If no model matches.
    """

    found = candidates(require, forbid, prefer, scope, snapshot=snapshot)
    if not found:
        raise NoMatchError(
            "No model matches the capability requirements",
            context={"require": dict(require or {}), "forbid": dict(forbid or {}), "scope": scope},
        )
    return found[0]


def _check_keys(requirements: Optional[Requirements]) -> Dict[str, Any]:
    for key in requirements or {}:
        if key not in CAPABILITY_PATHS:
            raise ValueError(
                f"Unknown capability key {key!r}; expected one of {sorted(CAPABILITY_PATHS)}"
            )
    return dict(requirements or {})


__all__ = [
    "CAPABILITY_PATHS",
    "candidates",
    "capability_value",
    "matches",
    "provider_order",
    "select",
]
