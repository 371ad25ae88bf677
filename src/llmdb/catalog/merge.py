"""Merge ranked data layers into one provider list and one model list."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, MutableMapping, Sequence, Tuple

# List fields whose values accumulate across layers instead of being replaced.
UNION_LIST_FIELDS = frozenset({"aliases"})

Record = Dict[str, Any]


def merge_layers(layers: Sequence[Mapping[str, Any]]) -> Tuple[List[Record], List[Record]]:
    """Combine layers left-to-right; later layers take precedence.

    Each layer is a mapping with ``providers`` and ``models`` record lists.
    Providers merge by ``id`` and models by ``(provider, id)`` using
    :func:`deep_merge`. A layer that contributes nothing is a no-op.

    Examples:
        >>> base = {"providers": [], "models": [{"provider": "openai", "id": "gpt-4", "aliases": ["a"]}]}
        >>> top = {"providers": [], "models": [{"provider": "openai", "id": "gpt-4", "aliases": ["b"]}]}
        >>> merge_layers([base, top])[1][0]["aliases"]
        ['b', 'a']
    """

    providers: List[Record] = []
    models: List[Record] = []
    for layer in layers:
        providers = merge_providers(providers, layer.get("providers") or ())
        models = merge_models(models, layer.get("models") or ())
    return providers, models


def merge_providers(base: Iterable[Mapping[str, Any]], override: Iterable[Mapping[str, Any]]) -> List[Record]:
    """Merge provider records by ``id``."""

    return _merge_keyed(base, override, lambda record: record.get("id"))


def merge_models(base: Iterable[Mapping[str, Any]], override: Iterable[Mapping[str, Any]]) -> List[Record]:
    """Merge model records by ``(provider, id)``."""

    return _merge_keyed(base, override, lambda record: (record.get("provider"), record.get("id")))


def deep_merge(left: Mapping[str, Any], right: Mapping[str, Any]) -> Record:
    """Merge ``right`` (higher precedence) onto ``left`` field by field.

    Maps recurse; lists in :data:`UNION_LIST_FIELDS` are unioned with the
    right-hand values first and duplicates dropped; any other list is replaced;
    scalars are replaced. Keys missing from ``right`` keep the ``left`` value,
    while explicit falsy values (``False``, ``0``, ``""``) still override.
    """

    result: Record = {key: _copy(value) for key, value in left.items()}
    for key, right_value in right.items():
        if key not in result:
            result[key] = _copy(right_value)
            continue
        left_value = result[key]
        if isinstance(left_value, Mapping) and isinstance(right_value, Mapping):
            result[key] = deep_merge(left_value, right_value)
        elif _is_list(left_value) and _is_list(right_value):
            if key in UNION_LIST_FIELDS:
                result[key] = _union(right_value, left_value)
            else:
                result[key] = list(right_value)
        else:
            result[key] = _copy(right_value)
    return result


def _merge_keyed(base, override, key_fn) -> List[Record]:
    merged: MutableMapping[Any, Record] = {}
    for record in base:
        merged[key_fn(record)] = dict(record)
    for record in override:
        key = key_fn(record)
        if key in merged:
            merged[key] = deep_merge(merged[key], record)
        else:
            merged[key] = {k: _copy(v) for k, v in record.items()}
    return list(merged.values())


def _is_list(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _union(first: Iterable[Any], second: Iterable[Any]) -> List[Any]:
    seen = []
    for item in (*first, *second):
        if item not in seen:
            seen.append(item)
    return seen


def _copy(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _copy(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_copy(v) for v in value]
    return value


__all__ = ["UNION_LIST_FIELDS", "deep_merge", "merge_layers", "merge_models", "merge_providers"]
