"""Record validation between normalization and merge.

The validator is a pluggable collaborator with the narrow contract
``validate(record) -> (ok, errors)``. The default implementation checks each
record against the pydantic schemas but hands back the *original* normalized
dictionary, so schema defaults are never materialized before the merge (an
absent field in a higher-precedence layer must not override a lower one).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple, Type

from pydantic import BaseModel, ValidationError

from llmdb.schemas import Model, Provider

logger = logging.getLogger(__name__)


class RecordValidator(Protocol):
    """Decide whether a single normalized record is acceptable."""

    def validate_provider(self, record: Mapping[str, Any]) -> Tuple[bool, Sequence[str]]:
        ...

    def validate_model(self, record: Mapping[str, Any]) -> Tuple[bool, Sequence[str]]:
        ...


class SchemaValidator:
    """Validate records against the pydantic ``Provider``/``Model`` schemas."""

    def validate_provider(self, record: Mapping[str, Any]) -> Tuple[bool, Sequence[str]]:
        return self._check(Provider, record)

    def validate_model(self, record: Mapping[str, Any]) -> Tuple[bool, Sequence[str]]:
        return self._check(Model, record)

    @staticmethod
    def _check(schema: Type[BaseModel], record: Mapping[str, Any]) -> Tuple[bool, Sequence[str]]:
        try:
            schema.model_validate(dict(record))
        except ValidationError as exc:
            errors = [
                f"{'.'.join(str(loc) for loc in error['loc']) or '<root>'}: {error['msg']}"
                for error in exc.errors()
            ]
            return False, errors
        return True, ()


DEFAULT_VALIDATOR = SchemaValidator()


def validate_providers(
    records: Sequence[Mapping[str, Any]],
    validator: Optional[RecordValidator] = None,
) -> Tuple[List[Dict[str, Any]], int]:
    """Return the valid provider records and the number dropped."""

    checker = validator or DEFAULT_VALIDATOR
    return _partition(records, checker.validate_provider, "provider")


def validate_models(
    records: Sequence[Mapping[str, Any]],
    validator: Optional[RecordValidator] = None,
) -> Tuple[List[Dict[str, Any]], int]:
    """Return the valid model records and the number dropped."""

    checker = validator or DEFAULT_VALIDATOR
    return _partition(records, checker.validate_model, "model")


def _partition(records, check, kind: str) -> Tuple[List[Dict[str, Any]], int]:
    valid: List[Dict[str, Any]] = []
    dropped = 0
    for record in records:
        ok, errors = check(record)
        if ok:
            valid.append(dict(record))
            continue
        dropped += 1
        logger.debug(
            "Dropping invalid %s record %r: %s",
            kind,
            _describe(record),
            "; ".join(errors),
        )
    return valid, dropped


def _describe(record: Mapping[str, Any]) -> str:
    provider = record.get("provider")
    record_id = record.get("id", "<missing id>")
    return f"{provider}:{record_id}" if provider else str(record_id)


__all__ = [
    "DEFAULT_VALIDATOR",
    "RecordValidator",
    "SchemaValidator",
    "validate_models",
    "validate_providers",
]
