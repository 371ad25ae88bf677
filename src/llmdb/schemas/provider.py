"""Provider record schema."""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from llmdb._internal.exceptions import BadProviderError
from llmdb.catalog.normalize import normalize_provider_id


class ConfigField(BaseModel):
    """A runtime configuration field a provider declares (e.g. a region)."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: str
    required: bool = False
    default: Any = None
    doc: Optional[str] = None


class Provider(BaseModel):
    """Metadata describing a model provider.

    Attributes:
        id: Canonical provider identifier such as 'openai' or 'google_vertex'.
        name: Human-readable provider name.
        base_url: API endpoint; may contain ``{variable}`` placeholders that
            callers resolve from ``config_schema`` values.
        env: Ordered credential environment variable names.
        config_schema: Declared runtime configuration fields.
        doc: Documentation URL.
        exclude_models: Globs of model ids this provider never publishes.
        region_prefixes: Routing prefixes (e.g. ``us.``) that denote regional
            variants of a canonical model id.
        extra: Unrecognized upstream fields kept for forward compatibility.

    Examples:
        >>> Provider(id="google-vertex").id
        'google_vertex'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    name: Optional[str] = None
    base_url: Optional[str] = None
    env: Tuple[str, ...] = ()
    config_schema: Tuple[ConfigField, ...] = ()
    doc: Optional[str] = None
    exclude_models: Tuple[str, ...] = ()
    region_prefixes: Tuple[str, ...] = ()
    extra: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("id", mode="before")
    @classmethod
    def _validate_id(cls, value: Any) -> str:
        # pydantic only collects ValueError and AssertionError.
        try:
            return normalize_provider_id(value)
        except BadProviderError as exc:
            raise ValueError(str(exc)) from exc


__all__ = ["ConfigField", "Provider"]
