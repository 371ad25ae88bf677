"""Model record schema and capability objects.

Capability objects default to "not supported" except ``chat``; a record that
carries no capability data is treated as a plain chat model.

Examples:
    >>> m = Model(id="gpt-4o", provider="openai", capabilities={"tools": {"enabled": True}})
    >>> m.capabilities.tools.enabled, m.capabilities.json_.native
    (True, False)
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from llmdb._internal.exceptions import BadProviderError
from llmdb.catalog.normalize import normalize_provider_id


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")


class Modalities(_Frozen):
    input: Tuple[str, ...] = ()
    output: Tuple[str, ...] = ()


class ReasoningCapability(_Frozen):
    enabled: bool = False
    token_budget: Optional[int] = None


class ToolsCapability(_Frozen):
    enabled: bool = False
    streaming: bool = False
    strict: bool = False
    parallel: bool = False


class JsonCapability(_Frozen):
    native: bool = False
    schema_: bool = Field(default=False, alias="schema")
    strict: bool = False


class StreamingCapability(_Frozen):
    text: bool = False
    tool_calls: bool = False


class Capabilities(_Frozen):
    """Nested capability flags used by selection and policy checks."""

    chat: bool = True
    embeddings: bool = False
    reasoning: ReasoningCapability = Field(default_factory=ReasoningCapability)
    tools: ToolsCapability = Field(default_factory=ToolsCapability)
    json_: JsonCapability = Field(default_factory=JsonCapability, alias="json")
    streaming: StreamingCapability = Field(default_factory=StreamingCapability)


class Limits(_Frozen):
    context: Optional[int] = None
    output: Optional[int] = None


class Cost(_Frozen):
    """Prices per million tokens."""

    input: Optional[float] = None
    output: Optional[float] = None
    cache_read: Optional[float] = None
    cache_write: Optional[float] = None


class Model(BaseModel):
    """Structured metadata describing a catalogued model.

    Attributes:
        id: Canonical identifier, unique within its provider.
        provider: Identifier of the owning provider.
        provider_model_id: Identifier sent to the provider API (defaults to ``id``).
        name: Human-readable model name.
        family: Model family derived during enrichment when absent.
        aliases: Alternate identifiers resolving to ``id`` under the same provider.
        modalities: Accepted input and produced output modalities.
        capabilities: Nested capability flags.
        limits: Context and output token limits.
        cost: Token prices.
        tags: Free-form labels.
        deprecated: Whether the provider has deprecated the model.
        extra: Unrecognized upstream fields kept for forward compatibility.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", protected_namespaces=())

    id: str = Field(min_length=1)
    provider: str
    provider_model_id: Optional[str] = None
    name: Optional[str] = None
    family: Optional[str] = None
    aliases: Tuple[str, ...] = ()
    modalities: Modalities = Field(default_factory=Modalities)
    capabilities: Capabilities = Field(default_factory=Capabilities)
    limits: Limits = Field(default_factory=Limits)
    cost: Cost = Field(default_factory=Cost)
    tags: Tuple[str, ...] = ()
    deprecated: bool = False
    extra: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("provider", mode="before")
    @classmethod
    def _validate_provider(cls, value: Any) -> str:
        try:
            return normalize_provider_id(value)
        except BadProviderError as exc:
            raise ValueError(str(exc)) from exc

    @property
    def key(self) -> Tuple[str, str]:
        """Return the ``(provider, id)`` pair used by the catalog indexes."""
        return (self.provider, self.id)


__all__ = [
    "Capabilities",
    "Cost",
    "JsonCapability",
    "Limits",
    "Modalities",
    "Model",
    "ReasoningCapability",
    "StreamingCapability",
    "ToolsCapability",
]
