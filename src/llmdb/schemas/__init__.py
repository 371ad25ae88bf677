"""Typed schemas for catalog records.

Provider and model records are pydantic models frozen after validation, so a
published snapshot cannot be mutated through the objects it hands out.
"""

from llmdb.schemas.model import (
    Capabilities,
    Cost,
    JsonCapability,
    Limits,
    Modalities,
    Model,
    ReasoningCapability,
    StreamingCapability,
    ToolsCapability,
)
from llmdb.schemas.provider import ConfigField, Provider

__all__ = [
    "Capabilities",
    "ConfigField",
    "Cost",
    "JsonCapability",
    "Limits",
    "Modalities",
    "Model",
    "Provider",
    "ReasoningCapability",
    "StreamingCapability",
    "ToolsCapability",
]
