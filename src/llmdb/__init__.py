"""
llmdb: a catalog of LLM providers and models
============================================

llmdb merges ranked layers of provider and model metadata, filters them with
allow/deny globs, indexes the result, and publishes it as an immutable
snapshot. Reads go through the published snapshot only.

Examples:
    import llmdb

    # Build from the configured sources (llmdb.yaml / LLMDB_* variables)
    llmdb.load(llmdb.load_config())

    # Resolve specs in either textual form
    llmdb.resolve("openai:gpt-4o-mini")
    llmdb.resolve("claude-3-5-sonnet@anthropic")
    llmdb.resolve("bedrock:us.anthropic.claude-opus-4-1-20250805-v1:0")

    # Capability-based selection
    provider, model_id = llmdb.select(require={"tools": True, "json_native": True})
"""

from __future__ import annotations

import importlib.metadata

from llmdb._internal.exceptions import (
    AmbiguousModelError,
    BadProviderError,
    CatalogBuildError,
    ConfigError,
    ConfigValueError,
    EmptySegmentError,
    InvalidCharsError,
    InvalidFormatError,
    LLMDbError,
    ModelNotFoundError,
    NoMatchError,
    ResolutionError,
    SourceError,
    UnknownProviderError,
)
from llmdb._internal.logging import configure_logging, set_component_level
from llmdb.api import (
    allowed,
    candidates,
    capabilities,
    epoch,
    load,
    load_empty,
    model,
    models,
    parse,
    provider,
    providers,
    resolve,
    select,
    snapshot,
)
from llmdb.catalog.filters import ALL
from llmdb.config import LLMDbConfig, load_config
from llmdb.schemas import Capabilities, Model, Provider
from llmdb.spec import ResolvedModel, build_spec, format_spec, normalize_spec, parse_provider

try:
    __version__ = importlib.metadata.version("llmdb")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "ALL",
    "AmbiguousModelError",
    "BadProviderError",
    "Capabilities",
    "CatalogBuildError",
    "ConfigError",
    "ConfigValueError",
    "EmptySegmentError",
    "InvalidCharsError",
    "InvalidFormatError",
    "LLMDbConfig",
    "LLMDbError",
    "Model",
    "ModelNotFoundError",
    "NoMatchError",
    "Provider",
    "ResolutionError",
    "ResolvedModel",
    "SourceError",
    "UnknownProviderError",
    "allowed",
    "build_spec",
    "candidates",
    "capabilities",
    "configure_logging",
    "epoch",
    "format_spec",
    "load",
    "load_config",
    "load_empty",
    "model",
    "models",
    "normalize_spec",
    "parse",
    "parse_provider",
    "provider",
    "providers",
    "resolve",
    "select",
    "set_component_level",
    "snapshot",
]
