"""Exception hierarchy for llmdb.

Build-time failures (configuration, sources, catalog assembly) and run-time
resolution failures share a single base class so callers can catch
``LLMDbError`` at their outer boundary. Resolution errors additionally carry a
stable ``code`` tag that callers can branch on without matching class names.

Examples:
    >>> from llmdb._internal.exceptions import ModelNotFoundError
    >>> err = ModelNotFoundError("no such model", context={"spec": "openai:nope"})
    >>> err.code
    'not_found'
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, Mapping, Optional


class LLMDbError(Exception):
    """Base class for all custom exceptions in llmdb."""

    def __init__(self, message: str, *, context: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = dict(context or {})

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value!r}" for key, value in self.context.items())
        return f"{self.message} ({details})"


class ConfigError(LLMDbError):
    """Raised when configuration cannot be loaded or parsed."""


class ConfigValueError(ConfigError):
    """Raised when a configuration value has the wrong shape or type."""


class SourceError(LLMDbError):
    """Raised by a data source that cannot produce any data."""


class CatalogBuildError(LLMDbError):
    """Raised when the build pipeline would publish an unusable snapshot."""


class ResolutionError(LLMDbError):
    """Base class for spec parsing, resolution, and selection failures."""

    code: ClassVar[str] = "error"


class InvalidFormatError(ResolutionError):
    """The input carries no recognizable separator or is not a spec at all."""

    code = "invalid_format"


class EmptySegmentError(ResolutionError):
    """A separator was found but one side of it is empty."""

    code = "empty_segment"


class InvalidCharsError(ResolutionError):
    """The provider segment contains a separator character."""

    code = "invalid_chars"


class BadProviderError(ResolutionError):
    """The provider identifier is syntactically malformed."""

    code = "bad_provider"


class UnknownProviderError(ResolutionError):
    """The provider identifier is well formed but absent from the snapshot."""

    code = "unknown_provider"


class ModelNotFoundError(ResolutionError):
    """No model or alias matches under the requested provider(s)."""

    code = "not_found"


class AmbiguousModelError(ResolutionError):
    """A bare model id matches under more than one provider."""

    code = "ambiguous"


class NoMatchError(ResolutionError):
    """Capability-filtered selection found no model."""

    code = "no_match"


__all__ = [
    "LLMDbError",
    "ConfigError",
    "ConfigValueError",
    "SourceError",
    "CatalogBuildError",
    "ResolutionError",
    "InvalidFormatError",
    "EmptySegmentError",
    "InvalidCharsError",
    "BadProviderError",
    "UnknownProviderError",
    "ModelNotFoundError",
    "AmbiguousModelError",
    "NoMatchError",
]
