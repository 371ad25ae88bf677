"""Configuration schema.

The schema is deliberately small; unknown top-level keys are kept so that a
shared YAML file can carry settings for other tools.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from llmdb.catalog.filters import ALL


class SourceConfig(BaseModel):
    """A registered source name plus the options passed to its ``load``."""

    name: str
    options: Dict[str, Any] = Field(default_factory=dict)


class LoggingConfig(BaseModel):
    """Level for the ``llmdb`` logger; ``None`` leaves it untouched."""

    level: Optional[str] = None

    @field_validator("level", mode="before")
    @classmethod
    def _upper(cls, value: Any) -> Optional[str]:
        # Numeric levels (10, "20") are kept as their digit string.
        if value is None or value == "":
            return None
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        if not isinstance(value, str):
            raise ValueError("logging.level must be a level name or number")
        return value.strip().upper()


class LLMDbConfig(BaseModel):
    """Catalog build configuration.

    Attributes:
        allow: ``"all"`` or provider -> model id globs.
        deny: Provider -> model id globs; deny always wins over allow.
        prefer: Provider preference order for selection.
        sources: Ranked sources, lowest precedence first.
        logging: Level for the ``llmdb`` logger.
    """

    model_config = ConfigDict(extra="allow")

    allow: Union[str, Dict[str, List[str]]] = ALL
    deny: Dict[str, List[str]] = Field(default_factory=dict)
    prefer: List[str] = Field(default_factory=list)
    sources: List[SourceConfig] = Field(default_factory=list)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("allow")
    @classmethod
    def _check_allow(cls, value: Union[str, Dict[str, List[str]]]):
        if isinstance(value, str) and value != ALL:
            raise ValueError(f"allow must be '{ALL}' or a mapping of provider to patterns")
        return value
