"""Source interface for catalog data layers.

A source produces one layer of provider and model data::

    {
        "openai": {"id": "openai", "name": "OpenAI", "models": [{"id": "gpt-4o"}, ...]},
        "anthropic": {...},
    }

Sources return raw data only; normalization, validation, and filtering happen
in the build pipeline. ``load`` raises :class:`SourceError` only when the
source cannot produce *any* data. Partial failures (one bad file out of many)
are logged and absorbed by the source.

Fetching remote data is a separate, optional step: a source that supports it
sets ``supports_pull`` and overrides :meth:`Source.pull`. ``load`` never
touches the network.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Mapping, Optional

SourceData = Mapping[str, Mapping[str, Any]]


class Source(ABC):
    """Base class for catalog data sources."""

    name: ClassVar[str]
    supports_pull: ClassVar[bool] = False

    @abstractmethod
    def load(self, options: Mapping[str, Any]) -> SourceData:
        """Return provider-keyed data for one layer.

        Raises:
            SourceError: If no data can be produced at all.
        """

    def pull(self, options: Mapping[str, Any]) -> Optional[str]:
        """Fetch remote data into the local cache.

        Returns:
            The cache path written, or ``None`` when upstream reported no change.
        """
        raise NotImplementedError(f"Source '{self.name}' does not support pull")


__all__ = ["Source", "SourceData"]
