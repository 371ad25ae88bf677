"""Catalog data sources and their registry.

Built-in sources are registered on import under their ``name``: ``inline``,
``file`` and ``models_dev``.
"""

from llmdb.sources.base import Source, SourceData
from llmdb.sources.local import FileSource, InlineSource
from llmdb.sources.models_dev import ModelsDevSource
from llmdb.sources.registry import get_source, list_sources, register_source

for _source in (InlineSource(), FileSource(), ModelsDevSource()):
    register_source(_source)
del _source

__all__ = [
    "FileSource",
    "InlineSource",
    "ModelsDevSource",
    "Source",
    "SourceData",
    "get_source",
    "list_sources",
    "register_source",
]
