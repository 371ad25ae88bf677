"""Catalog build pipeline: normalize, validate, merge, filter, enrich, index.

The pipeline entry points live in :mod:`llmdb.catalog.engine`; this package
re-exports the dependency-free building blocks only.
"""

from llmdb.catalog.filters import (
    ALL,
    FilterSet,
    apply_filters,
    compile_filters,
    compile_pattern,
    is_allowed,
)
from llmdb.catalog.index import CatalogIndexes, build_indexes
from llmdb.catalog.merge import deep_merge, merge_layers
from llmdb.catalog.normalize import normalize_provider_id

__all__ = [
    "ALL",
    "CatalogIndexes",
    "FilterSet",
    "apply_filters",
    "build_indexes",
    "compile_filters",
    "compile_pattern",
    "deep_merge",
    "is_allowed",
    "merge_layers",
    "normalize_provider_id",
]
