"""Tests for the lookup indexes."""

import pytest

from llmdb._internal.exceptions import CatalogBuildError
from llmdb.catalog.index import build_alias_index, build_indexes
from llmdb.schemas import Model, Provider

PROVIDERS = [Provider(id="openai"), Provider(id="anthropic")]
MODELS = [
    Model(id="gpt-4", provider="openai", aliases=("gpt-4-0613",)),
    Model(id="gpt-4o", provider="openai"),
    Model(id="claude-3-opus", provider="anthropic", aliases=("claude-opus", "opus")),
]


class TestBuildIndexes:
    def test_all_indexes(self):
        indexes = build_indexes(PROVIDERS, MODELS)

        assert set(indexes.providers_by_id) == {"openai", "anthropic"}
        assert indexes.models_by_key[("openai", "gpt-4o")] is MODELS[1]
        assert [m.id for m in indexes.models_by_provider["openai"]] == ["gpt-4", "gpt-4o"]
        assert indexes.aliases_by_key == {
            ("openai", "gpt-4-0613"): "gpt-4",
            ("anthropic", "claude-opus"): "claude-3-opus",
            ("anthropic", "opus"): "claude-3-opus",
        }

    def test_indexes_are_read_only(self):
        indexes = build_indexes(PROVIDERS, MODELS)
        with pytest.raises(TypeError):
            indexes.models_by_key[("openai", "new")] = MODELS[0]

    def test_provider_without_models(self):
        indexes = build_indexes(PROVIDERS + [Provider(id="mistral")], MODELS)
        assert "mistral" in indexes.providers_by_id
        assert "mistral" not in indexes.models_by_provider

    def test_duplicate_key_rejected(self):
        with pytest.raises(CatalogBuildError):
            build_indexes(PROVIDERS, MODELS + [Model(id="gpt-4", provider="openai")])


def test_alias_index_keys_on_provider():
    index = build_alias_index([Model(id="a", provider="openai", aliases=("x",)), Model(id="b", provider="azure", aliases=("x",))])
    assert index == {("openai", "x"): "a", ("azure", "x"): "b"}
