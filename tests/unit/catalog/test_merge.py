"""Tests for layered merging."""

from llmdb.catalog.merge import deep_merge, merge_layers, merge_models, merge_providers


def layer(providers=(), models=()):
    return {"providers": list(providers), "models": list(models)}


class TestDeepMerge:
    """Field-level precedence rules."""

    def test_maps_recurse(self):
        left = {"capabilities": {"tools": {"enabled": True, "strict": False}}}
        right = {"capabilities": {"tools": {"strict": True}}}
        assert deep_merge(left, right) == {"capabilities": {"tools": {"enabled": True, "strict": True}}}

    def test_aliases_union_higher_layer_first(self):
        merged = deep_merge({"aliases": ["a", "b"]}, {"aliases": ["c", "a"]})
        assert merged["aliases"] == ["c", "a", "b"]

    def test_other_lists_replaced(self):
        merged = deep_merge({"tags": ["old", "stable"]}, {"tags": ["new"]})
        assert merged["tags"] == ["new"]

    def test_falsy_values_override(self):
        left = {"deprecated": True, "name": "Old", "limits": {"context": 8192}}
        right = {"deprecated": False, "name": "", "limits": {"context": 0}}
        assert deep_merge(left, right) == {"deprecated": False, "name": "", "limits": {"context": 0}}

    def test_missing_keys_do_not_override(self):
        merged = deep_merge({"name": "GPT-4", "deprecated": True}, {"family": "gpt-4"})
        assert merged == {"name": "GPT-4", "deprecated": True, "family": "gpt-4"}

    def test_inputs_not_mutated(self):
        left = {"capabilities": {"tools": {"enabled": True}}, "aliases": ["a"]}
        right = {"capabilities": {"tools": {"strict": True}}, "aliases": ["b"]}
        deep_merge(left, right)
        assert left == {"capabilities": {"tools": {"enabled": True}}, "aliases": ["a"]}
        assert right == {"capabilities": {"tools": {"strict": True}}, "aliases": ["b"]}

    def test_scalar_replaces_map(self):
        assert deep_merge({"cost": {"input": 1.0}}, {"cost": None}) == {"cost": None}


class TestMergeLayers:
    """Reducing ranked layers into one provider list and one model list."""

    def test_one_record_per_key(self):
        base = layer(
            [{"id": "openai", "name": "OpenAI"}],
            [
                {"provider": "openai", "id": "gpt-4", "aliases": ["gpt-4-0613"]},
                {"provider": "openai", "id": "gpt-3.5-turbo"},
            ],
        )
        top = layer(
            [{"id": "openai", "doc": "https://platform.openai.com"}],
            [{"provider": "openai", "id": "gpt-4", "aliases": ["gpt-4-0314"], "name": "GPT-4"}],
        )

        providers, models = merge_layers([base, top])

        assert providers == [{"id": "openai", "name": "OpenAI", "doc": "https://platform.openai.com"}]
        assert [(m["provider"], m["id"]) for m in models] == [
            ("openai", "gpt-4"),
            ("openai", "gpt-3.5-turbo"),
        ]
        assert models[0]["aliases"] == ["gpt-4-0314", "gpt-4-0613"]
        assert models[0]["name"] == "GPT-4"

    def test_same_id_under_different_providers_stays_separate(self):
        models = merge_layers(
            [
                layer(models=[{"provider": "openai", "id": "shared"}]),
                layer(models=[{"provider": "anthropic", "id": "shared"}]),
            ]
        )[1]
        assert len(models) == 2

    def test_later_layer_wins(self):
        layers = [
            layer(models=[{"provider": "openai", "id": "m", "name": "first"}]),
            layer(models=[{"provider": "openai", "id": "m", "name": "second"}]),
            layer(models=[{"provider": "openai", "id": "m", "name": "third"}]),
        ]
        assert merge_layers(layers)[1][0]["name"] == "third"

    def test_empty_layer_is_noop(self):
        base = layer([{"id": "openai"}], [{"provider": "openai", "id": "gpt-4"}])
        assert merge_layers([base, layer()]) == merge_layers([base])
        assert merge_layers([{}, base]) == merge_layers([base])

    def test_no_layers(self):
        assert merge_layers([]) == ([], [])


def test_merge_helpers_key_records():
    assert merge_providers([{"id": "a", "name": "A"}], [{"id": "a", "doc": "d"}]) == [
        {"id": "a", "name": "A", "doc": "d"}
    ]
    assert merge_models(
        [{"provider": "p", "id": "m", "tags": ["x"]}], [{"provider": "p", "id": "m", "tags": ["y"]}]
    ) == [{"provider": "p", "id": "m", "tags": ["y"]}]
