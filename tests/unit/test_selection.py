"""Tests for capability-based selection."""

import pytest

from llmdb._internal.exceptions import NoMatchError
from llmdb.catalog.engine import build_from_records
from llmdb.schemas import Capabilities
from llmdb.selection import CAPABILITY_PATHS, candidates, capability_value, select

PROVIDERS = [{"id": "openai"}, {"id": "anthropic"}, {"id": "mistral"}]
MODELS = [
    {
        "id": "gpt-4o",
        "provider": "openai",
        "capabilities": {
            "tools": {"enabled": True, "streaming": True, "parallel": True},
            "json": {"native": True, "schema": True, "strict": True},
            "streaming": {"text": True, "tool_calls": True},
        },
    },
    {"id": "text-embedding-3", "provider": "openai", "capabilities": {"chat": False, "embeddings": True}},
    {
        "id": "claude-sonnet",
        "provider": "anthropic",
        "capabilities": {"tools": {"enabled": True}, "reasoning": {"enabled": True}},
    },
    {"id": "mistral-small", "provider": "mistral", "capabilities": {"tools": True}},
]


@pytest.fixture
def selection_snapshot():
    return build_from_records(PROVIDERS, MODELS, prefer=["mistral"])


class TestCapabilityValue:
    def test_every_key_resolves(self):
        caps = Capabilities()
        for key in CAPABILITY_PATHS:
            assert capability_value(caps, key) == (key == "chat")

    def test_aliased_fields(self):
        caps = Capabilities.model_validate({"json": {"schema": True}})
        assert capability_value(caps, "json_schema") is True

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="Unknown capability key"):
            capability_value(Capabilities(), "vision")


class TestSelect:
    """Selection honours require/forbid, scope, and provider preference."""

    def test_snapshot_prefer_is_default_order(self, selection_snapshot):
        assert select(require={"tools": True}, snapshot=selection_snapshot) == ("mistral", "mistral-small")

    def test_explicit_prefer(self, selection_snapshot):
        found = select(require={"tools": True}, prefer=["openai"], snapshot=selection_snapshot)
        assert found == ("openai", "gpt-4o")

    def test_empty_prefer_sorts_providers(self, selection_snapshot):
        found = select(require={"tools": True}, prefer=[], snapshot=selection_snapshot)
        assert found == ("anthropic", "claude-sonnet")

    def test_forbid(self, selection_snapshot):
        found = select(
            require={"tools": True},
            forbid={"reasoning": True},
            prefer=["anthropic", "openai"],
            snapshot=selection_snapshot,
        )
        assert found == ("openai", "gpt-4o")

    def test_scope(self, selection_snapshot):
        found = select(require={"embeddings": True}, scope="openai", snapshot=selection_snapshot)
        assert found == ("openai", "text-embedding-3")

    def test_no_match(self, selection_snapshot):
        with pytest.raises(NoMatchError) as exc_info:
            select(require={"json_strict": True}, scope="anthropic", snapshot=selection_snapshot)
        assert exc_info.value.code == "no_match"

    def test_unknown_key_rejected(self, selection_snapshot):
        with pytest.raises(ValueError):
            select(require={"vision": True}, snapshot=selection_snapshot)


class TestCandidates:
    def test_all_matches_in_preference_order(self, selection_snapshot):
        found = candidates(require={"tools": True}, prefer=["openai"], snapshot=selection_snapshot)
        assert found == [
            ("openai", "gpt-4o"),
            ("anthropic", "claude-sonnet"),
            ("mistral", "mistral-small"),
        ]

    def test_nested_flags(self, selection_snapshot):
        found = candidates(
            require={"tools_parallel": True, "streaming_tool_calls": True},
            snapshot=selection_snapshot,
        )
        assert found == [("openai", "gpt-4o")]

    def test_without_snapshot(self):
        assert candidates(require={"chat": True}) == []
