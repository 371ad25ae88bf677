"""Tests for inline and file-backed sources."""

import json
import logging

import pytest

from llmdb._internal.exceptions import SourceError
from llmdb.sources import FileSource, InlineSource
from llmdb.sources.registry import get_source, list_sources


class TestInlineSource:
    def test_returns_payload(self):
        data = {"openai": {"models": [{"id": "gpt-4"}]}}
        assert InlineSource().load({"data": data}) is data

    @pytest.mark.parametrize("options", [{}, {"data": ["openai"]}])
    def test_missing_or_malformed_data(self, options):
        with pytest.raises(SourceError):
            InlineSource().load(options)

    def test_does_not_pull(self):
        assert not InlineSource.supports_pull
        with pytest.raises(NotImplementedError):
            InlineSource().pull({})


class TestFileSource:
    def test_json_file(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({"openai": {"models": [{"id": "gpt-4"}]}}), encoding="utf-8")
        assert FileSource().load({"path": str(path)}) == {"openai": {"models": [{"id": "gpt-4"}]}}

    def test_single_provider_yaml_file(self, tmp_path):
        path = tmp_path / "anthropic.yaml"
        path.write_text("id: anthropic\nmodels:\n  - id: claude-3-opus\n", encoding="utf-8")
        data = FileSource().load({"path": str(path)})
        assert data == {"anthropic": {"id": "anthropic", "models": [{"id": "claude-3-opus"}]}}

    def test_directory_accumulates_models(self, tmp_path):
        (tmp_path / "a.json").write_text(
            json.dumps({"openai": {"name": "OpenAI", "models": [{"id": "gpt-4"}]}}), encoding="utf-8"
        )
        (tmp_path / "b.yaml").write_text("openai:\n  models:\n    - id: gpt-4o\n", encoding="utf-8")
        (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

        data = FileSource().load({"path": str(tmp_path)})
        assert data["openai"]["name"] == "OpenAI"
        assert [m["id"] for m in data["openai"]["models"]] == ["gpt-4", "gpt-4o"]

    def test_bad_file_in_directory_skipped(self, tmp_path, caplog):
        (tmp_path / "good.json").write_text(json.dumps({"openai": {"models": []}}), encoding="utf-8")
        (tmp_path / "bad.json").write_text("{not json", encoding="utf-8")

        with caplog.at_level(logging.WARNING):
            data = FileSource().load({"path": str(tmp_path)})
        assert "openai" in data
        assert "bad.json" in caplog.text

    def test_single_bad_file_raises(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("openai: [unclosed\n", encoding="utf-8")
        with pytest.raises(SourceError):
            FileSource().load({"path": str(path)})

    @pytest.mark.parametrize("name", ["missing.json", "empty_dir"])
    def test_missing_data(self, tmp_path, name):
        (tmp_path / "empty_dir").mkdir()
        with pytest.raises(SourceError):
            FileSource().load({"path": str(tmp_path / name)})

    def test_path_required(self):
        with pytest.raises(SourceError):
            FileSource().load({})


class TestRegistry:
    def test_builtin_sources_registered(self):
        assert {"inline", "file", "models_dev"} <= set(list_sources())
        assert isinstance(get_source("file"), FileSource)

    def test_unknown_source(self):
        with pytest.raises(KeyError, match="Known:"):
            get_source("nope")
