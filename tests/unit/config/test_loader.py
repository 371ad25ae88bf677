"""Tests for configuration loading."""

import os

import pytest

from llmdb._internal.exceptions import ConfigError
from llmdb.config import LLMDbConfig, load_config
from llmdb.config.loader import load_from_env, merge_dicts, resolve_env_vars


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "llmdb.yaml"
    path.write_text(
        """
allow:
  openai: ["gpt-4*"]
deny:
  openai: ["*-preview"]
prefer: [anthropic, openai]
sources:
  - name: file
    options:
      path: ${CATALOG_DIR}/providers
logging:
  level: info
""",
        encoding="utf-8",
    )
    return path


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Run from an empty directory with no LLMDB_* variables set."""
    for key in list(os.environ):
        if key.startswith("LLMDB_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


class TestLoadConfig:
    def test_defaults_without_file(self):
        config = load_config()
        assert config.allow == "all"
        assert config.deny == {}
        assert config.sources == []
        assert config.logging.level is None

    def test_yaml_file(self, config_file, monkeypatch):
        monkeypatch.setenv("CATALOG_DIR", "/data")
        config = load_config(str(config_file))

        assert config.allow == {"openai": ["gpt-4*"]}
        assert config.prefer == ["anthropic", "openai"]
        assert config.sources[0].name == "file"
        assert config.sources[0].options == {"path": "/data/providers"}
        assert config.logging.level == "INFO"

    def test_default_file_in_working_directory(self, config_file):
        assert load_config().prefer == ["anthropic", "openai"]

    def test_config_path_from_environment(self, tmp_path, monkeypatch):
        other = tmp_path / "other.yaml"
        other.write_text("prefer: [google-vertex]\n", encoding="utf-8")
        monkeypatch.setenv("LLMDB_CONFIG", str(other))
        assert load_config().prefer == ["google-vertex"]

    def test_environment_overrides_file(self, config_file, monkeypatch):
        monkeypatch.setenv("LLMDB_PREFER", "openai, bedrock")
        monkeypatch.setenv("LLMDB_LOGGING_LEVEL", "debug")
        config = load_config(str(config_file))
        assert config.prefer == ["openai", "bedrock"]
        assert config.logging.level == "DEBUG"
        assert config.allow == {"openai": ["gpt-4*"]}

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("allow: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(str(path))

    @pytest.mark.parametrize("content", ["allow: some\n", "deny: [openai]\n", "sources: [{options: {}}]\n"])
    def test_invalid_values(self, tmp_path, content):
        path = tmp_path / "invalid.yaml"
        path.write_text(content, encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_unknown_keys_kept(self, tmp_path):
        path = tmp_path / "shared.yaml"
        path.write_text("other_tool:\n  enabled: true\n", encoding="utf-8")
        assert load_config(str(path)).model_extra == {"other_tool": {"enabled": True}}


class TestEnvironment:
    def test_nested_keys_and_types(self, monkeypatch):
        monkeypatch.setenv("LLMDB_LOGGING__LEVEL", "warning")
        monkeypatch.setenv("LLMDB_FEATURE__ENABLED", "yes")
        monkeypatch.setenv("LLMDB_FEATURE__RETRIES", "3")
        assert load_from_env() == {
            "logging": {"level": "warning"},
            "feature": {"enabled": True, "retries": 3},
        }

    def test_filter_globs_from_environment(self, monkeypatch):
        monkeypatch.setenv("LLMDB_DENY__OPENAI", "gpt-3*, *-preview")
        monkeypatch.setenv("LLMDB_ALLOW__GOOGLE_VERTEX", "gemini*")
        config = load_config()
        assert config.deny == {"openai": ["gpt-3*", "*-preview"]}
        assert config.allow == {"google_vertex": ["gemini*"]}

    def test_env_deny_merges_with_file(self, config_file, monkeypatch):
        monkeypatch.setenv("LLMDB_DENY__ANTHROPIC", "claude-2*")
        config = load_config(str(config_file))
        assert config.deny == {"openai": ["*-preview"], "anthropic": ["claude-2*"]}

    def test_numeric_logging_level(self, monkeypatch):
        monkeypatch.setenv("LLMDB_LOGGING_LEVEL", "10")
        assert load_from_env() == {"logging": {"level": "10"}}
        assert load_config().logging.level == "10"

    def test_numeric_logging_level_in_yaml(self, tmp_path):
        path = tmp_path / "level.yaml"
        path.write_text("logging:\n  level: 20\n", encoding="utf-8")
        assert load_config(str(path)).logging.level == "20"

    def test_reserved_keys_ignored(self, monkeypatch):
        monkeypatch.setenv("LLMDB_CONFIG", "x.yaml")
        monkeypatch.setenv("LLMDB_CACHE_DIR", "/tmp/cache")
        assert load_from_env() == {}

    def test_resolve_env_vars(self, monkeypatch):
        monkeypatch.setenv("HOME_DIR", "/home/me")
        monkeypatch.delenv("UNSET_VAR", raising=False)
        value = {"paths": ["${HOME_DIR}/a", "${UNSET_VAR}b"], "n": 1}
        assert resolve_env_vars(value) == {"paths": ["/home/me/a", "b"], "n": 1}


def test_merge_dicts():
    base = {"logging": {"level": "INFO"}, "prefer": ["a"]}
    assert merge_dicts(base, {"logging": {"other": 1}, "prefer": ["b"]}) == {
        "logging": {"level": "INFO", "other": 1},
        "prefer": ["b"],
    }
    assert base == {"logging": {"level": "INFO"}, "prefer": ["a"]}


def test_config_model_accepts_all_sentinel():
    assert LLMDbConfig(allow="all").allow == "all"
