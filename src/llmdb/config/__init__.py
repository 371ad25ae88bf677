"""Configuration loading and schema for llmdb."""

from llmdb.config.loader import load_config, load_from_env, load_yaml_file, merge_dicts, resolve_env_vars
from llmdb.config.schema import LLMDbConfig, LoggingConfig, SourceConfig

__all__ = [
    "LLMDbConfig",
    "LoggingConfig",
    "SourceConfig",
    "load_config",
    "load_from_env",
    "load_yaml_file",
    "merge_dicts",
    "resolve_env_vars",
]
