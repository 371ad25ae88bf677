"""Configure pytest environment for all tests."""

import sys
from pathlib import Path

import pytest

# Get absolute paths
PROJECT_ROOT = Path(__file__).parent.parent.absolute()
SRC_PATH = PROJECT_ROOT / "src"

# Allow running the suite from a checkout without installing the package
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from llmdb import store  # noqa: E402
from llmdb.catalog.engine import build_from_records  # noqa: E402

PROVIDERS = [
    {"id": "openai", "name": "OpenAI"},
    {"id": "anthropic", "name": "Anthropic"},
    {"id": "google_vertex", "name": "Google Vertex AI"},
    {"id": "bedrock", "name": "Amazon Bedrock"},
]

MODELS = [
    {
        "id": "gpt-4",
        "provider": "openai",
        "name": "GPT-4",
        "aliases": ["gpt-4-0613"],
        "capabilities": {"tools": {"enabled": True, "parallel": True}, "json": {"native": True}},
    },
    {"id": "gpt-3.5-turbo", "provider": "openai", "name": "GPT-3.5 Turbo"},
    {
        "id": "claude-3-opus",
        "provider": "anthropic",
        "name": "Claude 3 Opus",
        "aliases": ["claude-opus"],
        "capabilities": {"tools": {"enabled": True}, "reasoning": {"enabled": True}},
    },
    {"id": "gemini-pro", "provider": "google_vertex", "name": "Gemini Pro"},
    {"id": "model:with:colons", "provider": "openai", "name": "Model with colons in ID"},
    {"id": "shared-model", "provider": "openai", "name": "Shared Model OpenAI"},
    {"id": "shared-model", "provider": "anthropic", "name": "Shared Model Anthropic"},
    {
        "id": "anthropic.claude-opus-4-1-20250805-v1:0",
        "provider": "bedrock",
        "name": "Claude Opus 4.1",
        "aliases": ["anthropic.claude-opus"],
    },
    {"id": "meta.llama3-2-3b-instruct-v1:0", "provider": "bedrock", "name": "Llama 3.2 3B"},
]


@pytest.fixture(autouse=True)
def clear_store():
    """Start and finish every test without a published snapshot."""
    store.clear()
    yield
    store.clear()


@pytest.fixture
def catalog_snapshot():
    """An unpublished snapshot of the shared test catalog."""
    return build_from_records(PROVIDERS, MODELS)


@pytest.fixture
def published(catalog_snapshot):
    """The shared test catalog, published to the default store."""
    return store.publish(catalog_snapshot)
