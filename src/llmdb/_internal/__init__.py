"""Internal helpers shared across llmdb (exceptions, logging)."""
