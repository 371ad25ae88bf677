"""Tests for the record validation step."""

import logging

from llmdb.catalog.validate import SchemaValidator, validate_models, validate_providers


class RejectDeprecated:
    """A custom validator that only accepts non-deprecated models."""

    def validate_provider(self, record):
        return True, ()

    def validate_model(self, record):
        if record.get("deprecated"):
            return False, ["deprecated models are not accepted"]
        return True, ()


class TestSchemaValidator:
    def test_valid_model(self):
        ok, errors = SchemaValidator().validate_model({"id": "gpt-4", "provider": "openai"})
        assert ok and not errors

    def test_reports_field_errors(self):
        ok, errors = SchemaValidator().validate_model({"id": "", "provider": "openai", "limits": {"context": "big"}})
        assert not ok
        assert any(error.startswith("id:") for error in errors)
        assert any(error.startswith("limits.context:") for error in errors)

    def test_bad_provider_id(self):
        ok, _ = SchemaValidator().validate_provider({"id": "not valid!"})
        assert not ok


class TestPartition:
    def test_returns_original_records_and_drop_count(self):
        records = [
            {"id": "gpt-4", "provider": "openai"},
            {"provider": "openai"},
            {"id": "x", "provider": "bad provider!"},
        ]
        valid, dropped = validate_models(records)
        assert valid == [{"id": "gpt-4", "provider": "openai"}]
        assert dropped == 2

    def test_defaults_are_not_materialized(self):
        valid, _ = validate_models([{"id": "gpt-4", "provider": "openai"}])
        assert "capabilities" not in valid[0]

    def test_drops_are_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="llmdb.catalog.validate"):
            validate_providers([{"id": "bad id!"}])
        assert "Dropping invalid provider" in caplog.text

    def test_custom_validator(self):
        records = [{"id": "a", "provider": "openai"}, {"id": "b", "provider": "openai", "deprecated": True}]
        valid, dropped = validate_models(records, RejectDeprecated())
        assert [r["id"] for r in valid] == ["a"]
        assert dropped == 1
