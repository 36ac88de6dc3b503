"""Tests for the Field Metadata Registry."""

import re

import pytest

from recordforge.persistence.errors import DataAccessError, ErrorKind
from recordforge.registry import FieldMetadataRegistry
from fakes import FakeRepository, make_schema


@pytest.fixture
def visit_schema():
    return make_schema({
        "entity": "Visit",
        "table": "visit",
        "abbreviation": "VT",
        "fields": [
            {"name": "visitid", "primaryKey": True},
            {"name": "doctorid", "foreignKey": {
                "table": "doctor", "keyColumn": "doctorid",
                "display": "CONCAT(firstname, ' ', surname)",
            }},
            {"name": "diagnosis", "required": True},
        ],
    })


@pytest.fixture
def registry(visit_schema):
    prescription = make_schema({
        "entity": "Prescription",
        "abbreviation": "PR",
        "keyFormat": "numeric",
        "fields": [{"name": "prescriptionid", "primaryKey": True}],
    })
    drug = make_schema({
        "entity": "Drug",
        "abbreviation": "DG",
        "keyFormat": "numeric",
        "fields": [{"name": "drugid", "type": "integer", "primaryKey": True}],
    })
    return FieldMetadataRegistry({s.name: s for s in (visit_schema, prescription, drug)})


class TestForeignKeyOptions:
    def test_ordered_by_display_value_ascending(self, registry, visit_schema):
        repo = FakeRepository(lookups={"doctor": [("D1", "Alice Smith"), ("D2", "Bob Jones")]})
        options = registry.resolve_foreign_key_options(visit_schema.get_field("doctorid"), repo)
        assert options == [("D1", "Alice Smith"), ("D2", "Bob Jones")]

    def test_reorders_unsorted_lookup(self, registry, visit_schema):
        repo = FakeRepository(lookups={"doctor": [("D2", "Bob Jones"), ("D1", "Alice Smith")]})
        options = registry.resolve_foreign_key_options(visit_schema.get_field("doctorid"), repo)
        assert [display for _, display in options] == ["Alice Smith", "Bob Jones"]

    def test_ties_broken_by_key(self, registry, visit_schema):
        repo = FakeRepository(lookups={"doctor": [("D9", "Sam Lee"), ("D3", "Sam Lee")]})
        options = registry.resolve_foreign_key_options(visit_schema.get_field("doctorid"), repo)
        assert options == [("D3", "Sam Lee"), ("D9", "Sam Lee")]

    def test_passes_relation_to_lookup(self, registry, visit_schema):
        repo = FakeRepository()
        registry.resolve_foreign_key_options(visit_schema.get_field("doctorid"), repo)
        assert repo.calls == [("lookup", "doctor", "doctorid", "CONCAT(firstname, ' ', surname)")]

    def test_field_without_relation_has_no_options(self, registry, visit_schema):
        repo = FakeRepository()
        assert registry.resolve_foreign_key_options(visit_schema.get_field("diagnosis"), repo) == []
        assert repo.calls == []

    def test_lookup_failure_propagates(self, registry, visit_schema):
        repo = FakeRepository()
        repo.fail["lookup"] = DataAccessError(ErrorKind.MISSING_TABLE, "no such table: doctor")
        with pytest.raises(DataAccessError) as info:
            registry.resolve_foreign_key_options(visit_schema.get_field("doctorid"), repo)
        assert info.value.kind == ErrorKind.MISSING_TABLE


class TestPrimaryKeys:
    def test_prefixed(self, registry):
        key = registry.generate_primary_key("Visit")
        assert re.fullmatch(r"VT[0-9A-F]{6}", key)

    def test_prefixed_keys_differ(self, registry):
        keys = {registry.generate_primary_key("Visit") for _ in range(50)}
        assert len(keys) > 1

    def test_numeric(self, registry):
        assert re.fullmatch(r"\d{10}", registry.generate_primary_key("Prescription"))

    def test_numeric_integer_key_fits_int_column(self, registry):
        key = int(registry.generate_primary_key("Drug"))
        assert 1 <= key <= 2**31 - 1

    def test_unknown_entity(self, registry):
        with pytest.raises(ValueError, match="Unknown entity"):
            registry.generate_primary_key("Nope")


class TestSchemas:
    def test_get_schema_case_insensitive(self, registry):
        assert registry.get_schema("visit").name == "Visit"

    def test_validate_delegates_to_field_rules(self, registry, visit_schema):
        result = registry.validate(visit_schema.get_field("doctorid"), "")
        assert not result.valid
        assert "doctor" in result.error_message
        assert registry.validate(visit_schema.get_field("diagnosis"), "Flu").valid
