"""
tests/test_typemaps.py
The four dialect tables must be total and case-insensitive.
"""

from __future__ import annotations

import pytest

from schemabridge.models import FieldType
from schemabridge.typemaps import (
    API_DOC_TYPES,
    LANGUAGE_TYPES,
    SCHEMA_TYPES,
    VALIDATION_TYPES,
    api_doc_type,
    graphql_type,
    language_type,
    schema_type,
    validation_type,
)

KNOWN_TYPES = [t.value for t in FieldType]


class TestTableCoverage:
    @pytest.mark.parametrize("table", [SCHEMA_TYPES, VALIDATION_TYPES, API_DOC_TYPES, LANGUAGE_TYPES])
    def test_every_known_type_is_mapped(self, table) -> None:
        assert sorted(table) == sorted(KNOWN_TYPES)

    @pytest.mark.parametrize("abstract", KNOWN_TYPES)
    def test_lookups_defined_for_known_types(self, abstract: str) -> None:
        assert schema_type(abstract)
        assert validation_type(abstract)
        assert api_doc_type(abstract)["type"]
        assert language_type(abstract)


class TestKnownTokens:
    def test_schema_tokens(self) -> None:
        assert schema_type("string") == "String"
        assert schema_type("email") == "String"
        assert schema_type("number") == "Int"
        assert schema_type("float") == "Float"
        assert schema_type("boolean") == "Boolean"
        assert schema_type("date") == "DateTime"
        assert schema_type("json") == "Json"

    def test_validation_tokens(self) -> None:
        assert validation_type("email") == "z.string().email()"
        assert validation_type("number") == "z.number().int()"
        assert validation_type("float") == "z.number()"
        assert validation_type("date") == "z.date()"
        assert validation_type("json") == "z.any()"

    def test_api_doc_fragments(self) -> None:
        assert api_doc_type("email") == {"type": "string", "format": "email"}
        assert api_doc_type("number") == {"type": "integer"}
        assert api_doc_type("date") == {"type": "string", "format": "date-time"}

    def test_language_tokens(self) -> None:
        assert language_type("number") == "number"
        assert language_type("float") == "number"
        assert language_type("date") == "Date"
        assert language_type("json") == "any"

    def test_graphql_scalars_derive_from_schema_table(self) -> None:
        assert graphql_type("number") == "Int"
        assert graphql_type("float") == "Float"
        assert graphql_type("boolean") == "Boolean"
        assert graphql_type("date") == "String"
        assert graphql_type("json") == "String"


class TestFallbacks:
    @pytest.mark.parametrize("unknown", ["hyperblob", "", "  ", "uuid"])
    def test_unknown_types_fall_back(self, unknown: str) -> None:
        assert schema_type(unknown) == "String"
        assert validation_type(unknown) == "z.string()"
        assert api_doc_type(unknown) == {"type": "string"}
        assert language_type(unknown) == "any"

    @pytest.mark.parametrize("spelling", ["STRING", "String", " string "])
    def test_lookups_are_case_insensitive(self, spelling: str) -> None:
        assert schema_type(spelling) == "String"
        assert validation_type(spelling) == "z.string()"
        assert language_type(spelling) == "string"

    def test_api_doc_fragment_is_a_copy(self) -> None:
        fragment = api_doc_type("string")
        fragment["description"] = "changed"
        assert api_doc_type("string") == {"type": "string"}
