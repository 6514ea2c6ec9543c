"""Tests for the ERD Pydantic models."""
from __future__ import annotations

import pytest
from pydantic import TypeAdapter, ValidationError

from src.shared.models.common import HealthStatus
from src.shared.models.erd import (
    Attribute,
    Cardinality,
    CardinalityKind,
    Entity,
    ErdWarning,
    MissingForeignKeyWarning,
    Severity,
    ValidateErdRequest,
    WarningCategory,
)


def _attr(name: str, constraints: str = "") -> Attribute:
    return Attribute(
        name=name,
        display_name=name,
        original_type="string",
        constraints=constraints,
        is_primary_key="PK" in constraints,
        is_foreign_key="FK" in constraints,
    )


class TestEntity:
    def test_primary_keys(self):
        entity = Entity(name="A", display_name="A", attributes=[_attr("id", "PK"), _attr("x")])
        assert [a.name for a in entity.primary_keys] == ["id"]

    def test_junction_table(self):
        entity = Entity(
            name="AB",
            display_name="AB",
            attributes=[_attr("a_id", "PK FK"), _attr("b_id", "PK FK")],
        )
        assert entity.is_junction_table

    def test_two_primary_keys_one_foreign_is_not_junction(self):
        entity = Entity(
            name="AB",
            display_name="AB",
            attributes=[_attr("a_id", "PK FK"), _attr("code", "PK")],
        )
        assert not entity.is_junction_table


class TestCardinality:
    def test_accepts_wire_names(self):
        card = Cardinality.model_validate({"kind": "one-to-one", "from": "one", "to": "one"})
        assert card.kind is CardinalityKind.ONE_TO_ONE
        assert card.from_side == "one"


class TestWarningUnion:
    def test_discriminates_on_type(self):
        adapter = TypeAdapter(ErdWarning)
        warning = adapter.validate_python(
            {
                "type": "missing_foreign_key",
                "message": "m",
                "fixData": {
                    "entityName": "B",
                    "columnName": "a_id",
                    "referencedEntity": "A",
                },
            }
        )
        assert isinstance(warning, MissingForeignKeyWarning)
        assert warning.severity is Severity.WARNING
        assert warning.category is WarningCategory.RELATIONSHIPS

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            TypeAdapter(ErdWarning).validate_python({"type": "nope", "message": "m"})


class TestRequests:
    def test_validate_request_accepts_camel_case(self):
        req = ValidateErdRequest.model_validate({"mermaidContent": "A {\n}"})
        assert req.mermaid_content == "A {\n}"
        assert req.options.include_corrected_erd is None

    def test_validate_request_rejects_empty(self):
        with pytest.raises(ValidationError):
            ValidateErdRequest(mermaid_content="")


class TestHealthStatus:
    def test_invalid_status_rejected(self):
        with pytest.raises(ValidationError):
            HealthStatus(status="sleepy", service_name="s", version="1", uptime_seconds=0)
