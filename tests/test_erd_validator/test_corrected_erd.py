"""Tests for the corrected-ERD generator."""
from __future__ import annotations

from src.erd_validator.services.corrected_erd import (
    apply_corrections,
    generate_corrected_erd,
)
from src.erd_validator.services.erd_parser import parse_erd
from src.shared.models.erd import ParseResult

_FIXED_CATEGORIES = {
    "naming_conflict",
    "missing_foreign_key",
    "many_to_many_relationship",
}

EXPECTED_PROBLEM_OUTPUT = """\
erDiagram
    Customer {
        string name PK
        string customer_name "Customer name"
        int age
    }

    Product {
        guid name PK
        money price NOT NULL
    }

    Invoice {
        string name PK
        date duedate
        string customer_id FK "Foreign key to Customer"
    }

    CustomerProduct {
        string id PK "Unique identifier"
        string customer_id FK "Foreign key to Customer"
        string product_id FK "Foreign key to Product"
    }

    Customer ||--o{ Invoice : "receives"
    Customer ||--o{ CustomerProduct : "has"
    Product ||--o{ CustomerProduct : "has\""""


def _types(result: ParseResult) -> list[str]:
    return [w.type for w in result.warnings]


class TestGeneratedText:
    def test_problem_diagram(self, problem_result: ParseResult):
        assert generate_corrected_erd(problem_result) == EXPECTED_PROBLEM_OUTPUT

    def test_no_trailing_whitespace(self, clean_result: ParseResult):
        text = generate_corrected_erd(clean_result)
        assert text == text.rstrip()
        assert text.startswith("erDiagram\n")

    def test_untouched_constraints_and_descriptions_preserved(self):
        result = parse_erd(
            "Widget {\n"
            'string widget_id PK "Key"\n'
            'string code UK NOT NULL "Business code"\n'
            "choice(Red,Blue) colour\n"
            "}"
        )
        text = generate_corrected_erd(result)
        assert '        string name PK "Key"' in text
        assert '        string code UK NOT NULL "Business code"' in text
        assert "        choice(Red,Blue) colour" in text

    def test_relationships_keep_their_symbols(self):
        result = parse_erd(
            "A {\nstring id PK\n}\nB {\nstring id PK\nstring a_id FK\n}\n"
            "A |o--o{ B\n"
        )
        assert generate_corrected_erd(result).endswith("    A |o--o{ B")

    def test_junction_table_primary_keys_untouched(self):
        result = parse_erd(
            "Enrolment {\n"
            "string student_id PK FK\n"
            "string course_id PK FK\n"
            "}"
        )
        text = generate_corrected_erd(result)
        assert "string student_id PK FK" in text
        assert "string course_id PK FK" in text
        assert " name " not in text

    def test_primary_key_that_is_foreign_key_untouched(self):
        result = parse_erd("A {\nstring id PK\n}\nB {\nstring a_id PK FK\n}\nA ||--|| B")
        assert "string a_id PK FK" in generate_corrected_erd(result)

    def test_existing_column_is_marked_fk_instead_of_duplicated(self):
        result = parse_erd(
            "A {\nstring id PK\n}\nB {\nstring id PK\nstring a_id\n}\nA ||--o{ B"
        )
        corrected = apply_corrections(result)
        assert "        string a_id FK" in corrected.text
        assert corrected.text.count("a_id") == 1
        assert "Marked 'B.a_id' as FK" in corrected.applied_fixes

    def test_primary_key_marked_as_fk_keeps_its_name(self):
        result = parse_erd(
            "Employee {\nstring employee_id PK\n}\n"
            'Employee ||--o{ Employee : "manages"'
        )
        corrected = apply_corrections(result)
        assert "        string employee_id PK FK" in corrected.text
        assert " name PK" not in corrected.text
        assert "Marked 'Employee.employee_id' as FK" in corrected.applied_fixes

    def test_renamed_name_column_avoids_existing_column(self):
        result = parse_erd(
            "Crate {\nstring id PK\nstring name\nstring crate_name\n}"
        )
        text = generate_corrected_erd(result)
        assert "        string crate_display_name" in text
        assert text.count("crate_name") == 1

    def test_renamed_name_column_falls_back_to_numbered_name(self):
        result = parse_erd(
            "Crate {\nstring id PK\nstring name\nstring crate_name\n"
            "string crate_display_name\n}"
        )
        assert "        string crate_name_2" in generate_corrected_erd(result)

    def test_duplicate_fk_warnings_add_one_column(self):
        result = parse_erd(
            "A {\nstring id PK\n}\nB {\nstring id PK\n}\nA ||--o{ B\nA ||--|| B"
        )
        assert generate_corrected_erd(result).count("string a_id FK") == 1

    def test_self_many_to_many_has_distinct_columns(self):
        result = parse_erd("Node {\nstring id PK\n}\nNode }o--o{ Node")
        text = generate_corrected_erd(result)
        assert "    NodeNode {" in text
        assert "string node_id FK" in text
        assert "string related_node_id FK" in text

    def test_applied_fixes_are_reported(self, problem_result: ParseResult):
        fixes = apply_corrections(problem_result).applied_fixes
        assert "Renamed 'Customer.name' to 'Customer.customer_name'" in fixes
        assert "Added foreign key 'Invoice.customer_id'" in fixes
        assert any("CustomerProduct" in fix for fix in fixes)


class TestManyToManyDecomposition:
    def test_junction_entity_shape(self):
        result = parse_erd("A {\nstring id PK\n}\nB {\nstring id PK\n}\nA }o--o{ B")
        reparsed = parse_erd(generate_corrected_erd(result))
        junction = reparsed.entities[-1]
        assert junction.name == "AB"
        assert len(junction.attributes) == 3
        assert [a.is_primary_key for a in junction.attributes] == [True, False, False]
        assert [a.is_foreign_key for a in junction.attributes] == [False, True, True]
        lines = [
            (r.from_entity, r.symbols, r.to_entity, r.label)
            for r in reparsed.relationships
        ]
        assert lines == [("A", "||--o{", "AB", "has"), ("B", "||--o{", "AB", "has")]


class TestRoundTrip:
    def test_fixed_categories_do_not_recur(self, problem_result: ParseResult):
        reparsed = parse_erd(generate_corrected_erd(problem_result))
        assert not _FIXED_CATEGORIES & set(_types(reparsed))
        assert reparsed.validation.is_valid

    def test_no_new_findings_in_other_categories(self, problem_result: ParseResult):
        before = {t for t in _types(problem_result) if t not in _FIXED_CATEGORIES}
        reparsed = parse_erd(generate_corrected_erd(problem_result))
        after = {t for t in _types(reparsed) if t not in _FIXED_CATEGORIES}
        assert after <= before

    def test_self_reference_on_primary_key_is_resolved(self):
        result = parse_erd(
            "Employee {\nstring employee_id PK\n}\n"
            'Employee ||--o{ Employee : "manages"'
        )
        assert "missing_foreign_key" in _types(result)
        reparsed = parse_erd(generate_corrected_erd(result))
        assert "missing_foreign_key" not in _types(reparsed)

    def test_one_to_one_on_primary_key_is_resolved(self):
        result = parse_erd(
            "A {\nstring id PK\n}\nB {\nstring a_id PK\n}\nA ||--|| B"
        )
        assert "missing_foreign_key" in _types(result)
        text = generate_corrected_erd(result)
        assert "        string a_id PK FK" in text
        assert "missing_foreign_key" not in _types(parse_erd(text))

    def test_name_rename_does_not_duplicate_columns(self):
        result = parse_erd(
            "Crate {\nstring id PK\nstring name\nstring crate_name\n}"
        )
        assert _types(result) == ["naming_conflict"]
        reparsed = parse_erd(generate_corrected_erd(result))
        assert reparsed.warnings == []

    def test_clean_diagram_stays_clean(self, clean_result: ParseResult):
        reparsed = parse_erd(generate_corrected_erd(clean_result))
        assert reparsed.warnings == []

    def test_correction_is_idempotent(self, problem_result: ParseResult):
        once = generate_corrected_erd(problem_result)
        twice = generate_corrected_erd(parse_erd(once))
        assert parse_erd(twice).warnings == parse_erd(once).warnings
