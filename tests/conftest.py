"""Shared test fixtures for the ERD validator test suite."""
from __future__ import annotations

import pytest

from src.erd_validator.services.erd_parser import parse_erd
from src.shared.models.erd import ParseResult


@pytest.fixture
def clean_erd() -> str:
    """A diagram with no errors and no advisory warnings."""
    return (
        "erDiagram\n"
        "    Customer {\n"
        '        string customer_id PK "Customer identifier"\n'
        "        string full_name NOT NULL\n"
        "        string email_address UK\n"
        "    }\n"
        "    Purchase {\n"
        "        string purchase_id PK\n"
        "        decimal total\n"
        '        string customer_id FK "Buyer"\n'
        "    }\n"
        '    Customer ||--o{ Purchase : "places"\n'
    )


@pytest.fixture
def problem_erd() -> str:
    """A diagram exercising every auto-fixable finding."""
    return (
        "erDiagram\n"
        "    %% sales model\n"
        "    Customer {\n"
        "        string id PK\n"
        '        string name "Customer name"\n'
        "        int age\n"
        "    }\n"
        "    Product {\n"
        "        guid product_id PK\n"
        "        money price NOT NULL\n"
        "    }\n"
        "    Invoice {\n"
        "        string invoice_id PK\n"
        "        date duedate\n"
        "    }\n"
        '    Customer ||--o{ Invoice : "receives"\n'
        "    Customer }o--o{ Product\n"
    )


@pytest.fixture
def clean_result(clean_erd: str) -> ParseResult:
    return parse_erd(clean_erd)


@pytest.fixture
def problem_result(problem_erd: str) -> ParseResult:
    return parse_erd(problem_erd)
