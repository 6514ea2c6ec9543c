"""Attribute parsing for lines inside an entity block.

Attribute and relationship lines share vocabulary (both may carry a colon
and quoted text), so every line is first run through the relationship
shape checks; only lines that pass none of them are tried against the
attribute grammar::

    TYPE NAME [CONSTRAINTS] ["DESCRIPTION"]

``TYPE`` is a bare identifier or ``choice(a,b)`` / ``lookup(Target)``.
Constraint flags are substring matches on the constraint field, and
``PK`` implies required.
"""
from __future__ import annotations

import logging
import re

from src.erd_validator.services.relationship_parser import looks_like_relationship
from src.erd_validator.services.type_mapper import resolve_type
from src.shared.models.erd import Attribute
from src.shared.utils import format_display_name

logger = logging.getLogger(__name__)

ATTRIBUTE_RE = re.compile(
    r'^((?:choice\([^)]+\)|lookup\([^)]+\)|\w+))'
    r'\s+(\w+)'
    r'(?:\s+([^"]+?))?'
    r'(?:\s+"([^"]*)")?$'
)

PRIMARY_KEY = "PK"
FOREIGN_KEY = "FK"
UNIQUE_KEY = "UK"
NOT_NULL = "NOT NULL"


def parse_attribute(line: str) -> Attribute | None:
    """Parse one entity-body line, or return ``None`` if it isn't an attribute."""
    if looks_like_relationship(line):
        logger.debug("Skipping relationship-shaped line: %r", line)
        return None

    match = ATTRIBUTE_RE.match(line)
    if not match:
        return None

    type_token, name, constraints, description = match.groups()
    constraints = (constraints or "").strip()
    info = resolve_type(type_token, name)

    is_primary_key = PRIMARY_KEY in constraints
    return Attribute(
        name=name,
        display_name=format_display_name(name),
        original_type=type_token,
        type=info.semantic_type,
        constraints=constraints,
        description=description,
        is_primary_key=is_primary_key,
        is_foreign_key=FOREIGN_KEY in constraints,
        is_unique=UNIQUE_KEY in constraints,
        is_required=NOT_NULL in constraints or is_primary_key,
        choice_options=info.choice_options,
        target_entity=info.target_entity,
    )
