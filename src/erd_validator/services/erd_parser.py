"""ERD parser: text -> entities, relationships, warnings.

Pipeline, leaves first::

    classify_lines -> parse_attribute / parse_relationship
                   -> validate_model -> build_validation_summary

This is a pure, deterministic function.  Every call starts from fresh
local accumulators, and no stage raises on malformed DSL: lines that
match no grammar are dropped and structural problems surface as warnings.
"""
from __future__ import annotations

import logging

from src.erd_validator.services.attribute_parser import parse_attribute
from src.erd_validator.services.line_classifier import LineKind, classify_lines
from src.erd_validator.services.relationship_parser import parse_relationship
from src.erd_validator.services.validator import (
    build_validation_summary,
    detect_cdm_entities,
    validate_model,
)
from src.shared.errors import ParsingError
from src.shared.models.erd import Entity, ParseResult, Relationship
from src.shared.utils import format_display_name

logger = logging.getLogger(__name__)


def parse_erd(text: str) -> ParseResult:
    """Parse an erDiagram document and validate the resulting model.

    Args:
        text: Raw diagram text.

    Returns:
        A ``ParseResult`` with entities in first-declared order,
        relationships in source order, warnings and the summary.

    Raises:
        ParsingError: When *text* is not a string.
    """
    if not isinstance(text, str):
        raise ParsingError("ERD content must be a string.")

    entities, relationships = build_model(text)
    warnings = validate_model(entities, relationships)
    validation = build_validation_summary(warnings)

    logger.debug(
        "Parsed ERD: entities=%d relationships=%d errors=%d warnings=%d",
        len(entities), len(relationships),
        validation.error_count, validation.warning_count,
    )

    return ParseResult(
        entities=entities,
        relationships=relationships,
        warnings=warnings,
        validation=validation,
        cdm_detection=detect_cdm_entities(entities),
    )


def build_model(text: str) -> tuple[list[Entity], list[Relationship]]:
    """Build the entity/relationship model without validating it."""
    document = classify_lines(text)

    # Re-declaring an entity replaces it in place; dict keeps first position.
    entities: dict[str, Entity] = {}
    relationships: list[Relationship] = []

    for line in document.lines:
        if line.kind is LineKind.ENTITY_OPEN:
            entities[line.entity] = Entity(
                name=line.entity,
                display_name=format_display_name(line.entity),
            )
        elif line.kind is LineKind.ENTITY_BODY:
            attribute = parse_attribute(line.text)
            if attribute is not None:
                entities[line.entity].attributes.append(attribute)
            else:
                logger.debug("Dropping unparsed line in '%s': %r", line.entity, line.text)
        elif line.kind is LineKind.TOP_LEVEL:
            relationship = parse_relationship(line.text)
            if relationship is not None:
                relationships.append(relationship)
            else:
                logger.debug("Dropping unparsed top-level line: %r", line.text)

    if document.has_unclosed_block:
        logger.debug(
            "Entity block '%s' is not closed at end of input", document.open_entity
        )

    return list(entities.values()), relationships
