"""Validation router for the ERD validator service."""
from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Request

from src.erd_validator.services.corrected_erd import apply_corrections
from src.erd_validator.services.erd_parser import parse_erd
from src.erd_validator.services.type_mapper import TYPE_MAP
from src.shared.config import ErdValidatorConfig
from src.shared.errors import PayloadTooLargeError, ValidationError
from src.shared.models.erd import (
    CorrectErdRequest,
    CorrectErdResponse,
    Severity,
    ValidateErdRequest,
    ValidateErdResponse,
    ValidationOptions,
    ValidationRule,
    WarningCategory,
)

logger = logging.getLogger("erd-validator")

router = APIRouter(tags=["validation"])

_RULES: list[ValidationRule] = [
    ValidationRule(
        type="missing_primary_key", severity=Severity.ERROR,
        category=WarningCategory.STRUCTURE,
        description="Entity has no PK attribute.",
    ),
    ValidationRule(
        type="multiple_primary_keys", severity=Severity.ERROR,
        category=WarningCategory.STRUCTURE,
        description="Entity has more than one PK attribute.",
    ),
    ValidationRule(
        type="duplicate_columns", severity=Severity.ERROR,
        category=WarningCategory.STRUCTURE,
        description="Attribute names repeat (case-insensitive).",
    ),
    ValidationRule(
        type="empty_entity", severity=Severity.WARNING,
        category=WarningCategory.STRUCTURE,
        description="Entity declares no attributes.",
    ),
    ValidationRule(
        type="naming_conflict", severity=Severity.WARNING,
        category=WarningCategory.NAMING, auto_fixable=True,
        description="Non-primary column named 'name'.",
    ),
    ValidationRule(
        type="system_column_conflict", severity=Severity.WARNING,
        category=WarningCategory.NAMING,
        description="Column collides with a platform system column.",
    ),
    ValidationRule(
        type="missing_entity", severity=Severity.ERROR,
        category=WarningCategory.RELATIONSHIPS,
        description="Relationship references an undeclared entity.",
    ),
    ValidationRule(
        type="many_to_many_relationship", severity=Severity.ERROR,
        category=WarningCategory.RELATIONSHIPS, auto_fixable=True,
        description="Direct M:N relationship; needs a junction entity.",
    ),
    ValidationRule(
        type="self_referencing_relationship", severity=Severity.WARNING,
        category=WarningCategory.RELATIONSHIPS,
        description="Relationship from an entity to itself.",
    ),
    ValidationRule(
        type="missing_foreign_key", severity=Severity.WARNING,
        category=WarningCategory.RELATIONSHIPS, auto_fixable=True,
        description="Target entity lacks the '<from>_id' FK column.",
    ),
    ValidationRule(
        type="cdm_entity_detected", severity=Severity.INFO,
        category=WarningCategory.CDM,
        description="Entity matches a common platform entity.",
    ),
]


def _settings(request: Request) -> ErdValidatorConfig:
    return getattr(request.app.state, "config", None) or ErdValidatorConfig()


def _check_content(content: str, settings: ErdValidatorConfig) -> None:
    if not content.strip():
        raise ValidationError("Missing required field: mermaidContent")
    if len(content) > settings.max_content_length:
        raise PayloadTooLargeError(
            f"ERD content exceeds {settings.max_content_length} characters."
        )


def _run_validation(content: str, include_corrected: bool) -> ValidateErdResponse:
    """Parse, validate and optionally correct the diagram synchronously.

    This function is called via asyncio.to_thread() from the async endpoint.
    """
    result = parse_erd(content)
    corrected = apply_corrections(result).text if include_corrected else None

    return ValidateErdResponse(
        success=True,
        validation=result.validation,
        entities=result.entities,
        relationships=result.relationships,
        warnings=result.warnings,
        corrected_erd=corrected,
        cdm_detection=result.cdm_detection,
    )


@router.post("/api/validate-erd")
async def validate_erd(request: Request, body: ValidateErdRequest) -> ValidateErdResponse:
    """Parse and validate an ERD, returning the model and all findings."""
    settings = _settings(request)
    _check_content(body.mermaid_content, settings)

    include_corrected = body.options.include_corrected_erd
    if include_corrected is None:
        include_corrected = settings.include_corrected_erd

    response = await asyncio.to_thread(
        _run_validation, body.mermaid_content, include_corrected
    )
    logger.info(
        "Validated ERD: entities=%d status=%s",
        len(response.entities), response.validation.status.value,
    )
    return response


@router.post("/api/correct-erd")
async def correct_erd(request: Request, body: CorrectErdRequest) -> CorrectErdResponse:
    """Return the ERD rewritten with every auto-fix applied."""
    _check_content(body.mermaid_content, _settings(request))

    def _correct() -> CorrectErdResponse:
        corrected = apply_corrections(parse_erd(body.mermaid_content))
        return CorrectErdResponse(
            corrected_erd=corrected.text,
            applied_fixes=corrected.applied_fixes,
        )

    return await asyncio.to_thread(_correct)


@router.get("/api/validation-options")
async def validation_options() -> ValidationOptions:
    """List the validation rules and the DSL type tokens understood."""
    return ValidationOptions(
        rules=_RULES,
        supported_types=sorted(TYPE_MAP) + ["choice(...)", "lookup(...)"],
    )
