"""Validation rule engine for parsed ERD models.

Pure-function module: every pass reads the completed model (entities and
relationships) and returns warnings; nothing is mutated and no global
state is read or written.  Passes run in a fixed order, which only
affects the order of the emitted warnings:

    1. Structure   -- primary keys, duplicate columns, empty entities
    2. Naming      -- ``name`` column collisions, system column collisions
    3. Relationships -- dangling references, M:N, self references, FKs
    4. CDM         -- entities matching common platform entities
"""

from __future__ import annotations

from collections import Counter

from src.shared.models.erd import (
    CardinalityKind,
    CdmDetection,
    CdmEntityDetectedWarning,
    CdmMatch,
    DuplicateColumnsWarning,
    EmptyEntityWarning,
    Entity,
    ErdWarning,
    ForeignKeyFix,
    JunctionFix,
    ManyToManyRelationshipWarning,
    MissingEntityWarning,
    MissingForeignKeyWarning,
    MissingPrimaryKeyWarning,
    MultiplePrimaryKeysWarning,
    NamingConflictWarning,
    Relationship,
    SelfReferencingRelationshipWarning,
    Severity,
    SystemColumnConflictWarning,
    ValidationStatus,
    ValidationSummary,
    WarningCategory,
)

# ---------------------------------------------------------------------------
# Reference tables
# ---------------------------------------------------------------------------

PRIMARY_NAME_COLUMN = "name"

SYSTEM_COLUMNS: frozenset[str] = frozenset(
    {
        "createdon",
        "createdby",
        "modifiedon",
        "modifiedby",
        "ownerid",
        "statecode",
        "statuscode",
    }
)

CDM_ENTITIES: tuple[str, ...] = (
    "Account", "Contact", "Lead", "Opportunity", "Case", "Incident",
    "Activity", "Email", "PhoneCall", "Task", "Appointment",
    "User", "Team", "BusinessUnit", "SystemUser",
    "Product", "PriceLevel", "Quote", "Order", "Invoice",
    "Campaign", "MarketingList", "Competitor",
)

_CDM_INDEX: dict[str, str] = {name.lower(): name for name in CDM_ENTITIES}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_model(
    entities: list[Entity],
    relationships: list[Relationship],
) -> list[ErdWarning]:
    """Run every validation pass over a completed model.

    Args:
        entities: Parsed entities in declaration order.
        relationships: Parsed relationships in declaration order.

    Returns:
        Warnings of all severities, ordered by pass and then by model order.
    """
    index = {entity.name: entity for entity in entities}
    warnings: list[ErdWarning] = []

    for entity in entities:
        warnings.extend(_check_structure(entity))
    for entity in entities:
        warnings.extend(_check_naming(entity))
    for relationship in relationships:
        warnings.extend(_check_relationship(relationship, index))
    warnings.extend(_check_cdm(entities))

    return warnings


def build_validation_summary(warnings: list[ErdWarning]) -> ValidationSummary:
    """Aggregate warnings into counts and a traffic-light status."""
    counts = Counter(w.severity for w in warnings)
    errors = counts[Severity.ERROR]
    advisories = counts[Severity.WARNING]

    if errors:
        status = ValidationStatus.ERROR
    elif advisories:
        status = ValidationStatus.WARNING
    else:
        status = ValidationStatus.SUCCESS

    return ValidationSummary(
        is_valid=errors == 0,
        status=status,
        error_count=errors,
        warning_count=advisories,
        info_count=counts[Severity.INFO],
        total_issues=len(warnings),
        cdm_entities_detected=sum(
            1 for w in warnings if w.category is WarningCategory.CDM
        ),
    )


def detect_cdm_entities(entities: list[Entity]) -> CdmDetection:
    """Report which declared entities match a common platform entity."""
    matches: list[CdmMatch] = []
    for entity in entities:
        cdm_name = _CDM_INDEX.get(entity.name.lower())
        if cdm_name is not None:
            matches.append(
                CdmMatch(
                    entity=entity.name,
                    logical_name=cdm_name.lower(),
                    display_name=cdm_name,
                )
            )
    return CdmDetection(
        matches=matches,
        total_entities_analyzed=len(entities),
        custom_entities=len(entities) - len(matches),
    )


def expected_foreign_key(relationship: Relationship) -> str:
    """Name of the FK column expected on the ``to`` side of *relationship*."""
    return f"{relationship.from_entity.lower()}_id"


def junction_entity_name(relationship: Relationship) -> str:
    return f"{relationship.from_entity}{relationship.to_entity}"


# ---------------------------------------------------------------------------
# Individual passes (private helpers)
# ---------------------------------------------------------------------------


def _check_structure(entity: Entity) -> list[ErdWarning]:
    """Primary key count, duplicate column names and empty entities."""
    issues: list[ErdWarning] = []

    primary_keys = entity.primary_keys
    if not primary_keys:
        issues.append(
            MissingPrimaryKeyWarning(
                entity=entity.name,
                message=(
                    f"Entity '{entity.name}' must have exactly one primary "
                    f"key (PK) attribute."
                ),
                suggestion="Add a PK constraint to one of the columns.",
            )
        )
    elif len(primary_keys) > 1:
        issues.append(
            MultiplePrimaryKeysWarning(
                entity=entity.name,
                message=(
                    f"Entity '{entity.name}' has {len(primary_keys)} primary "
                    f"keys. Only one primary key is allowed per entity."
                ),
                suggestion="Remove the PK constraint from all but one attribute.",
                columns=[pk.name for pk in primary_keys],
            )
        )

    # Counter preserves first-seen order, so duplicates are reported in
    # declaration order.
    seen = Counter(attr.name.lower() for attr in entity.attributes)
    duplicates = [name for name, count in seen.items() if count > 1]
    if duplicates:
        issues.append(
            DuplicateColumnsWarning(
                entity=entity.name,
                message=(
                    f"Entity '{entity.name}' has duplicate column names: "
                    f"{', '.join(duplicates)}"
                ),
                suggestion="Column names must be unique within an entity.",
                columns=duplicates,
            )
        )

    if not entity.attributes:
        issues.append(
            EmptyEntityWarning(
                entity=entity.name,
                message=f"Entity '{entity.name}' has no attributes defined.",
                suggestion="Add at least one attribute with a PK constraint.",
            )
        )

    return issues


def _check_naming(entity: Entity) -> list[ErdWarning]:
    """Columns that collide with platform-generated columns."""
    issues: list[ErdWarning] = []
    prefix = entity.name.lower()

    name_columns = [
        attr.name
        for attr in entity.attributes
        if attr.name.lower() == PRIMARY_NAME_COLUMN and not attr.is_primary_key
    ]
    if name_columns:
        issues.append(
            NamingConflictWarning(
                entity=entity.name,
                message=(
                    f"Entity '{entity.name}' has a non-primary column called "
                    f"'name'. This conflicts with the auto-generated primary "
                    f"name column."
                ),
                suggestion=(
                    f"Rename the column to '{prefix}_name', 'display_name' "
                    f"or 'title'."
                ),
                columns=name_columns,
            )
        )

    system_columns = [
        attr.name
        for attr in entity.attributes
        if attr.name.lower() in SYSTEM_COLUMNS
    ]
    if system_columns:
        renames = ", ".join(f"'{prefix}_{col.lower()}'" for col in system_columns)
        issues.append(
            SystemColumnConflictWarning(
                entity=entity.name,
                message=(
                    f"Entity '{entity.name}' has columns that conflict with "
                    f"system columns: {', '.join(system_columns)}"
                ),
                suggestion=f"Rename using the table_column pattern, e.g. {renames}.",
                columns=system_columns,
            )
        )

    return issues


def _check_relationship(
    relationship: Relationship,
    index: dict[str, Entity],
) -> list[ErdWarning]:
    """Dangling references, M:N, self references and missing FKs."""
    issues: list[ErdWarning] = []
    reference = relationship.reference

    for side in (relationship.from_entity, relationship.to_entity):
        if side not in index:
            issues.append(
                MissingEntityWarning(
                    relationship=reference,
                    missing_entity=side,
                    message=f"Relationship references non-existent entity '{side}'.",
                    suggestion=(
                        "Define every entity referenced by a relationship "
                        "in the diagram."
                    ),
                )
            )

    is_many_to_many = relationship.cardinality.kind is CardinalityKind.MANY_TO_MANY
    if is_many_to_many:
        junction = junction_entity_name(relationship)
        issues.append(
            ManyToManyRelationshipWarning(
                relationship=reference,
                message=(
                    f"Many-to-many relationship detected between "
                    f"'{relationship.from_entity}' and "
                    f"'{relationship.to_entity}'. Direct M:N relationships "
                    f"are not supported."
                ),
                suggestion=(
                    f"Create a junction table like '{junction}' with FK "
                    f"references to both entities."
                ),
                fix_data=JunctionFix(
                    junction_entity=junction,
                    from_entity=relationship.from_entity,
                    to_entity=relationship.to_entity,
                ),
            )
        )

    if relationship.from_entity == relationship.to_entity:
        issues.append(
            SelfReferencingRelationshipWarning(
                relationship=reference,
                message=(
                    f"Self-referencing relationship detected in entity "
                    f"'{relationship.from_entity}'."
                ),
                suggestion="Self references are supported but need extra configuration.",
            )
        )

    # The junction entity synthesised for an M:N link carries both FKs.
    target = index.get(relationship.to_entity)
    if is_many_to_many or relationship.from_entity not in index or target is None:
        return issues

    expected = expected_foreign_key(relationship)
    has_foreign_key = any(
        attr.is_foreign_key and attr.name.lower() == expected
        for attr in target.attributes
    )
    if not has_foreign_key:
        issues.append(
            MissingForeignKeyWarning(
                entity=target.name,
                relationship=reference,
                message=(
                    f"Relationship defined but no foreign key '{expected}' "
                    f"found in '{target.name}'."
                ),
                suggestion=f"Add '{expected} FK' to entity '{target.name}'.",
                fix_data=ForeignKeyFix(
                    entity_name=target.name,
                    column_name=expected,
                    referenced_entity=relationship.from_entity,
                ),
            )
        )

    return issues


def _check_cdm(entities: list[Entity]) -> list[ErdWarning]:
    """Flag entities whose name matches a common platform entity."""
    issues: list[ErdWarning] = []
    for match in detect_cdm_entities(entities).matches:
        issues.append(
            CdmEntityDetectedWarning(
                entity=match.entity,
                cdm_entity=match.logical_name,
                message=(
                    f"Entity '{match.entity}' matches CDM entity "
                    f"'{match.display_name}'."
                ),
                suggestion=(
                    f"Consider using the existing CDM {match.display_name} "
                    f"entity instead of creating a custom one."
                ),
            )
        )
    return issues
