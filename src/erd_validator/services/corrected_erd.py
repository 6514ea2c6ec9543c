"""Corrected-ERD generator.

Rewrites a parsed diagram so that the auto-fixable findings disappear,
leaving everything else as it was written:

* the first primary key of each non-junction entity is renamed to ``name``;
* non-primary ``name`` columns flagged by ``naming_conflict`` become
  ``<entity>_name`` (``<entity>_display_name`` or a numbered variant when
  that column already exists);
* every ``missing_foreign_key`` appends ``string <col> FK`` to its entity
  (or marks an existing column of that name as ``FK``);
* every ``many_to_many_relationship`` is replaced by a junction entity and
  two ``||--o{`` relationships labelled ``has``.

Attribute types are re-emitted from ``original_type`` and untouched
constraints/descriptions are copied verbatim, so re-parsing the output
does not raise new findings in categories the generator leaves alone.

Unlike the plain "rename every primary key" rule, a primary key is kept
as written when it is already a foreign key, or when a
``missing_foreign_key`` fix is about to mark it as one.  Renaming it would
drop the ``<from>_id`` column that the relationship check looks for.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from src.erd_validator.services.validator import PRIMARY_NAME_COLUMN
from src.shared.constants import DIAGRAM_HEADER
from src.shared.models.erd import (
    Attribute,
    CardinalityKind,
    Entity,
    ForeignKeyFix,
    JunctionFix,
    ManyToManyRelationshipWarning,
    MissingForeignKeyWarning,
    NamingConflictWarning,
    ParseResult,
    Relationship,
)

_ENTITY_INDENT = "    "
_ATTRIBUTE_INDENT = "        "
_JUNCTION_SYMBOLS = "||--o{"
_JUNCTION_LABEL = "has"


@dataclass
class CorrectedErd:
    """Generator output: the corrected text plus a log of applied fixes."""

    text: str
    applied_fixes: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def generate_corrected_erd(result: ParseResult) -> str:
    """Return the corrected diagram text for a parse result."""
    return apply_corrections(result).text


def apply_corrections(result: ParseResult) -> CorrectedErd:
    """Regenerate the diagram from *result* with all auto-fixes applied."""
    naming_columns: dict[str, set[str]] = {}
    foreign_keys: dict[str, dict[str, ForeignKeyFix]] = {}
    junctions: dict[str, JunctionFix] = {}

    for warning in result.warnings:
        if isinstance(warning, NamingConflictWarning) and warning.entity:
            naming_columns.setdefault(warning.entity, set()).update(
                col.lower() for col in warning.columns
            )
        elif isinstance(warning, MissingForeignKeyWarning):
            fix = warning.fix_data
            foreign_keys.setdefault(fix.entity_name, {}).setdefault(
                fix.column_name.lower(), fix
            )
        elif isinstance(warning, ManyToManyRelationshipWarning):
            junctions.setdefault(warning.fix_data.junction_entity, warning.fix_data)

    declared = {entity.name for entity in result.entities}
    applied: list[str] = []
    lines = [DIAGRAM_HEADER]

    for entity in result.entities:
        lines.extend(
            _entity_block(
                entity,
                naming_columns.get(entity.name, set()),
                foreign_keys.get(entity.name, {}),
                applied,
            )
        )

    for fix in junctions.values():
        if fix.junction_entity in declared:
            continue
        lines.extend(_junction_block(fix))
        applied.append(
            f"Created junction entity '{fix.junction_entity}' for "
            f"'{fix.from_entity}' and '{fix.to_entity}'"
        )

    replaced = {(fix.from_entity, fix.to_entity) for fix in junctions.values()}
    for relationship in result.relationships:
        if _is_replaced(relationship, replaced):
            continue
        lines.append(_relationship_line(
            relationship.from_entity,
            relationship.symbols,
            relationship.to_entity,
            relationship.label,
        ))

    for fix in junctions.values():
        for side in (fix.from_entity, fix.to_entity):
            lines.append(_relationship_line(
                side, _JUNCTION_SYMBOLS, fix.junction_entity, _JUNCTION_LABEL
            ))

    return CorrectedErd(text="\n".join(lines).rstrip(), applied_fixes=applied)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _renamed_primary_key(
    entity: Entity, foreign_keys: dict[str, ForeignKeyFix]
) -> Attribute | None:
    """Primary key to rename to ``name``, if any.

    Only the first primary key is renamed; renaming several would collide.
    """
    if entity.is_junction_table:
        return None
    primary_keys = entity.primary_keys
    if not primary_keys:
        return None
    pk = primary_keys[0]
    if pk.is_foreign_key or pk.name.lower() in foreign_keys:
        return None
    return pk


def _free_name_column(prefix: str, taken: set[str]) -> str:
    """Replacement for a conflicting ``name`` column that is not in *taken*."""
    candidates = [
        f"{prefix}_{PRIMARY_NAME_COLUMN}",
        f"{prefix}_display_{PRIMARY_NAME_COLUMN}",
    ]
    for candidate in candidates:
        if candidate not in taken:
            return candidate
    suffix = 2
    while f"{candidates[0]}_{suffix}" in taken:
        suffix += 1
    return f"{candidates[0]}_{suffix}"


def _entity_block(
    entity: Entity,
    conflicting: set[str],
    foreign_keys: dict[str, ForeignKeyFix],
    applied: list[str],
) -> list[str]:
    lines = [f"{_ENTITY_INDENT}{entity.name} {{"]
    pk_to_rename = _renamed_primary_key(entity, foreign_keys)
    pending = dict(foreign_keys)
    taken = {attr.name.lower() for attr in entity.attributes} | set(foreign_keys)

    for attr in entity.attributes:
        name = attr.name
        constraints = attr.constraints

        if attr is pk_to_rename:
            name = PRIMARY_NAME_COLUMN
        elif not attr.is_primary_key and attr.name.lower() in conflicting:
            name = _free_name_column(entity.name.lower(), taken)
            taken.add(name)

        if name != attr.name:
            applied.append(
                f"Renamed '{entity.name}.{attr.name}' to '{entity.name}.{name}'"
            )

        existing_fk = pending.pop(attr.name.lower(), None)
        if existing_fk is not None and not attr.is_foreign_key:
            constraints = f"{constraints} FK".strip()
            applied.append(f"Marked '{entity.name}.{attr.name}' as FK")

        lines.append(
            _attribute_line(attr.original_type, name, constraints, attr.description)
        )

    for fix in pending.values():
        lines.append(
            _attribute_line(
                "string",
                fix.column_name,
                "FK",
                f"Foreign key to {_capitalize(fix.referenced_entity)}",
            )
        )
        applied.append(f"Added foreign key '{entity.name}.{fix.column_name}'")

    lines.append(f"{_ENTITY_INDENT}}}")
    lines.append("")
    return lines


def _junction_block(fix: JunctionFix) -> list[str]:
    to_column = f"{fix.to_entity.lower()}_id"
    if fix.from_entity == fix.to_entity:
        to_column = f"related_{to_column}"
    return [
        f"{_ENTITY_INDENT}{fix.junction_entity} {{",
        _attribute_line("string", "id", "PK", "Unique identifier"),
        _attribute_line(
            "string", f"{fix.from_entity.lower()}_id", "FK",
            f"Foreign key to {fix.from_entity}",
        ),
        _attribute_line(
            "string", to_column, "FK",
            f"Foreign key to {fix.to_entity}",
        ),
        f"{_ENTITY_INDENT}}}",
        "",
    ]


def _is_replaced(relationship: Relationship, replaced: set[tuple[str, str]]) -> bool:
    return (
        relationship.cardinality.kind is CardinalityKind.MANY_TO_MANY
        and (relationship.from_entity, relationship.to_entity) in replaced
    )


def _attribute_line(
    type_token: str,
    name: str,
    constraints: str,
    description: str | None,
) -> str:
    line = f"{_ATTRIBUTE_INDENT}{type_token} {name}"
    if constraints:
        line += f" {constraints}"
    if description is not None:
        line += f' "{description}"'
    return line


def _relationship_line(
    from_entity: str,
    symbols: str,
    to_entity: str,
    label: str | None,
) -> str:
    line = f"{_ENTITY_INDENT}{from_entity} {symbols} {to_entity}"
    if label:
        line += f' : "{label}"'
    return line


def _capitalize(value: str) -> str:
    return value[:1].upper() + value[1:]
