"""ERD validator Pydantic v2 data models.

Attributes are snake_case in Python and camelCase on the wire
(``model_dump(by_alias=True)``), so consumers see ``isPrimaryKey``,
``fixData``, ``fromEntity`` and friends.
"""
from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

_WIRE_CONFIG = {
    "from_attributes": True,
    "populate_by_name": True,
    "alias_generator": to_camel,
}


class SemanticType(str, Enum):
    """Canonical attribute types understood by the provisioning pipeline."""
    STRING = "String"
    INTEGER = "Integer"
    DECIMAL = "Decimal"
    MONEY = "Money"
    BOOLEAN = "Boolean"
    DATETIME = "DateTime"
    DATEONLY = "DateOnly"
    MEMO = "Memo"
    UNIQUEIDENTIFIER = "Uniqueidentifier"
    EMAIL = "Email"
    PHONE = "Phone"
    URL = "Url"
    DURATION = "Duration"
    FILE = "File"
    IMAGE = "Image"
    TICKER = "Ticker"
    TIMEZONE = "TimeZone"
    LANGUAGE = "Language"
    FLOAT = "Float"
    CHOICE = "Choice"
    LOOKUP = "Lookup"


class CardinalityKind(str, Enum):
    """Relationship multiplicity classification."""
    ONE_TO_ONE = "one-to-one"
    ONE_TO_MANY = "one-to-many"
    MANY_TO_MANY = "many-to-many"
    ZERO_TO_MANY = "zero-to-many"
    UNKNOWN = "unknown"


class Severity(str, Enum):
    """Severity of a validation finding."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class WarningCategory(str, Enum):
    """Grouping tag used by the UI layer."""
    STRUCTURE = "structure"
    NAMING = "naming"
    RELATIONSHIPS = "relationships"
    CDM = "cdm"


class ValidationStatus(str, Enum):
    """Traffic-light status derived from the highest severity present."""
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


# ---------------------------------------------------------------------------
# Parsed model
# ---------------------------------------------------------------------------


class Attribute(BaseModel):
    """Column declared inside an entity block."""
    name: str
    display_name: str
    original_type: str
    type: SemanticType = SemanticType.STRING
    constraints: str = ""
    description: str | None = None
    is_primary_key: bool = False
    is_foreign_key: bool = False
    is_unique: bool = False
    is_required: bool = False
    choice_options: list[str] | None = None
    target_entity: str | None = None

    model_config = _WIRE_CONFIG


class Entity(BaseModel):
    """Entity block with its attributes in declaration order."""
    name: str
    display_name: str
    attributes: list[Attribute] = Field(default_factory=list)

    model_config = _WIRE_CONFIG

    @property
    def primary_keys(self) -> list[Attribute]:
        return [attr for attr in self.attributes if attr.is_primary_key]

    @property
    def is_junction_table(self) -> bool:
        """True when more than one primary key is also a foreign key."""
        primary_keys = self.primary_keys
        return (
            len(primary_keys) > 1
            and sum(1 for attr in primary_keys if attr.is_foreign_key) > 1
        )


class Cardinality(BaseModel):
    """Normalised cardinality of a relationship."""
    kind: CardinalityKind
    from_side: str = Field(alias="from")
    to_side: str = Field(alias="to")

    model_config = _WIRE_CONFIG


class Relationship(BaseModel):
    """Relationship line between two (possibly undeclared) entities."""
    from_entity: str
    to_entity: str
    cardinality: Cardinality
    name: str
    display_name: str
    symbols: str
    label: str | None = None

    model_config = _WIRE_CONFIG

    @property
    def reference(self) -> str:
        return f"{self.from_entity} → {self.to_entity}"


# ---------------------------------------------------------------------------
# Warnings (discriminated on ``type``)
# ---------------------------------------------------------------------------


class ForeignKeyFix(BaseModel):
    """Payload telling the generator which FK column to append."""
    entity_name: str
    column_name: str
    referenced_entity: str

    model_config = _WIRE_CONFIG


class JunctionFix(BaseModel):
    """Payload describing the junction entity replacing an M:N link."""
    junction_entity: str
    from_entity: str
    to_entity: str

    model_config = _WIRE_CONFIG


class _WarningBase(BaseModel):
    severity: Severity
    category: WarningCategory
    message: str
    suggestion: str = ""
    entity: str | None = None
    relationship: str | None = None

    model_config = _WIRE_CONFIG


class MissingPrimaryKeyWarning(_WarningBase):
    type: Literal["missing_primary_key"] = "missing_primary_key"
    severity: Severity = Severity.ERROR
    category: WarningCategory = WarningCategory.STRUCTURE


class MultiplePrimaryKeysWarning(_WarningBase):
    type: Literal["multiple_primary_keys"] = "multiple_primary_keys"
    severity: Severity = Severity.ERROR
    category: WarningCategory = WarningCategory.STRUCTURE
    columns: list[str] = Field(default_factory=list)


class DuplicateColumnsWarning(_WarningBase):
    type: Literal["duplicate_columns"] = "duplicate_columns"
    severity: Severity = Severity.ERROR
    category: WarningCategory = WarningCategory.STRUCTURE
    columns: list[str] = Field(default_factory=list)


class EmptyEntityWarning(_WarningBase):
    type: Literal["empty_entity"] = "empty_entity"
    severity: Severity = Severity.WARNING
    category: WarningCategory = WarningCategory.STRUCTURE


class NamingConflictWarning(_WarningBase):
    type: Literal["naming_conflict"] = "naming_conflict"
    severity: Severity = Severity.WARNING
    category: WarningCategory = WarningCategory.NAMING
    columns: list[str] = Field(default_factory=list)


class SystemColumnConflictWarning(_WarningBase):
    type: Literal["system_column_conflict"] = "system_column_conflict"
    severity: Severity = Severity.WARNING
    category: WarningCategory = WarningCategory.NAMING
    columns: list[str] = Field(default_factory=list)


class MissingEntityWarning(_WarningBase):
    type: Literal["missing_entity"] = "missing_entity"
    severity: Severity = Severity.ERROR
    category: WarningCategory = WarningCategory.RELATIONSHIPS
    missing_entity: str


class ManyToManyRelationshipWarning(_WarningBase):
    type: Literal["many_to_many_relationship"] = "many_to_many_relationship"
    severity: Severity = Severity.ERROR
    category: WarningCategory = WarningCategory.RELATIONSHIPS
    fix_data: JunctionFix


class SelfReferencingRelationshipWarning(_WarningBase):
    type: Literal["self_referencing_relationship"] = "self_referencing_relationship"
    severity: Severity = Severity.WARNING
    category: WarningCategory = WarningCategory.RELATIONSHIPS


class MissingForeignKeyWarning(_WarningBase):
    type: Literal["missing_foreign_key"] = "missing_foreign_key"
    severity: Severity = Severity.WARNING
    category: WarningCategory = WarningCategory.RELATIONSHIPS
    fix_data: ForeignKeyFix


class CdmEntityDetectedWarning(_WarningBase):
    type: Literal["cdm_entity_detected"] = "cdm_entity_detected"
    severity: Severity = Severity.INFO
    category: WarningCategory = WarningCategory.CDM
    cdm_entity: str


ErdWarning = Annotated[
    Union[
        MissingPrimaryKeyWarning,
        MultiplePrimaryKeysWarning,
        DuplicateColumnsWarning,
        EmptyEntityWarning,
        NamingConflictWarning,
        SystemColumnConflictWarning,
        MissingEntityWarning,
        ManyToManyRelationshipWarning,
        SelfReferencingRelationshipWarning,
        MissingForeignKeyWarning,
        CdmEntityDetectedWarning,
    ],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class ValidationSummary(BaseModel):
    """Counts by severity plus the overall verdict."""
    is_valid: bool
    status: ValidationStatus
    error_count: int = 0
    warning_count: int = 0
    info_count: int = 0
    total_issues: int = 0
    cdm_entities_detected: int = 0

    model_config = _WIRE_CONFIG


class CdmMatch(BaseModel):
    """A declared entity that matches a platform CDM entity."""
    entity: str
    logical_name: str
    display_name: str
    match_type: str = "exact"
    confidence: float = 1.0

    model_config = _WIRE_CONFIG


class CdmDetection(BaseModel):
    """CDM detection report for a parsed diagram."""
    matches: list[CdmMatch] = Field(default_factory=list)
    total_entities_analyzed: int = 0
    custom_entities: int = 0

    model_config = _WIRE_CONFIG


class ParseResult(BaseModel):
    """Complete output of one parse invocation."""
    entities: list[Entity] = Field(default_factory=list)
    relationships: list[Relationship] = Field(default_factory=list)
    warnings: list[ErdWarning] = Field(default_factory=list)
    validation: ValidationSummary
    cdm_detection: CdmDetection = Field(default_factory=CdmDetection)

    model_config = _WIRE_CONFIG


# ---------------------------------------------------------------------------
# HTTP request / response bodies
# ---------------------------------------------------------------------------


class ValidateErdOptions(BaseModel):
    """Per-request switches for ``/api/validate-erd``."""
    include_corrected_erd: bool | None = None

    model_config = _WIRE_CONFIG


class ValidateErdRequest(BaseModel):
    """Request to validate an ERD document."""
    mermaid_content: str = Field(..., min_length=1)
    options: ValidateErdOptions = Field(default_factory=ValidateErdOptions)

    model_config = _WIRE_CONFIG


class ValidateErdResponse(BaseModel):
    """Response body of ``/api/validate-erd``."""
    success: bool
    validation: ValidationSummary
    entities: list[Entity]
    relationships: list[Relationship]
    warnings: list[ErdWarning]
    corrected_erd: str | None = None
    cdm_detection: CdmDetection

    model_config = _WIRE_CONFIG


class CorrectErdRequest(BaseModel):
    """Request to regenerate an ERD with auto-fixes applied."""
    mermaid_content: str = Field(..., min_length=1)

    model_config = _WIRE_CONFIG


class CorrectErdResponse(BaseModel):
    """Response body of ``/api/correct-erd``."""
    corrected_erd: str
    applied_fixes: list[str] = Field(default_factory=list)

    model_config = _WIRE_CONFIG


class ValidationRule(BaseModel):
    """Catalogue entry describing one validation rule."""
    type: str
    severity: Severity
    category: WarningCategory
    auto_fixable: bool = False
    description: str = ""

    model_config = _WIRE_CONFIG


class ValidationOptions(BaseModel):
    """Response body of ``/api/validation-options``."""
    rules: list[ValidationRule]
    supported_types: list[str]

    model_config = _WIRE_CONFIG
