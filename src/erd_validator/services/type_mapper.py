"""DSL type token -> canonical semantic type mapping.

Mapping happens in two strictly ordered stages:

1. ``map_type`` resolves the token itself.  ``choice(...)`` and
   ``lookup(...)`` are recognised first; any other token goes through a
   fixed, case-insensitive table and falls back to ``String``.
2. ``infer_semantic_type`` refines the *generic* results (``String`` and
   ``DateTime``) from the attribute name.  Explicit non-generic types are
   never touched.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

from src.shared.models.erd import SemanticType

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_CHOICE_RE = re.compile(r"^choice\(([^)]+)\)$")
_LOOKUP_RE = re.compile(r"^lookup\(([^)]+)\)$")

TYPE_MAP: dict[str, SemanticType] = {
    "string": SemanticType.STRING,
    "int": SemanticType.INTEGER,
    "integer": SemanticType.INTEGER,
    "decimal": SemanticType.DECIMAL,
    "money": SemanticType.MONEY,
    "boolean": SemanticType.BOOLEAN,
    "bool": SemanticType.BOOLEAN,
    "datetime": SemanticType.DATETIME,
    "date": SemanticType.DATETIME,
    "dateonly": SemanticType.DATEONLY,
    "text": SemanticType.MEMO,
    "memo": SemanticType.MEMO,
    "guid": SemanticType.UNIQUEIDENTIFIER,
    "uniqueidentifier": SemanticType.UNIQUEIDENTIFIER,
    "email": SemanticType.EMAIL,
    "phone": SemanticType.PHONE,
    "url": SemanticType.URL,
    "ticker": SemanticType.TICKER,
    "timezone": SemanticType.TIMEZONE,
    "language": SemanticType.LANGUAGE,
    "duration": SemanticType.DURATION,
    "float": SemanticType.FLOAT,
    "double": SemanticType.FLOAT,
    "file": SemanticType.FILE,
    "image": SemanticType.IMAGE,
}

# Name fragments checked in order; first hit wins.
_STRING_NAME_HINTS: list[tuple[tuple[str, ...], SemanticType]] = [
    (("email",), SemanticType.EMAIL),
    (("phone", "mobile", "tel"), SemanticType.PHONE),
    (("url", "website", "link"), SemanticType.URL),
]

DATE_ONLY_FIELD_NAMES: tuple[str, ...] = (
    "birthdate",
    "dateofbirth",
    "startdate",
    "enddate",
    "duedate",
    "orderdate",
    "deliverydate",
    "createddate",
    "modifieddate",
)


# ---------------------------------------------------------------------------
# Dataclass
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TypeInfo:
    """Result of the explicit (stage 1) mapping."""

    semantic_type: SemanticType
    choice_options: list[str] | None = None
    target_entity: str | None = None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def map_type(token: str) -> TypeInfo:
    """Map a DSL type token to its canonical type without looking at names."""
    choice = _CHOICE_RE.match(token)
    if choice:
        options = [opt.strip() for opt in choice.group(1).split(",")]
        return TypeInfo(SemanticType.CHOICE, choice_options=options)

    lookup = _LOOKUP_RE.match(token)
    if lookup:
        return TypeInfo(SemanticType.LOOKUP, target_entity=lookup.group(1).strip())

    return TypeInfo(TYPE_MAP.get(token.lower(), SemanticType.STRING))


def infer_semantic_type(attribute_name: str, mapped: SemanticType) -> SemanticType:
    """Upgrade a generic ``String``/``DateTime`` using name heuristics."""
    lowered = attribute_name.lower()

    if mapped is SemanticType.STRING:
        for fragments, upgraded in _STRING_NAME_HINTS:
            if any(fragment in lowered for fragment in fragments):
                return upgraded
        return mapped

    if mapped is SemanticType.DATETIME:
        if any(field in lowered for field in DATE_ONLY_FIELD_NAMES):
            return SemanticType.DATEONLY
        return mapped

    return mapped


def resolve_type(token: str, attribute_name: str) -> TypeInfo:
    """Run both stages and return the final ``TypeInfo``."""
    info = map_type(token)
    refined = infer_semantic_type(attribute_name, info.semantic_type)
    if refined is info.semantic_type:
        return info
    return TypeInfo(refined)
