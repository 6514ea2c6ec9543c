"""Relationship line parsing and cardinality classification.

Both the "does this line look like a relationship?" test and the
cardinality classification are ordered predicate lists evaluated
top-to-bottom; the first matching entry wins.  The order is part of the
behavioural contract and must not be rearranged.
"""
from __future__ import annotations

import re
from typing import Callable

from src.shared.models.erd import Cardinality, CardinalityKind, Relationship
from src.shared.utils import format_display_name

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

RELATIONSHIP_RE = re.compile(r"^(\w+)\s+([|}{o-]+)\s+(\w+)(?:\s*:\s*(.+))?$")

_CARDINALITY_MARKERS_RE = re.compile(r"\|\|--|--o\{|o\{|\}\|")
_QUOTED_LABEL_RE = re.compile(r""":\s*["'][^"']*["']$""")
_LABEL_QUOTES_RE = re.compile(r"""^["']|["']$""")

# (check name, predicate) -- any hit marks the line as relationship-shaped.
RELATIONSHIP_SHAPE_CHECKS: list[tuple[str, Callable[[str], bool]]] = [
    ("strict_pattern", lambda line: RELATIONSHIP_RE.match(line) is not None),
    ("cardinality_markers", lambda line: _CARDINALITY_MARKERS_RE.search(line) is not None),
    ("quoted_label", lambda line: _QUOTED_LABEL_RE.search(line) is not None),
]

# (predicate over the symbol run, kind) -- first hit wins.
CARDINALITY_RULES: list[tuple[Callable[[str], bool], CardinalityKind]] = [
    (lambda s: "||" in s and "{" in s, CardinalityKind.ONE_TO_MANY),
    (lambda s: s.count("||") >= 2, CardinalityKind.ONE_TO_ONE),
    (lambda s: "{" in s and "}" in s, CardinalityKind.MANY_TO_MANY),
    (lambda s: "o" in s and "{" in s, CardinalityKind.ZERO_TO_MANY),
]

_SIDES: dict[CardinalityKind, tuple[str, str]] = {
    CardinalityKind.ONE_TO_MANY: ("one", "many"),
    CardinalityKind.ONE_TO_ONE: ("one", "one"),
    CardinalityKind.MANY_TO_MANY: ("many", "many"),
    CardinalityKind.ZERO_TO_MANY: ("zero-or-one", "many"),
    CardinalityKind.UNKNOWN: ("unknown", "unknown"),
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def relationship_shape(line: str) -> str | None:
    """Return the name of the first relationship-shape check *line* hits."""
    for check_name, predicate in RELATIONSHIP_SHAPE_CHECKS:
        if predicate(line):
            return check_name
    return None


def looks_like_relationship(line: str) -> bool:
    return relationship_shape(line) is not None


def classify_cardinality(symbols: str) -> Cardinality:
    """Classify a free-form symbol run such as ``||--o{``."""
    kind = CardinalityKind.UNKNOWN
    for predicate, candidate in CARDINALITY_RULES:
        if predicate(symbols):
            kind = candidate
            break
    from_side, to_side = _SIDES[kind]
    return Cardinality(kind=kind, from_side=from_side, to_side=to_side)


def parse_relationship(line: str) -> Relationship | None:
    """Parse ``FROM SYMBOLS TO [: "label"]``; ``None`` if the line doesn't fit."""
    match = RELATIONSHIP_RE.match(line)
    if not match:
        return None

    from_entity, symbols, to_entity, raw_label = match.groups()
    label = _LABEL_QUOTES_RE.sub("", (raw_label or "").strip())
    default_name = f"{from_entity}_{to_entity}"

    return Relationship(
        from_entity=from_entity,
        to_entity=to_entity,
        cardinality=classify_cardinality(symbols),
        name=label or default_name,
        display_name=label or format_display_name(default_name),
        symbols=symbols,
        label=label or None,
    )
