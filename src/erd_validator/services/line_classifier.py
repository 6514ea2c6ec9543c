"""Line classifier for erDiagram text.

Splits raw text into significant lines and tags each one with the role it
plays in the two-state block machine (``AT_TOP`` / ``IN_ENTITY_BLOCK``).
Comment lines (``%%``), blank lines and the ``erDiagram`` header are
dropped before classification.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from src.shared.constants import COMMENT_PREFIX, DIAGRAM_HEADER

_ENTITY_HEADER_RE = re.compile(r"^(\w+)\s*\{")
_BLOCK_CLOSE = "}"


class BlockState(str, Enum):
    """States of the block machine."""
    AT_TOP = "at_top"
    IN_ENTITY_BLOCK = "in_entity_block"


class LineKind(str, Enum):
    """Role of a significant line."""
    ENTITY_OPEN = "entity_open"
    ENTITY_CLOSE = "entity_close"
    ENTITY_BODY = "entity_body"
    TOP_LEVEL = "top_level"


@dataclass(frozen=True)
class ClassifiedLine:
    """A trimmed significant line.

    ``entity`` is the declared name for ``ENTITY_OPEN`` and the owning
    entity for ``ENTITY_BODY`` lines; ``None`` otherwise.
    """

    kind: LineKind
    text: str
    entity: str | None = None


@dataclass
class ClassifiedDocument:
    """All classified lines plus the state reached at end of input."""

    lines: list[ClassifiedLine] = field(default_factory=list)
    final_state: BlockState = BlockState.AT_TOP
    open_entity: str | None = None

    @property
    def has_unclosed_block(self) -> bool:
        return self.final_state is BlockState.IN_ENTITY_BLOCK


def significant_lines(text: str) -> list[str]:
    """Return trimmed lines minus blanks, ``%%`` comments and the header."""
    lines: list[str] = []
    for raw in text.split("\n"):
        line = raw.strip()
        if not line or line.startswith(COMMENT_PREFIX) or line == DIAGRAM_HEADER:
            continue
        lines.append(line)
    return lines


def entity_header_name(line: str) -> str | None:
    """Return the entity name if *line* opens an entity block."""
    if not line.endswith("{"):
        return None
    match = _ENTITY_HEADER_RE.match(line)
    return match.group(1) if match else None


def classify_lines(text: str) -> ClassifiedDocument:
    """Run the block machine over *text*.

    A header line always opens a block, even while another block is open
    (the earlier block is implicitly closed).  A stray ``}`` at top level is
    classified as a close and leaves the state unchanged.
    """
    document = ClassifiedDocument()
    state = BlockState.AT_TOP
    current: str | None = None

    for line in significant_lines(text):
        name = entity_header_name(line)
        if name is not None:
            state = BlockState.IN_ENTITY_BLOCK
            current = name
            document.lines.append(ClassifiedLine(LineKind.ENTITY_OPEN, line, name))
            continue

        if line == _BLOCK_CLOSE:
            state = BlockState.AT_TOP
            current = None
            document.lines.append(ClassifiedLine(LineKind.ENTITY_CLOSE, line))
            continue

        if state is BlockState.IN_ENTITY_BLOCK:
            document.lines.append(ClassifiedLine(LineKind.ENTITY_BODY, line, current))
        else:
            document.lines.append(ClassifiedLine(LineKind.TOP_LEVEL, line))

    document.final_state = state
    document.open_entity = current
    return document
