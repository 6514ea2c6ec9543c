"""Shared constants used across the ERD validator."""
from __future__ import annotations

# Application version
VERSION: str = "1.0.0"

# Port numbers
ERD_VALIDATOR_PORT: int = 8001
INTERNAL_PORT: int = 8000

# Service names
ERD_VALIDATOR_SERVICE_NAME: str = "erd-validator"

# Request limits
MAX_CONTENT_LENGTH: int = 1_048_576

# Diagram header line recognised by the line classifier
DIAGRAM_HEADER: str = "erDiagram"

# Comment prefix for ignored lines
COMMENT_PREFIX: str = "%%"
