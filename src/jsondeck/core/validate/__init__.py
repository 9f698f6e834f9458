from __future__ import annotations

from .schema_validate import SCHEMA_PATH, validate_document, validate_document_file

__all__ = [
    "SCHEMA_PATH",
    "validate_document",
    "validate_document_file",
]
