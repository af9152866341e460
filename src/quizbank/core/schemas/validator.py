"""
Schema Validation Utilities

Validates stored record dictionaries (questions, exams) against the JSON
schemas shipped next to this module. Every store write goes through
these checks so malformed records fail fast instead of landing in the
database.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema


# Load schemas lazily
_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class ValidationError(Exception):
    """Raised when data fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def _validate(name: str, data: dict[str, Any]) -> None:
    validator = jsonschema.Draft7Validator(_load_schema(name))
    problems = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
    if not problems:
        return

    first = problems[0]
    path = "/".join(str(p) for p in first.path)
    raise ValidationError(
        f"Invalid {name} record: {first.message}",
        path=path,
        errors=[e.message for e in problems],
    )


def validate_question(data: dict[str, Any]) -> None:
    """
    Validate a question record against the question schema.

    Args:
        data: Question dictionary (``Question.to_dict()`` form)

    Raises:
        ValidationError: If data is invalid
    """
    _validate("question", data)


def validate_exam(data: dict[str, Any]) -> None:
    """
    Validate an exam record against the exam schema.

    Raises:
        ValidationError: If data is invalid
    """
    _validate("exam", data)
