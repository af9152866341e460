"""
Schemas Package

JSON schema definitions and validation utilities.
"""

from .validator import (
    validate_exam,
    validate_question,
    ValidationError,
)

__all__ = [
    "validate_exam",
    "validate_question",
    "ValidationError",
]
