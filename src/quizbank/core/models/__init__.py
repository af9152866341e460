"""
Core Models Package

Immutable data models shared by the extractor, the store and the CLI.
All models are frozen dataclasses; changes produce new instances via
``dataclasses.replace``.
"""

from .exams import Exam
from .questions import (
    Level,
    Question,
    MISSING_TEXT,
    PLACEHOLDER_OPTIONS_EN,
    PLACEHOLDER_OPTIONS_HI,
    now_millis,
    parse_base_id,
)

__all__ = [
    "Exam",
    "Level",
    "Question",
    "MISSING_TEXT",
    "PLACEHOLDER_OPTIONS_EN",
    "PLACEHOLDER_OPTIONS_HI",
    "now_millis",
    "parse_base_id",
]
