"""
Module: questions

Purpose:
    Provides the Question dataclass - the record passed between the
    extractor, the review step and the record store. Represents one
    bilingual (English/Hindi) multiple-choice question.

Key Functions:
    - Question.with_placeholders(): Fill empty text/options with placeholders
    - Question.to_dict() / Question.from_dict(): Stored record form
    - parse_base_id(): Derive exam/year tokens from a base id

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - extractor.pipeline: Builds questions from segmenter drafts
    - extractor.model_extractor: Builds questions from model replies
    - store: Persists question records
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional, Tuple


# Placeholders used to keep extracted records complete
MISSING_TEXT = "Text not extracted"
PLACEHOLDER_OPTIONS_EN: Tuple[str, ...] = ("Option A", "Option B", "Option C", "Option D")
PLACEHOLDER_OPTIONS_HI: Tuple[str, ...] = ("विकल्प A", "विकल्प B", "विकल्प C", "विकल्प D")

DEFAULT_CATEGORY = "General"
UNKNOWN_EXAM = "UNKNOWN"


class Level(str, Enum):
    """Difficulty level of a question."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


def parse_base_id(base_id: str) -> Tuple[str, str]:
    """
    Derive (exam, year) tokens from a base id.

    Base ids follow the ``q_<exam>_<year>_<subject>`` convention. The
    exam token is the second underscore-delimited segment upper-cased,
    the year token is the third segment.

    Args:
        base_id: Caller-supplied id seed like "q_uppsc_2024_gs".

    Returns:
        (exam, year). Exam falls back to "UNKNOWN", year to the
        current calendar year.

    Example:
        >>> parse_base_id("q_uppsc_2024_gs")
        ('UPPSC', '2024')
        >>> parse_base_id("q")[0]
        'UNKNOWN'
    """
    segments = base_id.split("_")
    exam = segments[1].upper() if len(segments) > 1 and segments[1] else UNKNOWN_EXAM
    year = segments[2] if len(segments) > 2 and segments[2] else str(date.today().year)
    return exam, year


def now_millis() -> int:
    """Current time as integer milliseconds since the epoch."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Question:
    """
    Bilingual multiple-choice question (immutable).

    Attributes:
        id: Unique identifier like "q_uppsc_2024_gs_001"
        exam: Exam token like "UPPSC"
        year: Year token like "2024"
        category: Subject category, defaults to "General"
        level: Difficulty level, defaults to medium
        question_en: English question text
        question_hi: Hindi question text
        options_en: English options in display order
        options_hi: Hindi options in display order
        answer: 1-based index of the correct option (not range-checked)
        tags: Free-form tags
        created_at: Creation time in milliseconds since epoch
        explanation_en: Optional English explanation
        explanation_hi: Optional Hindi explanation
    """

    id: str
    exam: str
    year: str
    category: str = DEFAULT_CATEGORY
    level: Level = Level.MEDIUM
    question_en: str = ""
    question_hi: str = ""
    options_en: Tuple[str, ...] = ()
    options_hi: Tuple[str, ...] = ()
    answer: int = 1
    tags: Tuple[str, ...] = ()
    created_at: int = field(default_factory=now_millis)
    explanation_en: Optional[str] = None
    explanation_hi: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate question on construction."""
        if not self.id:
            raise ValueError("Question id must not be empty")
        if not isinstance(self.level, Level):
            # Accept plain strings ("easy") for convenience
            object.__setattr__(self, "level", Level(self.level))

    @property
    def is_complete(self) -> bool:
        """True when both languages have question text and options."""
        return bool(
            self.question_en and self.question_hi
            and self.options_en and self.options_hi
        )

    def with_placeholders(self) -> "Question":
        """
        Return a copy with empty text and option fields filled.

        Only completely empty option lists are replaced; a list with
        a single captured option is left as it is.

        Returns:
            Question satisfying is_complete.
        """
        return replace(
            self,
            question_en=self.question_en or MISSING_TEXT,
            question_hi=self.question_hi or MISSING_TEXT,
            options_en=self.options_en or PLACEHOLDER_OPTIONS_EN,
            options_hi=self.options_hi or PLACEHOLDER_OPTIONS_HI,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the stored record form."""
        data: Dict[str, Any] = {
            "id": self.id,
            "exam": self.exam,
            "year": self.year,
            "category": self.category,
            "level": self.level.value,
            "question_en": self.question_en,
            "question_hi": self.question_hi,
            "options_en": list(self.options_en),
            "options_hi": list(self.options_hi),
            "answer": self.answer,
            "tags": list(self.tags),
            "created_at": self.created_at,
        }
        if self.explanation_en is not None:
            data["explanation_en"] = self.explanation_en
        if self.explanation_hi is not None:
            data["explanation_hi"] = self.explanation_hi
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Question":
        """Create from the stored record form."""
        return cls(
            id=data["id"],
            exam=data.get("exam", UNKNOWN_EXAM),
            year=str(data.get("year", "")),
            category=data.get("category", DEFAULT_CATEGORY),
            level=Level(data.get("level", Level.MEDIUM.value)),
            question_en=data.get("question_en", ""),
            question_hi=data.get("question_hi", ""),
            options_en=tuple(data.get("options_en") or ()),
            options_hi=tuple(data.get("options_hi") or ()),
            answer=int(data.get("answer", 1)),
            tags=tuple(data.get("tags") or ()),
            created_at=int(data.get("created_at", 0)),
            explanation_en=data.get("explanation_en"),
            explanation_hi=data.get("explanation_hi"),
        )
