"""
Module: store.base

Purpose:
    Record store interface. Records are kept in two collections that
    mirror the admin database tree: ``questions/<id>`` and ``Exams/<id>``.

Key Classes:
    - QuestionStore: Abstract store (questions and exams)
    - StoreError: Store read/write failure
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, TypeVar

from quizbank.core.models import Exam, Question
from quizbank.core.schemas import ValidationError, validate_exam, validate_question

logger = logging.getLogger(__name__)

QUESTIONS = "questions"
EXAMS = "Exams"

T = TypeVar("T")


class StoreError(Exception):
    """Error reading from or writing to a record store."""
    pass


def _convert(
    factory: Callable[[Dict[str, Any]], T],
    collection: str,
    key: str,
    record: Dict[str, Any],
) -> T:
    """Build a model from a stored record, mapping bad records to StoreError."""
    try:
        return factory(record)
    except (KeyError, TypeError, ValueError) as e:
        raise StoreError(f"Stored record {collection}/{key} is malformed: {e!r}") from e


class QuestionStore(ABC):
    """
    Key-value record store for questions and exams.

    Subclasses implement the four raw collection operations; record
    conversion and schema validation live here. There are no
    transactions and no queries beyond reading a whole collection.
    """

    # ─────────────────────────────────────────────────────────────────────────
    # Raw collection access (implemented by subclasses)
    # ─────────────────────────────────────────────────────────────────────────

    @abstractmethod
    def _read_collection(self, collection: str) -> Dict[str, Dict[str, Any]]:
        """Return all records of a collection keyed by id."""

    @abstractmethod
    def _read_record(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        """Return one record or None."""

    @abstractmethod
    def _write_record(self, collection: str, key: str, record: Dict[str, Any]) -> None:
        """Create or replace one record."""

    @abstractmethod
    def _delete_record(self, collection: str, key: str) -> None:
        """Remove one record (no error if absent)."""

    # ─────────────────────────────────────────────────────────────────────────
    # Questions
    # ─────────────────────────────────────────────────────────────────────────

    def list_questions(self) -> List[Question]:
        records = self._read_collection(QUESTIONS)
        return [
            _convert(Question.from_dict, QUESTIONS, key, r)
            for key, r in records.items() if isinstance(r, dict)
        ]

    def get_question(self, question_id: str) -> Optional[Question]:
        record = self._read_record(QUESTIONS, question_id)
        if not record:
            return None
        if not isinstance(record, dict):
            raise StoreError(f"Stored record {QUESTIONS}/{question_id} is not an object")
        return _convert(Question.from_dict, QUESTIONS, question_id, record)

    def save_question(self, question: Question) -> None:
        """
        Validate and write one question under its id.

        Raises:
            StoreError: If the record is invalid or the write fails.
        """
        record = question.to_dict()
        try:
            validate_question(record)
        except ValidationError as e:
            raise StoreError(f"Question {question.id} rejected: {e}") from e
        self._write_record(QUESTIONS, question.id, record)
        logger.debug(f"Saved question {question.id}")

    def delete_question(self, question_id: str) -> None:
        self._delete_record(QUESTIONS, question_id)
        logger.debug(f"Deleted question {question_id}")

    # ─────────────────────────────────────────────────────────────────────────
    # Exams
    # ─────────────────────────────────────────────────────────────────────────

    def list_exams(self) -> List[Exam]:
        records = self._read_collection(EXAMS)
        return [
            _convert(Exam.from_dict, EXAMS, key, r)
            for key, r in records.items() if isinstance(r, dict)
        ]

    def save_exam(self, exam: Exam) -> None:
        record = exam.to_dict()
        try:
            validate_exam(record)
        except ValidationError as e:
            raise StoreError(f"Exam {exam.id} rejected: {e}") from e
        self._write_record(EXAMS, exam.id, record)

    def delete_exam(self, exam_id: str) -> None:
        self._delete_record(EXAMS, exam_id)
