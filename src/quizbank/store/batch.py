"""
Module: store.batch

Purpose:
    Batch save of reviewed questions. One store write per question is
    issued on a thread pool and all writes are joined before the outcome
    is reported. There is no atomicity: on failure some records may
    already be saved.

Key Functions:
    - save_questions(): Concurrent batch write

Key Classes:
    - BatchSaveError: Aggregate failure of a batch
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, Iterable, List, Mapping, Union

from quizbank.core.models import Question

from .base import QuestionStore, StoreError

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


class BatchSaveError(StoreError):
    """
    One or more writes of a batch failed.

    Attributes:
        saved: Number of records written.
        failed: Number of records not written.
    """

    def __init__(self, message: str, saved: int, failed: int):
        super().__init__(message)
        self.saved = saved
        self.failed = failed


def save_questions(
    store: QuestionStore,
    questions: Union[Mapping[str, Question], Iterable[Question]],
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> int:
    """
    Save questions concurrently and wait for every write.

    Args:
        store: Target store.
        questions: Id-keyed mapping (as produced by extraction) or any
            iterable of questions.
        max_workers: Maximum concurrent writes.

    Returns:
        Number of questions saved.

    Raises:
        BatchSaveError: If any write failed. Only counts are reported.

    Example:
        >>> saved = save_questions(store, result.questions)
        >>> print(f"Successfully saved {saved} questions!")
    """
    items: List[Question] = list(questions.values()) if isinstance(questions, Mapping) else list(questions)
    if not items:
        return 0

    futures: Dict[str, Future] = {}
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        for question in items:
            futures[question.id] = executor.submit(store.save_question, question)

    failed = 0
    first_error = None
    for qid, future in futures.items():
        error = future.exception()
        if error is not None:
            failed += 1
            first_error = first_error or error
            logger.error(f"Write failed for {qid}: {error}")

    saved = len(futures) - failed
    if failed:
        raise BatchSaveError(
            f"Failed to save questions: {failed} of {len(futures)} writes failed ({first_error})",
            saved=saved,
            failed=failed,
        )

    logger.info(f"Saved {saved} questions to {store!r}")
    return saved
