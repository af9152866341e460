"""
Module: store.json_store

Purpose:
    Local record store: the whole database tree in one JSON file,
    laid out as ``{"questions": {...}, "Exams": {...}}``.

Key Classes:
    - JsonFileStore: File-backed QuestionStore
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .base import EXAMS, QUESTIONS, QuestionStore, StoreError
from .file_locking import locked_read_json, locked_read_modify_write_json

logger = logging.getLogger(__name__)


def _empty_tree() -> Dict[str, Any]:
    return {QUESTIONS: {}, EXAMS: {}}


class JsonFileStore(QuestionStore):
    """
    QuestionStore backed by a single JSON document on disk.

    Every write is a locked read-modify-write of the whole file, so
    concurrent writers (threads or processes) never lose each other's
    records.

    Example:
        >>> store = JsonFileStore(Path("~/.quizbank/db.json").expanduser())
        >>> store.save_question(question)
        >>> len(store.list_questions())
        1
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"JsonFileStore({str(self.path)!r})"

    def _load(self) -> Dict[str, Any]:
        try:
            return locked_read_json(self.path, _empty_tree)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Failed to read {self.path}: {e}") from e

    def _update(self, modifier) -> None:
        try:
            locked_read_modify_write_json(self.path, modifier, _empty_tree)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Failed to write {self.path}: {e}") from e

    def _read_collection(self, collection: str) -> Dict[str, Dict[str, Any]]:
        return dict(self._load().get(collection) or {})

    def _read_record(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        return (self._load().get(collection) or {}).get(key)

    def _write_record(self, collection: str, key: str, record: Dict[str, Any]) -> None:
        def _set(tree: Dict[str, Any]) -> Dict[str, Any]:
            tree.setdefault(collection, {})[key] = record
            return tree

        self._update(_set)

    def _delete_record(self, collection: str, key: str) -> None:
        def _remove(tree: Dict[str, Any]) -> Dict[str, Any]:
            (tree.get(collection) or {}).pop(key, None)
            return tree

        self._update(_remove)
