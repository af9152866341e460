"""
Record stores for questions and exams.

- JsonFileStore: local JSON document with file locking
- RealtimeDatabaseStore: Firebase Realtime Database REST API
- save_questions: concurrent batch save
"""

from .base import QuestionStore, StoreError
from .batch import BatchSaveError, save_questions
from .json_store import JsonFileStore
from .realtime_db import RealtimeDatabaseStore

__all__ = [
    "BatchSaveError",
    "JsonFileStore",
    "QuestionStore",
    "RealtimeDatabaseStore",
    "StoreError",
    "save_questions",
]
