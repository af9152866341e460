"""
quizbank core package.

Shared data models (``Question``, ``Exam``) and JSON schema validation
for stored records.
"""

from .models import Exam, Level, Question

__all__ = [
    "Exam",
    "Level",
    "Question",
]
