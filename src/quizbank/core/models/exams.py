"""
Module: exams

Purpose:
    Exam dataclass - a named exam that questions are filed under.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class Exam:
    """
    Exam entry (immutable).

    Attributes:
        id: Unique key like "uppsc"
        name: Short display name like "UPPSC"
        full_name: Long name, stored as "fullName"
        description: Free text
    """
    id: str
    name: str
    full_name: str = ""
    description: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Exam id must not be empty")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "fullName": self.full_name,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Exam":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            full_name=data.get("fullName", ""),
            description=data.get("description", ""),
        )
