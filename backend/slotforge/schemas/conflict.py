from pydantic import BaseModel, Field
from typing import Literal, List

ConflictKind = Literal[
    "faculty_clash",
    "classroom_clash",
    "student_clash",
    "constraint_violation",
]

ConflictSeverity = Literal["low", "medium", "high", "critical"]


class Conflict(BaseModel):
    type: ConflictKind
    description: str
    severity: ConflictSeverity = "medium"
    suggestions: List[str] = Field(default_factory=list)
