"""
Progress tracking schemas for Clarity Academy.

Defines Pydantic models for per-learner state:
- Access history entries (one per lesson, last write wins)
- The progress record kept for each (user, course) pair
- Course enrollments
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import Field, field_validator

from .course import DocumentModel


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive timestamps read from storage as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AccessHistoryEntry(DocumentModel):
    lesson_id: str
    accessed_at: datetime

    @field_validator("accessed_at")
    @classmethod
    def accessed_at_utc(cls, v):
        return ensure_utc(v)


class ProgressRecord(DocumentModel):
    """
    Progress for one learner in one course.

    `completed_lessons` maps module id -> lesson ids completed in that
    module. `current_module`/`current_lesson` is the resume point.
    """
    id: Optional[str] = None
    user_id: str
    course_id: str
    completed_modules: list[str] = []
    completed_lessons: dict[str, list[str]] = {}
    current_module: Optional[str] = None
    current_lesson: Optional[str] = None
    access_history: list[AccessHistoryEntry] = []
    last_accessed_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("last_accessed_at", "updated_at")
    @classmethod
    def timestamps_utc(cls, v):
        return ensure_utc(v)

    def completed_in_module(self, module_id: str) -> list[str]:
        return self.completed_lessons.get(module_id, [])

    def is_lesson_completed(self, module_id: str, lesson_id: str) -> bool:
        return lesson_id in self.completed_in_module(module_id)

    def is_module_completed(self, module_id: str) -> bool:
        """Stored module completion (see completion.is_module_complete for the live check)."""
        return module_id in self.completed_modules

    def last_access(self, lesson_id: str) -> Optional[datetime]:
        entry = next((h for h in self.access_history if h.lesson_id == lesson_id), None)
        return entry.accessed_at if entry else None


class Enrollment(DocumentModel):
    id: Optional[str] = None
    user_id: str
    course_id: str
    enrolled_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("enrolled_at")
    @classmethod
    def enrolled_at_utc(cls, v):
        return ensure_utc(v)
