"""
Clarity Academy Schemas - Pydantic models for the e-learning platform.

This module exports all schema classes for:
- Course: access rules, lessons, modules, courses
- Progress: per-learner progress records, access history, enrollments
"""

# Course schemas
from .course import (
    DocumentModel,
    AccessRule,
    AccessConfig,
    TIME_GATED_RULES,
    LessonType,
    Lesson,
    Module,
    Course,
)

# Progress schemas
from .progress import (
    AccessHistoryEntry,
    ProgressRecord,
    Enrollment,
    ensure_utc,
)

__all__ = [
    # Course
    'DocumentModel',
    'AccessRule',
    'AccessConfig',
    'TIME_GATED_RULES',
    'LessonType',
    'Lesson',
    'Module',
    'Course',
    # Progress
    'AccessHistoryEntry',
    'ProgressRecord',
    'Enrollment',
    'ensure_utc',
]
