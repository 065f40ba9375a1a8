"""
Clarity Academy Classroom - Runtime components for taking courses.

This module provides:
- DocumentStore: JSON documents in SQLite
- CourseLoader: Load the course structure
- ProgressStore: Load, create and update progress records
- Access evaluation, sequencing, completion and access history
- LessonNavigator: The lesson viewer's state machine
- EnrollmentService: Course enrollment
"""

from .errors import (
    ClarityError,
    DocumentNotFoundError,
    StructureMissingError,
    CourseDataError,
    EmptyStructureError,
    StaleReferenceError,
    ProgressWriteError,
    StoreError,
)

from .store import DocumentStore

from .loader import CourseLoader

from .progress import ProgressStore

from .sequence import (
    LessonPosition,
    first_position,
    next_position,
)

from .access import (
    TIME_GATES,
    DEFAULT_ACCESS_RULE,
    resolve_access_rule,
    is_accessible,
)

from .completion import (
    CompletionResult,
    complete_lesson,
    is_module_complete,
    is_course_complete,
    live_completed_modules,
    progress_summary,
)

from .history import record_access

from .navigator import (
    LessonNavigator,
    NavigatorState,
    SidebarLesson,
    SidebarModule,
    LessonView,
    CompletionOutcome,
)

from .enrollment import EnrolledCourse, EnrollmentService

__all__ = [
    # Errors
    "ClarityError",
    "DocumentNotFoundError",
    "StructureMissingError",
    "CourseDataError",
    "EmptyStructureError",
    "StaleReferenceError",
    "ProgressWriteError",
    "StoreError",
    # Storage
    "DocumentStore",
    "CourseLoader",
    "ProgressStore",
    # Sequencing
    "LessonPosition",
    "first_position",
    "next_position",
    # Access
    "TIME_GATES",
    "DEFAULT_ACCESS_RULE",
    "resolve_access_rule",
    "is_accessible",
    # Completion
    "CompletionResult",
    "complete_lesson",
    "is_module_complete",
    "is_course_complete",
    "live_completed_modules",
    "progress_summary",
    "record_access",
    # Navigator
    "LessonNavigator",
    "NavigatorState",
    "SidebarLesson",
    "SidebarModule",
    "LessonView",
    "CompletionOutcome",
    # Enrollment
    "EnrolledCourse",
    "EnrollmentService",
]
