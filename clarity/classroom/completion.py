"""
Completion propagation - lesson -> module -> course.

Completing a lesson adds it to the module's completed set, recomputes the
module and course completion against the current structure, and moves the
resume point to the next lesson. The functions here never mutate their
inputs; persisting the result is the caller's job.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from clarity.schemas import Course, Module, ProgressRecord, ensure_utc

from .errors import StaleReferenceError
from .sequence import LessonPosition, next_position

logger = logging.getLogger(__name__)

# Fields written back after a completion
COMPLETION_FIELDS = ("completed_lessons", "completed_modules", "current_module", "current_lesson", "updated_at")


@dataclass
class CompletionResult:
    """Outcome of completing one lesson."""
    progress: ProgressRecord
    module_just_completed: bool
    course_just_completed: bool
    course_completed: bool
    next_position: Optional[LessonPosition]


def is_module_complete(module: Module, progress: ProgressRecord) -> bool:
    """
    Live module completion: every lesson currently in the module is completed.

    Modules without lessons are never complete.
    """
    if not module.lessons:
        return False
    completed = set(progress.completed_in_module(module.id))
    return all(lesson.id in completed for lesson in module.lessons)


def is_course_complete(course: Course, completed_modules: list[str]) -> bool:
    """Every module in the structure is in `completed_modules`."""
    if not course.modules:
        return False
    done = set(completed_modules)
    return all(module.id in done for module in course.modules)


def live_completed_modules(course: Course, progress: ProgressRecord) -> list[str]:
    """
    Stored completed modules that still hold.

    A module that gained lessons since it was completed drops out. Ids of
    modules no longer in the structure are kept.
    """
    kept = []
    for module_id in progress.completed_modules:
        module = course.get_module(module_id)
        if module is None or is_module_complete(module, progress):
            kept.append(module_id)
    return kept


def progress_summary(course: Course, progress: ProgressRecord) -> dict:
    """
    Completion statistics for display.

    Only lessons present in the structure are counted; completed ids left
    behind by deleted lessons are ignored.
    """
    total_lessons = course.lesson_count
    completed = sum(
        1 for module in course.modules for lesson in module.lessons
        if progress.is_lesson_completed(module.id, lesson.id)
    )
    completed_modules = sum(1 for module in course.modules if is_module_complete(module, progress))

    return {
        "total_lessons": total_lessons,
        "completed": completed,
        "completion_percent": round(completed / total_lessons * 100, 1) if total_lessons > 0 else 0,
        "total_modules": len(course.modules),
        "completed_modules": completed_modules,
        "course_completed": is_course_complete(course, live_completed_modules(course, progress)),
        "total_minutes": course.total_duration,
    }


def complete_lesson(
    module_id: str,
    lesson_id: str,
    progress: ProgressRecord,
    course: Course,
    now: Optional[datetime] = None,
) -> CompletionResult:
    """
    Mark a lesson completed and propagate to module and course.

    Completing an already-completed lesson leaves the completion sets as
    they were.

    Raises:
        StaleReferenceError: If the module/lesson is not in the structure.
            Nothing is changed in that case.
    """
    located = course.locate(module_id, lesson_id)
    if not located:
        raise StaleReferenceError(module_id, lesson_id)
    module, _ = located

    updated = progress.model_copy(deep=True)
    completed_before = live_completed_modules(course, progress)
    was_course_complete = is_course_complete(course, completed_before)

    module_lessons = updated.completed_lessons.setdefault(module_id, [])
    if lesson_id not in module_lessons:
        module_lessons.append(lesson_id)

    updated.completed_modules = live_completed_modules(course, updated)

    module_just_completed = False
    if is_module_complete(module, updated):
        if module_id not in updated.completed_modules:
            updated.completed_modules.append(module_id)
        module_just_completed = module_id not in completed_before
    if module_just_completed:
        logger.info(f"Module {module_id} completed by user {progress.user_id}")

    course_complete = is_course_complete(course, updated.completed_modules)
    course_just_completed = course_complete and not was_course_complete
    if course_just_completed:
        logger.info(f"Course {course.id} completed by user {progress.user_id}")

    following = next_position(course, module_id, lesson_id)
    if following:
        updated.current_module, updated.current_lesson = following.ids
    else:
        updated.current_module, updated.current_lesson = module_id, lesson_id

    updated.updated_at = ensure_utc(now) or datetime.now(timezone.utc)

    return CompletionResult(
        progress=updated,
        module_just_completed=module_just_completed,
        course_just_completed=course_just_completed,
        course_completed=course_complete,
        next_position=following,
    )
