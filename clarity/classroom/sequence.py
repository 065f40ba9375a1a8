"""
Lesson sequencing - first and next lesson across module boundaries.

"Next" means the lesson with order + 1 in the same module, otherwise the
lowest-order lesson of the module with order + 1. Gaps in either ordering
end the sequence.
"""

from dataclasses import dataclass
from typing import Optional

from clarity.schemas import Course, Lesson, Module


@dataclass(frozen=True)
class LessonPosition:
    """A (module, lesson) pair inside a course."""
    module: Module
    lesson: Lesson

    @property
    def module_id(self) -> str:
        return self.module.id

    @property
    def lesson_id(self) -> str:
        return self.lesson.id

    @property
    def ids(self) -> tuple[str, str]:
        return (self.module.id, self.lesson.id)


def first_position(course: Course) -> Optional[LessonPosition]:
    """First lesson of the first module by order, or None if either is missing."""
    modules = course.sorted_modules()
    if not modules:
        return None
    lesson = modules[0].first_lesson()
    if not lesson:
        return None
    return LessonPosition(modules[0], lesson)


def next_position(course: Course, module_id: str, lesson_id: str) -> Optional[LessonPosition]:
    """Lesson following (module_id, lesson_id), or None at the end of the course."""
    located = course.locate(module_id, lesson_id)
    if not located:
        return None
    module, lesson = located

    following = module.lesson_at(lesson.order + 1)
    if following:
        return LessonPosition(module, following)

    next_module = course.module_at(module.order + 1)
    if next_module:
        first = next_module.first_lesson()
        if first:
            return LessonPosition(next_module, first)

    return None
