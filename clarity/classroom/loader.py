"""
CourseLoader - Load course structure from the document store.

Provides:
- The full module/lesson tree of a course in one call
- Course document writes for the import tooling
"""

import logging

from pydantic import ValidationError

from clarity.schemas import Course

from .errors import CourseDataError, StructureMissingError
from .store import DocumentStore

logger = logging.getLogger(__name__)

COURSES = "courses"


class CourseLoader:
    """Read course documents from the `courses` collection."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def load_course(self, course_id: str) -> Course:
        """
        Load a course with its full module/lesson tree.

        Raises:
            StructureMissingError: If the course document does not exist
            CourseDataError: If the document does not validate
        """
        data = self.store.get(COURSES, course_id)
        if data is None:
            logger.warning(f"Course not found: {course_id}")
            raise StructureMissingError(course_id)

        try:
            course = Course.model_validate({**data, "id": course_id})
        except ValidationError as e:
            logger.error(f"Invalid course document {course_id}: {e}")
            raise CourseDataError(f"Course {course_id} has invalid structure") from e

        logger.info(f"Loaded course {course_id}: {len(course.modules)} modules, {course.lesson_count} lessons")
        return course

    def save_course(self, course: Course):
        """Create or replace a course document."""
        data = course.model_dump(mode="json", by_alias=True, exclude={"id"})
        self.store.set(COURSES, course.id, data)

    def course_exists(self, course_id: str) -> bool:
        return self.store.get(COURSES, course_id) is not None
