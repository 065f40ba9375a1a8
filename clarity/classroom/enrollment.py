"""
EnrollmentService - Enroll learners in courses.

Enrolling creates an `enrollments` document and the learner's initial
progress record, so the lesson viewer opens at the first lesson.
"""

import logging
from dataclasses import dataclass

from clarity.schemas import Enrollment

from .completion import progress_summary
from .errors import CourseDataError, StructureMissingError
from .loader import CourseLoader
from .progress import ProgressStore
from .store import DocumentStore

logger = logging.getLogger(__name__)

ENROLLMENTS = "enrollments"


@dataclass
class EnrolledCourse:
    """A course on the learner's list, with overall progress."""
    course_id: str
    title: str
    completion_percent: int


class EnrollmentService:
    """Create and look up course enrollments."""

    def __init__(self, store: DocumentStore, loader: CourseLoader, progress_store: ProgressStore):
        self.store = store
        self.loader = loader
        self.progress_store = progress_store

    def get_enrollment(self, user_id: str, course_id: str) -> Enrollment | None:
        matches = self.store.query(ENROLLMENTS, userId=user_id, courseId=course_id)
        if not matches:
            return None
        doc_id, data = matches[0]
        return Enrollment.model_validate({**data, "id": doc_id})

    def is_enrolled(self, user_id: str, course_id: str) -> bool:
        return self.get_enrollment(user_id, course_id) is not None

    def enrolled_course_ids(self, user_id: str) -> list[str]:
        """Course ids the learner is enrolled in, oldest enrollment first."""
        return [data["courseId"] for _, data in self.store.query(ENROLLMENTS, userId=user_id)]

    def enrolled_courses(self, user_id: str) -> list[EnrolledCourse]:
        """
        Enrolled courses with their titles and whole-number completion percent.

        Courses that were deleted or can no longer be parsed are left out.
        """
        courses = []
        for course_id in self.enrolled_course_ids(user_id):
            try:
                course = self.loader.load_course(course_id)
            except (StructureMissingError, CourseDataError) as e:
                logger.warning(f"Skipping enrolled course {course_id} for user {user_id}: {e}")
                continue

            progress = self.progress_store.load_progress(user_id, course_id)
            percent = round(progress_summary(course, progress)["completion_percent"]) if progress else 0
            courses.append(EnrolledCourse(course_id, course.title, percent))
        return courses

    def enroll(self, user_id: str, course_id: str) -> Enrollment:
        """
        Enroll a learner in a course.

        Already-enrolled learners get their existing enrollment back. A
        progress record is created unless one exists.

        Raises:
            StructureMissingError: If the course does not exist
        """
        existing = self.get_enrollment(user_id, course_id)
        if existing:
            return existing

        course = self.loader.load_course(course_id)

        enrollment = Enrollment(user_id=user_id, course_id=course_id)
        data = enrollment.model_dump(mode="json", by_alias=True, exclude={"id"})
        doc_id = self.store.add(ENROLLMENTS, data)

        if self.progress_store.load_progress(user_id, course_id) is None:
            self.progress_store.create_progress(user_id, course)

        logger.info(f"Enrolled user {user_id} in course {course_id}")
        return enrollment.model_copy(update={"id": doc_id})
