"""
ProgressStore - Per-learner course progress in the `progress` collection.

One record per (user, course) pair, holding:
- Completed lessons (per module) and completed modules
- The resume point (current module and lesson)
- Access history used by time-gated lessons
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic.alias_generators import to_camel
from pydantic_core import to_jsonable_python

from clarity.schemas import Course, ProgressRecord

from .errors import DocumentNotFoundError, ProgressWriteError, StoreError
from .sequence import first_position
from .store import DocumentStore

logger = logging.getLogger(__name__)

PROGRESS = "progress"


class ProgressStore:
    """
    Load, create and partially update progress records.

    Writes are blind overwrites of the named fields; there is no version
    check, so two sessions on the same record can clobber each other.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    def load_progress(self, user_id: str, course_id: str) -> Optional[ProgressRecord]:
        """Get the progress record for a learner in a course, or None."""
        matches = self.store.query(PROGRESS, userId=user_id, courseId=course_id)
        if not matches:
            return None
        if len(matches) > 1:
            logger.warning(f"{len(matches)} progress records for user {user_id} in course {course_id}; using the first")
        doc_id, data = matches[0]
        return ProgressRecord.model_validate({**data, "id": doc_id})

    def create_progress(self, user_id: str, course: Course) -> ProgressRecord:
        """
        Create the initial progress record for a learner.

        The resume point is the first lesson of the first module, or empty
        when the course has no content yet.
        """
        now = datetime.now(timezone.utc)
        start = first_position(course)
        record = ProgressRecord(
            user_id=user_id,
            course_id=course.id,
            current_module=start.module_id if start else None,
            current_lesson=start.lesson_id if start else None,
            last_accessed_at=now,
            updated_at=now,
        )
        data = record.model_dump(mode="json", by_alias=True, exclude={"id"})
        try:
            doc_id = self.store.add(PROGRESS, data)
        except StoreError as e:
            raise ProgressWriteError(f"Could not create progress for user {user_id}: {e}") from e

        logger.info(f"Created progress {doc_id} for user {user_id} in course {course.id}")
        return record.model_copy(update={"id": doc_id})

    def update_progress(self, progress_id: str, **fields: Any):
        """
        Replace the given top-level fields of a progress record.

        Args:
            progress_id: Progress document id
            **fields: ProgressRecord attribute names and their new values

        Raises:
            ValueError: If a field name is not a progress attribute
            ProgressWriteError: If the write fails
        """
        payload = {}
        for name, value in fields.items():
            field = ProgressRecord.model_fields.get(name)
            if field is None or name == "id":
                raise ValueError(f"Unknown progress field: {name}")
            payload[field.alias or to_camel(name)] = to_jsonable_python(value, by_alias=True)

        try:
            self.store.update(PROGRESS, progress_id, payload)
        except (StoreError, DocumentNotFoundError) as e:
            logger.error(f"Progress write failed for {progress_id}: {e}")
            raise ProgressWriteError(f"Could not update progress {progress_id}") from e

    def delete_progress(self, progress_id: str) -> bool:
        return self.store.delete(PROGRESS, progress_id)
