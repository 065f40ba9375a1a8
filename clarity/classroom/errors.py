"""Error types raised by the classroom runtime."""


class ClarityError(Exception):
    """Base class for classroom errors."""


class DocumentNotFoundError(ClarityError):
    """A document addressed by id does not exist in its collection."""

    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"Document not found: {collection}/{doc_id}")
        self.collection = collection
        self.doc_id = doc_id


class StructureMissingError(ClarityError):
    """The course document does not exist."""

    def __init__(self, course_id: str):
        super().__init__(f"Course not found: {course_id}")
        self.course_id = course_id


class CourseDataError(ClarityError):
    """The stored course document does not match the course schema."""


class EmptyStructureError(ClarityError):
    """The course has no modules, or its first module has no lessons."""


class StaleReferenceError(ClarityError):
    """A module/lesson reference no longer exists in the course structure."""

    def __init__(self, module_id: str | None, lesson_id: str | None):
        super().__init__(f"Lesson {lesson_id!r} not found in module {module_id!r}")
        self.module_id = module_id
        self.lesson_id = lesson_id


class ProgressWriteError(ClarityError):
    """Persisting progress to the document store failed."""


class StoreError(ClarityError):
    """The document store could not be read or written."""
