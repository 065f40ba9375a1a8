"""
Navigator - The lesson viewer's state machine.

Provides:
- Resolution of the resume point on load (with fallback to the first lesson)
- Sidebar tree with locked/completed/current flags
- Jumps gated by the access evaluator, and an ungated "next" action
- Lesson completion with an optional advance confirmation
- Access history recording for time-gated lessons
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Iterable, Optional

from clarity.config import WritePolicy
from clarity.schemas import AccessRule, Course, Lesson, Module, ProgressRecord

from .access import is_accessible, resolve_access_rule
from .completion import (
    COMPLETION_FIELDS,
    complete_lesson,
    is_module_complete,
    progress_summary,
)
from .errors import ClarityError, EmptyStructureError, ProgressWriteError
from .history import HISTORY_FIELDS, record_access
from .loader import CourseLoader
from .progress import ProgressStore
from .sequence import LessonPosition, first_position, next_position

logger = logging.getLogger(__name__)


class NavigatorState(str, Enum):
    UNINITIALIZED = "uninitialized"
    RESOLVED = "resolved"
    ERROR = "error"


@dataclass
class SidebarLesson:
    """Lesson with sidebar flags."""
    lesson: Lesson
    locked: bool
    completed: bool
    is_current: bool


@dataclass
class SidebarModule:
    """Module with its lessons and completion counts."""
    module: Module
    lessons: list[SidebarLesson]
    completed: bool
    completed_count: int
    total_count: int


@dataclass
class LessonView:
    """Everything the lesson pane needs for one render."""
    module: Module
    lesson: Lesson
    access_rule: AccessRule
    accessible: bool
    completed: bool
    next_position: Optional[LessonPosition]

    @property
    def has_next(self) -> bool:
        return self.next_position is not None

    @property
    def can_go_next(self) -> bool:
        """Locked lessons offer no way forward until they open."""
        return self.accessible and self.next_position is not None


@dataclass
class CompletionOutcome:
    """Result of the "mark complete" action."""
    module: Module
    lesson: Lesson
    module_just_completed: bool
    course_just_completed: bool
    course_completed: bool
    next_position: Optional[LessonPosition]
    advanced: bool


class LessonNavigator:
    """
    Viewer session for one learner in one course.

    Holds the course structure, a working copy of the learner's progress
    record and the lesson currently shown. Every state-changing action is
    written back to the progress store; `write_policy` decides whether the
    working copy changes before or after the write succeeds.
    """

    def __init__(
        self,
        loader: CourseLoader,
        progress_store: ProgressStore,
        user_id: str,
        course_id: str,
        write_policy: WritePolicy = WritePolicy.CONFIRMED,
    ):
        """
        Initialize navigator.

        Args:
            loader: CourseLoader for the course structure
            progress_store: ProgressStore for the learner's record
            user_id: Signed-in learner
            course_id: Course being viewed
            write_policy: Persist-then-mutate (confirmed) or mutate-then-persist (optimistic)
        """
        self.loader = loader
        self.progress_store = progress_store
        self.user_id = user_id
        self.course_id = course_id
        self.write_policy = write_policy

        self.state = NavigatorState.UNINITIALIZED
        self.course: Optional[Course] = None
        self.progress: Optional[ProgressRecord] = None
        self.position: Optional[LessonPosition] = None
        self.error: Optional[ClarityError] = None

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def load(self) -> LessonPosition:
        """
        Load structure and progress, then resolve the lesson to show.

        Raises:
            StructureMissingError: Course does not exist
            CourseDataError: Course document is invalid
            EmptyStructureError: Course has no modules or no first lesson
            ProgressWriteError: Initial progress record could not be created
            StoreError: The document store could not be read
        """
        try:
            self.course = self.loader.load_course(self.course_id)
            if not self.course.modules:
                raise EmptyStructureError(f"Course {self.course_id} has no modules yet")

            self.progress = self.progress_store.load_progress(self.user_id, self.course_id)
            if self.progress is None:
                if first_position(self.course) is None:
                    raise EmptyStructureError(f"Course {self.course_id} has no lessons in its first module")
                logger.info(f"No progress for user {self.user_id} in course {self.course_id}; creating it")
                self.progress = self.progress_store.create_progress(self.user_id, self.course)

            self.position = self._resolve_start()
        except ClarityError as e:
            self.state = NavigatorState.ERROR
            self.error = e
            logger.error(f"Could not open course {self.course_id} for user {self.user_id}: {e}")
            raise

        self.state = NavigatorState.RESOLVED
        logger.info(f"Resolved user {self.user_id} to lesson {self.position.lesson_id} in module {self.position.module_id}")
        return self.position

    def _resolve_start(self) -> LessonPosition:
        """Use the stored resume point, falling back to the first lesson."""
        progress = self.progress
        if progress.current_module and progress.current_lesson:
            located = self.course.locate(progress.current_module, progress.current_lesson)
            if located:
                return LessonPosition(*located)
            logger.warning(
                f"Resume point {progress.current_module}/{progress.current_lesson} no longer exists; "
                f"falling back to first lesson"
            )

        start = first_position(self.course)
        if start is None:
            raise EmptyStructureError(f"Course {self.course_id} has no lessons in its first module")

        repaired = progress.model_copy(update={
            "current_module": start.module_id,
            "current_lesson": start.lesson_id,
            "updated_at": datetime.now(timezone.utc),
        })
        try:
            self._commit(repaired, ("current_module", "current_lesson", "updated_at"))
        except ProgressWriteError as e:
            logger.warning(f"Could not save repaired resume point: {e}")
        return start

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def _commit(self, updated: ProgressRecord, fields: Iterable[str]):
        """Write `fields` of `updated` and swap it in as the working copy."""
        values = {name: getattr(updated, name) for name in fields}
        if self.write_policy == WritePolicy.OPTIMISTIC:
            self.progress = updated
            self.progress_store.update_progress(updated.id, **values)
        else:
            self.progress_store.update_progress(updated.id, **values)
            self.progress = updated

    def _require_resolved(self):
        if self.state != NavigatorState.RESOLVED:
            raise RuntimeError(f"Navigator is {self.state.value}; call load() first")

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def current_module(self) -> Optional[Module]:
        return self.position.module if self.position else None

    @property
    def current_lesson(self) -> Optional[Lesson]:
        return self.position.lesson if self.position else None

    def is_accessible(self, module_id: str, lesson_id: str, now: Optional[datetime] = None) -> bool:
        """Whether the learner may open a lesson right now."""
        self._require_resolved()
        return is_accessible(module_id, lesson_id, self.course, self.progress, now=now)

    def is_completed(self, module_id: str, lesson_id: str) -> bool:
        self._require_resolved()
        return self.progress.is_lesson_completed(module_id, lesson_id)

    def next_position(self) -> Optional[LessonPosition]:
        """Lesson after the current one, or None at the end of the course."""
        self._require_resolved()
        return next_position(self.course, *self.position.ids)

    def view(self, now: Optional[datetime] = None) -> LessonView:
        """Describe the current lesson without recording a visit."""
        self._require_resolved()
        module, lesson = self.position.module, self.position.lesson
        return LessonView(
            module=module,
            lesson=lesson,
            access_rule=resolve_access_rule(lesson, self.course.access_config),
            accessible=self.is_accessible(module.id, lesson.id, now=now),
            completed=self.is_completed(module.id, lesson.id),
            next_position=self.next_position(),
        )

    def sidebar(self, now: Optional[datetime] = None) -> list[SidebarModule]:
        """Full course tree, ordered, with per-lesson flags."""
        self._require_resolved()
        current = self.position.ids
        tree = []
        for module in self.course.sorted_modules():
            entries = []
            for lesson in module.sorted_lessons():
                entries.append(SidebarLesson(
                    lesson=lesson,
                    locked=not self.is_accessible(module.id, lesson.id, now=now),
                    completed=self.is_completed(module.id, lesson.id),
                    is_current=(module.id, lesson.id) == current,
                ))
            tree.append(SidebarModule(
                module=module,
                lessons=entries,
                completed=is_module_complete(module, self.progress),
                completed_count=sum(1 for entry in entries if entry.completed),
                total_count=len(entries),
            ))
        return tree

    def progress_summary(self) -> dict:
        """Completion statistics plus the resume point."""
        self._require_resolved()
        return {
            **progress_summary(self.course, self.progress),
            "current_module": self.progress.current_module,
            "current_lesson": self.progress.current_lesson,
        }

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def render(self, now: Optional[datetime] = None) -> LessonView:
        """
        Describe the current lesson and record the visit if it is unlocked.

        A failed history write is logged and otherwise ignored.
        """
        current = self.view(now=now)
        if current.accessible:
            visited = record_access(self.progress, current.lesson.id, now=now)
            try:
                self._commit(visited, HISTORY_FIELDS)
            except ProgressWriteError as e:
                logger.warning(f"Could not record visit to lesson {current.lesson.id}: {e}")
        return current

    def jump_to(self, module_id: str, lesson_id: str, now: Optional[datetime] = None) -> bool:
        """
        Open a lesson picked from the sidebar.

        Locked or unknown lessons are ignored and False is returned.
        """
        self._require_resolved()
        if not self.is_accessible(module_id, lesson_id, now=now):
            logger.debug(f"Ignoring jump to locked lesson {module_id}/{lesson_id}")
            return False
        self.position = LessonPosition(*self.course.locate(module_id, lesson_id))
        return True

    def go_next(self) -> bool:
        """
        Move to the next lesson.

        Unlike jump_to this does not consult the access evaluator.
        """
        following = self.next_position()
        if following is None:
            return False
        self.position = following
        return True

    def mark_complete(
        self,
        confirm_advance: Optional[Callable[[LessonPosition], bool]] = None,
        now: Optional[datetime] = None,
    ) -> CompletionOutcome:
        """
        Complete the current lesson and save progress.

        Args:
            confirm_advance: Asked whether to move on to the next lesson;
                without it the navigator stays on the current lesson.
                Not asked once the whole course is complete.
            now: Completion time (default: current UTC time)

        Raises:
            StaleReferenceError: Current lesson is no longer in the course
            ProgressWriteError: Progress could not be saved
        """
        self._require_resolved()
        module, lesson = self.position.module, self.position.lesson
        result = complete_lesson(module.id, lesson.id, self.progress, self.course, now=now)
        self._commit(result.progress, COMPLETION_FIELDS)

        advanced = False
        if not result.course_completed and result.next_position and confirm_advance:
            if confirm_advance(result.next_position):
                self.position = result.next_position
                advanced = True

        return CompletionOutcome(
            module=module,
            lesson=lesson,
            module_just_completed=result.module_just_completed,
            course_just_completed=result.course_just_completed,
            course_completed=result.course_completed,
            next_position=result.next_position,
            advanced=advanced,
        )
