"""
Access evaluation - decide whether a lesson is unlocked for a learner.

Pure functions over the course structure, the learner's progress record
and the course access configuration. Evaluated on every render, since both
progress and structure can change between renders.

Rule precedence:
1. Effective rule = lesson override, else course rule, else sequential
2. `anytime`, or a course with allowSkip, unlocks everything
3. `sequential` gates on the previous lesson (or previous module)
4. `daily`/`weekly`/`monthly` gate on time since the last visit
5. Unrecognized rules unlock
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from clarity.schemas import AccessConfig, AccessRule, Course, Lesson, Module, ProgressRecord, ensure_utc

logger = logging.getLogger(__name__)

DEFAULT_ACCESS_RULE = AccessRule.SEQUENTIAL

# Minimum time between visits for time-gated lessons
TIME_GATES = {
    AccessRule.DAILY: timedelta(hours=24),
    AccessRule.WEEKLY: timedelta(hours=168),
    AccessRule.MONTHLY: timedelta(hours=720),
}


def resolve_access_rule(lesson: Lesson, access_config: Optional[AccessConfig] = None) -> AccessRule:
    """Effective access rule for a lesson."""
    if lesson.access_rule:
        return lesson.access_rule
    if access_config and access_config.type:
        return access_config.type
    return DEFAULT_ACCESS_RULE


def is_accessible(
    module_id: str,
    lesson_id: str,
    course: Course,
    progress: ProgressRecord,
    access_config: Optional[AccessConfig] = None,
    now: Optional[datetime] = None,
) -> bool:
    """
    Check whether a lesson is unlocked.

    Args:
        module_id: Module containing the lesson
        lesson_id: Lesson to check
        course: Course structure
        progress: Learner progress record
        access_config: Access configuration (default: the course's own)
        now: Evaluation time for time-gated rules (default: current UTC time)

    Returns:
        False if the module/lesson pair does not exist in the course.
    """
    located = course.locate(module_id, lesson_id)
    if not located:
        return False
    module, lesson = located

    config = access_config if access_config is not None else course.access_config
    rule = resolve_access_rule(lesson, config)

    if rule == AccessRule.ANYTIME or config.allow_skip:
        return True

    if rule == AccessRule.SEQUENTIAL:
        return _sequential_unlocked(module, lesson, course, progress)

    if rule in TIME_GATES:
        return _time_gate_open(rule, lesson, progress, now)

    if rule == AccessRule.UNRECOGNIZED:
        return True

    raise AssertionError(f"Unhandled access rule: {rule}")


def _sequential_unlocked(module: Module, lesson: Lesson, course: Course, progress: ProgressRecord) -> bool:
    if lesson.order == 1:
        if module.order == 1:
            return True
        previous_module = course.module_at(module.order - 1)
        if not previous_module:
            # No module to gate on: locked
            logger.debug(f"No module with order {module.order - 1} before {module.id}; locking {lesson.id}")
            return False
        return progress.is_module_completed(previous_module.id)

    previous_lesson = module.lesson_at(lesson.order - 1)
    if not previous_lesson:
        # Gap in lesson ordering: unlocked
        return True
    return progress.is_lesson_completed(module.id, previous_lesson.id)


def _time_gate_open(rule: AccessRule, lesson: Lesson, progress: ProgressRecord, now: Optional[datetime]) -> bool:
    last_access = progress.last_access(lesson.id)
    if last_access is None:
        return True
    now = ensure_utc(now) or datetime.now(timezone.utc)
    return now - last_access >= TIME_GATES[rule]
