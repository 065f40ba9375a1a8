"""
Schema validation tests for Clarity Academy.

Tests the Pydantic models to ensure they validate and serialize correctly.
"""

import pytest
from datetime import datetime, timezone

from pydantic import ValidationError

from clarity.schemas import (
    # Course
    AccessRule,
    AccessConfig,
    LessonType,
    Lesson,
    Module,
    Course,
    # Progress
    AccessHistoryEntry,
    ProgressRecord,
    Enrollment,
)

from conftest import make_course, text_lesson


class TestAccessRule:
    """Test access rule normalization."""

    def test_known_values(self):
        assert AccessRule.normalize("sequential") == AccessRule.SEQUENTIAL
        assert AccessRule.normalize("Weekly") == AccessRule.WEEKLY
        assert AccessRule.normalize(" daily ") == AccessRule.DAILY

    def test_empty_is_none(self):
        assert AccessRule.normalize(None) is None
        assert AccessRule.normalize("") is None

    def test_unknown_is_unrecognized(self):
        assert AccessRule.normalize("fortnightly") == AccessRule.UNRECOGNIZED

    def test_access_config_normalizes(self):
        config = AccessConfig.model_validate({"type": "bogus", "allowSkip": True})
        assert config.type == AccessRule.UNRECOGNIZED
        assert config.allow_skip is True

    def test_unknown_rule_dumped_as_read(self):
        config = AccessConfig.model_validate({"type": "fortnightly"})
        assert config.model_dump(mode="json", by_alias=True)["type"] == "fortnightly"

        lesson = Lesson.model_validate({
            "id": "l1", "title": "Intro", "order": 1, "type": "text",
            "content": "Hi", "accessRule": "Someday",
        })
        assert lesson.access_rule == AccessRule.UNRECOGNIZED
        assert lesson.model_dump(mode="json", by_alias=True)["accessRule"] == "Someday"

    def test_known_rule_dumped_normalized(self):
        config = AccessConfig.model_validate({"type": "Weekly"})
        assert config.model_dump(mode="json", by_alias=True)["type"] == "weekly"
        assert AccessConfig(type=AccessRule.UNRECOGNIZED).model_dump(mode="json")["type"] == "unrecognized"

    def test_access_config_defaults(self):
        config = AccessConfig()
        assert config.type is None
        assert config.allow_skip is False


class TestLessonSchema:
    """Test lesson validation."""

    def test_text_lesson_valid(self):
        lesson = Lesson(id="l1", title="Intro", order=1, type=LessonType.TEXT, content="Hello")
        assert lesson.has_text
        assert not lesson.has_video
        assert lesson.access_rule is None

    def test_camel_case_input(self):
        lesson = Lesson.model_validate({
            "id": "l1",
            "title": "Intro",
            "order": 1,
            "type": "video",
            "videoUrl": "https://example.com/v.mp4",
            "accessRule": "anytime",
        })
        assert lesson.video_url == "https://example.com/v.mp4"
        assert lesson.access_rule == AccessRule.ANYTIME

    def test_video_lesson_requires_url(self):
        with pytest.raises(ValidationError):
            Lesson(id="l1", title="Intro", order=1, type=LessonType.VIDEO)

    def test_mixed_lesson_requires_both(self):
        with pytest.raises(ValidationError):
            Lesson(id="l1", title="Intro", order=1, type=LessonType.MIXED, video_url="https://x")
        with pytest.raises(ValidationError):
            Lesson(id="l1", title="Intro", order=1, type=LessonType.MIXED, content="Body")

    def test_negative_duration_rejected(self):
        with pytest.raises(ValidationError):
            Lesson(id="l1", title="Intro", order=1, type=LessonType.TEXT, content="x", duration=-5)

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            Lesson.model_validate({"id": "l1", "title": "Intro", "order": 1, "type": "quiz"})

    def test_empty_access_rule_is_none(self):
        lesson = Lesson.model_validate(text_lesson("l1", 1, access_rule=""))
        assert lesson.access_rule is None


class TestCourseSchema:
    """Test course tree helpers."""

    def test_sorted_modules_and_lessons(self):
        course = make_course(modules={
            "b": [text_lesson("b2", 2), text_lesson("b1", 1)],
            "a": [text_lesson("a1", 1)],
        })
        # "b" is order 1, "a" is order 2
        assert [m.id for m in course.sorted_modules()] == ["b", "a"]
        assert [l.id for l in course.get_module("b").sorted_lessons()] == ["b1", "b2"]

    def test_locate(self, course):
        module, lesson = course.locate("m2", "l3")
        assert module.id == "m2"
        assert lesson.id == "l3"

    def test_locate_missing(self, course):
        assert course.locate("m9", "l1") is None
        assert course.locate("m1", "l3") is None

    def test_lookup_by_order(self, course):
        assert course.module_at(2).id == "m2"
        assert course.module_at(7) is None
        assert course.get_module("m1").lesson_at(2).id == "l2"

    def test_counts(self, course):
        assert course.lesson_count == 5
        assert course.total_duration == 50

    def test_missing_duration_counts_as_zero(self):
        course = make_course(modules={"m1": [text_lesson("l1", 1, duration=None), text_lesson("l2", 2)]})
        assert course.total_duration == 10

    def test_empty_module(self):
        module = Module(id="m1", title="Empty", order=1)
        assert module.first_lesson() is None
        assert module.duration == 0

    def test_dump_uses_camel_case(self, course):
        data = course.model_dump(mode="json", by_alias=True)
        assert data["accessConfig"] == {"type": "sequential", "allowSkip": False}
        assert "accessRule" in data["modules"][0]["lessons"][0]

    def test_default_access_config(self):
        course = Course(id="c", title="No config")
        assert course.access_config.type is None
        assert course.modules == []


class TestProgressSchemas:
    """Test progress-related schemas."""

    def test_defaults(self):
        progress = ProgressRecord(user_id="u1", course_id="c1")
        assert progress.completed_modules == []
        assert progress.completed_lessons == {}
        assert progress.access_history == []
        assert progress.current_module is None

    def test_camel_case_round_trip(self):
        data = {
            "userId": "u1",
            "courseId": "c1",
            "completedLessons": {"m1": ["l1"]},
            "completedModules": [],
            "currentModule": "m1",
            "currentLesson": "l2",
            "accessHistory": [{"lessonId": "l1", "accessedAt": "2024-03-01T12:00:00+00:00"}],
        }
        progress = ProgressRecord.model_validate(data)
        assert progress.is_lesson_completed("m1", "l1")
        assert not progress.is_lesson_completed("m1", "l2")
        assert progress.access_history[0].lesson_id == "l1"

        dumped = progress.model_dump(mode="json", by_alias=True, exclude={"id"})
        assert dumped["completedLessons"] == {"m1": ["l1"]}
        assert dumped["accessHistory"][0]["lessonId"] == "l1"

    def test_naive_timestamp_is_utc(self):
        entry = AccessHistoryEntry(lesson_id="l1", accessed_at=datetime(2024, 1, 1, 8, 0))
        assert entry.accessed_at.tzinfo == timezone.utc

    def test_last_access(self):
        when = datetime(2024, 1, 1, tzinfo=timezone.utc)
        progress = ProgressRecord(
            user_id="u1",
            course_id="c1",
            access_history=[AccessHistoryEntry(lesson_id="l1", accessed_at=when)],
        )
        assert progress.last_access("l1") == when
        assert progress.last_access("l2") is None

    def test_enrollment_defaults_enrolled_at(self):
        enrollment = Enrollment(user_id="u1", course_id="c1")
        assert enrollment.enrolled_at.tzinfo is not None


class TestSchemaImports:
    """Test that all schemas can be imported from the main module."""

    def test_import_from_clarity_schemas(self):
        from clarity.schemas import (
            DocumentModel,
            TIME_GATED_RULES,
            ensure_utc,
        )
        assert AccessRule.DAILY in TIME_GATED_RULES
        assert DocumentModel is not None
        assert ensure_utc(None) is None
