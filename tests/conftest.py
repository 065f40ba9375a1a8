"""Shared fixtures for Clarity Academy tests."""

import sqlite3
from datetime import datetime, timezone

import pytest

from clarity.classroom import CourseLoader, DocumentStore, ProgressStore
from clarity.schemas import Course, ProgressRecord


NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def text_lesson(lesson_id, order, access_rule=None, duration=10):
    return {
        "id": lesson_id,
        "title": f"Lesson {lesson_id}",
        "order": order,
        "type": "text",
        "content": f"Body of {lesson_id}",
        "duration": duration,
        "accessRule": access_rule,
    }


def make_course(rule="sequential", allow_skip=False, modules=None, course_id="c1") -> Course:
    """
    Build a course. `modules` maps module id -> list of lesson dicts, in
    module order (default: m1 [l1, l2], m2 [l3, l4], m3 [l5]).
    """
    if modules is None:
        modules = {
            "m1": [text_lesson("l1", 1), text_lesson("l2", 2)],
            "m2": [text_lesson("l3", 1), text_lesson("l4", 2)],
            "m3": [text_lesson("l5", 1)],
        }
    return Course.model_validate({
        "id": course_id,
        "title": "Test Course",
        "accessConfig": {"type": rule, "allowSkip": allow_skip},
        "modules": [
            {"id": module_id, "title": f"Module {module_id}", "order": i, "lessons": lessons}
            for i, (module_id, lessons) in enumerate(modules.items(), start=1)
        ],
    })


def make_progress(**kwargs) -> ProgressRecord:
    values = {"id": "p1", "user_id": "u1", "course_id": "c1"}
    values.update(kwargs)
    return ProgressRecord(**values)


def drop_documents_table(store):
    """Leave the database file in place but remove its table."""
    conn = sqlite3.connect(str(store.db_path))
    try:
        conn.execute("DROP TABLE documents")
        conn.commit()
    finally:
        conn.close()


@pytest.fixture
def course():
    return make_course()


@pytest.fixture
def store(tmp_path):
    return DocumentStore(tmp_path / "clarity.db")


@pytest.fixture
def loader(store):
    return CourseLoader(store)


@pytest.fixture
def progress_store(store):
    return ProgressStore(store)
