"""Access history tests."""

from datetime import timedelta

from clarity.classroom import record_access

from conftest import NOW, make_progress


class TestRecordAccess:
    """One entry per lesson, latest visit wins."""

    def test_first_visit_appends(self):
        updated = record_access(make_progress(), "l1", now=NOW)
        assert len(updated.access_history) == 1
        assert updated.access_history[0].lesson_id == "l1"
        assert updated.last_access("l1") == NOW
        assert updated.last_accessed_at == NOW

    def test_repeat_visit_overwrites(self):
        later = NOW + timedelta(hours=3)
        progress = record_access(make_progress(), "l1", now=NOW)
        progress = record_access(progress, "l1", now=later)
        assert len(progress.access_history) == 1
        assert progress.last_access("l1") == later

    def test_keeps_other_lessons(self):
        progress = record_access(make_progress(), "l1", now=NOW)
        progress = record_access(progress, "l2", now=NOW + timedelta(minutes=5))
        progress = record_access(progress, "l1", now=NOW + timedelta(minutes=10))
        assert [h.lesson_id for h in progress.access_history] == ["l1", "l2"]
        assert progress.last_access("l2") == NOW + timedelta(minutes=5)

    def test_input_not_mutated(self):
        progress = make_progress()
        record_access(progress, "l1", now=NOW)
        assert progress.access_history == []
        assert progress.last_accessed_at is None

    def test_defaults_to_current_time(self):
        updated = record_access(make_progress(), "l1")
        assert updated.last_access("l1").tzinfo is not None
