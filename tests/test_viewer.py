"""Viewer rendering tests."""

import pytest

from clarity.classroom import LessonView, SidebarLesson
from clarity.schemas import AccessRule, Lesson, LessonType, Module
from clarity.viewer import (
    format_duration,
    get_lesson_css,
    get_status_indicator,
    render_lesson,
    render_locked_content,
    render_text,
    to_embed_url,
)


def make_lesson(**kwargs):
    values = {"id": "l1", "title": "Intro", "order": 1, "type": LessonType.TEXT, "content": "Hello"}
    values.update(kwargs)
    return Lesson(**values)


class TestEmbedUrl:
    @pytest.mark.parametrize("url,expected", [
        ("https://www.youtube.com/watch?v=abc123", "https://www.youtube.com/embed/abc123"),
        ("https://youtube.com/watch?v=abc123&t=42", "https://www.youtube.com/embed/abc123"),
        ("https://youtu.be/abc123", "https://www.youtube.com/embed/abc123"),
        ("https://vimeo.com/76979871", "https://player.vimeo.com/video/76979871"),
        ("https://player.vimeo.com/video/1", "https://player.vimeo.com/video/1"),
        ("https://cdn.example.com/lesson.mp4", "https://cdn.example.com/lesson.mp4"),
    ])
    def test_rewrites(self, url, expected):
        assert to_embed_url(url) == expected


class TestFormatDuration:
    def test_values(self):
        assert format_duration(None) == ""
        assert format_duration(0) == ""
        assert format_duration(12) == "12 min"
        assert format_duration(60) == "1 h"
        assert format_duration(65) == "1 h 5 min"


class TestRenderText:
    def test_escapes_html(self):
        html = render_text("<script>alert(1)</script>")
        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_paragraphs(self):
        html = render_text("First\n\nSecond\nline")
        assert html.count("<p>") == 2
        assert "Second<br>line" in html


class TestRenderLesson:
    def _view(self, lesson, accessible=True, rule=AccessRule.SEQUENTIAL):
        module = Module(id="m1", title="Basics & More", order=1, lessons=[lesson])
        return LessonView(
            module=module,
            lesson=lesson,
            access_rule=rule,
            accessible=accessible,
            completed=False,
            next_position=None,
        )

    def test_text_lesson(self):
        html = render_lesson(self._view(make_lesson(duration=12)))
        assert "Intro" in html
        assert "Basics &amp; More" in html
        assert "12 min" in html
        assert "iframe" not in html

    def test_mixed_lesson(self):
        lesson = make_lesson(type=LessonType.MIXED, video_url="https://youtu.be/xyz")
        html = render_lesson(self._view(lesson))
        assert "https://www.youtube.com/embed/xyz" in html
        assert "Hello" in html

    def test_locked_lesson_hides_content(self):
        lesson = make_lesson(content="Secret body")
        html = render_lesson(self._view(lesson, accessible=False, rule=AccessRule.WEEKLY))
        assert "Secret body" not in html
        assert "Lesson Locked" in html
        assert "weekly" in html

    def test_locked_unrecognized_rule(self):
        html = render_locked_content(make_lesson(), AccessRule.UNRECOGNIZED)
        assert "not available yet" in html

    def test_css(self):
        assert get_lesson_css().strip().startswith("<style>")


class TestStatusIndicator:
    def _entry(self, **flags):
        values = {"lesson": make_lesson(), "locked": False, "completed": False, "is_current": False}
        values.update(flags)
        return SidebarLesson(**values)

    def test_indicators(self):
        assert get_status_indicator(self._entry(completed=True, is_current=True)) == "✓"
        assert get_status_indicator(self._entry(is_current=True)) == "→"
        assert get_status_indicator(self._entry(locked=True)) == "🔒"
        assert get_status_indicator(self._entry()) == "○"
