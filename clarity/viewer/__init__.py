"""
Clarity Academy Viewer - Rendering components for the lesson viewer.

This module provides:
- Lesson content rendering (video embeds, text bodies)
- Locked-lesson notices
- Sidebar status indicators
"""

from .lesson import (
    ACCESS_RULE_HINTS,
    get_lesson_css,
    to_embed_url,
    format_duration,
    render_lesson_header,
    render_video,
    render_text,
    render_lesson_content,
    render_locked_content,
    render_lesson,
    get_status_indicator,
)

__all__ = [
    "ACCESS_RULE_HINTS",
    "get_lesson_css",
    "to_embed_url",
    "format_duration",
    "render_lesson_header",
    "render_video",
    "render_text",
    "render_lesson_content",
    "render_locked_content",
    "render_lesson",
    "get_status_indicator",
]
