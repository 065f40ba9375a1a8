"""
Lesson renderer - Generate HTML for the lesson viewer.

Features:
- Video embeds (YouTube and Vimeo page links rewritten to player URLs)
- Text lesson bodies
- Locked-lesson notice naming the access rule
- Sidebar status indicators
"""

import html
from typing import Optional
from urllib.parse import parse_qs, urlparse

from clarity.classroom import LessonView, SidebarLesson
from clarity.schemas import AccessRule, Lesson, Module


# Shown on the locked notice for each access rule
ACCESS_RULE_HINTS = {
    AccessRule.SEQUENTIAL: "Complete the previous lessons to unlock this content.",
    AccessRule.DAILY: "This lesson can be revisited once every 24 hours.",
    AccessRule.WEEKLY: "This lesson can be revisited once a week.",
    AccessRule.MONTHLY: "This lesson can be revisited once a month.",
}


def get_lesson_css() -> str:
    """Get CSS styles for lesson display."""
    return """
    <style>
    .lesson-header {
        display: flex;
        justify-content: space-between;
        align-items: flex-end;
        margin-bottom: 1em;
    }
    .lesson-module-title {
        color: #666;
        font-size: 0.95em;
        margin: 0;
    }
    .lesson-title {
        margin: 0.3em 0;
    }
    .lesson-duration {
        color: #666;
        font-size: 0.9em;
    }
    .lesson-video {
        position: relative;
        padding-bottom: 56.25%;
        height: 0;
        margin: 1em 0;
    }
    .lesson-video iframe {
        position: absolute;
        top: 0;
        left: 0;
        width: 100%;
        height: 100%;
        border: 0;
        border-radius: 8px;
    }
    .lesson-text-content {
        line-height: 1.7;
        margin: 1em 0;
    }
    .lesson-locked {
        text-align: center;
        padding: 3em 1em;
        background: #fafafa;
        border-radius: 8px;
        color: #555;
    }
    .lesson-locked-icon {
        font-size: 3em;
    }
    .lesson-locked-rule {
        color: #888;
        margin-top: 1em;
        font-size: 0.9em;
    }
    </style>
    """


def to_embed_url(url: str) -> str:
    """
    Rewrite a video page link to its embeddable player URL.

    Handles youtube.com/watch?v=..., youtu.be/... and vimeo.com/...;
    anything else is returned unchanged.
    """
    parsed = urlparse(url)
    host = parsed.netloc.lower()

    if "youtube.com" in host and parsed.path == "/watch":
        video_id = parse_qs(parsed.query).get("v", [""])[0]
        if video_id:
            return f"https://www.youtube.com/embed/{video_id}"
    if host.endswith("youtu.be"):
        video_id = parsed.path.lstrip("/").split("/")[0]
        if video_id:
            return f"https://www.youtube.com/embed/{video_id}"
    if host.endswith("vimeo.com") and not host.startswith("player."):
        video_id = parsed.path.lstrip("/").split("/")[0]
        if video_id:
            return f"https://player.vimeo.com/video/{video_id}"
    return url


def format_duration(minutes: Optional[int]) -> str:
    """Format a lesson duration, e.g. "12 min" or "1 h 5 min"."""
    if not minutes:
        return ""
    hours, rest = divmod(minutes, 60)
    if not hours:
        return f"{rest} min"
    if not rest:
        return f"{hours} h"
    return f"{hours} h {rest} min"


def render_lesson_header(module: Module, lesson: Lesson) -> str:
    """Module and lesson titles with the lesson duration."""
    duration = format_duration(lesson.duration)
    duration_html = f'<span class="lesson-duration">⏱ {duration}</span>' if duration else ""
    return f"""
    <div class="lesson-header">
        <div>
            <p class="lesson-module-title">Module {module.order}: {html.escape(module.title)}</p>
            <h1 class="lesson-title">{html.escape(lesson.title)}</h1>
        </div>
        {duration_html}
    </div>
    """


def render_video(url: str) -> str:
    src = html.escape(to_embed_url(url), quote=True)
    return f"""
    <div class="lesson-video">
        <iframe src="{src}" allowfullscreen></iframe>
    </div>
    """


def render_text(content: str) -> str:
    """Escape the lesson body and keep its paragraph breaks."""
    paragraphs = [p.strip() for p in content.split("\n\n") if p.strip()]
    body = "".join(
        f"<p>{html.escape(p).replace(chr(10), '<br>')}</p>" for p in paragraphs
    )
    return f'<div class="lesson-text-content">{body}</div>'


def render_lesson_content(lesson: Lesson) -> str:
    """Video, text, or both depending on the lesson type."""
    parts = []
    if lesson.has_video and lesson.video_url:
        parts.append(render_video(lesson.video_url))
    if lesson.has_text and lesson.content:
        parts.append(render_text(lesson.content))
    return "".join(parts)


def render_locked_content(lesson: Lesson, access_rule: AccessRule) -> str:
    hint = ACCESS_RULE_HINTS.get(access_rule, "This lesson is not available yet.")
    return f"""
    <div class="lesson-locked">
        <div class="lesson-locked-icon">🔒</div>
        <h2>Lesson Locked</h2>
        <p>{html.escape(hint)}</p>
        <p class="lesson-locked-rule">Access Rule: {access_rule.value}</p>
    </div>
    """


def render_lesson(view: LessonView) -> str:
    """Full lesson pane: header plus content, or the locked notice."""
    if not view.accessible:
        return render_locked_content(view.lesson, view.access_rule)
    return render_lesson_header(view.module, view.lesson) + render_lesson_content(view.lesson)


def get_status_indicator(entry: SidebarLesson) -> str:
    """
    Get status indicator for sidebar display.

    Returns:
        ✓ for completed
        → for current
        ○ for available
        🔒 for locked
    """
    if entry.completed:
        return "✓"
    if entry.is_current:
        return "→"
    if entry.locked:
        return "🔒"
    return "○"
