"""Access history - one last-visit timestamp per lesson."""

from datetime import datetime, timezone
from typing import Optional

from clarity.schemas import AccessHistoryEntry, ProgressRecord, ensure_utc

# Fields written back after a visit
HISTORY_FIELDS = ("access_history", "last_accessed_at")


def record_access(progress: ProgressRecord, lesson_id: str, now: Optional[datetime] = None) -> ProgressRecord:
    """
    Return a copy of `progress` with the visit to `lesson_id` recorded.

    An existing entry for the lesson gets its timestamp overwritten; a
    lesson is never listed twice.
    """
    now = ensure_utc(now) or datetime.now(timezone.utc)
    updated = progress.model_copy(deep=True)

    for entry in updated.access_history:
        if entry.lesson_id == lesson_id:
            entry.accessed_at = now
            break
    else:
        updated.access_history.append(AccessHistoryEntry(lesson_id=lesson_id, accessed_at=now))

    updated.last_accessed_at = now
    return updated
