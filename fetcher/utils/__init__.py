from datetime import datetime, timezone
from typing import Optional


def preview_text(text: Optional[str], limit: int) -> str:
    """Return the first ``limit`` characters of ``text`` for log previews."""
    if not text:
        return ""
    return text[:limit]


def iso_timestamp(now: Optional[datetime] = None) -> str:
    """UTC timestamp in ISO-8601 with millisecond precision and a ``Z`` suffix."""
    now = now or datetime.now(timezone.utc)
    return (
        now.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )
