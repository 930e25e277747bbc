"""
Timestamp utilities: timezone-aware UTC values and ISO 8601 formatting.
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Get current UTC datetime"""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on read)"""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def to_iso_format(dt: Optional[datetime]) -> Optional[str]:
    """Convert datetime to ISO 8601 format string"""
    dt = ensure_utc(dt)
    return dt.isoformat() if dt else None
