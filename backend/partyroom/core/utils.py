"""
Helper functions
"""

import re
from typing import Optional
from datetime import datetime, timedelta, timezone
from urllib.parse import quote
from partyroom.core.config import settings

JOIN_PATH_PATTERN = re.compile(r"^/join/([A-Z0-9]{6})$", re.IGNORECASE)


def utcnow() -> datetime:
    """Naive UTC now, matching what the database stores"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def format_timestamp_with_timezone(timestamp: Optional[datetime]) -> str:
    """Format a stored timestamp with the UTC 'Z' suffix"""
    if not timestamp:
        return ""
    # Stored timestamps are naive UTC; clients need the 'Z'
    return timestamp.isoformat() + 'Z'


def format_time(seconds: int) -> str:
    """Render a countdown as m:ss"""
    mins, secs = divmod(max(int(seconds), 0), 60)
    return f"{mins}:{secs:02d}"


def is_expired(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    if expires_at is None:
        return False
    return expires_at < (now or utcnow())


def can_reconnect(last_seen: Optional[datetime], now: Optional[datetime] = None,
                  window: Optional[int] = None) -> bool:
    """A player may resume while its last heartbeat is fresher than the reconnect window"""
    if last_seen is None:
        return False
    window = settings.RECONNECT_WINDOW if window is None else window
    return (now or utcnow()) - last_seen < timedelta(seconds=window)


def get_join_url(room_code: str, base_url: Optional[str] = None) -> str:
    origin = (base_url or settings.PUBLIC_BASE_URL).rstrip("/")
    return f"{origin}/join/{room_code.upper()}"


def get_qr_code_url(room_code: str, base_url: Optional[str] = None) -> str:
    """QR image URL from the external generator, encoding the join URL"""
    join_url = quote(get_join_url(room_code, base_url), safe="")
    size = settings.QR_SIZE
    return f"{settings.QR_SERVICE_URL}?size={size}x{size}&data={join_url}"


def parse_join_path(path: str) -> Optional[str]:
    """Extract the room code from a /join/<CODE> path"""
    match = JOIN_PATH_PATTERN.match(path or "")
    if not match:
        return None
    return match.group(1).upper()
