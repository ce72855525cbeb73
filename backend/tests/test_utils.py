"""
Time and link helpers
"""

from datetime import datetime, timedelta
from urllib.parse import parse_qs, urlparse

from partyroom.core.utils import (
    can_reconnect,
    format_time,
    format_timestamp_with_timezone,
    get_join_url,
    get_qr_code_url,
    is_expired,
    parse_join_path,
)


def test_format_time():
    assert format_time(60) == "1:00"
    assert format_time(9) == "0:09"
    assert format_time(-3) == "0:00"


def test_timestamp_has_utc_suffix():
    assert format_timestamp_with_timezone(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05Z"
    assert format_timestamp_with_timezone(None) == ""


def test_expiry_and_reconnect_window():
    now = datetime(2024, 1, 1, 12, 0, 0)
    assert is_expired(now - timedelta(seconds=1), now)
    assert not is_expired(now + timedelta(hours=1), now)
    assert can_reconnect(now - timedelta(seconds=59), now)
    assert not can_reconnect(now - timedelta(seconds=61), now)
    assert not can_reconnect(None, now)


def test_join_path_parsing():
    assert parse_join_path("/join/ab3x7k") == "AB3X7K"
    assert parse_join_path("/join/AB3X7K") == "AB3X7K"
    assert parse_join_path("/join/AB3X7") is None
    assert parse_join_path("/join/AB3X7K/extra") is None
    assert parse_join_path("/") is None


def test_qr_url_encodes_join_url():
    url = get_qr_code_url("AB3X7K", base_url="https://party.example")
    query = parse_qs(urlparse(url).query)
    assert query["data"] == ["https://party.example/join/AB3X7K"]
    assert query["size"] == ["300x300"]
    assert get_join_url("ab3x7k", "https://party.example/") == "https://party.example/join/AB3X7K"
