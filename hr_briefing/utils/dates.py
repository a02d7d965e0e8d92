# File: hr_briefing/utils/dates.py
"""Publish-date parsing and the recency window"""
import re
from datetime import datetime, timedelta, tzinfo
from typing import Optional

from dateutil import parser as dateparser
from dateutil import tz

from hr_briefing.utils.logger import get_logger

logger = get_logger(__name__)

KST = tz.gettz('Asia/Seoul')

KNOWN_FORMATS = ('%Y-%m-%d', '%Y-%m-%d %H:%M', '%Y-%m-%d %H:%M:%S')


def now_iso() -> str:
    return datetime.now(tz.UTC).isoformat()


def normalize_date_text(raw: str) -> str:
    """'2025.01.02  10:00' -> '2025-01-02 10:00'"""
    return re.sub(r'\s+', ' ', raw.replace('.', '-')).strip()


def _localize(value: datetime, zone: tzinfo) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=zone)
    return value.astimezone(tz.UTC)


def try_parse_date(raw: Optional[str], zone: tzinfo = KST) -> Optional[datetime]:
    """Parse a scraped date string, returning None when nothing fits.

    Known formats are tried strictly first, then dateutil's lenient parser.
    Naive values are taken to be in ``zone``.
    """
    if not raw or not raw.strip():
        return None

    # ISO timestamps from meta tags carry their own offset
    try:
        return _localize(datetime.fromisoformat(raw.strip().replace('Z', '+00:00')), zone)
    except ValueError:
        pass

    cleaned = normalize_date_text(raw)
    for fmt in KNOWN_FORMATS:
        try:
            return _localize(datetime.strptime(cleaned, fmt), zone)
        except ValueError:
            continue

    try:
        return _localize(dateparser.parse(cleaned), zone)
    except (ValueError, OverflowError) as e:
        logger.debug(f"Unparseable date '{raw}': {e}")
        return None


def parse_date(raw: Optional[str], zone: tzinfo = KST) -> str:
    """Parse to an ISO-8601 string, falling back to the current time.

    Always yields a usable timestamp. Scrapers call ``try_parse_date`` instead
    because they fall back to the listing placeholder, not to now.
    """
    parsed = try_parse_date(raw, zone)
    if parsed is None:
        return now_iso()
    return parsed.isoformat()


def is_recent(published_at: str, days: int = 7, now: Optional[datetime] = None, zone: tzinfo = KST) -> bool:
    """True when published_at lies within the trailing window.

    The window runs from ``days`` before now up to one day ahead, which
    tolerates sites that stamp articles with a slightly future time.
    """
    target = try_parse_date(published_at, zone)
    if target is None:
        return False

    current = (now or datetime.now(tz.UTC)).astimezone(zone)
    target = target.astimezone(zone)
    return current - timedelta(days=days) < target < current + timedelta(days=1)
