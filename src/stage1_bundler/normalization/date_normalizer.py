"""
Date normalization to ISO-8601 UTC strings
"""

import re
from datetime import date, datetime, timezone
from typing import Any, Optional

from dateutil import parser as date_parser

# Fallback layouts tried by DateNormalizer.parse after ISO parsing fails
_SLASH_MDY = re.compile(r'^(\d{1,2})/(\d{1,2})/(\d{4})$')
_DASH_DMY = re.compile(r'^(\d{1,2})-(\d{1,2})-(\d{4})$')
_DOT_YMD = re.compile(r'^(\d{4})\.(\d{2})\.(\d{2})$')


def _as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _to_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        # Numbers are epoch milliseconds
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    try:
        return _as_utc(date_parser.parse(str(value).strip()))
    except (ValueError, OverflowError, TypeError):
        return None


class DateNormalizer:
    """Date parsing and formatting helpers"""

    @staticmethod
    def normalize(value: Any) -> Optional[str]:
        """
        Normalize a date-like value to ISO-8601 UTC.

        Returns:
            "YYYY-MM-DDTHH:MM:SS.mmmZ", or None when the value is not a date
        """
        parsed = _to_datetime(value)
        if parsed is None:
            return None
        return parsed.strftime('%Y-%m-%dT%H:%M:%S.') + f"{parsed.microsecond // 1000:03d}Z"

    @staticmethod
    def to_date_string(value: Any) -> Optional[str]:
        """YYYY-MM-DD or None"""
        iso = DateNormalizer.normalize(value)
        if not iso:
            return None
        return iso.split("T")[0]

    @staticmethod
    def extract_year(value: Any) -> Optional[int]:
        iso = DateNormalizer.normalize(value)
        if not iso:
            return None
        return int(iso[:4])

    @staticmethod
    def parse(value: str) -> Optional[datetime]:
        """
        Parse a date string, trying ISO first and then common layouts.

        Layouts: MM/DD/YYYY, DD-MM-YYYY, YYYY.MM.DD. Ambiguous day/month
        pairs fall back to the swapped reading when the first is invalid.
        """
        if not value:
            return None

        try:
            return _as_utc(date_parser.isoparse(value))
        except (ValueError, OverflowError):
            pass

        candidates = []
        match = _SLASH_MDY.match(value)
        if match:
            month, day, year = (int(part) for part in match.groups())
            candidates = [(year, month, day), (year, day, month)]
        match = _DASH_DMY.match(value)
        if match:
            day, month, year = (int(part) for part in match.groups())
            candidates = [(year, month, day), (year, day, month)]
        match = _DOT_YMD.match(value)
        if match:
            candidates = [tuple(int(part) for part in match.groups())]

        for year, month, day in candidates:
            try:
                return datetime(year, month, day, tzinfo=timezone.utc)
            except ValueError:
                continue

        return None

    @staticmethod
    def format(value: Any) -> str:
        """US-style display date (M/D/YYYY), or "N/A" """
        parsed = _to_datetime(value)
        if parsed is None:
            return "N/A"
        return f"{parsed.month}/{parsed.day}/{parsed.year}"
