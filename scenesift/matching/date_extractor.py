"""Release-date extraction from torrent titles, used to disambiguate scene matches."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Callable, Optional

MIN_DATE = date(1980, 1, 1)


def _ymd(year: str, month: str, day: str) -> date:
    return date(int(year), int(month), int(day))


def _two_digit_year(match: re.Match) -> date:
    prefix = "19" if int(match.group(1)) >= 50 else "20"
    return _ymd(prefix + match.group(1), match.group(2), match.group(3))


# Most specific first.
_DATE_PATTERNS: tuple[tuple[re.Pattern, Callable[[re.Match], date]], ...] = (
    (
        re.compile(r"\b(20\d{2})[-._](0[1-9]|1[0-2])[-._](0[1-9]|[12]\d|3[01])\b"),
        lambda m: _ymd(m.group(1), m.group(2), m.group(3)),
    ),
    (
        re.compile(r"\b(0[1-9]|[12]\d|3[01])[-._](0[1-9]|1[0-2])[-._](20\d{2})\b"),
        lambda m: _ymd(m.group(3), m.group(2), m.group(1)),
    ),
    (
        re.compile(r"\b(20\d{2})(0[1-9]|1[0-2])(0[1-9]|[12]\d|3[01])\b"),
        lambda m: _ymd(m.group(1), m.group(2), m.group(3)),
    ),
    (
        re.compile(r"\b(\d{2})[-._](0[1-9]|1[0-2])[-._](0[1-9]|[12]\d|3[01])\b"),
        _two_digit_year,
    ),
)


def extract_date(title: str, today: Optional[date] = None) -> Optional[date]:
    """Return the first plausible date in the title, or None.

    Dates before 1980 or after ``today`` are ignored, as are impossible
    calendar dates such as 2023-02-30.
    """
    today = today or date.today()
    for pattern, build in _DATE_PATTERNS:
        match = pattern.search(title)
        if not match:
            continue
        try:
            found = build(match)
        except ValueError:
            continue
        if MIN_DATE <= found <= today:
            return found
    return None


def date_similarity(date1: date, date2: date) -> float:
    days = abs((date2 - date1).days)
    if days == 0:
        return 1.0
    if days <= 7:
        return 0.95
    if days <= 30:
        return 0.8
    if days <= 90:
        return 0.6
    if days <= 180:
        return 0.4
    if days <= 365:
        return 0.2
    return 0.0


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def date_bonus(torrent_date: Optional[date], scene_date: Optional[str]) -> int:
    """0-5 points added to a match score for date proximity."""
    if torrent_date is None or not scene_date:
        return 0
    scene_day = parse_iso_date(scene_date)
    if scene_day is None:
        return 0

    similarity = date_similarity(torrent_date, scene_day)
    if similarity >= 0.95:
        return 5
    if similarity >= 0.8:
        return 3
    if similarity >= 0.6:
        return 2
    if similarity >= 0.4:
        return 1
    return 0
