"""Parse torrent titles into quality attributes and a standalone quality score."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional

GIB = 1024 ** 3

_BRACKETED_RE = re.compile(r"[\[(].*?[\])]")
_QUALITY_TOKEN_RE = re.compile(
    r"\b(2160p|1080p|720p|480p|bluray|webdl|web-dl|webrip|hdtv|dvd|brrip|hdrip)\b",
    re.IGNORECASE,
)
_CODEC_TOKEN_RE = re.compile(r"\b(h264|h265|x264|x265|hevc|avc)\b", re.IGNORECASE)
_SIZE_RE = re.compile(r"^([\d.]+)\s*(gb|mb|kb)?$")

_RESOLUTION_POINTS = {"2160p": 400, "1080p": 300, "720p": 200, "480p": 100}
_SOURCE_POINTS = {"Bluray": 50, "WEB-DL": 40, "WEBRip": 30, "HDTV": 20, "DVD": 10}
_CODEC_POINTS = {"H.265": 10, "H.264": 5}
_SIZE_UNITS = {"kb": 1024, "mb": 1024 ** 2, "gb": GIB}


@dataclass
class ParsedTorrent:
    title: str
    quality: str
    resolution: Optional[str]
    codec: Optional[str]
    source: Optional[str]
    hdr: bool
    proper: bool
    repack: bool
    size: int
    seeders: int
    original_title: str


@dataclass
class TorrentFilters:
    """Hard filters. ``max_size`` is in GB."""
    required_words: List[str] = field(default_factory=list)
    forbidden_words: List[str] = field(default_factory=list)
    min_seeders: Optional[int] = None
    max_size: Optional[float] = None


def parse_torrent(title: str, size: int = 0, seeders: int = 0) -> ParsedTorrent:
    title_lower = title.lower()
    return ParsedTorrent(
        title=_clean_title(title),
        quality=_extract_quality(title_lower),
        resolution=_extract_resolution(title_lower),
        codec=_extract_codec(title_lower),
        source=_extract_source(title_lower),
        hdr=_has_hdr(title_lower),
        proper="proper" in title_lower,
        repack="repack" in title_lower,
        size=size,
        seeders=seeders,
        original_title=title,
    )


def _clean_title(title: str) -> str:
    clean = _BRACKETED_RE.sub(" ", title)
    clean = _QUALITY_TOKEN_RE.sub(" ", clean)
    clean = _CODEC_TOKEN_RE.sub(" ", clean)
    return re.sub(r"\s+", " ", clean).strip()


def _extract_quality(title: str) -> str:
    for resolution in ("2160p", "1080p", "720p"):
        if resolution in title:
            if "bluray" in title or "blu-ray" in title:
                return f"{resolution}_bluray"
            # Ambiguous or web sources both land on the webdl variant.
            return f"{resolution}_webdl"
    if "480p" in title:
        return "480p_webdl"
    if "dvd" in title and "dvdrip" not in title:
        return "dvd"
    return "any"


def _extract_resolution(title: str) -> Optional[str]:
    for resolution in ("2160p", "1080p", "720p", "480p"):
        if resolution in title:
            return resolution
    return None


def _extract_codec(title: str) -> Optional[str]:
    if any(token in title for token in ("h265", "x265", "hevc")):
        return "H.265"
    if any(token in title for token in ("h264", "x264", "avc")):
        return "H.264"
    return None


def _extract_source(title: str) -> Optional[str]:
    if "bluray" in title or "blu-ray" in title:
        return "Bluray"
    if "webdl" in title or "web-dl" in title:
        return "WEB-DL"
    if "webrip" in title:
        return "WEBRip"
    if "hdtv" in title:
        return "HDTV"
    if "dvd" in title:
        return "DVD"
    return None


def _has_hdr(title: str) -> bool:
    return "hdr" in title or "dolby vision" in title or re.search(r"\bdv\b", title) is not None


def quality_score(parsed: ParsedTorrent) -> float:
    """Generic quality score (higher is better). Independent of any quality profile."""
    score: float = 0
    score += _RESOLUTION_POINTS.get(parsed.resolution or "", 0)
    score += _SOURCE_POINTS.get(parsed.source or "", 0)
    score += _CODEC_POINTS.get(parsed.codec or "", 0)
    if parsed.hdr:
        score += 15
    if parsed.proper:
        score += 5
    if parsed.repack:
        score += 3
    score += min(parsed.seeders / 10, 50)
    return score


def matches_filters(parsed: ParsedTorrent, filters: TorrentFilters) -> bool:
    title_lower = parsed.original_title.lower()

    if filters.required_words:
        if not all(word.lower() in title_lower for word in filters.required_words):
            return False

    if filters.forbidden_words:
        if any(word.lower() in title_lower for word in filters.forbidden_words):
            return False

    if filters.min_seeders and parsed.seeders < filters.min_seeders:
        return False

    if filters.max_size and parsed.size / GIB > filters.max_size:
        return False

    return True


def detect_quality_source(title: str) -> tuple[str, str]:
    """Map a title onto the quality-profile vocabulary, e.g. ("1080p", "webdl")."""
    title_lower = title.lower()

    quality = "any"
    if re.search(r"2160p|4k|uhd", title_lower):
        quality = "2160p"
    elif "1080p" in title_lower:
        quality = "1080p"
    elif "720p" in title_lower:
        quality = "720p"
    elif "480p" in title_lower:
        quality = "480p"

    source = "any"
    if re.search(r"bluray|blu-ray|bdrip|brrip", title_lower):
        source = "bluray"
    elif re.search(r"web-?dl", title_lower):
        source = "webdl"
    elif re.search(r"web-?rip", title_lower):
        source = "webrip"
    elif "hdtv" in title_lower:
        source = "hdtv"
    elif "dvd" in title_lower:
        source = "dvd"

    return quality, source


def parse_size(size_str: str) -> int:
    """Parse "1.5 GB" / "700mb" / "2048" into bytes; unparseable input is 0."""
    match = _SIZE_RE.match(size_str.strip().lower())
    if not match:
        return 0
    try:
        value = float(match.group(1))
    except ValueError:
        return 0
    return int(value * _SIZE_UNITS.get(match.group(2) or "", 1))


def format_bytes(num_bytes: int) -> str:
    if num_bytes <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB", "TB"]
    value = float(num_bytes)
    unit = 0
    while value >= 1024 and unit < len(units) - 1:
        value /= 1024
        unit += 1
    return f"{value:.2f} {units[unit]}"
