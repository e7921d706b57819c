"""Torrent title parsing, quality profiles and best-candidate selection."""

from .parser import ParsedTorrent, TorrentFilters, detect_quality_source, parse_torrent, quality_score
from .profiles import QUALITY_ORDER, SOURCE_ORDER, QualityItem, QualityProfile, sort_profile_items
from .ranking import apply_hard_filters, filter_by_quality_profile, sort_by_quality_profile
from .selector import CandidateSelector

__all__ = [
    "CandidateSelector",
    "ParsedTorrent",
    "QUALITY_ORDER",
    "QualityItem",
    "QualityProfile",
    "SOURCE_ORDER",
    "TorrentFilters",
    "apply_hard_filters",
    "detect_quality_source",
    "filter_by_quality_profile",
    "parse_torrent",
    "quality_score",
    "sort_by_quality_profile",
    "sort_profile_items",
]
