"""Per-item quality profile rules and sanity bounds applied before download."""

from __future__ import annotations

from typing import List, Optional, Sequence

from scenesift import logger as logger_module
from scenesift.logger import SceneSiftLogger
from scenesift.matching.types import TorrentResult
from scenesift.quality.profiles import GIB, QualityItem, QualityProfile

MIN_MATCH_SCORE = 60
MIN_SIZE_BYTES = 100 * 1024 ** 2
MAX_SIZE_BYTES = 50 * GIB
UNLISTED_PRIORITY = 9999


def _first_matching_item(torrent: TorrentResult, items: Sequence[QualityItem]) -> Optional[int]:
    for index, item in enumerate(items):
        if item.accepts(torrent.quality, torrent.source):
            return index
    return None


def filter_by_quality_profile(torrents: Sequence[TorrentResult], profile: QualityProfile) -> List[TorrentResult]:
    """Keep torrents that satisfy the limits of the first profile item covering them.

    Only that first item counts: a torrent rejected by its seeder floor or
    size cap is not retried against later, looser items.
    """
    kept: List[TorrentResult] = []
    for torrent in torrents:
        index = _first_matching_item(torrent, profile.items)
        if index is None:
            continue
        item = profile.items[index]
        if item.min_seeders is not None and torrent.seeders < item.min_seeders:
            continue
        max_bytes = item.max_size_bytes
        if max_bytes is not None and torrent.size > max_bytes:
            continue
        kept.append(torrent)
    return kept


def apply_hard_filters(
    torrents: Sequence[TorrentResult],
    min_match_score: int = MIN_MATCH_SCORE,
    logger: Optional[SceneSiftLogger] = None,
) -> List[TorrentResult]:
    """Drop weak title matches and implausible sizes (under 100 MB or over 50 GB)."""
    kept = [
        torrent
        for torrent in torrents
        if torrent.match_score >= min_match_score and MIN_SIZE_BYTES <= torrent.size <= MAX_SIZE_BYTES
    ]

    eliminated = len(torrents) - len(kept)
    if eliminated > 0:
        (logger or logger_module.get_logger()).event(
            "info",
            "torrent",
            f"Hard filters eliminated {eliminated} torrents",
            {"before": len(torrents), "after": len(kept), "eliminated": eliminated},
        )
    return kept


def sort_by_quality_profile(torrents: Sequence[TorrentResult], profile: QualityProfile) -> List[TorrentResult]:
    """New list ordered by matching item position, then seeders, then match score.

    Torrents no item covers sort last.
    """

    def _key(torrent: TorrentResult):
        index = _first_matching_item(torrent, profile.items)
        priority = UNLISTED_PRIORITY if index is None else index
        return priority, -torrent.seeders, -torrent.match_score

    return sorted(torrents, key=_key)
