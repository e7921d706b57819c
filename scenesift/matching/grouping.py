"""Name-integrity filtering, dedup across indexers and per-scene grouping of search hits."""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Sequence

from scenesift import logger as logger_module
from scenesift.logger import SceneSiftLogger
from scenesift.matching.normalizer import TitleNormalizer
from scenesift.matching.types import SceneGroup, TorrentResult

SHORT_TITLE_LENGTH = 15
PREFIX_MIN_LENGTH = 30
MAX_WORDS_BETWEEN_NAME_PARTS = 2


def deduplicate_by_info_hash(results: Sequence[TorrentResult]) -> List[TorrentResult]:
    """Collapse the same release reported by several indexers into one entry.

    ``indexer_count`` becomes the number of distinct indexers. The copy with
    the most seeders supplies seeders, leechers and download URL. Hits without
    an info hash are keyed by title and size; later duplicates are dropped.
    """
    merged: Dict[str, TorrentResult] = {}

    for torrent in results:
        indexer_names = [torrent.indexer_name] if torrent.indexer_name else []

        if not torrent.info_hash:
            pseudo_hash = f"{torrent.title}-{torrent.size}"
            if pseudo_hash not in merged:
                merged[pseudo_hash] = replace(torrent, indexers=indexer_names, indexer_count=1)
            continue

        existing = merged.get(torrent.info_hash)
        if existing is None:
            merged[torrent.info_hash] = replace(torrent, indexers=indexer_names, indexer_count=1)
            continue

        for name in indexer_names:
            if name not in existing.indexers:
                existing.indexers.append(name)
        existing.indexer_count = max(len(existing.indexers), 1)

        if torrent.seeders > existing.seeders:
            existing.seeders = torrent.seeders
            existing.leechers = torrent.leechers
            existing.download_url = torrent.download_url

    return list(merged.values())


def group_by_scene(results: Sequence[TorrentResult], grouping_threshold: float = 0.7) -> List[SceneGroup]:
    """Cluster hits whose cleaned titles are equal or a long, close-enough prefix of each other.

    Titles under 15 characters only group on exact equality. Prefix grouping
    needs the shorter title to be at least 30 characters; the longer title
    becomes the group key.
    """
    groups: Dict[str, List[TorrentResult]] = {}

    for result in results:
        scene_title = TitleNormalizer.extract_core_title(result.title)

        if len(scene_title) < SHORT_TITLE_LENGTH:
            groups.setdefault(scene_title, []).append(result)
            continue

        group_key = scene_title
        for existing_key in list(groups):
            if len(existing_key) < SHORT_TITLE_LENGTH:
                continue
            if existing_key == scene_title:
                break

            shorter, longer = (
                (scene_title, existing_key) if len(scene_title) < len(existing_key) else (existing_key, scene_title)
            )
            if len(shorter) >= PREFIX_MIN_LENGTH and longer.startswith(shorter):
                if len(shorter) / len(longer) >= grouping_threshold:
                    if longer != existing_key:
                        # Re-keyed groups move to the end of the ordering.
                        groups[longer] = groups.pop(existing_key)
                    group_key = longer
                    break

        groups.setdefault(group_key, []).append(result)

    return [SceneGroup(scene_title=title, torrents=torrents) for title, torrents in groups.items()]


def _name_pattern(name: str) -> Optional[re.Pattern]:
    words = name.split()
    if not words:
        return None
    escaped = [re.escape(word) for word in words]
    gap = rf"(\s+\w+){{0,{MAX_WORDS_BETWEEN_NAME_PARTS}}}\s+"
    return re.compile(rf"\b{gap.join(escaped)}\b", re.IGNORECASE)


def apply_name_filter(
    results: Sequence[TorrentResult],
    name: str,
    aliases: Iterable[str] = (),
    logger: Optional[SceneSiftLogger] = None,
) -> List[TorrentResult]:
    """Keep hits whose title names the performer or studio, or one of its aliases.

    Single-word names match on word boundaries. Multi-word names must appear
    in order with at most two words between parts, so "jade harper" keeps
    "Jade Harper" and "Jade Ann Harper" but drops "Jade Kush".
    """
    patterns = [
        pattern
        for pattern in (_name_pattern(candidate.lower()) for candidate in [name, *aliases])
        if pattern is not None
    ]
    kept = [result for result in results if any(pattern.search(result.title) for pattern in patterns)]

    eliminated = len(results) - len(kept)
    if eliminated > 0:
        (logger or logger_module.get_logger()).event(
            "info",
            "torrent",
            f"Eliminated {eliminated} false matches during filtering for {name}",
            {"entityName": name, "before": len(results), "after": len(kept), "eliminated": eliminated},
        )
    return kept
