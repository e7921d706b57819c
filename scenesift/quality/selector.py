"""Pick the best torrent per scene according to a quality profile."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from functools import cmp_to_key
from typing import List, Optional, Sequence

from scenesift import logger as logger_module
from scenesift.logger import SceneSiftLogger
from scenesift.matching.protocols import ProgressCallback, QualityProfileProvider
from scenesift.matching.types import MatchedScene, TorrentResult, UnmatchedScene
from scenesift.quality.profiles import GIB


def _preference_index(preferences: Sequence[str], value: str) -> int:
    try:
        return preferences.index(value)
    except ValueError:
        return -1


def _compare_candidates(
    a: TorrentResult,
    b: TorrentResult,
    preferred_qualities: Sequence[str],
    preferred_sources: Sequence[str],
) -> int:
    a_quality = _preference_index(preferred_qualities, a.quality)
    b_quality = _preference_index(preferred_qualities, b.quality)
    if a_quality != -1 and b_quality != -1 and a_quality != b_quality:
        return a_quality - b_quality

    a_source = _preference_index(preferred_sources, a.source)
    b_source = _preference_index(preferred_sources, b.source)
    if a_source != -1 and b_source != -1 and a_source != b_source:
        return a_source - b_source

    if a.seeders != b.seeders:
        return b.seeders - a.seeders

    return (b.indexer_count or 1) - (a.indexer_count or 1)


class CandidateSelector:
    """Ranks the torrents of one scene against a stored quality profile.

    Filtering narrows by preferred quality, preferred source, size ceiling
    and seeder floor. If nothing survives, the first torrent of the
    unfiltered list is returned.
    """

    def __init__(self, provider: QualityProfileProvider, logger: Optional[SceneSiftLogger] = None):
        self._provider = provider
        self._logger = logger

    @property
    def log(self) -> SceneSiftLogger:
        return self._logger or logger_module.get_logger()

    async def select_best_torrent(
        self,
        torrents: Sequence[TorrentResult],
        quality_profile_id: str,
    ) -> Optional[TorrentResult]:
        if not torrents:
            return None

        profile = await self._provider.find_quality_profile_by_id(quality_profile_id)
        if profile is None:
            self.log.event(
                "warning",
                "torrent",
                f"Quality profile not found: {quality_profile_id}, using first torrent",
                {"qualityProfileId": quality_profile_id},
            )
            return torrents[0]

        preferred_qualities = profile.preferred_qualities
        preferred_sources = profile.preferred_sources

        candidates: List[TorrentResult] = list(torrents)
        if preferred_qualities:
            candidates = [t for t in candidates if t.quality in preferred_qualities]
        if preferred_sources:
            candidates = [t for t in candidates if t.source in preferred_sources]

        max_size = profile.overall_max_size
        if max_size is not None:
            candidates = [t for t in candidates if t.size <= max_size * GIB]

        min_seeders = profile.overall_min_seeders
        if min_seeders > 0:
            candidates = [t for t in candidates if t.seeders >= min_seeders]

        if not candidates:
            self.log.event(
                "info",
                "torrent",
                "No torrents match quality profile preferences, using first available",
                {
                    "qualityProfileId": quality_profile_id,
                    "profileName": profile.name,
                    "totalTorrents": len(torrents),
                },
            )
            return torrents[0]

        ranked = sorted(
            candidates,
            key=cmp_to_key(
                lambda a, b: _compare_candidates(a, b, preferred_qualities, preferred_sources)
            ),
        )
        selected = ranked[0]

        self.log.event(
            "info",
            "torrent",
            "Selected best torrent for scene",
            {
                "qualityProfileId": quality_profile_id,
                "profileName": profile.name,
                "selectedTitle": selected.title,
                "selectedQuality": selected.quality,
                "selectedSource": selected.source,
                "selectedSeeders": selected.seeders,
                "selectedIndexers": selected.indexer_count,
                "totalCandidates": len(candidates),
            },
        )
        return selected

    async def _select_isolated(
        self,
        torrents: Sequence[TorrentResult],
        quality_profile_id: str,
        label: str,
        metadata: dict,
    ) -> Optional[TorrentResult]:
        """Selection for one scene or group. A failure skips that entry only."""
        try:
            return await self.select_best_torrent(torrents, quality_profile_id)
        except Exception as exc:
            self.log.event(
                "error",
                "torrent",
                f"Torrent selection failed for {label}, skipping",
                {**metadata, "qualityProfileId": quality_profile_id, "error": str(exc)},
            )
            return None

    async def process_matched_results(
        self,
        matched: Sequence[MatchedScene],
        quality_profile_id: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[TorrentResult]:
        """One winner per matched scene, tagged with the scene id, in input order."""

        async def _select(index: int, entry: MatchedScene) -> Optional[TorrentResult]:
            selected = await self._select_isolated(
                entry.torrents, quality_profile_id, f"scene {entry.scene.id}", {"sceneId": entry.scene.id}
            )
            if on_progress is not None:
                on_progress(
                    "matched_scene_processed",
                    {"index": index, "total": len(matched), "sceneId": entry.scene.id, "selected": selected is not None},
                )
            if selected is None:
                return None
            return replace(selected, scene_id=entry.scene.id)

        results = await asyncio.gather(*(_select(i, entry) for i, entry in enumerate(matched)))
        selected_torrents = [torrent for torrent in results if torrent is not None]

        self.log.event(
            "info",
            "torrent",
            f"Processed {len(matched)} matched scenes",
            {"matchedScenes": len(matched), "selectedTorrents": len(selected_torrents)},
        )
        return selected_torrents

    async def process_unmatched_results(
        self,
        unmatched: Sequence[UnmatchedScene],
        quality_profile_id: str,
        min_group_members: int,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[TorrentResult]:
        """One winner per group that has at least ``min_group_members`` torrents."""
        valid_groups = [group for group in unmatched if len(group.torrents) >= min_group_members]

        filtered_out = len(unmatched) - len(valid_groups)
        if filtered_out > 0:
            self.log.event(
                "info",
                "torrent",
                f"Filtered out {filtered_out} unmatched groups with insufficient members",
                {
                    "totalUnmatched": len(unmatched),
                    "minGroupMembers": min_group_members,
                    "filteredOut": filtered_out,
                    "remainingGroups": len(valid_groups),
                },
            )

        async def _select(index: int, group: UnmatchedScene) -> Optional[TorrentResult]:
            selected = await self._select_isolated(
                group.torrents, quality_profile_id, f"group \"{group.scene_title}\"", {"sceneTitle": group.scene_title}
            )
            if on_progress is not None:
                on_progress(
                    "unmatched_group_processed",
                    {"index": index, "total": len(valid_groups), "sceneTitle": group.scene_title, "selected": selected is not None},
                )
            return None if selected is None else replace(selected)

        results = await asyncio.gather(*(_select(i, group) for i, group in enumerate(valid_groups)))
        selected_torrents = [torrent for torrent in results if torrent is not None]

        self.log.event(
            "info",
            "torrent",
            f"Processed {len(valid_groups)} unmatched scenes",
            {"validGroups": len(valid_groups), "selectedTorrents": len(selected_torrents)},
        )
        return selected_torrents
