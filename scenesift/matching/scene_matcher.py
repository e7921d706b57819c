"""Match torrent titles against candidate scenes (exact → truncated → partial → AI → Levenshtein)."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from scenesift import logger as logger_module
from scenesift.config import MatchSettings
from scenesift.logger import SceneSiftLogger
from scenesift.matching import lexical
from scenesift.matching.date_extractor import date_bonus, extract_date
from scenesift.matching.normalizer import TitleNormalizer
from scenesift.matching.semantic import SemanticMatcher
from scenesift.matching.types import MatchedScene, MatchResult, SceneGroup, SceneMetadata

PARTIAL_MIN_LENGTH = 20


class SceneMatcher:
    """Finds the best scene for a torrent title using a fixed method cascade.

    Each candidate scene is tried against the methods in priority order and
    the first method that accepts it decides its score. A date found in the
    torrent title adds up to 5 points when it lines up with the scene date.
    """

    def __init__(
        self,
        semantic_matcher: Optional[SemanticMatcher] = None,
        logger: Optional[SceneSiftLogger] = None,
    ):
        self._semantic = semantic_matcher
        self._logger = logger

    @property
    def log(self) -> SceneSiftLogger:
        return self._logger or logger_module.get_logger()

    async def find_best_match(
        self,
        torrent_title: str,
        candidate_scenes: Sequence[SceneMetadata],
        settings: MatchSettings,
    ) -> Optional[MatchResult]:
        if not candidate_scenes:
            return None

        normalized_torrent = TitleNormalizer.remove_metadata(torrent_title)
        torrent_date = extract_date(torrent_title)

        best: Optional[MatchResult] = None
        for scene in candidate_scenes:
            candidate = await self._match_scene(normalized_torrent, scene, settings)
            if candidate is None:
                continue

            candidate.score += date_bonus(torrent_date, scene.date)
            if best is None or candidate.score > best.score:
                best = candidate
            if candidate.score >= 100:
                break

        return best

    async def _match_scene(
        self,
        normalized_torrent: str,
        scene: SceneMetadata,
        settings: MatchSettings,
    ) -> Optional[MatchResult]:
        normalized_scene = TitleNormalizer.normalize(scene.title)

        if normalized_torrent == normalized_scene:
            return MatchResult(scene=scene, score=100, method="exact", confidence=1.0)

        ratio = _truncated_ratio(normalized_torrent, normalized_scene, settings.grouping_threshold)
        if ratio is not None:
            return MatchResult(scene=scene, score=90 + ratio * 5, method="truncated", confidence=ratio)

        ratio = _partial_ratio(normalized_torrent, normalized_scene)
        if ratio is not None:
            return MatchResult(scene=scene, score=80 + ratio * 5, method="partial", confidence=ratio)

        if settings.ai_enabled and self._semantic is not None:
            try:
                similarity = await self._semantic.calculate_similarity(normalized_torrent, normalized_scene)
            except Exception as exc:
                self.log.event(
                    "warning",
                    "torrent",
                    "AI matching failed, falling back to Levenshtein",
                    {"error": str(exc)},
                )
            else:
                if similarity >= settings.ai_threshold:
                    return MatchResult(scene=scene, score=similarity * 100, method="ai", confidence=similarity)

        similarity = lexical.similarity(normalized_torrent, normalized_scene)
        if similarity >= settings.levenshtein_threshold:
            return MatchResult(scene=scene, score=similarity * 100, method="levenshtein", confidence=similarity)

        return None

    async def match_groups(
        self,
        groups: Sequence[SceneGroup],
        candidate_scenes: Sequence[SceneMetadata],
        settings: MatchSettings,
    ) -> Tuple[List[MatchedScene], List[SceneGroup]]:
        """Split groups into matched and unmatched. A scene is claimed by at most one group."""
        matched: List[MatchedScene] = []
        unmatched: List[SceneGroup] = []
        claimed: set[str] = set()

        for group in groups:
            available = [scene for scene in candidate_scenes if scene.id not in claimed]
            if not available:
                unmatched.append(group)
                continue

            result = await self.find_best_match(group.scene_title, available, settings)
            if result is None:
                unmatched.append(group)
                continue

            claimed.add(result.scene.id)
            matched.append(MatchedScene(scene=result.scene, torrents=list(group.torrents)))
            self.log.event(
                "info",
                "torrent",
                f'Matched "{group.scene_title}" to "{result.scene.title}"',
                {"method": result.method, "score": round(result.score, 2), "confidence": round(result.confidence, 4)},
            )

        return matched, unmatched


def _truncated_ratio(title1: str, title2: str, threshold: float) -> Optional[float]:
    """Length ratio when one title is a prefix of the other and the ratio clears ``threshold``."""
    if not (title1.startswith(title2) or title2.startswith(title1)):
        return None
    ratio = TitleNormalizer.length_ratio(title1, title2)
    return ratio if ratio >= threshold else None


def _partial_ratio(title1: str, title2: str) -> Optional[float]:
    shorter, longer = (title1, title2) if len(title1) < len(title2) else (title2, title1)
    if not TitleNormalizer.is_partial_match(shorter, longer, PARTIAL_MIN_LENGTH):
        return None
    return TitleNormalizer.length_ratio(title1, title2)
