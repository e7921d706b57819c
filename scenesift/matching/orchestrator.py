"""Torrent-title match scoring: semantic first, Levenshtein as the fallback."""

from __future__ import annotations

import asyncio
import traceback
from dataclasses import replace
from typing import List, Optional, Sequence

from scenesift import logger as logger_module
from scenesift.logger import SceneSiftLogger
from scenesift.matching import lexical
from scenesift.matching.semantic import SemanticMatcher
from scenesift.matching.types import TorrentResult


class MatchScorer:
    """Scores how well a torrent title matches an expected title (0-100)."""

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

    async def calculate_match_score(
        self,
        torrent_title: str,
        expected_title: str,
        use_ai: bool = True,
    ) -> int:
        if use_ai and self._semantic is not None:
            try:
                return await self._score_semantic(torrent_title, expected_title)
            except Exception as exc:
                self.log.event(
                    "error",
                    "torrent",
                    f"AI matching failed, falling back to Levenshtein: {exc}",
                    {"error": "".join(traceback.format_exception_only(type(exc), exc)).strip()},
                )

        # Lexical scoring normalizes the raw titles itself.
        return lexical.score(torrent_title, expected_title)

    async def _score_semantic(self, torrent_title: str, expected_title: str) -> int:
        processed_torrent = self._semantic.preprocess_text(torrent_title)
        processed_expected = self._semantic.preprocess_text(expected_title)
        similarity = await self._semantic.calculate_similarity(processed_torrent, processed_expected)
        return lexical.round_half_up(similarity * 100)

    async def score_torrents(
        self,
        torrents: Sequence[TorrentResult],
        expected_title: str,
        use_ai: bool = True,
    ) -> List[TorrentResult]:
        """Copies of ``torrents`` with ``match_score`` set against ``expected_title``."""
        scores = await asyncio.gather(
            *(self.calculate_match_score(torrent.title, expected_title, use_ai) for torrent in torrents)
        )
        return [replace(torrent, match_score=score) for torrent, score in zip(torrents, scores)]

    def is_ai_matching_available(self) -> bool:
        return self._semantic is not None
