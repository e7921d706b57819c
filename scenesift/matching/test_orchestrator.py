from __future__ import annotations

import pytest

from scenesift.matching import lexical
from scenesift.matching.orchestrator import MatchScorer
from scenesift.matching.semantic import SemanticMatcher
from scenesift.matching.types import TorrentResult


class _RecordingLog:
    def __init__(self) -> None:
        self.events: list[tuple[str, str, str, dict | None]] = []

    def event(self, level, category, message, metadata=None) -> None:
        self.events.append((level, category, message, metadata))


class _FakeSemantic:
    preprocess_text = staticmethod(SemanticMatcher.preprocess_text)

    def __init__(self, similarity: float = 0.0, error: Exception | None = None) -> None:
        self.similarity = similarity
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def calculate_similarity(self, text1: str, text2: str) -> float:
        self.calls.append((text1, text2))
        if self.error is not None:
            raise self.error
        return self.similarity


@pytest.mark.asyncio
async def test_lexical_scoring_without_semantic_matcher():
    scorer = MatchScorer(logger=_RecordingLog())

    assert await scorer.calculate_match_score("Scene Title", "scene title!") == 100
    assert not scorer.is_ai_matching_available()


@pytest.mark.asyncio
async def test_semantic_scoring_uses_preprocessed_titles_and_rounds_half_up():
    semantic = _FakeSemantic(similarity=0.875)
    scorer = MatchScorer(semantic_matcher=semantic, logger=_RecordingLog())

    score = await scorer.calculate_match_score("Scene Title 1080p WEB-DL.mkv", "Scene Title")

    assert score == 88
    assert semantic.calls == [("scene title", "scene title")]
    assert scorer.is_ai_matching_available()


@pytest.mark.asyncio
async def test_semantic_failure_falls_back_to_lexical_and_logs_error():
    log = _RecordingLog()
    semantic = _FakeSemantic(error=RuntimeError("model unavailable"))
    scorer = MatchScorer(semantic_matcher=semantic, logger=log)

    score = await scorer.calculate_match_score("abc", "abd")

    assert score == 67
    assert len(log.events) == 1
    level, category, message, metadata = log.events[0]
    assert (level, category) == ("error", "torrent")
    assert message.startswith("AI matching failed, falling back to Levenshtein")
    assert "model unavailable" in metadata["error"]


@pytest.mark.asyncio
async def test_use_ai_false_skips_semantic_matcher():
    semantic = _FakeSemantic(similarity=0.1)
    scorer = MatchScorer(semantic_matcher=semantic, logger=_RecordingLog())

    assert await scorer.calculate_match_score("Scene Title", "Scene Title", use_ai=False) == 100
    assert semantic.calls == []


@pytest.mark.asyncio
async def test_score_torrents_sets_match_score_on_copies():
    scorer = MatchScorer(logger=_RecordingLog())
    torrents = [TorrentResult(title="Scene Title", size=1, seeders=1), TorrentResult(title="abd", size=1, seeders=1)]

    scored = await scorer.score_torrents(torrents, "abc")

    assert [t.match_score for t in scored] == [lexical.score("Scene Title", "abc"), 67]
    assert [t.match_score for t in torrents] == [0, 0]
