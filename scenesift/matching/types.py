"""Shared data structures for matching and selection."""

from dataclasses import dataclass, field
from typing import List, Literal, Optional

MatchMethod = Literal["exact", "truncated", "partial", "ai", "levenshtein"]


@dataclass
class TorrentResult:
    """Single search hit, after dedup across indexers."""
    title: str
    size: int
    seeders: int
    quality: str = "any"
    source: str = "any"
    leechers: Optional[int] = None
    indexer_name: Optional[str] = None
    download_url: Optional[str] = None
    info_hash: Optional[str] = None
    indexers: List[str] = field(default_factory=list)
    indexer_count: Optional[int] = None
    scene_id: Optional[str] = None
    match_score: int = 0  # 0-100, from MatchScorer


@dataclass
class SceneMetadata:
    """Identified scene used as a matching target."""
    id: str
    title: str
    date: Optional[str] = None  # ISO date
    performer_ids: List[str] = field(default_factory=list)
    studio_id: Optional[str] = None


@dataclass
class MatchResult:
    """Scene matched to a torrent title, with the method that found it."""
    scene: SceneMetadata
    score: float  # 0-100, plus date bonus
    method: MatchMethod
    confidence: float  # raw similarity 0-1


@dataclass
class SceneGroup:
    """Torrents presumed to be the same release."""
    scene_title: str
    torrents: List[TorrentResult] = field(default_factory=list)


@dataclass
class MatchedScene:
    scene: SceneMetadata
    torrents: List[TorrentResult] = field(default_factory=list)


# Unmatched groups carry the same shape as a plain group.
UnmatchedScene = SceneGroup
