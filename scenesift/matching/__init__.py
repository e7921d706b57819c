"""Title normalization, similarity scoring and scene matching."""

from .date_extractor import date_bonus, date_similarity, extract_date
from .embedding_client import HttpEmbeddingBackend
from .grouping import apply_name_filter, deduplicate_by_info_hash, group_by_scene
from .normalizer import TitleNormalizer
from .orchestrator import MatchScorer
from .scene_matcher import SceneMatcher
from .semantic import BestMatch, DimensionMismatchError, EmbeddingInitError, SemanticMatcher
from .types import MatchedScene, MatchResult, SceneGroup, SceneMetadata, TorrentResult, UnmatchedScene

__all__ = [
    "BestMatch",
    "DimensionMismatchError",
    "EmbeddingInitError",
    "HttpEmbeddingBackend",
    "MatchResult",
    "MatchScorer",
    "MatchedScene",
    "SceneGroup",
    "SceneMatcher",
    "SceneMetadata",
    "SemanticMatcher",
    "TitleNormalizer",
    "TorrentResult",
    "UnmatchedScene",
    "apply_name_filter",
    "date_bonus",
    "date_similarity",
    "deduplicate_by_info_hash",
    "extract_date",
    "group_by_scene",
]
