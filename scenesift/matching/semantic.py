"""Semantic title similarity on top of a sentence-embedding backend."""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from scenesift import logger as logger_module
from scenesift.logger import SceneSiftLogger
from scenesift.matching.protocols import EmbeddingBackend

_RESOLUTION_RE = re.compile(r"\b(1080p|720p|480p|2160p|4k|uhd)\b", re.IGNORECASE)
_SOURCE_RE = re.compile(r"\b(bluray|blu-ray|webdl|web-dl|webrip|hdtv|dvd)\b", re.IGNORECASE)
_EXTENSION_RE = re.compile(r"\.(mkv|mp4|avi|wmv|mov)$", re.IGNORECASE)


class DimensionMismatchError(ValueError):
    """Raised when comparing embeddings of different lengths (different models)."""


class EmbeddingInitError(RuntimeError):
    """Raised when the embedding backend cannot be loaded."""


@dataclass
class BestMatch:
    text: str
    score: float
    index: int


class SemanticMatcher:
    """Embedding-based similarity with lazy, single-flight backend initialization.

    The caller owns the lifecycle: construct with a backend, optionally
    ``await initialize()`` up front, and ``await close()`` when done.
    Concurrent first calls share one in-flight load.
    """

    def __init__(self, backend: EmbeddingBackend, logger: Optional[SceneSiftLogger] = None):
        self._backend = backend
        self._logger = logger
        self._initialized = False
        self._init_task: asyncio.Task | None = None

    @property
    def log(self) -> SceneSiftLogger:
        return self._logger or logger_module.get_logger()

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        if self._initialized:
            return

        task = self._init_task
        if task is None:
            task = asyncio.create_task(self._load())
            self._init_task = task

        try:
            # Shielded so one cancelled caller does not abort the load for the others.
            await asyncio.shield(task)
        except EmbeddingInitError:
            if self._init_task is task:
                self._init_task = None
            raise

    async def _load(self) -> None:
        self.log.event("info", "ai", "Loading embedding model for semantic matching...")
        try:
            await self._backend.load()
        except Exception as exc:
            self.log.event("error", "ai", "Failed to load embedding model", {"error": str(exc)})
            raise EmbeddingInitError(f"Embedding backend failed to load: {exc}") from exc
        self._initialized = True
        self.log.event("info", "ai", "Embedding model loaded successfully")

    async def generate_embedding(self, text: str) -> np.ndarray:
        if not self._initialized:
            await self.initialize()

        try:
            raw = await self._backend.embed(text)
        except Exception as exc:
            self.log.event("error", "ai", "Failed to generate embedding", {"error": str(exc)})
            raise
        return _pool_and_normalize(raw)

    @staticmethod
    def cosine_similarity(embedding1: Sequence[float], embedding2: Sequence[float]) -> float:
        vec1 = np.asarray(embedding1, dtype=np.float64)
        vec2 = np.asarray(embedding2, dtype=np.float64)
        if vec1.shape != vec2.shape:
            raise DimensionMismatchError(
                f"Embeddings must have the same length ({vec1.size} != {vec2.size})"
            )

        magnitude1 = float(np.linalg.norm(vec1))
        magnitude2 = float(np.linalg.norm(vec2))
        if magnitude1 == 0 or magnitude2 == 0:
            return 0.0

        similarity = float(np.dot(vec1, vec2)) / (magnitude1 * magnitude2)
        return float(np.clip(similarity, -1.0, 1.0))

    async def calculate_similarity(self, text1: str, text2: str) -> float:
        """Cosine similarity of two texts; 1 means identical meaning."""
        embedding1, embedding2 = await asyncio.gather(
            self.generate_embedding(text1),
            self.generate_embedding(text2),
        )
        return self.cosine_similarity(embedding1, embedding2)

    async def calculate_similarity_preprocessed(self, text1: str, text2: str) -> float:
        return await self.calculate_similarity(self.preprocess_text(text1), self.preprocess_text(text2))

    async def find_best_match(
        self,
        query: str,
        candidates: Sequence[str],
        threshold: float = 0.7,
    ) -> Optional[BestMatch]:
        """Highest-scoring candidate at or above ``threshold``; first one wins ties."""
        if not candidates:
            return None

        query_embedding = await self.generate_embedding(query)
        candidate_embeddings = await asyncio.gather(
            *(self.generate_embedding(candidate) for candidate in candidates)
        )

        best_index = 0
        best_score = self.cosine_similarity(query_embedding, candidate_embeddings[0])
        for index in range(1, len(candidate_embeddings)):
            similarity = self.cosine_similarity(query_embedding, candidate_embeddings[index])
            if similarity > best_score:
                best_score = similarity
                best_index = index

        if best_score < threshold:
            return None
        return BestMatch(text=candidates[best_index], score=best_score, index=best_index)

    async def batch_calculate_similarity(
        self,
        queries: Sequence[str],
        candidates: Sequence[str],
    ) -> List[List[float]]:
        """Similarity matrix with one row per query and one column per candidate."""
        query_embeddings, candidate_embeddings = await asyncio.gather(
            asyncio.gather(*(self.generate_embedding(q) for q in queries)),
            asyncio.gather(*(self.generate_embedding(c) for c in candidates)),
        )
        return [
            [self.cosine_similarity(query_embedding, candidate_embedding) for candidate_embedding in candidate_embeddings]
            for query_embedding in query_embeddings
        ]

    @staticmethod
    def preprocess_text(text: str) -> str:
        """Drop resolution, source and container noise before embedding."""
        text = text.lower()
        text = _RESOLUTION_RE.sub("", text)
        text = _SOURCE_RE.sub("", text)
        text = _EXTENSION_RE.sub("", text)
        text = re.sub(r"\s+", " ", text)
        return text.strip()

    async def close(self) -> None:
        await self._backend.close()
        self._initialized = False
        self._init_task = None


def _pool_and_normalize(raw: Sequence[float] | Sequence[Sequence[float]]) -> np.ndarray:
    """Mean-pool token vectors (if any) and L2-normalize."""
    vector = np.asarray(raw, dtype=np.float64)
    if vector.ndim == 2:
        vector = vector.mean(axis=0)
    elif vector.ndim != 1:
        raise ValueError(f"Embedding backend returned an array of rank {vector.ndim}")
    norm = float(np.linalg.norm(vector))
    if norm > 0:
        vector = vector / norm
    return vector
