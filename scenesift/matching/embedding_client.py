"""Embedding backend talking to an OpenAI-compatible ``/embeddings`` endpoint."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, List

import aiohttp

from scenesift import logger
from scenesift.__version__ import __version__
from scenesift.config import EmbeddingConfig
from scenesift.matching.resilience import embedding_payload, run_with_retries

DEFAULT_USER_AGENT = f"SceneSift/{__version__}"
SAMPLE_TEXT = "scene title"


class HttpEmbeddingBackend:
    """Embedding backend for text-embeddings servers (TEI, Ollama, vLLM, OpenAI)."""

    def __init__(self, config: EmbeddingConfig):
        if not config.url:
            raise ValueError("Embedding service URL is required for the HTTP backend.")

        self.config = config
        self.base_url = config.url.rstrip("/")
        self.dimensions: int | None = None
        self._semaphore = asyncio.Semaphore(max(1, config.max_concurrency))
        self._session: aiohttp.ClientSession | None = None
        self._session_lock = asyncio.Lock()

    async def load(self) -> None:
        """Open the session and embed a sample text so a bad URL or model fails early."""
        vector = await self.embed(SAMPLE_TEXT)
        self.dimensions = len(vector)
        logger.get_logger().event(
            "info",
            "ai",
            "Embedding model ready",
            {"model": self.config.model, "dimensions": self.dimensions},
        )

    async def embed(self, text: str) -> List[float]:
        payload = {"model": self.config.model, "input": text}
        return await run_with_retries(
            lambda: self._post_embeddings(payload),
            max_attempts=max(1, self.config.max_attempts),
            on_retry=self._log_retry,
        )

    async def _post_embeddings(self, payload: Dict[str, Any]) -> List[float]:
        url = f"{self.base_url}/embeddings"
        log = logger.get_logger()
        request_start = time.time()
        async with self._semaphore:
            session = await self._ensure_session()
            async with session.post(url, json=payload) as response:
                if response.status >= 400:
                    text = await response.text()
                    raise aiohttp.ClientResponseError(
                        request_info=response.request_info,
                        history=response.history,
                        status=response.status,
                        message=text,
                        headers=response.headers,
                    )
                data = await response.json()
        elapsed_ms = (time.time() - request_start) * 1000
        log.debug(f"Embedding request ({elapsed_ms:.0f}ms): {url}")
        return [float(value) for value in embedding_payload(data, "embeddings")]

    def _log_retry(self, attempt: int, max_attempts: int, delay: int, exc: Exception) -> None:
        logger.get_logger().event(
            "warning",
            "ai",
            f"Embedding service error. Retrying in {delay}s... (attempt {attempt}/{max_attempts})",
            {"error": str(exc)},
        )

    async def _ensure_session(self) -> aiohttp.ClientSession:
        session = self._session
        if session is not None and not session.closed:
            return session

        async with self._session_lock:
            session = self._session
            if session is None or session.closed:
                timeout = aiohttp.ClientTimeout(total=self.config.timeout)
                self._session = aiohttp.ClientSession(
                    headers=self._get_headers(),
                    timeout=timeout,
                )
            return self._session

    def _get_headers(self) -> Dict[str, str]:
        headers = {"User-Agent": DEFAULT_USER_AGENT}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    async def close(self) -> None:
        """Close any open connections."""
        async with self._session_lock:
            session = self._session
            self._session = None
        if session is not None and not session.closed:
            await session.close()
