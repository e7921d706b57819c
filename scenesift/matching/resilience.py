"""Retry helpers for transient embedding-service failures and payload guards."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from aiohttp import ClientConnectionError, ClientResponseError, ServerTimeoutError

RETRYABLE_HTTP_STATUSES = {429, 500, 502, 503, 504}
THROTTLE_SHAPE_HINT = "possible rate-limit/throttle response"

_T = TypeVar("_T")


def expect_dict(value: object, context: str) -> dict:
    if isinstance(value, dict):
        return value
    value_type = type(value).__name__
    raise ValueError(f"{context} has unexpected type '{value_type}' ({THROTTLE_SHAPE_HINT})")


def expect_list(value: object, context: str) -> list:
    if isinstance(value, list):
        return value
    value_type = type(value).__name__
    raise ValueError(f"{context} has unexpected type '{value_type}' ({THROTTLE_SHAPE_HINT})")


def embedding_payload(payload: object, context: str) -> list:
    """Pull ``data[0].embedding`` out of an OpenAI-style embeddings response."""
    root = expect_dict(payload, f"{context} payload")
    error = root.get("error")
    if error and "data" not in root:
        raise ValueError(f"{context} returned an error without data: {error} ({THROTTLE_SHAPE_HINT})")
    data = expect_list(root.get("data"), f"{context}.data")
    if not data:
        raise ValueError(f"{context}.data is empty")
    first = expect_dict(data[0], f"{context}.data[0]")
    return expect_list(first.get("embedding"), f"{context}.data[0].embedding")


def is_retryable_exception(exc: Exception) -> bool:
    return (
        isinstance(exc, (asyncio.TimeoutError, ClientConnectionError, ServerTimeoutError))
        or (isinstance(exc, ClientResponseError) and exc.status in RETRYABLE_HTTP_STATUSES)
        or (isinstance(exc, ValueError) and THROTTLE_SHAPE_HINT in str(exc).lower())
    )


async def run_with_retries(
    operation: Callable[[], Awaitable[_T]],
    *,
    max_attempts: int,
    on_retry: Callable[[int, int, int, Exception], None] | None = None,
) -> _T:
    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except Exception as exc:
            if attempt >= max_attempts or not is_retryable_exception(exc):
                raise
            delay = 2 ** attempt
            if on_retry is not None:
                on_retry(attempt, max_attempts, delay, exc)
            await asyncio.sleep(delay)
    raise RuntimeError("Unreachable retry exit")
