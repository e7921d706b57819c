from __future__ import annotations

import asyncio
from types import SimpleNamespace

import aiohttp
import pytest

from scenesift.matching import resilience


def _response_error(status: int) -> aiohttp.ClientResponseError:
    return aiohttp.ClientResponseError(
        request_info=SimpleNamespace(real_url="http://embed.local/embeddings"),
        history=(),
        status=status,
        message="upstream",
    )


def test_embedding_payload_extracts_first_vector():
    payload = {"data": [{"embedding": [0.1, 0.2]}, {"embedding": [0.3, 0.4]}]}

    assert resilience.embedding_payload(payload, "embeddings") == [0.1, 0.2]


def test_embedding_payload_error_without_data_looks_like_throttle():
    with pytest.raises(ValueError) as excinfo:
        resilience.embedding_payload({"error": "rate limited"}, "embeddings")

    assert resilience.is_retryable_exception(excinfo.value)


def test_embedding_payload_empty_data_is_not_retryable():
    with pytest.raises(ValueError) as excinfo:
        resilience.embedding_payload({"data": []}, "embeddings")

    assert not resilience.is_retryable_exception(excinfo.value)


def test_embedding_payload_wrong_shape_is_retryable():
    with pytest.raises(ValueError) as excinfo:
        resilience.embedding_payload(["not", "a", "dict"], "embeddings")

    assert resilience.is_retryable_exception(excinfo.value)


def test_retryable_statuses():
    assert resilience.is_retryable_exception(_response_error(429))
    assert resilience.is_retryable_exception(_response_error(503))
    assert not resilience.is_retryable_exception(_response_error(401))
    assert resilience.is_retryable_exception(asyncio.TimeoutError())
    assert not resilience.is_retryable_exception(KeyError("data"))


@pytest.mark.asyncio
async def test_run_with_retries_backs_off_then_succeeds(monkeypatch: pytest.MonkeyPatch) -> None:
    waits: list[float] = []
    retries: list[tuple[int, int, int]] = []
    attempts = {"count": 0}

    async def _fake_sleep(delay: float) -> None:
        waits.append(delay)

    monkeypatch.setattr(resilience.asyncio, "sleep", _fake_sleep)

    async def _operation() -> str:
        attempts["count"] += 1
        if attempts["count"] < 3:
            raise _response_error(503)
        return "ok"

    result = await resilience.run_with_retries(
        _operation,
        max_attempts=3,
        on_retry=lambda attempt, max_attempts, delay, exc: retries.append((attempt, max_attempts, delay)),
    )

    assert result == "ok"
    assert waits == [2, 4]
    assert retries == [(1, 3, 2), (2, 3, 4)]


@pytest.mark.asyncio
async def test_run_with_retries_raises_non_retryable_immediately(monkeypatch: pytest.MonkeyPatch) -> None:
    waits: list[float] = []

    async def _fake_sleep(delay: float) -> None:
        waits.append(delay)

    monkeypatch.setattr(resilience.asyncio, "sleep", _fake_sleep)
    attempts = {"count": 0}

    async def _operation() -> str:
        attempts["count"] += 1
        raise _response_error(400)

    with pytest.raises(aiohttp.ClientResponseError):
        await resilience.run_with_retries(_operation, max_attempts=3)

    assert attempts["count"] == 1
    assert waits == []


@pytest.mark.asyncio
async def test_run_with_retries_gives_up_after_max_attempts(monkeypatch: pytest.MonkeyPatch) -> None:
    async def _fake_sleep(_delay: float) -> None:
        return None

    monkeypatch.setattr(resilience.asyncio, "sleep", _fake_sleep)
    attempts = {"count": 0}

    async def _operation() -> str:
        attempts["count"] += 1
        raise asyncio.TimeoutError()

    with pytest.raises(asyncio.TimeoutError):
        await resilience.run_with_retries(_operation, max_attempts=2)

    assert attempts["count"] == 2
