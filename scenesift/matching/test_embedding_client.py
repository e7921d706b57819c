from __future__ import annotations

from types import SimpleNamespace

import pytest

from scenesift.config import EmbeddingConfig
from scenesift.matching import embedding_client, resilience


class _FakeResponseCtx:
    def __init__(self, *, status: int = 200, payload: object | None = None) -> None:
        self.status = status
        self._payload = payload if payload is not None else {"data": [{"embedding": [1, 2, 3]}]}
        self.headers: dict[str, str] = {}
        self.request_info = SimpleNamespace(real_url="http://embed.local/v1/embeddings")
        self.history = ()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def json(self) -> object:
        return self._payload

    async def text(self) -> str:
        return str(self._payload)


class _FakeSession:
    instances: list["_FakeSession"] = []

    def __init__(self, *args, **kwargs) -> None:
        self.kwargs = kwargs
        self.closed = False
        self.posts: list[tuple[str, dict]] = []
        self.responses: list[_FakeResponseCtx] = [_FakeResponseCtx()]
        _FakeSession.instances.append(self)

    def post(self, url: str, json: dict):
        self.posts.append((url, json))
        idx = min(len(self.posts) - 1, len(self.responses) - 1)
        return self.responses[idx]

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_session(monkeypatch: pytest.MonkeyPatch):
    _FakeSession.instances = []
    monkeypatch.setattr(embedding_client.aiohttp, "ClientSession", _FakeSession)
    return _FakeSession


def _config(**overrides) -> EmbeddingConfig:
    values = {"url": "http://embed.local/v1/", "api_key": "token", "max_attempts": 3}
    values.update(overrides)
    return EmbeddingConfig(**values)


def test_backend_requires_url():
    with pytest.raises(ValueError, match="URL"):
        embedding_client.HttpEmbeddingBackend(EmbeddingConfig())


@pytest.mark.asyncio
async def test_embed_posts_model_and_input(fake_session) -> None:
    backend = embedding_client.HttpEmbeddingBackend(_config())

    vector = await backend.embed("scene title")

    assert vector == [1.0, 2.0, 3.0]
    session = fake_session.instances[0]
    assert session.posts == [
        ("http://embed.local/v1/embeddings", {"model": "all-MiniLM-L6-v2", "input": "scene title"})
    ]
    assert session.kwargs["headers"]["Authorization"] == "Bearer token"
    assert session.kwargs["headers"]["User-Agent"].startswith("SceneSift/")


@pytest.mark.asyncio
async def test_session_is_reused_across_requests(fake_session) -> None:
    backend = embedding_client.HttpEmbeddingBackend(_config(api_key=""))

    await backend.embed("a")
    await backend.embed("b")

    assert len(fake_session.instances) == 1
    assert "Authorization" not in fake_session.instances[0].kwargs["headers"]


@pytest.mark.asyncio
async def test_load_reads_dimensions_from_sample_embedding(fake_session) -> None:
    backend = embedding_client.HttpEmbeddingBackend(_config())

    await backend.load()

    assert backend.dimensions == 3


@pytest.mark.asyncio
async def test_server_error_is_retried(fake_session, monkeypatch: pytest.MonkeyPatch) -> None:
    waits: list[float] = []

    async def _fake_sleep(delay: float) -> None:
        waits.append(delay)

    monkeypatch.setattr(resilience.asyncio, "sleep", _fake_sleep)
    backend = embedding_client.HttpEmbeddingBackend(_config())
    session = await backend._ensure_session()
    session.responses = [
        _FakeResponseCtx(status=503, payload={"error": "overloaded"}),
        _FakeResponseCtx(payload={"data": [{"embedding": [0.5, 0.5]}]}),
    ]

    vector = await backend.embed("scene title")

    assert vector == [0.5, 0.5]
    assert waits == [2]
    assert len(session.posts) == 2


@pytest.mark.asyncio
async def test_close_closes_session(fake_session) -> None:
    backend = embedding_client.HttpEmbeddingBackend(_config())
    await backend.embed("a")

    await backend.close()

    assert fake_session.instances[0].closed
