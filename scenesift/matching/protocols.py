"""Protocol definitions for the collaborators the matching core depends on."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, Sequence

if TYPE_CHECKING:
    from scenesift.quality.profiles import QualityProfile


class EmbeddingBackend(Protocol):
    """Maps text to a fixed-length vector. Model choice is configuration."""

    async def load(self) -> None:
        ...

    async def embed(self, text: str) -> Sequence[float] | Sequence[Sequence[float]]:
        ...

    async def close(self) -> None:
        ...


class QualityProfileProvider(Protocol):
    """Read-only lookup of persisted quality profiles."""

    async def find_quality_profile_by_id(self, profile_id: str) -> QualityProfile | None:
        ...


class ProgressCallback(Protocol):
    def __call__(self, event: str, payload: dict[str, Any]) -> None:
        ...
