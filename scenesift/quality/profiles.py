"""Quality profile models and their best-to-worst ordering."""

from __future__ import annotations

from typing import Any, Iterable, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

Resolution = Literal["2160p", "1080p", "720p", "480p", "any"]
Source = Literal["bluray", "webdl", "webrip", "hdtv", "dvd", "any"]

# Best to worst. Profile item order is the preference ranking used by the selector.
QUALITY_ORDER: tuple[str, ...] = ("2160p", "1080p", "720p", "480p", "any")
SOURCE_ORDER: tuple[str, ...] = ("bluray", "webdl", "webrip", "hdtv", "dvd", "any")

GIB = 1024 ** 3


class QualityItem(BaseModel):
    """One acceptable resolution/source combination.

    ``min_seeders=None`` means unconstrained (``"any"`` on the wire) and
    ``max_size=None`` means unlimited (``0`` on the wire). Sizes are in GB.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    quality: Resolution
    source: Source
    min_seeders: Optional[int] = Field(default=None, alias="minSeeders")
    max_size: Optional[float] = Field(default=None, alias="maxSize")

    @field_validator("min_seeders", mode="before")
    @classmethod
    def _parse_min_seeders(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and value.strip().lower() == "any"):
            return None
        if isinstance(value, (int, float)) and value < 0:
            raise ValueError("minSeeders must be >= 0 or 'any'")
        return value

    @field_validator("max_size", mode="before")
    @classmethod
    def _parse_max_size(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                value = float(value)
            except ValueError:
                return value
        if value is None or value == 0:
            return None
        if isinstance(value, (int, float)) and value < 0:
            raise ValueError("maxSize must be >= 0 (0 means unlimited)")
        return value

    @property
    def max_size_bytes(self) -> Optional[float]:
        return None if self.max_size is None else self.max_size * GIB

    def accepts(self, quality: str, source: str) -> bool:
        """True when this item covers the given resolution and source. ``"any"`` matches everything."""
        return self.quality in ("any", quality) and self.source in ("any", source)

    def to_wire(self) -> dict[str, Any]:
        return {
            "quality": self.quality,
            "source": self.source,
            "minSeeders": "any" if self.min_seeders is None else self.min_seeders,
            "maxSize": 0 if self.max_size is None else self.max_size,
        }


def _rank(order: tuple[str, ...], value: str) -> int:
    try:
        return order.index(value)
    except ValueError:
        return len(order)


def sort_profile_items(items: Iterable[QualityItem]) -> list[QualityItem]:
    """Sort best to worst: resolution first, then source. Stable for equal pairs."""
    return sorted(
        items,
        key=lambda item: (_rank(QUALITY_ORDER, item.quality), _rank(SOURCE_ORDER, item.source)),
    )


class QualityProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    items: list[QualityItem] = Field(default_factory=list)

    @classmethod
    def create(cls, id: str, name: str, items: Iterable[QualityItem | dict[str, Any]]) -> "QualityProfile":
        """Build a profile the way it is persisted: items sorted best to worst."""
        parsed = [item if isinstance(item, QualityItem) else QualityItem.model_validate(item) for item in items]
        return cls(id=id, name=name, items=sort_profile_items(parsed))

    @property
    def preferred_qualities(self) -> list[str]:
        return [item.quality for item in self.items if item.quality != "any"]

    @property
    def preferred_sources(self) -> list[str]:
        return [item.source for item in self.items if item.source != "any"]

    @property
    def overall_max_size(self) -> Optional[float]:
        """Largest positive cap in GB. Unlimited items do not lift the ceiling."""
        caps = [item.max_size for item in self.items if item.max_size is not None and item.max_size > 0]
        return max(caps) if caps else None

    @property
    def overall_min_seeders(self) -> int:
        """Strictest numeric seeder minimum; unconstrained items are ignored."""
        minimums = [item.min_seeders for item in self.items if item.min_seeders is not None]
        return max(minimums) if minimums else 0
