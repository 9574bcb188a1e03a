"""Result records returned by the search and recommendation tools."""

from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(frozen=True, slots=True)
class SearchResult:
    """One search hit. ``rank_order`` is 1-based, in response order."""

    rank_order: int
    url: str
    title: str
    context: str | None = None

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class RecommendationResult:
    url: str
    title: str
    context: str | None = None

    def to_dict(self) -> dict[str, object]:
        return asdict(self)
