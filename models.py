"""Shared typed models for the admin sync engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True, slots=True)
class IndexEntry:
    """One record's detail location and display path, as listed by the index."""

    url: str
    pathname: str


@dataclass(frozen=True, slots=True)
class Partner:
    name: str = ""
    url: str = ""


@dataclass(frozen=True, slots=True)
class PublicationDetail:
    """Normalized publication record."""

    title: str
    content: str | tuple[str, ...] = ""
    date: str = ""
    publication_url: str = ""
    authors: tuple[str, ...] = ()
    venue: str = ""


@dataclass(frozen=True, slots=True)
class ProjectDetail:
    """Normalized project record."""

    title: str
    content: str = ""
    date: str = ""
    partner: Partner = field(default_factory=Partner)


Detail = Union[PublicationDetail, ProjectDetail]


@dataclass(frozen=True, slots=True)
class EnrichedItem:
    """Index entry plus the outcome of its detail fetch.

    ``detail`` set means the fetch succeeded. ``error`` set means it failed.
    Neither set means the fetch was cancelled before it settled; callers must
    render that as still loading, not as a failure.
    """

    url: str
    pathname: str
    detail: Detail | None = None
    error: str | None = None

    @classmethod
    def from_entry(
        cls, entry: IndexEntry, detail: Detail | None = None, error: str | None = None
    ) -> EnrichedItem:
        return cls(url=entry.url, pathname=entry.pathname, detail=detail, error=error)

    @property
    def entry(self) -> IndexEntry:
        return IndexEntry(url=self.url, pathname=self.pathname)

    @property
    def is_pending(self) -> bool:
        return self.detail is None and self.error is None


@dataclass(frozen=True, slots=True)
class Unloaded:
    pass


@dataclass(frozen=True, slots=True)
class Loading:
    pass


@dataclass(frozen=True, slots=True)
class Loaded:
    items: tuple[EnrichedItem, ...] = ()


@dataclass(frozen=True, slots=True)
class Failed:
    message: str


CollectionState = Union[Unloaded, Loading, Loaded, Failed]


@dataclass(frozen=True, slots=True)
class Projection:
    """The filtered, sorted, paginated window shown to the user."""

    visible: tuple[EnrichedItem, ...]
    current_page: int
    total_pages: int
    total_items: int
