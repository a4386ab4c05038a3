"""Turn search results and favorites into the sectioned list the CLI renders."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Hashable, Iterable

from eipbrowser.documents import (
    PLACEHOLDER_TITLE,
    Document,
    category_color,
    short_type,
    status_color,
    type_color,
)

FAVORITES_SECTION = "Favorites"
OTHER_SECTION = "Other"
FAVORITE_ICON = "★"


@dataclass(frozen=True)
class Tag:
    text: str
    color: str | None = None  # None when the value has no known color


@dataclass(frozen=True)
class Row:
    """One list entry."""

    id: str
    title: str
    subtitle: str
    tags: tuple[Tag, ...]
    created: dt.date | None
    favorite: bool
    document: Document = field(repr=False, compare=False)

    @property
    def icon(self) -> str:
        return FAVORITE_ICON if self.favorite else ""


@dataclass(frozen=True)
class Section:
    title: str | None  # None for the single untitled section
    rows: tuple[Row, ...]

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def ids(self) -> list[str]:
        return [row.id for row in self.rows]


def is_favorite(document: Document, favorites: Iterable[Hashable]) -> bool:
    """A document is a favorite when its id or its bare number is in the set.

    Bare numbers are what older state files hold; they match both an EIP and
    an ERC sharing the number.
    """
    return document.id in favorites or document.number in favorites


def toggle_favorite(favorites: Iterable[Hashable], key: Hashable) -> frozenset:
    """Return favorites with key added if absent, removed if present."""
    current = frozenset(favorites)
    return current - {key} if key in current else current | {key}


def build_tags(document: Document) -> tuple[Tag, ...]:
    """Type / category / status tags, skipping empty values."""
    tags = []
    if document.doc_type:
        tags.append(Tag(short_type(document.doc_type), type_color(document.doc_type)))
    if document.category:
        tags.append(Tag(document.category, category_color(document.category)))
    if document.status:
        tags.append(Tag(document.status, status_color(document.status)))
    return tuple(tags)


def build_row(document: Document, favorites: Iterable[Hashable] = frozenset()) -> Row:
    return Row(
        id=document.id,
        title=document.title or PLACEHOLDER_TITLE,
        subtitle=document.id,
        tags=build_tags(document),
        created=document.created,
        favorite=is_favorite(document, favorites),
        document=document,
    )


def assemble_view(
    results: list[Document],
    favorites: Iterable[Hashable],
    is_searching: bool,
    show_favorites: bool = True,
) -> list[Section]:
    """Build the sections to display.

    While searching: one untitled section in relevance order. Idle: a
    "Favorites" and an "Other" section, each ascending by number, or a single
    untitled ascending section when the favorites section is disabled.
    """
    favorites = frozenset(favorites)
    rows = [build_row(doc, favorites) for doc in results]

    if is_searching:
        return [Section(None, tuple(rows))]

    rows.sort(key=lambda r: r.document.number)
    if not show_favorites:
        return [Section(None, tuple(rows))]

    return [
        Section(FAVORITES_SECTION, tuple(r for r in rows if r.favorite)),
        Section(OTHER_SECTION, tuple(r for r in rows if not r.favorite)),
    ]
