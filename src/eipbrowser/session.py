"""A browsing session: corpus, index, favorites, and the current query."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from eipbrowser.corpus import load_corpus
from eipbrowser.documents import ID_RE, Document
from eipbrowser.search import DEFAULT_FIELDS, SearchIndex
from eipbrowser.storage import Favorites
from eipbrowser.view import Section, assemble_view

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BrowserOptions:
    """Switches for the list presentation."""

    show_favorites: bool = True
    search_fields: tuple[str, ...] = DEFAULT_FIELDS
    enable_sync: bool = True


class Session:
    """Idle while the query is blank, searching otherwise."""

    def __init__(
        self,
        corpus: list[Document],
        favorites: Favorites,
        options: BrowserOptions = BrowserOptions(),
    ):
        self.options = options
        self.favorites = favorites
        self.query = ""
        self._set_corpus(corpus)

    def _set_corpus(self, corpus: list[Document]) -> None:
        self.corpus = list(corpus)
        self.index = SearchIndex(self.corpus, fields=self.options.search_fields)

    def reload(self, base_path: str | Path | None) -> None:
        """Rescan the disk and rebuild the index."""
        self._set_corpus(load_corpus(base_path))

    @property
    def is_searching(self) -> bool:
        return bool(self.query.strip())

    def set_query(self, text: str) -> list[Section]:
        self.query = text or ""
        return self.view()

    def results(self) -> list[Document]:
        return self.index.search(self.query)

    def view(self) -> list[Section]:
        return assemble_view(
            self.results(),
            self.favorites.keys,
            self.is_searching,
            show_favorites=self.options.show_favorites,
        )

    def find(self, doc_id: str) -> Document | None:
        """Look up "EIP-1559", "erc20" or a bare "1559" (EIPs win ties)."""
        match = ID_RE.match(doc_id.strip())
        if not match:
            return None
        kind, number = match.group(1), int(match.group(2))
        for doc in self.corpus:
            if doc.number == number and (kind is None or doc.kind.value == kind.upper()):
                return doc
        return None

    def toggle_favorite(self, doc_id: str) -> tuple[str, bool]:
        """Toggle by id; returns (key, now_favorite).

        Ids absent from the corpus are still toggled: "EIP-9999" as that id, a
        bare "9999" as the number (matching either kind once it appears).
        Raises ValueError for anything that is not an id.
        """
        match = ID_RE.match(doc_id.strip())
        if not match:
            raise ValueError(f"Not a document id: {doc_id!r}")

        doc = self.find(doc_id)
        if doc is not None:
            return doc.id, self.favorites.toggle(doc)

        if match.group(1):
            key = f"{match.group(1).upper()}-{int(match.group(2))}"
        else:
            key = int(match.group(2))
        logger.info("%s is not in the corpus; toggling it anyway", key)
        return str(key), self.favorites.toggle_key(key)
