"""Weighted multi-field fuzzy search over the corpus.

Each searchable field is scored against the query with rapidfuzz, giving an
(N, F) score matrix. A document's relevance is its best weighted field score,
plus a small bonus proportional to how well the other fields match too.

An exact number or id query ("1559", "EIP-1559") lifts the matching documents
above every fuzzy hit, so digits that happen to appear in a title or body
never outrank the document that actually carries that number.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import numpy as np
from rapidfuzz import fuzz, process, utils

from eipbrowser.documents import ID_RE, Document


@dataclass(frozen=True)
class SearchField:
    name: str
    getter: Callable[[Document], str]
    scorer: Callable
    weight: float


# partial_ratio for free text (a query can hit anywhere in it), plain ratio for
# short values where a substring hit would be noise.
SEARCH_FIELDS: dict[str, SearchField] = {
    f.name: f
    for f in (
        SearchField("number", lambda d: str(d.number), fuzz.ratio, 3.0),
        SearchField("title", lambda d: d.title, fuzz.partial_ratio, 2.0),
        SearchField("author", lambda d: d.author, fuzz.partial_ratio, 1.0),
        SearchField("body", lambda d: d.body, fuzz.partial_ratio, 0.5),
        SearchField("type", lambda d: d.doc_type, fuzz.ratio, 0.75),
        SearchField("category", lambda d: d.category, fuzz.ratio, 0.75),
        SearchField("status", lambda d: d.status, fuzz.ratio, 0.75),
    )
}

DEFAULT_FIELDS: tuple[str, ...] = tuple(SEARCH_FIELDS)
BASIC_FIELDS: tuple[str, ...] = ("number", "title", "author", "body")

DEFAULT_SCORE_CUTOFF = 70.0
MULTI_FIELD_BONUS = 0.1
# Larger than any attainable fuzzy relevance
EXACT_MATCH_BONUS = 10.0


class SearchIndex:
    """Fuzzy index over a fixed corpus. Rebuild it whenever the corpus changes."""

    def __init__(
        self,
        corpus: list[Document],
        fields: tuple[str, ...] | list[str] | set[str] = DEFAULT_FIELDS,
        weights: dict[str, float] | None = None,
        score_cutoff: float = DEFAULT_SCORE_CUTOFF,
    ):
        unknown = set(fields) - SEARCH_FIELDS.keys()
        if unknown:
            raise ValueError(f"Unknown search fields: {sorted(unknown)}")
        if not fields:
            raise ValueError("At least one search field is required")

        self.corpus = list(corpus)
        # Canonical field order regardless of how they were passed in
        self.fields = tuple(name for name in SEARCH_FIELDS if name in set(fields))
        self.score_cutoff = score_cutoff

        overrides = weights or {}
        self._weights = np.array(
            [overrides.get(name, SEARCH_FIELDS[name].weight) for name in self.fields],
            dtype=float,
        )
        self._texts = {
            name: [SEARCH_FIELDS[name].getter(doc) for doc in self.corpus]
            for name in self.fields
        }
        # Empty values never count as a hit, whatever the scorer says
        self._present = np.zeros((len(self.corpus), len(self.fields)), dtype=bool)
        for j, name in enumerate(self.fields):
            self._present[:, j] = [bool(utils.default_process(text)) for text in self._texts[name]]
        self._numbers = np.array([doc.number for doc in self.corpus], dtype=int)
        self._kinds = np.array([doc.kind.value for doc in self.corpus], dtype=object)

    def __len__(self) -> int:
        return len(self.corpus)

    def search(self, query: str) -> list[Document]:
        """Return matching documents, most relevant first.

        A blank query returns the whole corpus in its existing order.
        """
        query = (query or "").strip()
        if not query:
            return list(self.corpus)
        if not self.corpus:
            return []

        relevance = self.score(query)
        # Stable: equal relevance keeps corpus order
        order = np.argsort(-relevance, kind="stable")
        return [self.corpus[i] for i in order if relevance[i] > 0]

    def score(self, query: str) -> np.ndarray:
        """Relevance of every corpus document for query; 0 means no match."""
        if not utils.default_process(query):
            # Punctuation only: nothing left to match against
            return np.zeros(len(self.corpus))

        matrix = np.zeros((len(self.corpus), len(self.fields)), dtype=float)
        for j, name in enumerate(self.fields):
            matrix[:, j] = process.cdist(
                [query],
                self._texts[name],
                scorer=SEARCH_FIELDS[name].scorer,
                processor=utils.default_process,
                score_cutoff=self.score_cutoff,
            )[0]

        weighted = np.where(self._present, matrix, 0.0) / 100.0 * self._weights
        relevance = weighted.max(axis=1) + MULTI_FIELD_BONUS * (
            weighted.sum(axis=1) / self._weights.sum()
        )
        if "number" in self.fields:
            relevance += self._exact_match_bonus(query)
        return relevance

    def _exact_match_bonus(self, query: str) -> np.ndarray:
        match = ID_RE.match(query.strip())
        if not match:
            return np.zeros(len(self.corpus))

        kind, number = match.group(1), int(match.group(2))
        bonus = np.where(self._numbers == number, EXACT_MATCH_BONUS, 0.0)
        if kind:
            # "erc-20" prefers ERC-20 over an EIP sharing the number
            bonus += np.where(
                (self._numbers == number) & (self._kinds == kind.upper()), 1.0, 0.0
            )
        return bonus
