"""Load every EIP and ERC from local checkouts into an ordered corpus."""

from __future__ import annotations

import logging
from pathlib import Path

from eipbrowser.documents import Document, parse_document
from eipbrowser.errors import MalformedDocumentError, MissingConfigurationError

logger = logging.getLogger(__name__)

# Relative to the base path: one pattern per repository family
DEFAULT_PATTERNS: tuple[str, ...] = (
    "EIPs/EIPS/eip-*.md",
    "ERCs/ERCS/erc-*.md",
)


def resolve_base_path(base_path: str | Path | None) -> Path:
    """Return base_path as a directory Path or raise MissingConfigurationError."""
    if not base_path:
        raise MissingConfigurationError("No repositories directory configured")
    base = Path(base_path).expanduser()
    if not base.is_dir():
        raise MissingConfigurationError(f"Repositories directory not found: {base}")
    return base


def discover_files(base_path: str | Path, patterns: tuple[str, ...] = DEFAULT_PATTERNS) -> list[Path]:
    """List candidate files under base_path, pattern by pattern, each sorted."""
    base = Path(base_path)
    files: list[Path] = []
    seen: set[Path] = set()
    for pattern in patterns:
        for path in sorted(base.glob(pattern)):
            if path in seen or not path.is_file():
                continue
            seen.add(path)
            files.append(path)
    return files


def load_corpus(
    base_path: str | Path | None,
    patterns: tuple[str, ...] = DEFAULT_PATTERNS,
) -> list[Document]:
    """Scan base_path and return the corpus sorted ascending by number.

    Moved documents are dropped. Files whose front-matter cannot be parsed are
    logged and skipped. A missing base path yields an empty corpus.
    Every call rescans the disk.
    """
    try:
        base = resolve_base_path(base_path)
    except MissingConfigurationError as exc:
        logger.warning("%s; corpus is empty", exc)
        return []

    documents: list[Document] = []
    seen: dict[tuple[str, int], Path] = {}
    skipped = moved = 0

    for path in discover_files(base, patterns):
        try:
            doc = parse_document(path, base)
        except MalformedDocumentError as exc:
            logger.warning("Skipping %s", exc)
            skipped += 1
            continue

        if doc.is_moved:
            moved += 1
            continue

        key = (doc.kind.value, doc.number)
        if key in seen:
            logger.warning("Duplicate %s in %s (already loaded from %s)", doc.id, path, seen[key])
            continue
        seen[key] = path
        documents.append(doc)

    # Stable: on equal numbers the EIP pattern's files stay ahead of ERCs
    documents.sort(key=lambda d: d.number)

    logger.info(
        "Loaded %d documents from %s (%d moved, %d skipped)",
        len(documents),
        base,
        moved,
        skipped,
    )
    return documents
