"""Parse EIP/ERC markdown files: front-matter, typed fields, and derived links."""

from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import yaml

from eipbrowser.errors import MalformedDocumentError

# Matches YAML frontmatter delimited by ---
_FRONTMATTER_RE = re.compile(r"\A---\r?\n(.*?)\r?\n---\r?\n?", re.DOTALL)

# Digits in filenames like eip-1559.md / erc-20.md
_NUMBER_RE = re.compile(r"(\d+)")

# Document ids as typed by a user: "EIP-1559", "erc20", "ERC #20", "1559"
ID_RE = re.compile(r"^(?:(eip|erc)\s*[-#]?\s*)?(\d+)$", re.IGNORECASE)

PLACEHOLDER_TITLE = "??"
UNKNOWN_NUMBER = -1
GITHUB_ORG_URL = "https://github.com/ethereum"


class Kind(str, Enum):
    """Which repository family a document comes from."""

    EIP = "EIP"
    ERC = "ERC"


class Status(str, Enum):
    IDEA = "Idea"
    DRAFT = "Draft"
    REVIEW = "Review"
    LAST_CALL = "Last Call"
    FINAL = "Final"
    STAGNANT = "Stagnant"
    WITHDRAWN = "Withdrawn"
    LIVING = "Living"
    MOVED = "Moved"


class DocType(str, Enum):
    STANDARDS_TRACK = "Standards Track"
    META = "Meta"
    INFORMATIONAL = "Informational"


class Category(str, Enum):
    CORE = "Core"
    INTERFACE = "Interface"
    NETWORKING = "Networking"
    ERC = "ERC"


TYPE_COLORS: dict[str, str] = {
    DocType.STANDARDS_TRACK.value: "#007bff",
    DocType.META.value: "#ffc107",
    DocType.INFORMATIONAL.value: "#28a745",
}

CATEGORY_COLORS: dict[str, str] = {
    Category.CORE.value: "#8B0A1A",
    Category.INTERFACE.value: "#4CAF50",
    Category.NETWORKING.value: "#2196F3",
    Category.ERC.value: "#FFC107",
}

# Moved has no color: it never reaches the corpus.
STATUS_COLORS: dict[str, str] = {
    Status.IDEA.value: "#CCCCCC",
    Status.DRAFT.value: "#87CEEB",
    Status.REVIEW.value: "#F7DC6F",
    Status.LAST_CALL.value: "#FFC107",
    Status.FINAL.value: "#2ECC40",
    Status.STAGNANT.value: "#AAAAAA",
    Status.WITHDRAWN.value: "#FF69B4",
    Status.LIVING.value: "#8BC34A",
}


def type_color(value: str | None) -> str | None:
    return TYPE_COLORS.get(value) if isinstance(value, str) else None


def category_color(value: str | None) -> str | None:
    return CATEGORY_COLORS.get(value) if isinstance(value, str) else None


def status_color(value: str | None) -> str | None:
    return STATUS_COLORS.get(value) if isinstance(value, str) else None


def short_type(doc_type: str) -> str:
    """Display form of a document type: "Standards Track" -> "Standards"."""
    return doc_type.removesuffix(" Track") if doc_type else ""


@dataclass(frozen=True)
class Document:
    """A single EIP or ERC."""

    path: Path
    kind: Kind
    number: int
    title: str
    author: str = ""
    status: str = ""
    doc_type: str = ""
    category: str = ""
    created: dt.date | None = None
    discussion_url: str = ""
    body: str = ""  # markdown with frontmatter stripped
    source_url: str = ""

    @property
    def id(self) -> str:
        """Display identifier and list key, e.g. ``EIP-1559``."""
        return f"{self.kind.value}-{self.number}"

    @property
    def is_moved(self) -> bool:
        return self.status == Status.MOVED.value


def split_front_matter(text: str, path: Path | str = "<string>") -> tuple[dict, str]:
    """Split raw file text into (metadata, body).

    Text without a frontmatter block yields an empty mapping and the text
    unchanged. Raises MalformedDocumentError when the block is not valid YAML
    or does not decode to a mapping.
    """
    fm_match = _FRONTMATTER_RE.match(text)
    if not fm_match:
        return {}, text

    try:
        metadata = yaml.safe_load(fm_match.group(1))
    except yaml.YAMLError as exc:
        raise MalformedDocumentError(path, f"invalid front-matter: {exc}") from exc

    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise MalformedDocumentError(
            path, f"front-matter is a {type(metadata).__name__}, expected a mapping"
        )
    return metadata, text[fm_match.end() :]


def detect_kind(path: Path | str) -> Kind:
    """EIP when the file is named ``eip-*``, ERC otherwise.

    Only the file name is inspected; directories above it (including the base
    path) may be named anything.
    """
    name = str(path).replace("\\", "/").rsplit("/", 1)[-1]
    return Kind.EIP if name.lower().startswith("eip-") else Kind.ERC


def path_to_github(path: Path | str, base: Path | str) -> str:
    """Map a local checkout path onto its GitHub blob URL.

    ``{base}/EIPs/EIPS/eip-1.md`` -> ``.../ethereum/EIPs/blob/master/EIPS/eip-1.md``.
    Unexpected layouts produce a meaningless URL rather than an error.
    """
    base_str = str(base).replace("\\", "/").rstrip("/")
    path_str = str(path).replace("\\", "/")
    if base_str and path_str.startswith(base_str):
        path_str = path_str[len(base_str) :]

    parts = path_str.split("/")
    repo = parts[1] if len(parts) > 1 else ""
    tail = "/".join(parts[2:])
    return f"{GITHUB_ORG_URL}/{repo}/blob/master/{tail}"


def _as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value).strip()


def _as_number(value, path: Path) -> int:
    if isinstance(value, bool):
        value = None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    # Fall back to the number in the filename
    match = _NUMBER_RE.search(path.stem)
    return int(match.group(1)) if match else UNKNOWN_NUMBER


def _as_date(value) -> dt.date | None:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        try:
            return dt.date.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def normalize_document(
    path: Path | str,
    metadata: dict,
    body: str,
    base: Path | str = "",
) -> Document:
    """Turn a (metadata, body) pair into a Document.

    Missing or mistyped fields get placeholders instead of raising.
    """
    path = Path(path)
    title = _as_text(metadata.get("title")) or PLACEHOLDER_TITLE

    return Document(
        path=path,
        kind=detect_kind(path),
        number=_as_number(metadata.get("eip"), path),
        title=title,
        author=_as_text(metadata.get("author")),
        status=_as_text(metadata.get("status")),
        doc_type=_as_text(metadata.get("type")),
        category=_as_text(metadata.get("category")),
        created=_as_date(metadata.get("created")),
        discussion_url=_as_text(metadata.get("discussions-to")),
        body=body.strip(),
        source_url=path_to_github(path, base),
    )


def parse_document(path: Path | str, base: Path | str = "") -> Document:
    """Read and parse a single markdown file into a Document."""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8-sig")  # tolerate a leading BOM
    except (OSError, UnicodeDecodeError) as exc:
        raise MalformedDocumentError(path, f"unreadable: {exc}") from exc

    metadata, body = split_front_matter(raw, path)
    return normalize_document(path, metadata, body, base)
