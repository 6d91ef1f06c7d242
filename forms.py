"""Create/edit form validation and payload normalization."""

from __future__ import annotations

import re
from dataclasses import dataclass, fields
from typing import Any, Sequence
from urllib.parse import unquote, urlsplit

from errors import ValidationFailure
from models import ProjectDetail, PublicationDetail

REQUIRED_FIELDS_MESSAGE = "Please fill in all required fields."
INVALID_URL_MESSAGE = "Please enter a valid URL (e.g., https://example.com)"
INVALID_PARTNER_URL_MESSAGE = "Please enter a valid partner URL (e.g., https://example.com)"

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")
_PARAGRAPH_BREAK_RE = re.compile(r"\n{2,}")
_MALFORMED_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")

# Schemes that must carry a host to be a usable URL.
_HOST_SCHEMES = frozenset({"http", "https", "ftp", "ws", "wss"})


def normalize_url(raw: str, message: str = INVALID_URL_MESSAGE) -> str:
    """Prefix ``https://`` when no scheme is present, then validate."""
    value = raw.strip()
    if not _SCHEME_RE.match(value):
        value = f"https://{value}"
    if not _is_valid_url(value):
        raise ValidationFailure(message)
    return value


def _is_valid_url(value: str) -> bool:
    try:
        parts = urlsplit(value)
        parts.port  # raises on a malformed port
    except ValueError:
        return False
    if not parts.scheme:
        return False
    if parts.scheme.lower() in _HOST_SCHEMES:
        if not parts.hostname or any(ch.isspace() for ch in parts.netloc):
            return False
    return True


def split_paragraphs(text: str) -> list[str]:
    """Split free text on blank lines into trimmed, non-empty paragraphs.

    Falls back to a single paragraph holding the trimmed text when nothing
    survives the split.
    """
    normalized = text.replace("\r\n", "\n")
    paragraphs = [p.strip() for p in _PARAGRAPH_BREAK_RE.split(normalized)]
    paragraphs = [p for p in paragraphs if p]
    return paragraphs or [normalized.strip()]


def join_paragraphs(content: str | Sequence[str]) -> str:
    """Inverse of ``split_paragraphs`` for prefilling an edit form."""
    if isinstance(content, str):
        return content
    parts = [p.strip() for p in content if isinstance(p, str)]
    return "\n\n".join(p for p in parts if p)


def split_authors(text: str) -> list[str]:
    return [a.strip() for a in text.split(",") if a.strip()]


def filename_from_pathname(pathname: str) -> str:
    """Last path segment, URL-decoded; the raw segment when decoding fails."""
    trimmed = pathname.rstrip("/")
    raw = trimmed.rsplit("/", 1)[-1]
    if _MALFORMED_ESCAPE_RE.search(raw):
        return raw
    try:
        return unquote(raw, errors="strict")
    except UnicodeDecodeError:
        return raw


def _require_filled(form: Any) -> None:
    if any(not getattr(form, f.name) for f in fields(form)):
        raise ValidationFailure(REQUIRED_FIELDS_MESSAGE)


@dataclass
class PublicationForm:
    title: str = ""
    content: str = ""
    date: str = ""
    publication_url: str = ""
    authors: str = ""
    venue: str = ""

    @classmethod
    def from_detail(cls, detail: PublicationDetail) -> PublicationForm:
        return cls(
            title=detail.title,
            content=join_paragraphs(detail.content),
            date=detail.date,
            publication_url=detail.publication_url,
            authors=", ".join(a for a in detail.authors if a),
            venue=detail.venue,
        )

    def to_payload(self) -> dict[str, Any]:
        """Validate locally and build the JSON body for create and update."""
        _require_filled(self)
        return {
            "title": self.title,
            "content": split_paragraphs(self.content),
            "date": self.date,
            "publicationUrl": normalize_url(self.publication_url),
            "authors": split_authors(self.authors),
            "venue": self.venue,
        }


@dataclass
class ProjectForm:
    title: str = ""
    content: str = ""
    date: str = ""
    partner_name: str = ""
    partner_url: str = ""

    @classmethod
    def from_detail(cls, detail: ProjectDetail) -> ProjectForm:
        return cls(
            title=detail.title,
            content=join_paragraphs(detail.content),
            date=detail.date,
            partner_name=detail.partner.name,
            partner_url=detail.partner.url,
        )

    def to_payload(self) -> dict[str, Any]:
        _require_filled(self)
        return {
            "title": self.title,
            "content": split_paragraphs(self.content),
            "date": self.date,
            "partner": {
                "name": self.partner_name,
                "url": normalize_url(self.partner_url, INVALID_PARTNER_URL_MESSAGE),
            },
        }
