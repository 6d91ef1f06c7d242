"""Fetch and normalize a single record's full detail."""

from __future__ import annotations

import logging
from typing import Any, Callable

from cancellation import CancellationToken
from errors import SchemaInvalid
from models import Detail, Partner, ProjectDetail, PublicationDetail

LOGGER = logging.getLogger(__name__)

DetailParser = Callable[[Any], Detail | None]


async def fetch_detail(
    client: Any,
    url: str,
    parse: DetailParser,
    cancel: CancellationToken,
) -> Detail:
    """GET one detail document and validate it with ``parse``.

    Raises ``NetworkFailure`` for non-2xx and transport errors, ``SchemaInvalid``
    when the body is not a record with a non-empty title, and ``Cancelled`` when
    ``cancel`` fires before the response arrives.
    """
    payload = await client.get_json(url, cancel)
    detail = parse(payload)
    if detail is None:
        LOGGER.warning("Detail at %s failed schema validation", url)
        raise SchemaInvalid()
    return detail


def parse_publication_detail(payload: Any) -> PublicationDetail | None:
    """Coerce a publication body. Only a missing or empty title rejects it."""
    if not isinstance(payload, dict):
        return None
    title = _as_str(payload.get("title"))
    if not title:
        return None

    raw_content = payload.get("content")
    content: str | tuple[str, ...]
    if isinstance(raw_content, list):
        content = tuple(p for p in raw_content if isinstance(p, str))
    else:
        content = _as_str(raw_content)

    raw_authors = payload.get("authors")
    authors = tuple(a for a in raw_authors if isinstance(a, str)) if isinstance(raw_authors, list) else ()

    return PublicationDetail(
        title=title,
        content=content,
        date=_as_str(payload.get("date")),
        publication_url=_as_str(payload.get("publicationUrl")),
        authors=authors,
        venue=_as_str(payload.get("venue")),
    )


def parse_project_detail(payload: Any) -> ProjectDetail | None:
    """Coerce a project body. Non-string content degrades to an empty string."""
    if not isinstance(payload, dict):
        return None
    title = _as_str(payload.get("title"))
    if not title:
        return None

    raw_partner = payload.get("partner")
    partner = Partner()
    if isinstance(raw_partner, dict):
        partner = Partner(
            name=_as_str(raw_partner.get("name")),
            url=_as_str(raw_partner.get("url")),
        )

    return ProjectDetail(
        title=title,
        content=_as_str(payload.get("content")),
        date=_as_str(payload.get("date")),
        partner=partner,
    )


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""
