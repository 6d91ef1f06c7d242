"""Endpoint configuration for the admin API.

Two REST conventions exist for the same resources. The ``legacy`` style lists
at ``/list``, creates at ``/upload`` and deletes by posting the filename in the
request body. The ``rest`` style lists and creates at the collection root,
deletes by path segment and wraps update payloads as a JSON string under
``contents``. The style is chosen by configuration, never inferred from
responses.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

DEFAULT_API_BASE_URL = "https://polyshape-mock.vercel.app/api"
DEFAULT_ENDPOINT_STYLE = "legacy"
DEFAULT_PAGE_SIZE = 5
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0

ENDPOINT_STYLES = ("legacy", "rest")
RECORD_KINDS = ("publications", "projects")


@dataclass(frozen=True, slots=True)
class ResourceConfig:
    """Paths and verbs for one record kind under one endpoint style."""

    kind: str
    base_url: str
    list_path: str
    create_path: str
    delete_by_path: bool
    wrap_update: bool

    @property
    def collection_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.kind}"

    def list_url(self) -> str:
        return f"{self.collection_url}{self.list_path}"

    def create_url(self) -> str:
        return f"{self.collection_url}{self.create_path}"

    def update_url(self, filename: str) -> str:
        return f"{self.collection_url}/{quote(filename, safe='')}"

    def delete_request(self, filename: str) -> tuple[str, dict[str, Any] | None]:
        """Return ``(url, json_body)`` for deleting ``filename``."""
        if self.delete_by_path:
            return f"{self.collection_url}/{quote(filename, safe='')}", None
        return f"{self.collection_url}/delete", {"filename": filename}

    def update_body(self, payload: dict[str, Any]) -> dict[str, Any]:
        if not self.wrap_update:
            return payload
        return {"contents": json.dumps(payload), "contentType": "application/json"}


def resource_config(
    kind: str,
    style: str | None = None,
    base_url: str | None = None,
) -> ResourceConfig:
    """Build the endpoint layout for ``kind``, reading env defaults when unset."""
    if kind not in RECORD_KINDS:
        raise ValueError(f"Unknown record kind: {kind!r} (expected one of {', '.join(RECORD_KINDS)})")

    style = (style or os.getenv("POLYSHAPE_ENDPOINT_STYLE", DEFAULT_ENDPOINT_STYLE)).strip().lower()
    if style not in ENDPOINT_STYLES:
        raise ValueError(f"Unknown endpoint style: {style!r} (expected one of {', '.join(ENDPOINT_STYLES)})")

    base_url = base_url or os.getenv("POLYSHAPE_API_BASE_URL", DEFAULT_API_BASE_URL)

    if style == "rest":
        return ResourceConfig(
            kind=kind,
            base_url=base_url,
            list_path="/",
            create_path="/",
            delete_by_path=True,
            wrap_update=True,
        )
    return ResourceConfig(
        kind=kind,
        base_url=base_url,
        list_path="/list",
        create_path="/upload",
        delete_by_path=False,
        wrap_update=False,
    )


def page_size() -> int:
    value = int(os.getenv("POLYSHAPE_PAGE_SIZE", str(DEFAULT_PAGE_SIZE)))
    if value < 1:
        raise ValueError("POLYSHAPE_PAGE_SIZE must be at least 1")
    return value


def request_timeout() -> float:
    return float(os.getenv("POLYSHAPE_REQUEST_TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT_SECONDS)))


def api_token() -> str | None:
    token = os.getenv("POLYSHAPE_API_TOKEN", "").strip()
    return token or None
