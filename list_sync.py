"""Index acquisition and detail enrichment for one record kind."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from cancellation import CancellationToken
from config import ResourceConfig
from detail_fetcher import DetailParser, fetch_detail
from errors import AdminApiError, Cancelled
from models import (
    CollectionState,
    Detail,
    EnrichedItem,
    Failed,
    IndexEntry,
    Loaded,
    Loading,
    Unloaded,
)

LOGGER = logging.getLogger(__name__)


async def fetch_collection(
    client: Any,
    resource: ResourceConfig,
    parse: DetailParser,
    cancel: CancellationToken,
) -> list[EnrichedItem]:
    """Fetch the index, then every detail concurrently, and merge the outcomes.

    Raises when the index itself cannot be fetched. Per-item detail failures are
    folded into ``EnrichedItem.error`` and never fail the whole load.
    """
    payload = await client.get_json(resource.list_url(), cancel)
    entries = extract_index_entries(payload)
    LOGGER.info("Index %s: %s entries", resource.kind, len(entries))

    outcomes = await asyncio.gather(
        *(fetch_detail(client, entry.url, parse, cancel) for entry in entries),
        return_exceptions=True,
    )
    return [_merge(entry, outcome) for entry, outcome in zip(entries, outcomes)]


def extract_index_entries(payload: Any) -> list[IndexEntry]:
    """Accept a bare list, ``{"data": [...]}`` or ``{"items": [...]}``.

    Any other shape is an empty index. Entries without a string ``url`` and
    ``pathname`` are dropped silently.
    """
    raw: list[Any] = []
    if isinstance(payload, list):
        raw = payload
    elif isinstance(payload, dict):
        if isinstance(payload.get("data"), list):
            raw = payload["data"]
        elif isinstance(payload.get("items"), list):
            raw = payload["items"]

    entries: list[IndexEntry] = []
    for item in raw:
        entry = _to_index_entry(item)
        if entry is not None:
            entries.append(entry)
    return entries


def _to_index_entry(item: Any) -> IndexEntry | None:
    if not isinstance(item, dict):
        return None
    url = item.get("url")
    pathname = item.get("pathname")
    if not isinstance(url, str) or not isinstance(pathname, str) or not url or not pathname:
        return None
    return IndexEntry(url=url, pathname=pathname)


def _merge(entry: IndexEntry, outcome: Detail | BaseException) -> EnrichedItem:
    if isinstance(outcome, Cancelled):
        return EnrichedItem.from_entry(entry)
    if isinstance(outcome, AdminApiError):
        LOGGER.warning("Detail for %s failed: %s", entry.pathname, outcome)
        return EnrichedItem.from_entry(entry, error=str(outcome) or "Failed to load details")
    if isinstance(outcome, BaseException):
        raise outcome
    return EnrichedItem.from_entry(entry, detail=outcome)


class ListSynchronizer:
    """Owns the collection state for one view and one record kind.

    Only one load is in flight at a time. Starting a load cancels the previous
    one through its token, and a cancelled load never writes state: the
    collection goes back to the last state it settled in.
    """

    def __init__(
        self,
        client: Any,
        resource: ResourceConfig,
        parse: DetailParser,
        lifetime: CancellationToken | None = None,
    ) -> None:
        self._client = client
        self._resource = resource
        self._parse = parse
        self._lifetime = lifetime
        self._current: CancellationToken | None = None
        self._settled: CollectionState = Unloaded()
        self.state: CollectionState = Unloaded()

    @property
    def items(self) -> tuple[EnrichedItem, ...]:
        return self.state.items if isinstance(self.state, Loaded) else ()

    @property
    def is_loading(self) -> bool:
        return self._current is not None

    def cancel(self) -> None:
        """Abort the in-flight load, if any, leaving the last settled state."""
        if self._current is not None:
            self._current.cancel()
            self._current = None
            self.state = self._settled

    async def load(self) -> CollectionState:
        if self._current is not None:
            LOGGER.debug("Superseding in-flight %s load", self._resource.kind)
            self._current.cancel()

        token = CancellationToken(parent=self._lifetime)
        self._current = token
        self.state = Loading()

        try:
            items = await fetch_collection(self._client, self._resource, self._parse, token)
        except Cancelled:
            return self._abandon(token)
        except AdminApiError as exc:
            if token.cancelled:
                return self._abandon(token)
            LOGGER.warning("Loading %s failed: %s", self._resource.kind, exc)
            return self._settle(Failed(str(exc) or "Failed to load"))

        if token.cancelled:
            return self._abandon(token)
        return self._settle(Loaded(tuple(items)))

    def _settle(self, state: CollectionState) -> CollectionState:
        self._current = None
        self._settled = state
        self.state = state
        return state

    def _abandon(self, token: CancellationToken) -> CollectionState:
        LOGGER.debug("Discarding cancelled %s load", self._resource.kind)
        if self._current is token:
            self._current = None
            self.state = self._settled
        return self.state
