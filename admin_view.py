"""One admin list view: collection, search, paging and mutations for a kind."""

from __future__ import annotations

import logging
from typing import Any

import config
from api_client import ApiClient
from cancellation import CancellationToken
from forms import filename_from_pathname
from list_sync import ListSynchronizer
from models import CollectionState, EnrichedItem, Failed, Loaded, Projection
from mutations import MutationCoordinator
from projection import project
from records import RecordKind, get_kind

LOGGER = logging.getLogger(__name__)


class RecordView:
    """Per-kind view instance.

    Owns the only copy of its collection state and deletion set. Closing the
    view cancels every request it started; results that arrive afterwards are
    dropped.
    """

    def __init__(
        self,
        kind: RecordKind | str,
        client: Any | None = None,
        resource: config.ResourceConfig | None = None,
        page_size: int | None = None,
    ) -> None:
        self.kind = get_kind(kind) if isinstance(kind, str) else kind
        self.client = client if client is not None else ApiClient()
        self.resource = resource or config.resource_config(self.kind.name)
        self.page_size = page_size or config.page_size()
        self.lifetime = CancellationToken()
        self.synchronizer = ListSynchronizer(
            self.client, self.resource, self.kind.parse_detail, lifetime=self.lifetime
        )
        self.mutations = MutationCoordinator(
            self.client, self.resource, self.kind, self.synchronizer, lifetime=self.lifetime
        )
        self.search_text = ""
        self.page = 1

    async def __aenter__(self) -> RecordView:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def state(self) -> CollectionState:
        return self.synchronizer.state

    @property
    def items(self) -> tuple[EnrichedItem, ...]:
        return self.synchronizer.items

    @property
    def is_busy(self) -> bool:
        return self.mutations.deleting.busy

    @property
    def error(self) -> str | None:
        if isinstance(self.state, Failed):
            return self.state.message
        return self.mutations.error

    async def load(self) -> CollectionState:
        """Reload the collection. A successful load clears any stale mutation error."""
        state = await self.synchronizer.load()
        if isinstance(state, Loaded):
            self.mutations.error = None
        return state

    async def refresh(self) -> CollectionState | None:
        """Reload unless a delete is pending."""
        if self.is_busy:
            LOGGER.info("Refresh of %s skipped while deletes are pending", self.kind.name)
            return None
        return await self.load()

    def set_search(self, text: str) -> Projection:
        self.search_text = text
        return self.projection()

    def set_page(self, page: int) -> Projection:
        self.page = page
        return self.projection()

    def projection(self) -> Projection:
        """Current page of the view, re-clamping the stored page number."""
        result = project(self.items, self.search_text, self.page, self.page_size)
        self.page = result.current_page
        return result

    def find(self, filename_or_pathname: str) -> EnrichedItem | None:
        for item in self.items:
            if item.pathname == filename_or_pathname:
                return item
        for item in self.items:
            if filename_from_pathname(item.pathname) == filename_or_pathname:
                return item
        return None

    def close(self) -> None:
        if not self.lifetime.cancelled:
            LOGGER.debug("Closing %s view", self.kind.name)
        self.lifetime.cancel()
