"""Create, update and delete records, then resynchronize the list."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator

from cancellation import CancellationToken
from config import ResourceConfig
from errors import AdminApiError, Cancelled, ValidationFailure
from forms import filename_from_pathname
from list_sync import ListSynchronizer
from models import EnrichedItem
from records import RecordKind

LOGGER = logging.getLogger(__name__)


class SubmitState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class FormSession:
    """The create/edit form: its fields, mode and last outcome."""

    form: Any
    is_open: bool = False
    edit_id: str | None = None
    error: str | None = None
    state: SubmitState = SubmitState.IDLE


class DeletionSet:
    """Pathnames with a delete request in flight."""

    def __init__(self) -> None:
        self._pending: set[str] = set()

    def begin(self, pathname: str) -> bool:
        """Mark ``pathname`` as deleting. False if it already is."""
        if pathname in self._pending:
            return False
        self._pending.add(pathname)
        return True

    def finish(self, pathname: str) -> None:
        self._pending.discard(pathname)

    @property
    def busy(self) -> bool:
        return bool(self._pending)

    def __contains__(self, pathname: object) -> bool:
        return pathname in self._pending

    def __len__(self) -> int:
        return len(self._pending)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._pending))


class MutationCoordinator:
    """Runs mutations for one record kind and reloads after each success.

    Mutations never edit the local collection. A successful create, update or
    delete triggers a full reload, and failures only set an error message.
    """

    def __init__(
        self,
        client: Any,
        resource: ResourceConfig,
        kind: RecordKind,
        synchronizer: ListSynchronizer,
        lifetime: CancellationToken | None = None,
    ) -> None:
        self._client = client
        self._resource = resource
        self._kind = kind
        self._synchronizer = synchronizer
        self._lifetime = lifetime
        self.session = FormSession(form=kind.blank_form())
        self.deleting = DeletionSet()
        self.confirm_path: str | None = None
        self.error: str | None = None

    # Form lifecycle

    def open_create(self) -> None:
        self.session = FormSession(form=self._kind.blank_form(), is_open=True)

    def open_edit(self, item: EnrichedItem) -> bool:
        """Prefill the form from ``item``'s detail. False when it has none."""
        if item.detail is None:
            return False
        self.session = FormSession(
            form=self._kind.form_from_detail(item.detail),
            is_open=True,
            edit_id=filename_from_pathname(item.pathname),
        )
        return True

    def close_form(self) -> None:
        self._reset_form(SubmitState.IDLE)

    def _reset_form(self, state: SubmitState) -> None:
        self.session = FormSession(form=self._kind.blank_form(), state=state)

    async def submit(self) -> bool:
        """Validate and send the form as a create or an update.

        Returns True on success, after the reload has finished and the form
        has been closed and reset. On failure the form stays open with
        ``session.error`` set.
        """
        session = self.session
        if session.state is SubmitState.SUBMITTING:
            LOGGER.warning("Submit already in progress for %s", self._kind.name)
            return False

        session.error = None
        self.error = None
        try:
            payload = session.form.to_payload()
        except ValidationFailure as exc:
            session.error = str(exc)
            session.state = SubmitState.FAILED
            return False

        session.state = SubmitState.SUBMITTING
        token = CancellationToken(parent=self._lifetime)
        action = "update" if session.edit_id else "create"
        try:
            if session.edit_id:
                await self._client.send(
                    "PUT",
                    self._resource.update_url(session.edit_id),
                    token,
                    self._resource.update_body(payload),
                )
            else:
                await self._client.send("POST", self._resource.create_url(), token, payload)
        except Cancelled:
            session.state = SubmitState.IDLE
            return False
        except AdminApiError as exc:
            LOGGER.warning("Failed to %s %s: %s", action, self._kind.label, exc)
            session.error = str(exc) or f"Failed to {action} {self._kind.label}"
            session.state = SubmitState.FAILED
            return False

        LOGGER.info("%s %s: %s", action.capitalize(), self._kind.label, payload["title"])
        await self._synchronizer.load()
        self._reset_form(SubmitState.SUCCEEDED)
        return True

    # Deletion

    def request_delete(self, pathname: str) -> None:
        self.confirm_path = pathname

    def cancel_delete(self) -> None:
        self.confirm_path = None

    async def delete(self, pathname: str) -> bool:
        """Delete the record at ``pathname`` and reload on success.

        The pathname stays in ``deleting`` until the request and any reload
        settle. A failure leaves the list as it was and sets ``error``.
        """
        if not self.deleting.begin(pathname):
            LOGGER.warning("Delete already pending for %s", pathname)
            return False
        self.error = None

        filename = filename_from_pathname(pathname)
        url, body = self._resource.delete_request(filename)
        token = CancellationToken(parent=self._lifetime)
        try:
            try:
                await self._client.send("DELETE", url, token, body)
            except Cancelled:
                return False
            except AdminApiError as exc:
                LOGGER.warning("Failed to delete %s: %s", pathname, exc)
                self.error = str(exc) or "Failed to delete"
                return False

            LOGGER.info("Deleted %s %s", self._kind.label, filename)
            await self._synchronizer.load()
            return True
        finally:
            self.deleting.finish(pathname)
            self.confirm_path = None
