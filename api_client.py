"""HTTP transport for the admin API."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import requests

import config
from cancellation import CancellationToken
from errors import NetworkFailure

LOGGER = logging.getLogger(__name__)


class ApiClient:
    """Thin async wrapper over ``requests``.

    Each call runs in a worker thread so the event loop keeps serving other
    requests. Awaits go through the caller's cancellation token; a cancelled
    call returns immediately and the thread's eventual response is discarded.
    """

    def __init__(self, timeout: float | None = None, token: str | None = None) -> None:
        self.timeout = config.request_timeout() if timeout is None else timeout
        self.headers = {"Accept": "application/json"}
        bearer = token if token is not None else config.api_token()
        if bearer:
            self.headers["Authorization"] = f"Bearer {bearer}"

    async def get_json(self, url: str, cancel: CancellationToken) -> Any:
        """GET ``url`` and decode its JSON body.

        Non-2xx responses raise ``NetworkFailure`` with ``HTTP <status>``. A 2xx
        body that does not decode raises ``NetworkFailure("Invalid JSON response")``.
        """
        response = await cancel.run(asyncio.to_thread(self._request, "GET", url, None))
        if not response.ok:
            raise NetworkFailure(f"HTTP {response.status_code}", status=response.status_code)
        try:
            return response.json()
        except ValueError:
            LOGGER.warning("Non-JSON body from %s", url)
            raise NetworkFailure("Invalid JSON response", status=response.status_code) from None

    async def send(
        self,
        method: str,
        url: str,
        cancel: CancellationToken,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        """Issue a mutating request and return the decoded body, if any.

        Failures surface the server's ``{"message": ...}`` when present.
        """
        response = await cancel.run(asyncio.to_thread(self._request, method, url, payload))
        if not response.ok:
            raise NetworkFailure(_error_message(response), status=response.status_code)
        try:
            return response.json()
        except ValueError:
            return None

    def _request(self, method: str, url: str, payload: dict[str, Any] | None) -> requests.Response:
        headers = dict(self.headers)
        if payload is not None:
            headers["Content-Type"] = "application/json"
        try:
            return requests.request(
                method=method,
                url=url,
                headers=headers,
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise NetworkFailure(str(exc) or "Network request failed") from exc


def _error_message(response: requests.Response) -> str:
    message = f"HTTP {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        return message
    if isinstance(body, dict) and isinstance(body.get("message"), str) and body["message"]:
        return body["message"]
    return message
