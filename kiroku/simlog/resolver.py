"""Identity resolution for ability/aura labels found in log lines."""

import asyncio
import dataclasses
import logging
from typing import Protocol

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from kiroku.simlog.action_id import ActionId

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class ActionLookupError(Exception):
    """Raised when the action name service returns an unusable response."""


class ActionResolver(Protocol):
    async def resolve(self, label: str, owner_index: int | None) -> ActionId:
        """Map a textual label to an ActionId.

        owner_index is the 0-based index of the entity that produced the
        line; some labels only resolve unambiguously per caster.
        """
        ...


class LogStringResolver:
    """Resolves labels by parsing the {SpellID: n, Tag: t} form directly."""

    async def resolve(self, label: str, owner_index: int | None) -> ActionId:
        return ActionId.from_log_string(label)


def _is_server_error(response: httpx.Response) -> bool:
    return response.status_code >= 500


class HttpNameResolver:
    """Fills action names from a JSON lookup service.

    The service is expected at ``{base_url}/{spell|item|other}/{id}`` and to
    answer ``{"name": "..."}``. Names are memoized per (action, owner) so
    each distinct action is fetched once per resolver.
    """

    def __init__(
        self,
        base_url: str,
        *,
        inner: ActionResolver | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._inner = inner or LogStringResolver()
        self._timeout = timeout
        self._http = http_client
        self._owns_http = http_client is None
        self._names: dict[tuple[str, int | None], asyncio.Task[str]] = {}

    async def __aenter__(self) -> "HttpNameResolver":
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self._timeout)
        return self

    async def __aexit__(self, *exc: object) -> None:
        if self._http and self._owns_http:
            await self._http.aclose()
            self._http = None

    async def resolve(self, label: str, owner_index: int | None) -> ActionId:
        action_id = await self._inner.resolve(label, owner_index)
        if self._http is None:
            raise RuntimeError("Use HttpNameResolver as an async context manager")

        key = (str(action_id), owner_index)
        task = self._names.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch_name(action_id, owner_index))
            self._names[key] = task

        try:
            name = await task
        except (httpx.HTTPError, ActionLookupError) as exc:
            logger.warning(
                "Name lookup failed for %s, keeping %s: %s",
                action_id, action_id.default_name, exc,
            )
            return action_id
        return dataclasses.replace(action_id, name=name)

    async def _fetch_name(self, action_id: ActionId, owner_index: int | None) -> str:
        kind, _, raw_id = action_id.to_string_ignoring_tag().partition("-")
        params = {"tag": action_id.tag} if action_id.tag else {}
        if owner_index is not None:
            params["player"] = owner_index

        response = await self._request(f"{self._base_url}/{kind}/{raw_id}", params)
        if response.status_code >= 400:
            raise ActionLookupError(f"{response.status_code}: {response.text}")

        try:
            body = response.json()
        except ValueError as exc:
            raise ActionLookupError(f"Invalid JSON for {action_id}: {exc}") from exc
        if not isinstance(body, dict):
            raise ActionLookupError(f"Unexpected response for {action_id}: {body!r}")

        name = body.get("name")
        if not name:
            raise ActionLookupError(f"No name for {action_id}")
        logger.debug("Resolved %s -> %s", action_id, name)
        return name

    @retry(
        retry=(
            retry_if_result(_is_server_error)
            | retry_if_exception_type((httpx.ConnectError, httpx.ReadTimeout))
        ),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry_error_callback=lambda state: state.outcome.result(),
    )
    async def _request(self, url: str, params: dict) -> httpx.Response:
        return await self._http.get(url, params=params)
