"""HTTP identity directory client.

Talks to a user directory exposing::

    GET {endpoint}/actors/{actor_id}   -> {"id", "display_name", "system_id", "username"}
    GET {endpoint}/actors?q={text}     -> [ {...}, ... ]  (best match first)

A 404 on the single-actor route means "no such actor".  Every other
non-2xx status, timeout or transport error raises IdentityLookupError.
"""

from __future__ import annotations

from typing import Any

import httpx

from revscope.errors import IdentityLookupError
from revscope.identity.resolver import Actor, IdentityDirectory
from revscope.models.revisions import ActorId
from revscope.observability.logging import get_logger

_log = get_logger("identity.http")


class HttpIdentityDirectory(IdentityDirectory):
    """IdentityDirectory backed by an HTTP JSON API.

    Args:
        endpoint: Base URL of the directory (no trailing slash needed).
        timeout:  Request timeout in seconds. Defaults to 5.
        client:   Optional pre-built AsyncClient (tests inject a MockTransport).
    """

    def __init__(
        self,
        endpoint: str,
        timeout: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not endpoint:
            raise ValueError("Identity endpoint must not be empty")
        self._endpoint = endpoint.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def get_actor(self, actor_id: ActorId) -> Actor | None:
        response = await self._get(f"{self._endpoint}/actors/{actor_id}")
        if response.status_code == 404:
            return None
        self._raise_for_status(response)
        return _parse_actor(_json_body(response))

    async def search_actors(self, text: str) -> list[Actor]:
        response = await self._get(f"{self._endpoint}/actors", params={"q": text})
        self._raise_for_status(response)
        body = _json_body(response)
        if not isinstance(body, list):
            raise IdentityLookupError(f"expected a JSON list from actor search, got {type(body).__name__}")
        return [_parse_actor(item) for item in body]

    async def stop(self) -> None:
        """Close the underlying HTTP client if this directory created it."""
        if self._owns_client:
            await self._client.aclose()

    async def _get(self, url: str, params: dict[str, str] | None = None) -> httpx.Response:
        try:
            return await self._client.get(url, params=params)
        except httpx.TimeoutException as exc:
            _log.warning("identity_request_timeout", url=url)
            raise IdentityLookupError(f"identity directory timed out: {url}") from exc
        except httpx.HTTPError as exc:
            _log.warning("identity_http_error", url=url, error=str(exc))
            raise IdentityLookupError(f"identity directory request failed: {exc}") from exc

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return
        _log.warning(
            "identity_non_2xx_response",
            status_code=response.status_code,
            body=response.text[:200],
        )
        raise IdentityLookupError(f"identity directory returned HTTP {response.status_code}")


def _parse_actor(data: Any) -> Actor:
    if not isinstance(data, dict) or "id" not in data:
        raise IdentityLookupError("malformed actor payload")
    try:
        actor_id = int(data["id"])
    except (TypeError, ValueError) as exc:
        raise IdentityLookupError(f"malformed actor id: {data['id']!r}") from exc
    return Actor(
        actor_id=actor_id,
        display_name=str(data.get("display_name") or ""),
        system_id=str(data.get("system_id") or ""),
        username=str(data.get("username") or ""),
    )


def _json_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise IdentityLookupError("identity directory returned invalid JSON") from exc
