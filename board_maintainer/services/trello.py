"""Trello REST client for the board maintainer.

A single :class:`TrelloClient` wraps one ``httpx.AsyncClient`` and is shared
by every concurrent card task of a run. Reads raise :class:`TrelloFetchError`
because a half-read list cannot be maintained safely; writes return a
normalized result dict so callers decide how much a failed mutation matters.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from board_maintainer.models.trello import Action, Card, TrelloList


logger = logging.getLogger("trello_maintainer.trello")

_TRELLO_BASE_URL = "https://api.trello.com/1"

# Trello refuses larger pages for action history.
ACTIONS_PAGE_LIMIT = 1000

_CARD_FIELDS = "id,name,desc,pos,dateLastActivity,idList,closed"
_LIST_FIELDS = "id,name,closed"


class TrelloFetchError(Exception):
    """Raised when a list, card or action history cannot be retrieved."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class TrelloClient:
    """Async capability surface over the Trello REST API."""

    def __init__(
        self,
        api_key: str,
        api_token: str,
        *,
        timeout: float = 15.0,
        base_url: str = _TRELLO_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._api_token = api_token
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "TrelloClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _auth_params(self) -> Dict[str, str]:
        return {"key": self._api_key, "token": self._api_token}

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        query = self._auth_params()
        if params:
            query.update(params)

        try:
            resp = await self._client.get(path, params=query)
            resp.raise_for_status()
        except httpx.RequestError as exc:
            raise TrelloFetchError(f"HTTP_ERROR: {exc!r}") from exc
        except httpx.HTTPStatusError as exc:
            raise TrelloFetchError(
                f"API_ERROR: {exc.response.status_code} {exc.response.text}",
                status=exc.response.status_code,
            ) from exc

        try:
            return resp.json()
        except ValueError as exc:
            raise TrelloFetchError(f"INVALID_JSON: {path}") from exc

    async def _mutate(self, method: str, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        query = self._auth_params()
        if params:
            query.update(params)

        try:
            resp = await self._client.request(method, path, params=query)
            resp.raise_for_status()
        except httpx.RequestError as exc:
            return {"success": False, "error": f"HTTP_ERROR: {exc!r}"}
        except httpx.HTTPStatusError as exc:
            return {"success": False, "error": f"API_ERROR: {exc.response.status_code}", "body": exc.response.text}

        try:
            data = resp.json()
        except ValueError:
            data = None
        return {"success": True, "data": data}

    async def get_list(self, list_id: str) -> TrelloList:
        """Fetch a list's metadata (without cards)."""

        payload = await self._get(f"/lists/{list_id}", {"fields": _LIST_FIELDS})
        try:
            return TrelloList.model_validate(payload)
        except ValidationError as exc:
            raise TrelloFetchError(f"INVALID_PAYLOAD: list {list_id}: {exc}") from exc

    async def get_list_cards(self, list_id: str) -> List[Card]:
        """Fetch the open cards of a list."""

        payload = await self._get(f"/lists/{list_id}/cards", {"fields": _CARD_FIELDS})
        return _validate_many(Card, payload, f"cards of list {list_id}")

    async def get_card_actions(self, card_id: str, action_filter: Optional[str] = None) -> List[Action]:
        """Fetch a card's action history, newest first."""

        params: Dict[str, Any] = {"limit": ACTIONS_PAGE_LIMIT}
        if action_filter:
            params["filter"] = action_filter
        payload = await self._get(f"/cards/{card_id}/actions", params)
        return _validate_many(Action, payload, f"actions of card {card_id}")

    async def get_list_actions(self, list_id: str, action_filter: str) -> List[Action]:
        """Fetch a list's action history restricted to ``action_filter`` kinds."""

        params = {"filter": action_filter, "limit": ACTIONS_PAGE_LIMIT}
        payload = await self._get(f"/lists/{list_id}/actions", params)
        return _validate_many(Action, payload, f"actions of list {list_id}")

    async def archive_card(self, card_id: str) -> Dict[str, Any]:
        """Move a card to the archived (closed) state."""

        return await self._mutate("PUT", f"/cards/{card_id}", {"closed": "true"})

    async def delete_card(self, card_id: str) -> Dict[str, Any]:
        """Permanently delete a card."""

        return await self._mutate("DELETE", f"/cards/{card_id}")

    async def set_card_position(self, card_id: str, position: float) -> Dict[str, Any]:
        """Set a card's ordering key within its list."""

        return await self._mutate("PUT", f"/cards/{card_id}", {"pos": repr(float(position))})


def _validate_many(model: Any, payload: Any, what: str) -> List[Any]:
    if not isinstance(payload, list):
        raise TrelloFetchError(f"INVALID_PAYLOAD: expected a list of {what}")
    try:
        return [model.model_validate(item) for item in payload]
    except ValidationError as exc:
        raise TrelloFetchError(f"INVALID_PAYLOAD: {what}: {exc}") from exc
