import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class ApiRequestError(Exception):
    """Non-2xx response from the API, carrying the envelope's error message."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class ApiClient:
    """
    Thin async client for the carlot HTTP API.

    Sends the public access key on every call and the session token once one
    is set. Responses are unwrapped from the ``{"data": ...}`` envelope.
    """

    def __init__(
        self,
        base_url: str,
        public_key: str,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"apikey": public_key},
            transport=transport,
            timeout=timeout,
        )
        self.token = token

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    async def request(self, method: str, path: str, **kwargs) -> Any:
        response = await self._client.request(method, path, headers=self._headers(), **kwargs)
        if response.is_error:
            try:
                message = response.json().get("error") or response.reason_phrase
            except ValueError:
                message = response.reason_phrase
            logger.warning(f"{method} {path} failed with {response.status_code}: {message}")
            raise ApiRequestError(response.status_code, message)
        return response.json().get("data")

    async def get_dropdown_options(self, category: str, active_only: bool = True) -> List[Dict[str, str]]:
        data = await self.request(
            "GET",
            "/api/dropdown-settings",
            params={"category": category, "active_only": str(active_only).lower()},
        )
        return [{"label": item["label"], "value": item["value"]} for item in data or []]

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
