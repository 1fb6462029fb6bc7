"""Small JSON-over-HTTP client bound to a base URL."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional

import httpx

logger = logging.getLogger(__name__)


class HttpError(Exception):
    """Raised for a non-2xx status or a body that is not valid JSON."""

    def __init__(self, message: str, status: int, body: str) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


def parse_response(response: httpx.Response) -> Any:
    """Decode a JSON body from a 2xx response, otherwise raise HttpError."""
    status = response.status_code
    text = response.text
    logger.debug("Response status: %s, body: %s", status, text)
    if 200 <= status < 300:
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise HttpError(f"Failed to parse response: {exc}", status, text) from exc
    raise HttpError(
        f"Request failed with status {status} and body: {text}", status, text
    )


class HttpClient:
    """Sends GET and POST requests relative to a base URL and decodes JSON."""

    def __init__(self, base_url: str, client: Optional[httpx.AsyncClient] = None) -> None:
        self.base_url = base_url
        self._client = client if client is not None else httpx.AsyncClient()

    async def __aenter__(self) -> HttpClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(
        self,
        url_path: str,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, str]] = None,
    ) -> Any:
        url = f"{self.base_url}{url_path}"
        logger.debug("Sending GET request to %s", url)
        response = await self._client.get(
            url,
            headers=dict(headers) if headers else None,
            params=dict(params) if params else None,
        )
        return parse_response(response)

    async def post(
        self,
        url_path: str,
        body: Any,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        url = f"{self.base_url}{url_path}"
        content = json.dumps(body, separators=(",", ":"))
        logger.debug("Sending POST request to %s", url)
        response = await self._client.post(
            url,
            content=content,
            headers=dict(headers) if headers else None,
        )
        return parse_response(response)