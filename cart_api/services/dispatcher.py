"""
In-process dispatcher for batch sub-requests.

Each sub-request goes through the full ASGI application, so middleware,
the route's own permission dependency and routing behave exactly as for a
standalone request.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from cart_api.core.security import ACCESS_TOKEN_HEADER
from cart_api.schemas.batch import SubRequest, SubResponse


CART_KEY_HEADER = "Cart-Key"
CART_KEY_RESPONSE_HEADER = "CoCart-API-Cart-Key"


@dataclass(frozen=True)
class RequestContext:
    """Values computed once per batch and passed to every sub-request."""
    access_token: Optional[str] = None
    cart_key: Optional[str] = None

    def headers(self) -> Dict[str, str]:
        headers = {}
        if self.access_token:
            headers[ACCESS_TOKEN_HEADER] = self.access_token
        if self.cart_key:
            headers[CART_KEY_HEADER] = self.cart_key
        return headers


class AsgiDispatcher:
    """Sends sub-requests to an ASGI app. Use as an async context manager."""

    def __init__(self, app: Any, context: RequestContext, base_url: str = "http://batch"):
        self.app = app
        self.context = context
        self.base_url = base_url
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "AsgiDispatcher":
        self._client = httpx.AsyncClient(
            transport=httpx.ASGITransport(app=self.app),
            base_url=self.base_url,
        )
        return self

    async def __aexit__(self, *exc_info) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def build_headers(self, sub_request: SubRequest) -> httpx.Headers:
        headers = httpx.Headers(self.context.headers())
        for name, value in sub_request.headers.items():
            headers[name] = ", ".join(value) if isinstance(value, list) else value
        return headers

    async def __call__(self, sub_request: SubRequest) -> SubResponse:
        if self._client is None:
            raise RuntimeError("AsgiDispatcher must be used inside 'async with'")

        response = await self._client.request(
            sub_request.method,
            sub_request.path,
            headers=self.build_headers(sub_request),
            json=sub_request.body or None,
        )

        try:
            body = response.json()
        except ValueError:
            body = response.text

        return SubResponse(
            status=response.status_code,
            body=body,
            headers=dict(response.headers),
        )
