from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from ..schemas.trivia import TriviaResponse


LOGGER = logging.getLogger(__name__)

DEFAULT_PATH = "/api/trivia"


class TriviaRequestError(Exception):
    """Base class for failures surfaced to callers as the `error` text."""


class TriviaHttpError(TriviaRequestError):
    """Raised when the endpoint answers with a non-2xx status."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Trivia request failed ({status_code})")
        self.status_code = status_code


class TriviaTransportError(TriviaRequestError):
    """Raised when the request cannot complete or the body cannot be parsed."""


class TriviaApiClient:
    """Async client for the `/api/trivia` endpoint."""

    def __init__(
        self,
        base_url: str = "",
        path: str = DEFAULT_PATH,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.path = path
        self._owns_client = client is None
        # No timeout: a request that never resolves waits until it is cancelled.
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            transport=transport,
            timeout=None,
        )

    def url_for(self, query_key: str) -> str:
        return f"{self.path}?{query_key}" if query_key else self.path

    async def fetch(self, query_key: str) -> TriviaResponse:
        url = self.url_for(query_key)
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            raise TriviaTransportError(str(exc) or exc.__class__.__name__) from exc

        if not response.is_success:
            LOGGER.info("trivia_fetch url=%s status=%s", url, response.status_code)
            raise TriviaHttpError(response.status_code)

        try:
            return TriviaResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise TriviaTransportError(f"Invalid trivia response: {exc.error_count()} error(s)") from exc

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
