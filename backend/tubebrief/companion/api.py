"""HTTP client the companion uses to talk to the TubeBrief API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from tubebrief.config import CompanionConfig
from tubebrief.schemas.brief import BriefStatusResponse, CreateBriefResponse

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Missing access token or the server rejected it."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class BriefApiError(Exception):
    """Non-auth API failure; message is the server's error text when present."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BriefApiClient:
    """Async client for brief creation and job polling."""

    def __init__(
        self,
        config: CompanionConfig | None = None,
        access_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or CompanionConfig()
        self.access_token = access_token if access_token is not None else self.config.access_token
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> BriefApiClient:
        self._client = httpx.AsyncClient(
            base_url=self.config.app_url,
            timeout=30.0,
            transport=self._transport,
        )
        return self

    async def __aexit__(
        self,
        exc_type: type | None,
        exc_val: Exception | None,
        exc_tb: Any,
    ) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError(
                "BriefApiClient must be used as async context manager"
            )
        return self._client

    async def _request(self, method: str, path: str, json_data: dict | None = None) -> dict:
        if not self.access_token:
            raise AuthError()

        try:
            response = await self.client.request(
                method,
                path,
                json=json_data,
                headers={"Authorization": f"Bearer {self.access_token}"},
            )
        except httpx.RequestError as e:
            logger.warning(f"Request to {path} failed: {e}")
            raise BriefApiError(f"Network error: {e}") from e

        if response.status_code in (401, 403):
            raise AuthError()

        if response.status_code >= 400:
            try:
                message = response.json().get("error")
            except ValueError:
                message = None
            raise BriefApiError(
                message or f"API error {response.status_code}",
                status_code=response.status_code,
            )

        return response.json()

    async def create_brief(self, video_url: str) -> CreateBriefResponse:
        data = await self._request("POST", "/api/briefs", {"url": video_url})
        return CreateBriefResponse.model_validate(data)

    async def check_brief_status(self, job_id: str) -> BriefStatusResponse:
        data = await self._request("GET", f"/api/briefs/{job_id}/status")
        return BriefStatusResponse.model_validate(data)
