from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from .config import YouTubeConfig
from .exceptions import YouTubeAPIError, YouTubeAuthError, YouTubeNotFoundError
from .models import VideoMetadata

logger = logging.getLogger(__name__)


class YouTubeClient:
    def __init__(
        self,
        api_key: str,
        config: YouTubeConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not api_key:
            raise YouTubeAuthError("YouTube API key is required")
        self.config = config or YouTubeConfig()
        self.api_key = api_key
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> YouTubeClient:
        self._client = httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout_seconds,
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
                "YouTubeClient must be used as async context manager"
            )
        return self._client

    async def _request(self, endpoint: str, params: dict[str, Any]) -> dict[str, Any]:
        params = {**params, "key": self.api_key}
        retry_count = 0
        last_error: Exception | None = None

        while retry_count < self.config.max_retries:
            try:
                response = await self.client.get(endpoint, params=params)

                if response.status_code in (401, 403):
                    raise YouTubeAuthError(
                        f"YouTube API rejected the request: {response.text[:200]}",
                        status_code=response.status_code,
                    )
                elif response.status_code == 429 or response.status_code >= 500:
                    wait_time = 2 ** retry_count
                    logger.warning(
                        f"YouTube API returned {response.status_code}, "
                        f"retrying in {wait_time}s..."
                    )
                    await asyncio.sleep(wait_time)
                    retry_count += 1
                    last_error = YouTubeAPIError(
                        f"HTTP {response.status_code}", status_code=response.status_code
                    )
                    continue
                elif response.status_code >= 400:
                    raise YouTubeAPIError(
                        f"YouTube API error {response.status_code}: {response.text[:200]}",
                        status_code=response.status_code,
                    )

                return response.json()

            except httpx.TimeoutException as e:
                last_error = e
                retry_count += 1
                if retry_count < self.config.max_retries:
                    logger.warning(f"Timeout, retrying ({retry_count})...")
                    await asyncio.sleep(2)

            except httpx.RequestError as e:
                last_error = e
                logger.error(f"Network error: {e}")
                break

        raise YouTubeAPIError(
            f"Request failed after {retry_count} retries: {last_error}"
        )

    async def get_video_metadata(self, video_id: str) -> VideoMetadata:
        data = await self._request(
            "videos",
            {"part": "snippet,contentDetails", "id": video_id},
        )
        items = data.get("items") or []
        if not items:
            raise YouTubeNotFoundError(f"Video not found: {video_id}", status_code=404)
        metadata = VideoMetadata.from_api(items[0])
        logger.info(f"Fetched metadata for {video_id}: {metadata.title!r}")
        return metadata


async def fetch_video_metadata(
    video_id: str,
    api_key: str,
    config: YouTubeConfig | None = None,
) -> VideoMetadata:
    async with YouTubeClient(api_key, config) as client:
        return await client.get_video_metadata(video_id)
