from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, field_validator

from tubebrief.parsing import parse_duration_to_seconds, thumbnail_url


class VideoMetadata(BaseModel):
    video_id: str
    title: str = ""
    channel_title: str = ""
    description: str = ""
    duration: str | None = None
    published_at: datetime | None = None
    thumbnail_url: str = ""

    @field_validator("published_at", mode="before")
    @classmethod
    def parse_published_at(cls, v: Any) -> datetime | None:
        if v is None or v == "":
            return None
        if isinstance(v, datetime):
            return v
        try:
            return datetime.fromisoformat(v.replace("Z", "+00:00"))
        except (ValueError, AttributeError):
            return None

    @property
    def duration_seconds(self) -> int:
        return parse_duration_to_seconds(self.duration)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> VideoMetadata:
        snippet = data.get("snippet", {})
        content_details = data.get("contentDetails", {})
        video_id = data.get("id", "")
        return cls(
            video_id=video_id,
            title=snippet.get("title", ""),
            channel_title=snippet.get("channelTitle", ""),
            description=snippet.get("description", ""),
            duration=content_details.get("duration"),
            published_at=snippet.get("publishedAt"),
            thumbnail_url=thumbnail_url(video_id),
        )
