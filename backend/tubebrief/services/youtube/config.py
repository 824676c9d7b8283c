from pydantic import BaseModel


class YouTubeConfig(BaseModel):
    """Configuration for the YouTube Data API client."""

    base_url: str = "https://www.googleapis.com/youtube/v3"
    timeout_seconds: float = 30.0
    max_retries: int = 3
