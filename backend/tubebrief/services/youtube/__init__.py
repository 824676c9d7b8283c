from .client import YouTubeClient, fetch_video_metadata
from .config import YouTubeConfig
from .exceptions import YouTubeAPIError, YouTubeAuthError, YouTubeNotFoundError
from .models import VideoMetadata

__all__ = [
    "YouTubeClient",
    "fetch_video_metadata",
    "YouTubeConfig",
    "YouTubeAPIError",
    "YouTubeAuthError",
    "YouTubeNotFoundError",
    "VideoMetadata",
]
