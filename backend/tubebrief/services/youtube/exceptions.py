class YouTubeAPIError(Exception):
    """Base exception for YouTube Data API errors."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class YouTubeAuthError(YouTubeAPIError):
    """API key rejected or quota exhausted."""

    pass


class YouTubeNotFoundError(YouTubeAPIError):
    """Video does not exist or is private."""

    pass
