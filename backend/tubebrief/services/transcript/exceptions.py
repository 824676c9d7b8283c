"""Transcript service exceptions."""

NO_CAPTIONS_MESSAGE = (
    "No captions/transcript available for this video. "
    "Try a video with auto-generated or manual captions."
)
VIDEO_UNAVAILABLE_MESSAGE = "Video is unavailable or has been removed"
INVALID_VIDEO_MESSAGE = "Invalid video ID"


class TranscriptError(Exception):
    """Transcript could not be fetched; the message is safe to show users."""

    pass


class NoCaptionsError(TranscriptError):
    """Captions are disabled or no track exists."""

    def __init__(self, message: str = NO_CAPTIONS_MESSAGE):
        super().__init__(message)


class VideoUnavailableError(TranscriptError):
    """Video is private, removed or region blocked."""

    def __init__(self, message: str = VIDEO_UNAVAILABLE_MESSAGE):
        super().__init__(message)


class InvalidVideoError(TranscriptError):
    """Video id was rejected by YouTube."""

    def __init__(self, message: str = INVALID_VIDEO_MESSAGE):
        super().__init__(message)
