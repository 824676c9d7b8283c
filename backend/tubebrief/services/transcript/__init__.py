"""YouTube caption transcripts."""

from .client import fetch_transcript, fetch_transcript_sync
from .exceptions import (
    InvalidVideoError,
    NoCaptionsError,
    TranscriptError,
    VideoUnavailableError,
)
from .models import TranscriptEntry, format_transcript

__all__ = [
    "fetch_transcript",
    "fetch_transcript_sync",
    "format_transcript",
    "TranscriptEntry",
    "TranscriptError",
    "NoCaptionsError",
    "VideoUnavailableError",
    "InvalidVideoError",
]
