"""Transcript fetching through youtube-transcript-api."""

import asyncio
import logging
import time
from typing import Callable

from youtube_transcript_api import (
    InvalidVideoId,
    NoTranscriptFound,
    TranscriptsDisabled,
    VideoUnavailable,
    YouTubeTranscriptApi,
)

from .exceptions import (
    InvalidVideoError,
    NoCaptionsError,
    TranscriptError,
    VideoUnavailableError,
)
from .models import TranscriptEntry

logger = logging.getLogger(__name__)

PREFERRED_LANGUAGES = ["en", "en-US", "en-GB"]


def _select_transcript(transcripts):
    """Manual English first, then generated English, then any track."""
    try:
        return transcripts.find_manually_created_transcript(PREFERRED_LANGUAGES)
    except NoTranscriptFound:
        pass
    try:
        return transcripts.find_generated_transcript(PREFERRED_LANGUAGES)
    except NoTranscriptFound:
        pass
    for transcript in transcripts:
        return transcript
    raise NoCaptionsError()


def fetch_transcript_sync(
    video_id: str,
    api_factory: Callable[[], YouTubeTranscriptApi] = YouTubeTranscriptApi,
) -> list[TranscriptEntry]:
    """Blocking transcript fetch with errors mapped to user-facing messages."""
    start = time.monotonic()
    logger.info(f"Fetching transcript for {video_id}")

    try:
        transcripts = api_factory().list(video_id)
        transcript = _select_transcript(transcripts)
        fetched = transcript.fetch()
        entries = [
            TranscriptEntry(
                text=snippet.text,
                offset=snippet.start,
                duration=snippet.duration,
                lang=transcript.language_code,
            )
            for snippet in fetched
        ]
    except TranscriptError:
        raise
    except (TranscriptsDisabled, NoTranscriptFound) as e:
        logger.warning(f"No captions for {video_id}: {type(e).__name__}")
        raise NoCaptionsError() from e
    except VideoUnavailable as e:
        logger.warning(f"Video unavailable: {video_id}")
        raise VideoUnavailableError() from e
    except InvalidVideoId as e:
        raise InvalidVideoError() from e
    except Exception as e:
        logger.error(f"Transcript fetch failed for {video_id}: {e}")
        raise TranscriptError(f"Failed to fetch transcript: {e}") from e

    if not entries:
        raise NoCaptionsError()

    elapsed_ms = (time.monotonic() - start) * 1000
    logger.info(f"Fetched {len(entries)} transcript entries for {video_id} in {elapsed_ms:.0f}ms")
    return entries


async def fetch_transcript(
    video_id: str,
    api_factory: Callable[[], YouTubeTranscriptApi] = YouTubeTranscriptApi,
) -> list[TranscriptEntry]:
    """Fetch a transcript without blocking the event loop."""
    return await asyncio.to_thread(fetch_transcript_sync, video_id, api_factory)
