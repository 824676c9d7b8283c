"""
Brief generation pipeline.

Runs metadata lookup, chapter detection, transcript fetch and summarization
for a single video. Persistence is left to the callers.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from tubebrief.config import Settings, get_settings
from tubebrief.parsing import extract_chapters, extract_urls
from tubebrief.schemas.content import StructuredBrief
from tubebrief.services.exceptions import GenerationConfigError
from tubebrief.services.summarizer import summarize_transcript
from tubebrief.services.transcript import fetch_transcript
from tubebrief.services.youtube import VideoMetadata, fetch_video_metadata

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], Awaitable[None]]


@dataclass
class GeneratedBrief:
    """Result of a successful generation run."""

    metadata: VideoMetadata
    content: StructuredBrief
    has_creator_chapters: bool


class BriefGenerator:
    """Produces brief content for a video from external services."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def ensure_configured(self) -> None:
        if not self.settings.anthropic_api_key or not self.settings.youtube_api_key:
            raise GenerationConfigError()

    async def generate(
        self,
        video_id: str,
        progress: Optional[ProgressCallback] = None,
    ) -> GeneratedBrief:
        self.ensure_configured()

        async def report(step: str) -> None:
            if progress is not None:
                await progress(step)

        await report("metadata")
        metadata = await fetch_video_metadata(
            video_id,
            api_key=self.settings.youtube_api_key,
            config=self.settings.youtube,
        )
        chapters = extract_chapters(metadata.description, metadata.duration_seconds)
        urls = extract_urls(metadata.description)

        await report("transcript")
        transcript = await fetch_transcript(video_id)

        await report("analyzing")
        content = await summarize_transcript(
            title=metadata.title,
            channel_title=metadata.channel_title,
            transcript=transcript,
            urls=urls,
            chapters=chapters,
        )

        logger.info(
            f"Generated brief for {video_id}: {len(content.sections)} sections, "
            f"{len(content.related_links) + len(content.other_links)} links"
        )
        return GeneratedBrief(
            metadata=metadata,
            content=content,
            has_creator_chapters=chapters is not None,
        )
