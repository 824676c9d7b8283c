"""Summarizer agent: transcript to structured brief."""

import logging
import os

from pydantic_ai import Agent
from pydantic_ai.models import Model
from pydantic_ai.settings import ModelSettings

from tubebrief.config import get_settings
from tubebrief.parsing import Chapter
from tubebrief.schemas.content import BriefLink, BriefSection, StructuredBrief
from tubebrief.services.transcript import TranscriptEntry, format_transcript

from .prompts import (
    SUMMARIZER_SYSTEM_PROMPT,
    build_chapter_user_prompt,
    build_user_prompt,
)

logger = logging.getLogger(__name__)


def _create_summarizer_agent(model: Model | str | None = None) -> Agent[None, StructuredBrief]:
    """Create the summarizer agent (called lazily to avoid loading API keys at import time)."""
    config = get_settings().summarizer
    return Agent(
        model=model or config.model,
        output_type=StructuredBrief,
        system_prompt=SUMMARIZER_SYSTEM_PROMPT,
        model_settings=ModelSettings(
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        ),
        retries=config.retries,
    )


# Global agent instance (created on first use)
_summarizer_agent: Agent[None, StructuredBrief] | None = None


def get_summarizer_agent() -> Agent[None, StructuredBrief]:
    """Get the singleton summarizer agent instance."""
    global _summarizer_agent
    if _summarizer_agent is None:
        # ensure API key is set for pydantic-ai
        settings = get_settings()
        if settings.anthropic_api_key:
            os.environ["ANTHROPIC_API_KEY"] = settings.anthropic_api_key

        _summarizer_agent = _create_summarizer_agent()
    return _summarizer_agent


def _normalize_url(url: str) -> str:
    return url.strip().rstrip("/")


def _filter_links(links: list[BriefLink], allowed: dict[str, str], used: set[str]) -> list[BriefLink]:
    kept = []
    for link in links:
        key = _normalize_url(link.url)
        if key not in allowed or key in used:
            continue
        used.add(key)
        kept.append(link.model_copy(update={"url": allowed[key]}))
    return kept


def normalize_brief(
    brief: StructuredBrief,
    urls: list[str],
    chapters: list[Chapter] | None = None,
) -> StructuredBrief:
    """
    Clean model output before it is stored.

    Links the model returned that were not in the description are dropped,
    duplicates removed, sections without a title and key points removed and,
    when the sections line up with creator chapters, their boundaries are
    taken from the chapters.
    """
    allowed = {_normalize_url(url): url for url in urls}
    used: set[str] = set()
    related = _filter_links(brief.related_links, allowed, used)
    other = _filter_links(brief.other_links, allowed, used)

    sections = []
    for section in brief.sections:
        key_points = [point.strip() for point in section.key_points if point.strip()]
        if not section.title.strip() and not key_points:
            continue
        sections.append(
            section.model_copy(update={"title": section.title.strip(), "key_points": key_points})
        )

    if chapters and len(sections) == len(chapters):
        sections = [
            BriefSection(
                title=section.title or chapter.title,
                timestamp_start=chapter.timestamp_start,
                timestamp_end=chapter.timestamp_end,
                key_points=section.key_points,
            )
            for section, chapter in zip(sections, chapters)
        ]

    return StructuredBrief(
        summary=brief.summary.strip(),
        sections=sections,
        related_links=related,
        other_links=other,
    )


async def summarize_transcript(
    title: str,
    channel_title: str,
    transcript: list[TranscriptEntry],
    urls: list[str],
    chapters: list[Chapter] | None = None,
    agent: Agent[None, StructuredBrief] | None = None,
) -> StructuredBrief:
    """Run the summarizer agent and return normalized structured content."""
    max_chars = get_settings().summarizer.max_transcript_chars
    formatted = format_transcript(transcript, max_chars=max_chars)

    if chapters:
        prompt = build_chapter_user_prompt(title, channel_title, formatted, urls, chapters)
    else:
        prompt = build_user_prompt(title, channel_title, formatted, urls)

    agent = agent or get_summarizer_agent()
    logger.info(
        f"Summarizing {title!r} ({len(transcript)} entries, {len(urls)} urls, "
        f"chapters={'yes' if chapters else 'no'})"
    )
    result = await agent.run(prompt)
    return normalize_brief(result.output, urls, chapters)
