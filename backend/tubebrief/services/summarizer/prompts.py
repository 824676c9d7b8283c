"""Prompts for the brief summarizer agent."""

from tubebrief.parsing import Chapter

SUMMARIZER_SYSTEM_PROMPT = """You turn YouTube video transcripts into concise, skimmable briefs.

<output_rules>
- summary: 2-4 short paragraphs capturing the thesis, the main arguments and the conclusion.
  Write in plain prose, present tense, no marketing language, no "in this video".
- sections: ordered, non-overlapping parts of the video.
  - title: short and descriptive (max ~8 words).
  - timestampStart / timestampEnd: M:SS or H:MM:SS taken from the transcript timestamps.
  - keyPoints: 2-6 concrete takeaways per section, each a single sentence.
- relatedLinks: URLs from the provided list that are directly about the video's subject
  (papers, tools, docs, referenced articles).
- otherLinks: every remaining URL from the provided list (sponsors, socials, merch, patreon).
</output_rules>

<link_rules>
- Only use URLs from the "URLs found in description" list. Never invent, shorten or edit URLs.
- Every provided URL belongs in exactly one of relatedLinks or otherLinks.
- title: the name of the resource; description: one sentence on what it is.
- If no URLs are provided, return empty link lists.
</link_rules>

<accuracy_rules>
- Only state what the transcript supports. Auto-generated captions contain errors;
  correct obvious mis-transcriptions of names and terms from context.
- Timestamps must exist within the video's duration.
</accuracy_rules>
"""


def _urls_section(urls: list[str]) -> str:
    if not urls:
        return "URLs found in description: none"
    return "URLs found in description:\n" + "\n".join(urls)


def build_user_prompt(
    title: str,
    channel_title: str,
    formatted_transcript: str,
    urls: list[str],
) -> str:
    """Prompt for free-form sectioning."""
    return f"""Video title: {title}
Channel: {channel_title}

{_urls_section(urls)}

Split the video into 4-10 sections following natural topic changes.

<transcript>
{formatted_transcript}
</transcript>"""


def build_chapter_user_prompt(
    title: str,
    channel_title: str,
    formatted_transcript: str,
    urls: list[str],
    chapters: list[Chapter],
) -> str:
    """Prompt that pins sections to the creator's chapters."""
    chapter_lines = "\n".join(
        f"{index}. [{chapter.timestamp_start} - {chapter.timestamp_end}] {chapter.title}"
        for index, chapter in enumerate(chapters, start=1)
    )
    return f"""Video title: {title}
Channel: {channel_title}

{_urls_section(urls)}

The creator divided this video into chapters. Produce exactly one section per
chapter, in order, using the chapter title and its start/end timestamps.

<chapters>
{chapter_lines}
</chapters>

<transcript>
{formatted_transcript}
</transcript>"""
