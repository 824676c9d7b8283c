"""Pure parsing helpers: video URLs, timestamps, chapters, links and slugs."""

from tubebrief.parsing.chapters import Chapter, extract_chapters
from tubebrief.parsing.text import (
    build_search_text,
    combine_urls,
    create_slug,
    extract_urls,
)
from tubebrief.parsing.video import (
    extract_video_id,
    format_timestamp,
    parse_duration_to_seconds,
    parse_timestamp,
    thumbnail_url,
)

__all__ = [
    "Chapter",
    "extract_chapters",
    "extract_video_id",
    "format_timestamp",
    "parse_duration_to_seconds",
    "parse_timestamp",
    "thumbnail_url",
    "extract_urls",
    "combine_urls",
    "create_slug",
    "build_search_text",
]
