"""Creator chapter extraction from video descriptions."""

import re
from dataclasses import dataclass
from typing import Optional

from tubebrief.parsing.video import format_timestamp, parse_timestamp

# "0:00 Intro", "(1:02:03) - Deep dive", "12:30 | Q&A"
CHAPTER_LINE_PATTERN = re.compile(
    r"^\s*[\[(]?(?P<time>\d{1,2}(?::\d{2}){1,2})[\])]?\s*[-–—:|.)]*\s*(?P<title>.+?)\s*$"
)
MIN_CHAPTERS = 3


@dataclass
class Chapter:
    """A creator-defined chapter of a video."""

    title: str
    start_seconds: int
    end_seconds: int

    @property
    def timestamp_start(self) -> str:
        return format_timestamp(self.start_seconds)

    @property
    def timestamp_end(self) -> str:
        return format_timestamp(self.end_seconds)


def extract_chapters(description: Optional[str], duration_seconds: int) -> Optional[list[Chapter]]:
    """
    Parse creator chapters from a video description.

    Chapters are lines starting with a timestamp. The list is only valid when
    it has at least three entries, starts at 0:00 and has strictly increasing
    start times. Each chapter ends where the next begins; the last ends at the
    video duration.

    Returns:
        The chapters, or None when the description has no valid chapter list.
    """
    if not description:
        return None

    starts: list[tuple[int, str]] = []
    for line in description.splitlines():
        match = CHAPTER_LINE_PATTERN.match(line)
        if not match:
            continue
        title = match.group("title").strip()
        if not title:
            continue
        starts.append((parse_timestamp(match.group("time")), title))

    if len(starts) < MIN_CHAPTERS or starts[0][0] != 0:
        return None

    for (previous, _), (current, _) in zip(starts, starts[1:]):
        if current <= previous:
            return None

    chapters = []
    for index, (start, title) in enumerate(starts):
        if index + 1 < len(starts):
            end = starts[index + 1][0]
        else:
            end = max(duration_seconds, start)
        chapters.append(Chapter(title=title, start_seconds=start, end_seconds=end))
    return chapters
