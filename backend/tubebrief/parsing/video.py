"""YouTube URL, duration and timestamp parsing."""

import re
from typing import Optional
from urllib.parse import parse_qs, urlparse

VIDEO_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{11}$")
ISO_DURATION_PATTERN = re.compile(
    r"^P(?:(?P<days>\d+)D)?(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+)S)?)?$"
)

YOUTUBE_HOSTS = {"youtube.com", "www.youtube.com", "m.youtube.com", "music.youtube.com"}
SHORT_HOSTS = {"youtu.be", "www.youtu.be"}
PATH_PREFIXES = ("shorts", "embed", "live", "v")


def _valid_id(candidate: Optional[str]) -> Optional[str]:
    if candidate and VIDEO_ID_PATTERN.match(candidate):
        return candidate
    return None


def extract_video_id(url: Optional[str]) -> Optional[str]:
    """
    Extract the video id from a YouTube URL.

    Accepts watch, shorts, embed, live and youtu.be links as well as a bare
    11-character id. Returns None for anything else.
    """
    if not url:
        return None

    url = url.strip()
    if VIDEO_ID_PATTERN.match(url):
        return url

    if "://" not in url:
        url = f"https://{url}"

    try:
        parsed = urlparse(url)
    except ValueError:
        return None

    host = (parsed.hostname or "").lower()
    segments = [segment for segment in parsed.path.split("/") if segment]

    if host in SHORT_HOSTS:
        return _valid_id(segments[0]) if segments else None

    if host in YOUTUBE_HOSTS:
        if parsed.path == "/watch":
            values = parse_qs(parsed.query).get("v")
            return _valid_id(values[0]) if values else None
        if len(segments) >= 2 and segments[0] in PATH_PREFIXES:
            return _valid_id(segments[1])

    return None


def parse_duration_to_seconds(duration: Optional[str]) -> int:
    """Convert an ISO-8601 duration such as PT1H2M3S to seconds (0 when invalid)."""
    if not duration:
        return 0
    match = ISO_DURATION_PATTERN.match(duration.strip())
    if not match:
        return 0
    parts = {key: int(value) if value else 0 for key, value in match.groupdict().items()}
    return parts["days"] * 86400 + parts["hours"] * 3600 + parts["minutes"] * 60 + parts["seconds"]


def format_timestamp(seconds: float) -> str:
    """Format seconds as M:SS, or H:MM:SS for an hour or more."""
    total = max(int(seconds), 0)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def parse_timestamp(value: str) -> int:
    """Parse M:SS, MM:SS or H:MM:SS into seconds (0 when invalid)."""
    parts = value.strip().split(":")
    if len(parts) not in (2, 3) or not all(part.isdigit() for part in parts):
        return 0
    numbers = [int(part) for part in parts]
    if any(number >= 60 for number in numbers[1:]):
        return 0
    if len(numbers) == 2:
        minutes, secs = numbers
        return minutes * 60 + secs
    hours, minutes, secs = numbers
    return hours * 3600 + minutes * 60 + secs


def thumbnail_url(video_id: str) -> str:
    return f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"
