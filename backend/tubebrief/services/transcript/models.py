"""Transcript models."""

from pydantic import BaseModel

from tubebrief.parsing import format_timestamp


class TranscriptEntry(BaseModel):
    """One caption cue."""

    text: str
    offset: float  # seconds from start of video
    duration: float = 0.0
    lang: str | None = None

    @property
    def timestamp(self) -> str:
        return format_timestamp(self.offset)


def format_transcript(entries: list[TranscriptEntry], max_chars: int | None = None) -> str:
    """Render entries as "[M:SS] text" lines, truncated to max_chars."""
    lines = [
        f"[{entry.timestamp}] {entry.text.strip()}"
        for entry in entries
        if entry.text.strip()
    ]
    formatted = "\n".join(lines)
    if max_chars is not None and len(formatted) > max_chars:
        cut = formatted.rfind("\n", 0, max_chars)
        formatted = formatted[: cut if cut > 0 else max_chars] + "\n[transcript truncated]"
    return formatted
