"""
Unit Tests: External Services

YouTube Data API client, transcript fetching and the summarizer agent,
each against an in-process fake.
"""

import asyncio

import httpx
import pytest
from pydantic_ai.models.test import TestModel
from youtube_transcript_api import NoTranscriptFound, TranscriptsDisabled, VideoUnavailable

from tubebrief.parsing import Chapter
from tubebrief.schemas.content import BriefLink, BriefSection, StructuredBrief
from tubebrief.services.summarizer.main import (
    _create_summarizer_agent,
    normalize_brief,
    summarize_transcript,
)
from tubebrief.services.transcript import (
    NoCaptionsError,
    TranscriptEntry,
    TranscriptError,
    VideoUnavailableError,
    fetch_transcript,
    fetch_transcript_sync,
    format_transcript,
)
from tubebrief.services.youtube import (
    YouTubeAuthError,
    YouTubeClient,
    YouTubeConfig,
    YouTubeNotFoundError,
)

VIDEO_ITEM = {
    "id": "dQw4w9WgXcQ",
    "snippet": {
        "title": "Never Gonna Give You Up",
        "channelTitle": "Rick Astley",
        "description": "0:00 Intro\nhttps://example.com",
        "publishedAt": "2009-10-25T06:57:33Z",
    },
    "contentDetails": {"duration": "PT3M33S"},
}


# =============================================================================
# YouTube Data API
# =============================================================================


def _youtube(handler, **config):
    return YouTubeClient(
        "key",
        YouTubeConfig(base_url="https://yt.test/v3", **config),
        transport=httpx.MockTransport(handler),
    )


async def _metadata(client: YouTubeClient, video_id: str = "dQw4w9WgXcQ"):
    async with client:
        return await client.get_video_metadata(video_id)


def test_youtube_metadata_parsed():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"items": [VIDEO_ITEM]})

    metadata = asyncio.run(_metadata(_youtube(handler)))

    assert seen["path"] == "/v3/videos"
    assert seen["params"]["id"] == "dQw4w9WgXcQ"
    assert seen["params"]["key"] == "key"
    assert metadata.title == "Never Gonna Give You Up"
    assert metadata.channel_title == "Rick Astley"
    assert metadata.duration_seconds == 213
    assert metadata.published_at.year == 2009
    assert metadata.thumbnail_url.endswith("/dQw4w9WgXcQ/hqdefault.jpg")


def test_youtube_missing_video():
    client = _youtube(lambda request: httpx.Response(200, json={"items": []}))
    with pytest.raises(YouTubeNotFoundError):
        asyncio.run(_metadata(client))


def test_youtube_rejected_key():
    client = _youtube(lambda request: httpx.Response(403, text="quotaExceeded"))
    with pytest.raises(YouTubeAuthError):
        asyncio.run(_metadata(client))


def test_youtube_requires_api_key():
    with pytest.raises(YouTubeAuthError):
        YouTubeClient("")


# =============================================================================
# Transcripts
# =============================================================================


class FakeSnippet:
    def __init__(self, text, start, duration=1.0):
        self.text = text
        self.start = start
        self.duration = duration


class FakeTranscript:
    def __init__(self, language_code, snippets):
        self.language_code = language_code
        self._snippets = snippets

    def fetch(self):
        return self._snippets


class FakeTranscriptList:
    def __init__(self, manual=None, generated=None, others=()):
        self.manual = manual
        self.generated = generated
        self.others = list(others)

    def find_manually_created_transcript(self, languages):
        if self.manual is None:
            raise NoTranscriptFound("vid", languages, self)
        return self.manual

    def find_generated_transcript(self, languages):
        if self.generated is None:
            raise NoTranscriptFound("vid", languages, self)
        return self.generated

    def __iter__(self):
        return iter(self.others)


def _factory(result):
    class FakeApi:
        def list(self, video_id):
            if isinstance(result, Exception):
                raise result
            return result

    return FakeApi


def test_transcript_prefers_manual_english():
    manual = FakeTranscript("en", [FakeSnippet("hello", 0), FakeSnippet("world", 65.5)])
    generated = FakeTranscript("en", [FakeSnippet("auto", 0)])

    entries = fetch_transcript_sync("vid", _factory(FakeTranscriptList(manual, generated)))

    assert [e.text for e in entries] == ["hello", "world"]
    assert entries[1].timestamp == "1:05"
    assert entries[0].lang == "en"


def test_transcript_falls_back_to_any_language():
    german = FakeTranscript("de", [FakeSnippet("hallo", 0)])
    entries = asyncio.run(
        fetch_transcript("vid", _factory(FakeTranscriptList(others=[german])))
    )
    assert entries[0].lang == "de"


def test_transcript_without_tracks_is_no_captions():
    with pytest.raises(NoCaptionsError):
        fetch_transcript_sync("vid", _factory(FakeTranscriptList()))


def test_transcript_error_mapping():
    with pytest.raises(NoCaptionsError):
        fetch_transcript_sync("vid", _factory(TranscriptsDisabled("vid")))
    with pytest.raises(VideoUnavailableError):
        fetch_transcript_sync("vid", _factory(VideoUnavailable("vid")))
    with pytest.raises(TranscriptError, match="Failed to fetch transcript: boom"):
        fetch_transcript_sync("vid", _factory(RuntimeError("boom")))


def test_format_transcript_truncates_on_line_boundary():
    entries = [TranscriptEntry(text=f"line {i}", offset=i * 10) for i in range(10)]

    full = format_transcript(entries)
    assert full.splitlines()[1] == "[0:10] line 1"

    truncated = format_transcript(entries, max_chars=40)
    assert truncated.endswith("\n[transcript truncated]")
    assert all(line.startswith("[") for line in truncated.splitlines())


# =============================================================================
# Summarizer
# =============================================================================


def _brief(**overrides) -> StructuredBrief:
    data = {
        "summary": "  A talk about things.  ",
        "sections": [
            BriefSection(title="Intro", timestamp_start="0:00", timestamp_end="1:00", key_points=["hi", " "]),
            BriefSection(title=" ", timestamp_start="1:00", timestamp_end="2:00", key_points=[]),
            BriefSection(title="Main", timestamp_start="1:00", timestamp_end="3:00", key_points=["point"]),
        ],
        "related_links": [
            BriefLink(url="https://paper.example.com/", title="Paper"),
            BriefLink(url="https://invented.example.com", title="Made up"),
        ],
        "other_links": [
            BriefLink(url="https://paper.example.com", title="Paper again"),
            BriefLink(url="https://shop.example.com", title="Merch"),
        ],
    }
    data.update(overrides)
    return StructuredBrief(**data)


def test_normalize_brief_filters_links_and_sections():
    urls = ["https://paper.example.com", "https://shop.example.com"]

    result = normalize_brief(_brief(), urls)

    assert result.summary == "A talk about things."
    assert [s.title for s in result.sections] == ["Intro", "Main"]
    assert result.sections[0].key_points == ["hi"]
    assert [link.url for link in result.related_links] == ["https://paper.example.com"]
    assert [link.title for link in result.other_links] == ["Merch"]


def test_normalize_brief_applies_chapter_boundaries():
    chapters = [
        Chapter(title="Opening", start_seconds=0, end_seconds=75),
        Chapter(title="Body", start_seconds=75, end_seconds=200),
    ]

    result = normalize_brief(_brief(), [], chapters)

    assert [(s.timestamp_start, s.timestamp_end) for s in result.sections] == [
        ("0:00", "1:15"),
        ("1:15", "3:20"),
    ]


def test_summarize_transcript_with_test_model():
    model = TestModel(
        custom_output_args={
            "summary": "Summary text",
            "sections": [
                {"title": "Intro", "timestampStart": "0:00", "timestampEnd": "0:30", "keyPoints": ["a"]}
            ],
            "relatedLinks": [{"url": "https://paper.example.com", "title": "Paper"}],
            "otherLinks": [{"url": "https://nowhere.example.com", "title": "Nope"}],
        }
    )
    agent = _create_summarizer_agent(model)
    transcript = [TranscriptEntry(text="hello there", offset=0)]

    result = asyncio.run(
        summarize_transcript(
            "Title",
            "Channel",
            transcript,
            ["https://paper.example.com"],
            agent=agent,
        )
    )

    assert result.summary == "Summary text"
    assert result.sections[0].key_points == ["a"]
    assert [link.url for link in result.related_links] == ["https://paper.example.com"]
    assert result.other_links == []
