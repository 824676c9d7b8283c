"""
Unit Tests: Parsing

Video id extraction, durations, timestamps, chapters, URLs, slugs and
search text.
"""

import pytest

from tubebrief.parsing import (
    build_search_text,
    combine_urls,
    create_slug,
    extract_chapters,
    extract_urls,
    extract_video_id,
    format_timestamp,
    parse_duration_to_seconds,
    parse_timestamp,
)


@pytest.mark.parametrize(
    "url",
    [
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "https://youtube.com/watch?v=dQw4w9WgXcQ&t=42s",
        "https://m.youtube.com/watch?v=dQw4w9WgXcQ",
        "https://music.youtube.com/watch?v=dQw4w9WgXcQ",
        "https://youtu.be/dQw4w9WgXcQ?si=abc",
        "https://www.youtube.com/shorts/dQw4w9WgXcQ",
        "https://www.youtube.com/embed/dQw4w9WgXcQ",
        "https://www.youtube.com/live/dQw4w9WgXcQ",
        "youtube.com/watch?v=dQw4w9WgXcQ",
        "dQw4w9WgXcQ",
    ],
)
def test_extract_video_id_accepts_supported_forms(url):
    assert extract_video_id(url) == "dQw4w9WgXcQ"


@pytest.mark.parametrize(
    "url",
    [
        None,
        "",
        "not a url",
        "https://vimeo.com/123456",
        "https://www.youtube.com/watch?v=short",
        "https://www.youtube.com/channel/UC1234567890",
        "https://example.com/watch?v=dQw4w9WgXcQ",
    ],
)
def test_extract_video_id_rejects_other_urls(url):
    assert extract_video_id(url) is None


def test_parse_duration_to_seconds():
    assert parse_duration_to_seconds("PT1H2M3S") == 3723
    assert parse_duration_to_seconds("PT45S") == 45
    assert parse_duration_to_seconds("PT10M") == 600
    assert parse_duration_to_seconds("P1DT1S") == 86401
    assert parse_duration_to_seconds("garbage") == 0
    assert parse_duration_to_seconds(None) == 0


def test_format_and_parse_timestamp():
    assert format_timestamp(0) == "0:00"
    assert format_timestamp(75) == "1:15"
    assert format_timestamp(3723) == "1:02:03"
    assert parse_timestamp("1:15") == 75
    assert parse_timestamp("01:02:03") == 3723
    assert parse_timestamp("1:75") == 0
    assert parse_timestamp("abc") == 0


def test_extract_chapters_valid_list():
    description = """Great video about things.

0:00 Intro
(1:30) - Setup
12:05 | Deep dive
1:02:00 Outro

Links: https://example.com
"""
    chapters = extract_chapters(description, duration_seconds=3900)

    assert [c.title for c in chapters] == ["Intro", "Setup", "Deep dive", "Outro"]
    assert [c.start_seconds for c in chapters] == [0, 90, 725, 3720]
    assert chapters[0].end_seconds == 90
    assert chapters[-1].end_seconds == 3900
    assert chapters[2].timestamp_start == "12:05"
    assert chapters[3].timestamp_start == "1:02:00"


def test_extract_chapters_requires_three_starting_at_zero():
    assert extract_chapters("0:00 Intro\n1:00 End", 120) is None
    assert extract_chapters("0:10 Intro\n1:00 Middle\n2:00 End", 180) is None
    assert extract_chapters("0:00 Intro\n2:00 Middle\n1:00 End", 180) is None
    assert extract_chapters("", 180) is None


def test_extract_chapters_last_end_never_before_start():
    chapters = extract_chapters("0:00 A\n1:00 B\n5:00 C", duration_seconds=0)
    assert chapters[-1].end_seconds == 300


def test_extract_urls_strips_punctuation_and_dedupes():
    text = (
        "Sponsor: https://sponsor.example.com/deal. "
        "Paper (https://arxiv.org/abs/1234) and again https://sponsor.example.com/deal!"
    )
    assert extract_urls(text) == [
        "https://sponsor.example.com/deal",
        "https://arxiv.org/abs/1234",
    ]
    assert extract_urls(None) == []


def test_combine_urls_keeps_first_occurrence():
    assert combine_urls(["a", "b"], ["b", "c", ""]) == ["a", "b", "c"]


def test_create_slug():
    assert create_slug("Hello, World! 2024") == "hello-world-2024"
    assert create_slug("  --Already--Slugged--  ") == "already-slugged"
    assert create_slug("a" * 80) == "a" * 60
    assert create_slug(None) == ""


def test_build_search_text_collects_all_parts():
    text = build_search_text(
        "Main summary",
        sections=[
            {"title": "Part one", "keyPoints": ["first point", {"text": "legacy point"}]},
        ],
        related_links=[{"url": "https://a", "title": "Paper", "description": "The paper"}],
        other_links=[{"url": "https://b", "title": "Merch"}],
    )

    for fragment in ("Main summary", "Part one", "first point", "legacy point", "Paper", "The paper", "Merch"):
        assert fragment in text
    assert "https://a" not in text


def test_build_search_text_empty():
    assert build_search_text(None) == ""
