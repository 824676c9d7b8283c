"""URL extraction, slugs and search text."""

import re
from typing import Any, Iterable, Mapping, Optional

URL_PATTERN = re.compile(r"https?://[^\s<>\"'\]\)]+", re.IGNORECASE)
TRAILING_PUNCTUATION = ".,;:!?)]}'\""
SLUG_SEPARATOR_PATTERN = re.compile(r"[^a-z0-9]+")


def extract_urls(text: Optional[str]) -> list[str]:
    """Return the http(s) URLs in text, de-duplicated in order of appearance."""
    if not text:
        return []
    urls = (match.rstrip(TRAILING_PUNCTUATION) for match in URL_PATTERN.findall(text))
    return combine_urls(urls)


def combine_urls(*url_lists: Iterable[str]) -> list[str]:
    """Merge URL lists keeping the first occurrence of each URL."""
    seen: set[str] = set()
    combined = []
    for urls in url_lists:
        for url in urls:
            if url and url not in seen:
                seen.add(url)
                combined.append(url)
    return combined


def create_slug(text: Optional[str], max_length: int = 60) -> str:
    """Lower-case slug with non-alphanumeric runs collapsed to single dashes."""
    slug = SLUG_SEPARATOR_PATTERN.sub("-", (text or "").lower()).strip("-")
    return slug[:max_length].rstrip("-")


def _key_point_text(key_point: Any) -> str:
    # Older rows store key points as {"text": ...}
    if isinstance(key_point, Mapping):
        return str(key_point.get("text") or "")
    return str(key_point or "")


def build_search_text(
    summary: Optional[str],
    sections: Optional[Iterable[Mapping[str, Any]]] = None,
    related_links: Optional[Iterable[Mapping[str, Any]]] = None,
    other_links: Optional[Iterable[Mapping[str, Any]]] = None,
) -> str:
    """Concatenate the searchable parts of a brief."""
    parts: list[str] = []
    if summary:
        parts.append(summary)

    for section in sections or []:
        if section.get("title"):
            parts.append(section["title"])
        for key_point in section.get("keyPoints") or []:
            text = _key_point_text(key_point)
            if text:
                parts.append(text)

    for link in [*(related_links or []), *(other_links or [])]:
        for field in ("title", "description"):
            if link.get(field):
                parts.append(link[field])

    return " ".join(parts)
