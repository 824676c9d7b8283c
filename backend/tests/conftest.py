"""Shared fixtures: environment, in-memory database and fake generation."""

import asyncio
import os
from datetime import datetime, timezone

# Must be set before tubebrief.config.get_settings() is first called
os.environ["DATABASE__URL"] = "sqlite+aiosqlite://"
os.environ["JOBS__BACKEND"] = "background"
os.environ["ALLOWED_EMAILS"] = "alice@example.com"
os.environ["LOGFIRE_TOKEN"] = ""
os.environ["ANTHROPIC_API_KEY"] = ""
os.environ["YOUTUBE_API_KEY"] = ""

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import tubebrief.models  # noqa: F401
from tubebrief.database.base import Base
from tubebrief.schemas.content import BriefLink, BriefSection, StructuredBrief
from tubebrief.services.exceptions import GenerationConfigError
from tubebrief.services.generator import GeneratedBrief
from tubebrief.services.youtube import VideoMetadata


def make_engine():
    return create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


async def create_tables(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def run_db():
    """Run `fn(session_factory)` against a fresh in-memory database."""

    def _run(fn):
        async def _main():
            engine = make_engine()
            try:
                await create_tables(engine)
                factory = async_sessionmaker(engine, expire_on_commit=False)
                return await fn(factory)
            finally:
                await engine.dispose()

        return asyncio.run(_main())

    return _run


def make_generated(
    video_id: str = "dQw4w9WgXcQ",
    title: str = "Never Gonna Give You Up",
    summary: str = "A song about commitment.",
    channel: str = "Rick Astley",
) -> GeneratedBrief:
    return GeneratedBrief(
        metadata=VideoMetadata(
            video_id=video_id,
            title=title,
            channel_title=channel,
            description="",
            duration="PT3M33S",
            published_at=datetime(2009, 10, 25, tzinfo=timezone.utc),
        ),
        content=StructuredBrief(
            summary=summary,
            sections=[
                BriefSection(
                    title="Chorus",
                    timestamp_start="0:00",
                    timestamp_end="3:33",
                    key_points=["Never gonna give you up"],
                )
            ],
            related_links=[BriefLink(url="https://example.com/lyrics", title="Lyrics")],
            other_links=[],
        ),
        has_creator_chapters=False,
    )


class FakeGenerator:
    """Stands in for BriefGenerator; reports the same progress steps."""

    def __init__(self, error: Exception | None = None, configured: bool = True, **generated):
        self.error = error
        self.configured = configured
        self.generated = generated
        self.calls: list[str] = []

    def ensure_configured(self) -> None:
        if not self.configured:
            raise GenerationConfigError()

    async def generate(self, video_id, progress=None):
        self.ensure_configured()
        self.calls.append(video_id)
        for step in ("metadata", "transcript", "analyzing"):
            if progress is not None:
                await progress(step)
        if self.error is not None:
            raise self.error
        return make_generated(video_id, **self.generated)
