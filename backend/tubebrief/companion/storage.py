"""Recent brief list persisted as YAML."""

import logging
import shutil
import tempfile
import time
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

RecentStatus = Literal["processing", "completed", "failed"]


class RecentBrief(BaseModel):
    """A brief the companion submitted, newest first in the store."""

    job_id: str
    video_url: str
    video_title: str = ""
    status: RecentStatus = "processing"
    brief_id: Optional[str] = None
    error: Optional[str] = None
    created_at: float = Field(default_factory=time.time)
    seen: bool = False


def processing_briefs(briefs: list[RecentBrief]) -> list[RecentBrief]:
    return [b for b in briefs if b.status == "processing"]


def unseen_count(briefs: list[RecentBrief]) -> int:
    return sum(1 for b in briefs if b.status == "completed" and not b.seen)


class RecentBriefStore:
    """
    Bounded list of recently requested briefs.

    Entries are kept newest first and capped at max_recent. Every mutation
    rewrites the file atomically.
    """

    def __init__(self, path: Path, max_recent: int = 5):
        self.path = Path(path)
        self.max_recent = max_recent

    def load(self) -> list[RecentBrief]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Corrupted YAML in recent briefs file: {e}")
            raise
        if not raw_data:
            return []
        return [RecentBrief(**entry) for entry in raw_data.get("recent_briefs", [])]

    def save(self, briefs: list[RecentBrief]) -> None:
        """Atomically write the list (tempfile then rename)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {"recent_briefs": [b.model_dump(mode="json") for b in briefs[: self.max_recent]]}

        temp_path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                dir=self.path.parent,
                delete=False,
                suffix=".yaml",
                encoding="utf-8",
            ) as temp_file:
                yaml.dump(
                    data,
                    temp_file,
                    default_flow_style=False,
                    allow_unicode=True,
                    sort_keys=False,
                )
                temp_path = Path(temp_file.name)

            shutil.move(str(temp_path), str(self.path))
        except Exception as e:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            logger.error(f"Failed to save recent briefs: {e}")
            raise

    def add(self, job_id: str, video_url: str, video_title: str = "") -> RecentBrief:
        """Record a newly queued job."""
        entry = RecentBrief(job_id=job_id, video_url=video_url, video_title=video_title)
        self.save([entry, *self.load()])
        return entry

    def add_completed(
        self,
        job_id: str,
        video_url: str,
        video_title: str,
        brief_id: str,
    ) -> RecentBrief:
        """Record a brief the server returned from cache."""
        entry = RecentBrief(
            job_id=job_id,
            video_url=video_url,
            video_title=video_title,
            status="completed",
            brief_id=brief_id,
        )
        self.save([entry, *self.load()])
        return entry

    def update_status(
        self,
        job_id: str,
        status: RecentStatus,
        brief_id: Optional[str] = None,
        error: Optional[str] = None,
    ) -> bool:
        briefs = self.load()
        for brief in briefs:
            if brief.job_id == job_id:
                brief.status = status
                if brief_id:
                    brief.brief_id = brief_id
                if error:
                    brief.error = error
                self.save(briefs)
                return True
        return False

    def retry(self, old_job_id: str, new_job_id: str) -> bool:
        """Replace a failed entry in place with a new processing job."""
        briefs = self.load()
        for brief in briefs:
            if brief.job_id == old_job_id:
                brief.job_id = new_job_id
                brief.status = "processing"
                brief.error = None
                brief.brief_id = None
                brief.created_at = time.time()
                self.save(briefs)
                return True
        return False

    def remove(self, job_id: str) -> None:
        self.save([b for b in self.load() if b.job_id != job_id])

    def mark_all_seen(self) -> None:
        briefs = self.load()
        changed = False
        for brief in briefs:
            if brief.status == "completed" and not brief.seen:
                brief.seen = True
                changed = True
        if changed:
            self.save(briefs)
