"""Structured brief content: sections, key points and links."""

from pydantic import Field

from tubebrief.schemas.common import BaseSchema


class BriefSection(BaseSchema):
    """One timestamped section of a video."""

    title: str = Field(description="Short descriptive title of the section")
    timestamp_start: str = Field(description="Section start as M:SS or H:MM:SS")
    timestamp_end: str = Field(description="Section end as M:SS or H:MM:SS")
    key_points: list[str] = Field(
        default_factory=list,
        description="Concise key points covered in the section",
    )


class BriefLink(BaseSchema):
    """A link mentioned in the video description."""

    url: str
    title: str = Field(description="Human readable name of the linked resource")
    description: str = Field(default="", description="One sentence on why it is relevant")


class StructuredBrief(BaseSchema):
    """Generated content of a brief."""

    summary: str = Field(description="Two to four paragraph summary of the video")
    sections: list[BriefSection] = Field(default_factory=list)
    related_links: list[BriefLink] = Field(
        default_factory=list,
        description="Description links directly related to the video topic",
    )
    other_links: list[BriefLink] = Field(
        default_factory=list,
        description="Remaining description links (sponsors, socials, merch)",
    )

    def to_columns(self) -> dict:
        """JSON-ready values for the brief content columns."""
        data = self.model_dump(by_alias=True)
        return {
            "summary": data["summary"],
            "sections": data["sections"],
            "related_links": data["relatedLinks"],
            "other_links": data["otherLinks"],
        }
