"""API routes module."""

from tubebrief.api.routes.brief import router as brief_router
from tubebrief.api.routes.briefs import router as briefs_router
from tubebrief.api.routes.shared import router as shared_router
from tubebrief.api.routes.tags import router as tags_router

__all__ = [
    "brief_router",
    "briefs_router",
    "shared_router",
    "tags_router",
]
