"""Projects API endpoints."""

from __future__ import annotations

from flvr_cli.models.core import Devlog, Project

from .client import FlavortownClient
from .decoding import decode_list, decode_one, wrapped_then_bare
from .errors import Section

PROJECT_LIST_SHAPES = wrapped_then_bare("projects")
PROJECT_SHAPES = wrapped_then_bare("project")
DEVLOG_LIST_SHAPES = wrapped_then_bare("devlogs")


class ProjectsAPI:
    """Projects API client."""

    def __init__(self, client: FlavortownClient):
        self.client = client

    async def list_projects(self) -> list[Project]:
        """List projects."""
        response = await self.client.get("/projects", section=Section.PROJECTS)
        return decode_list(response.content, Project, PROJECT_LIST_SHAPES, Section.PROJECTS)

    async def get_project(self, project_id: int) -> Project:
        """Get a specific project by ID."""
        response = await self.client.get(f"/projects/{project_id}", section=Section.PROJECTS)
        return decode_one(response.content, Project, PROJECT_SHAPES, Section.PROJECTS)

    async def list_devlogs(self, project_id: int) -> list[Devlog]:
        """List the devlogs posted on a project."""
        response = await self.client.get(
            f"/projects/{project_id}/devlogs", section=Section.DEVLOGS
        )
        return decode_list(response.content, Devlog, DEVLOG_LIST_SHAPES, Section.DEVLOGS)
