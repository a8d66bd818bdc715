"""
ProjectService — projects, their title page and the project-level rollup.

The project total sums the grand totals of priced calculators only;
Measurement calculators are takeoff sheets and stay out of it.
"""
import logging
from typing import Any, Dict, Optional

from sitecalc.config import UNPRICED_VARIANTS
from sitecalc.models.actor import Actor, owner_key
from sitecalc.models.estimate_models import Project
from sitecalc.services.document_store import DocumentStore
from sitecalc.services.errors import NotFoundError, ValidationError

logger = logging.getLogger("sitecalc-api")

TITLE_PAGE_FIELDS = ("date_sent", "job_address", "to_address")


class ProjectService:
    def __init__(self, store: DocumentStore):
        self.store = store

    async def create_project(self, actor: Actor, name: str) -> Project:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Project name is required")
        project = Project(name=name, owner_id=owner_key(actor))
        await self.store.save_project(actor, project)
        logger.info(f"Project '{name}' created", extra={"project_id": project.id})
        return project

    async def list_projects(self, actor: Actor) -> list[Project]:
        return await self.store.list_projects(actor)

    async def get_project(self, actor: Actor, project_id: str) -> Project:
        project = await self.store.load_project(actor, project_id)
        if project is None:
            raise NotFoundError("Project", project_id)
        return project

    async def rename_project(self, actor: Actor, project_id: str, new_name: str) -> Project:
        name = (new_name or "").strip()
        if not name:
            raise ValidationError("Project name is required")
        project = await self.get_project(actor, project_id)
        project.name = name
        await self.store.save_project(actor, project)
        return project

    async def update_title_page(self, actor: Actor, project_id: str, fields: Dict[str, Optional[str]]) -> Project:
        """Set any of date_sent / job_address / to_address; None leaves a field alone."""
        project = await self.get_project(actor, project_id)
        for key in TITLE_PAGE_FIELDS:
            value = fields.get(key)
            if value is not None:
                setattr(project, key, str(value))
        await self.store.save_project(actor, project)
        return project

    async def delete_project(self, actor: Actor, project_id: str) -> None:
        if not await self.store.delete_project(actor, project_id):
            raise NotFoundError("Project", project_id)
        logger.info("Project deleted", extra={"project_id": project_id})

    async def project_totals(self, actor: Actor, project_id: str) -> Dict[str, Any]:
        project = await self.get_project(actor, project_id)
        calculators = await self.store.list_estimates(actor, project_id)
        rows = [
            {"id": c.id, "name": c.name, "variant": c.variant.value, "grand_total": c.grand_total}
            for c in calculators
            if c.variant not in UNPRICED_VARIANTS
        ]
        return {
            "project_id": project.id,
            "project_name": project.name,
            "calculators": rows,
            "total": sum((row["grand_total"] for row in rows), 0.0),
        }
