"""Project routes — CRUD, title page, calculators per project, totals."""
from fastapi import APIRouter, Depends

from sitecalc.api.deps import get_actor, get_calculator_service, get_project_service
from sitecalc.models.actor import Actor
from sitecalc.models.api_schemas import (
    CalculatorCreateRequest,
    ProjectCreateRequest,
    RenameRequest,
    TitlePageUpdate,
)
from sitecalc.models.estimate_models import Estimate, Project
from sitecalc.services.calculator_service import CalculatorService
from sitecalc.services.project_service import ProjectService

router = APIRouter(prefix="/api/projects", tags=["Projects"])


@router.post("", response_model=Project, status_code=201)
async def create_project(
    req: ProjectCreateRequest,
    actor: Actor = Depends(get_actor),
    projects: ProjectService = Depends(get_project_service),
):
    return await projects.create_project(actor, req.name)


@router.get("", response_model=list[Project])
async def list_projects(
    actor: Actor = Depends(get_actor),
    projects: ProjectService = Depends(get_project_service),
):
    return await projects.list_projects(actor)


@router.get("/{project_id}", response_model=Project)
async def get_project(
    project_id: str,
    actor: Actor = Depends(get_actor),
    projects: ProjectService = Depends(get_project_service),
):
    return await projects.get_project(actor, project_id)


@router.patch("/{project_id}/name", response_model=Project)
async def rename_project(
    project_id: str,
    req: RenameRequest,
    actor: Actor = Depends(get_actor),
    projects: ProjectService = Depends(get_project_service),
):
    return await projects.rename_project(actor, project_id, req.name)


@router.patch("/{project_id}/title-page", response_model=Project)
async def update_title_page(
    project_id: str,
    req: TitlePageUpdate,
    actor: Actor = Depends(get_actor),
    projects: ProjectService = Depends(get_project_service),
):
    return await projects.update_title_page(actor, project_id, req.model_dump())


@router.delete("/{project_id}", status_code=204)
async def delete_project(
    project_id: str,
    actor: Actor = Depends(get_actor),
    projects: ProjectService = Depends(get_project_service),
):
    await projects.delete_project(actor, project_id)


@router.get("/{project_id}/totals")
async def project_totals(
    project_id: str,
    actor: Actor = Depends(get_actor),
    projects: ProjectService = Depends(get_project_service),
):
    """Per-calculator grand totals and the project total (Measurement sheets excluded)."""
    return await projects.project_totals(actor, project_id)


@router.get("/{project_id}/calculators", response_model=list[Estimate])
async def list_calculators(
    project_id: str,
    actor: Actor = Depends(get_actor),
    calculators: CalculatorService = Depends(get_calculator_service),
):
    return await calculators.list_calculators(actor, project_id)


@router.post("/{project_id}/calculators", response_model=Estimate, status_code=201)
async def create_calculator(
    project_id: str,
    req: CalculatorCreateRequest,
    actor: Actor = Depends(get_actor),
    calculators: CalculatorService = Depends(get_calculator_service),
):
    return await calculators.create_calculator(actor, project_id, req.name, req.variant)
