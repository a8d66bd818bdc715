"""
Calculator routes — the mutation API over HTTP.

Each call is one load → apply → save cycle and returns the whole calculator
with totals already refreshed.
"""
from fastapi import APIRouter, Depends

from sitecalc.api.deps import get_actor, get_calculator_service
from sitecalc.models.actor import Actor
from sitecalc.models.api_schemas import FieldUpdateRequest, RenameRequest, SectionRenameRequest
from sitecalc.models.estimate_models import Estimate
from sitecalc.services.calculator_service import CalculatorService

router = APIRouter(prefix="/api/calculators", tags=["Calculators"])


@router.get("/{calculator_id}", response_model=Estimate)
async def get_calculator(
    calculator_id: str,
    actor: Actor = Depends(get_actor),
    svc: CalculatorService = Depends(get_calculator_service),
):
    return await svc.get_calculator(actor, calculator_id)


@router.delete("/{calculator_id}", response_model=Estimate)
async def delete_calculator(
    calculator_id: str,
    actor: Actor = Depends(get_actor),
    svc: CalculatorService = Depends(get_calculator_service),
):
    return await svc.delete_calculator(actor, calculator_id)


@router.patch("/{calculator_id}/name", response_model=Estimate)
async def rename_calculator(
    calculator_id: str,
    req: RenameRequest,
    actor: Actor = Depends(get_actor),
    svc: CalculatorService = Depends(get_calculator_service),
):
    return await svc.rename_calculator(actor, calculator_id, req.name)


# ─── Sections ────────────────────────────────────────────────────────────────

@router.post("/{calculator_id}/sections", response_model=Estimate)
async def add_section(
    calculator_id: str,
    actor: Actor = Depends(get_actor),
    svc: CalculatorService = Depends(get_calculator_service),
):
    return await svc.add_section(actor, calculator_id)


@router.delete("/{calculator_id}/sections/{section_id}", response_model=Estimate)
async def delete_section(
    calculator_id: str,
    section_id: str,
    actor: Actor = Depends(get_actor),
    svc: CalculatorService = Depends(get_calculator_service),
):
    return await svc.delete_section(actor, calculator_id, section_id)


@router.patch("/{calculator_id}/sections/{section_id}/title", response_model=Estimate)
async def rename_section(
    calculator_id: str,
    section_id: str,
    req: SectionRenameRequest,
    actor: Actor = Depends(get_actor),
    svc: CalculatorService = Depends(get_calculator_service),
):
    return await svc.rename_section(actor, calculator_id, section_id, req.title)


# ─── Lines ───────────────────────────────────────────────────────────────────
# The /bulk routes are declared before /{line_id} so "bulk" is never read as a line id.

@router.post("/{calculator_id}/sections/{section_id}/lines/bulk", response_model=Estimate)
async def add_ten_lines(
    calculator_id: str,
    section_id: str,
    actor: Actor = Depends(get_actor),
    svc: CalculatorService = Depends(get_calculator_service),
):
    return await svc.add_ten_lines(actor, calculator_id, section_id)


@router.delete("/{calculator_id}/sections/{section_id}/lines/bulk", response_model=Estimate)
async def delete_ten_lines(
    calculator_id: str,
    section_id: str,
    actor: Actor = Depends(get_actor),
    svc: CalculatorService = Depends(get_calculator_service),
):
    return await svc.delete_ten_lines(actor, calculator_id, section_id)


@router.post("/{calculator_id}/sections/{section_id}/lines", response_model=Estimate)
async def add_line(
    calculator_id: str,
    section_id: str,
    actor: Actor = Depends(get_actor),
    svc: CalculatorService = Depends(get_calculator_service),
):
    return await svc.add_line(actor, calculator_id, section_id)


@router.delete("/{calculator_id}/sections/{section_id}/lines/{line_id}", response_model=Estimate)
async def delete_line(
    calculator_id: str,
    section_id: str,
    line_id: str,
    actor: Actor = Depends(get_actor),
    svc: CalculatorService = Depends(get_calculator_service),
):
    return await svc.delete_line(actor, calculator_id, section_id, line_id)


@router.patch("/{calculator_id}/sections/{section_id}/lines/{line_id}", response_model=Estimate)
async def update_field(
    calculator_id: str,
    section_id: str,
    line_id: str,
    req: FieldUpdateRequest,
    actor: Actor = Depends(get_actor),
    svc: CalculatorService = Depends(get_calculator_service),
):
    return await svc.update_field(actor, calculator_id, section_id, line_id, req.field, req.value)
