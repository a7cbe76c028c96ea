"""Production run endpoints"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from proofmaster.api.deps import get_production_service
from proofmaster.models.production import (
    CompleteMixingRequest,
    DoughAge,
    ProductBatch,
    ProductionRun,
    ProductionRunRecord,
    StartBakingRequest,
    StartProofingRequest,
    StartRunRequest,
)
from proofmaster.services.production.production_service import (
    BatchNotFoundError,
    NoActiveRunError,
    PersistenceUnavailableError,
    ProductionError,
    ProductionService,
)
from proofmaster.services.timer.errors import DuplicateTimerError, InvalidTimerConfigError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/production", tags=["production"])


def _to_http_error(e: Exception) -> HTTPException:
    if isinstance(e, (NoActiveRunError, BatchNotFoundError)):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, PersistenceUnavailableError):
        return HTTPException(status_code=503, detail=str(e))
    if isinstance(e, DuplicateTimerError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, InvalidTimerConfigError):
        return HTTPException(status_code=400, detail=str(e))
    return HTTPException(status_code=409, detail=str(e))


@router.post("/runs", response_model=ProductionRun, status_code=201)
async def start_run(
    request: StartRunRequest,
    service: ProductionService = Depends(get_production_service),
):
    """Start the division phase for freshly mixed dough"""
    try:
        return service.start_run(request.products)
    except ProductionError as e:
        raise _to_http_error(e)


@router.get("/runs", response_model=List[ProductionRunRecord])
async def list_saved_runs(
    limit: int = Query(20, ge=1, le=100),
    service: ProductionService = Depends(get_production_service),
):
    """Saved production runs, newest first"""
    try:
        return await service.recent_runs(limit)
    except ProductionError as e:
        raise _to_http_error(e)
    except Exception as e:
        logger.error(f"Error loading production runs: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to load production runs: {str(e)}")


@router.get("/runs/current", response_model=ProductionRun)
async def get_current_run(service: ProductionService = Depends(get_production_service)):
    run = service.current_run
    if run is None:
        raise HTTPException(status_code=404, detail="No production run in progress")
    return run


@router.post("/runs/current/mix-timer", response_model=ProductionRun)
async def start_mix_timer(service: ProductionService = Depends(get_production_service)):
    try:
        return service.start_mix_timer()
    except ProductionError as e:
        raise _to_http_error(e)


@router.delete("/runs/current/mix-timer", response_model=ProductionRun)
async def reset_mix_timer(service: ProductionService = Depends(get_production_service)):
    try:
        return service.reset_mix_timer()
    except ProductionError as e:
        raise _to_http_error(e)


@router.post("/runs/current/mixing/complete", response_model=ProductionRun)
async def complete_mixing(
    request: CompleteMixingRequest,
    service: ProductionService = Depends(get_production_service),
):
    """
    Rate the dough and start the division phase.

    Poor dough is refused with 409 unless confirm_poor_quality is set.
    """
    try:
        return service.complete_mixing(
            request.quality,
            temperature=request.temperature,
            notes=request.notes,
            confirm_poor_quality=request.confirm_poor_quality,
        )
    except ProductionError as e:
        raise _to_http_error(e)


@router.post("/runs/current/batches/{product_id}/proof", response_model=ProductBatch)
async def start_proofing(
    product_id: str,
    request: StartProofingRequest,
    service: ProductionService = Depends(get_production_service),
):
    """Complete division of a batch and start its proof timer"""
    try:
        return service.start_proofing(
            product_id,
            proof_minutes=request.proof_minutes,
            pieces_actual=request.pieces_actual,
            issues=request.issues,
        )
    except (ProductionError, InvalidTimerConfigError) as e:
        raise _to_http_error(e)


@router.post("/runs/current/batches/{product_id}/bake", response_model=ProductBatch)
async def start_baking(
    product_id: str,
    request: StartBakingRequest,
    service: ProductionService = Depends(get_production_service),
):
    """Start the bake timer for a proofed batch"""
    try:
        return service.start_baking(
            product_id,
            bake_minutes=request.bake_minutes,
            rotate_at_minutes=request.rotate_at_minutes,
            proof_quality=request.proof_quality,
            oven_temp_top=request.oven_temp_top,
            oven_temp_bottom=request.oven_temp_bottom,
        )
    except (ProductionError, InvalidTimerConfigError) as e:
        raise _to_http_error(e)


@router.get("/runs/current/dough-age", response_model=DoughAge)
async def get_dough_age(service: ProductionService = Depends(get_production_service)):
    try:
        return service.dough_age()
    except ProductionError as e:
        raise _to_http_error(e)


@router.post("/runs/current/complete", response_model=ProductionRun)
async def complete_run(service: ProductionService = Depends(get_production_service)):
    """Finish division and save the run"""
    try:
        return await service.complete_run()
    except ProductionError as e:
        raise _to_http_error(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to save production run: {str(e)}")
