"""
Product lookup API endpoints.
"""

from typing import List

from fastapi import APIRouter, Depends, Query
import structlog

from productlookup.core.dependencies import get_orchestrator, get_registry
from productlookup.models.lookup import (
    EngineSchema,
    FormatsResponse,
    LookupResponse,
)
from productlookup.services.lookup import (
    EngineRegistry,
    LookupOrchestrator,
    classify,
    has_valid_check_digit,
)

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/engines", response_model=List[EngineSchema])
async def list_engines(registry: EngineRegistry = Depends(get_registry)):
    """Registered engines in priority order."""
    return [EngineSchema.from_engine(engine) for engine in registry.all()]


@router.get("/{barcode}/formats", response_model=FormatsResponse)
async def classify_barcode(barcode: str):
    """Plausible formats of a barcode, without any network call."""
    return FormatsResponse(
        barcode=barcode,
        formats=sorted(tag.value for tag in classify(barcode)),
        valid_check_digit=has_valid_check_digit(barcode),
    )


@router.get("/{barcode}", response_model=LookupResponse)
async def lookup_barcode(
    barcode: str,
    parallel: bool = Query(False, description="Query every capable source at once"),
    orchestrator: LookupOrchestrator = Depends(get_orchestrator)
):
    """
    Resolve a scanned barcode into a product.

    Always answers 200: ``status`` tells resolved, exhausted (with the
    per-source attempt trail) or no_candidates apart.
    """
    if parallel:
        outcome = await orchestrator.resolve_parallel(barcode)
    else:
        outcome = await orchestrator.resolve(barcode)

    response = LookupResponse.from_outcome(barcode, outcome)
    logger.info("Lookup request served", barcode=barcode, status=response.status.value)
    return response
