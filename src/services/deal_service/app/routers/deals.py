# src/services/deal_service/app/routers/deals.py
import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status

from ..core.outcome import ImportErrored, ImportSucceeded
from ..DTOs.deal_dto import FxDealBatchRequest, FxDealBatchResponse, FxDealRecord, FxDealRequest, FxDealResponse
from ..error_envelope import error_response
from ..services.deal_import_service import DealImportService, get_deal_import_service
from ..status_policy import INTERNAL_ERROR_MESSAGE, status_for_batch, status_for_error

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/deals", tags=["FX Deals"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=FxDealResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"description": "Invalid currency or malformed deal."},
        status.HTTP_409_CONFLICT: {"description": "A deal with this dealId already exists."},
    },
    summary="Import a single FX deal",
    description=(
        "Validates one FX deal (unique dealId, ISO 4217 currencies, distinct pair) "
        "and persists it. The server assigns createdAt."
    ),
)
async def import_deal(
    request: FxDealRequest,
    service: DealImportService = Depends(get_deal_import_service),
):
    logger.info("Import request received.", extra={"deal_id": request.deal_id})
    outcome = await service.import_deal(request)

    if isinstance(outcome, ImportSucceeded):
        return outcome.deal

    status_code, title = status_for_error(outcome.error)
    if isinstance(outcome, ImportErrored):
        return error_response(status_code, title, INTERNAL_ERROR_MESSAGE)
    return error_response(status_code, title, outcome.message)


@router.post(
    "/batch",
    status_code=status.HTTP_201_CREATED,
    response_model=FxDealBatchResponse,
    responses={
        status.HTTP_207_MULTI_STATUS: {
            "model": FxDealBatchResponse,
            "description": "Some deals were imported and some failed.",
        },
        status.HTTP_400_BAD_REQUEST: {
            "model": FxDealBatchResponse,
            "description": "No deal in the batch could be imported.",
        },
    },
    summary="Import a batch of FX deals",
    description=(
        "Imports each deal independently, in order. A failed deal never stops the "
        "batch; failures are reported with their 1-based rowNumber."
    ),
)
async def import_batch(
    request: FxDealBatchRequest,
    response: Response,
    service: DealImportService = Depends(get_deal_import_service),
):
    logger.info("Batch import request received.", extra={"num_deals": len(request.deals)})
    result = await service.import_batch(request.deals)
    response.status_code = status_for_batch(result)
    return result


@router.get(
    "",
    response_model=List[FxDealRecord],
    summary="List all FX deals",
    description="Returns every persisted FX deal, oldest first.",
)
async def list_deals(service: DealImportService = Depends(get_deal_import_service)):
    return await service.list_deals()
