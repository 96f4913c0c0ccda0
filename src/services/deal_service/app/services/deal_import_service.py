# src/services/deal_service/app/services/deal_import_service.py
import logging
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

from fastapi import Depends
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fx_deals_common.db import get_async_db_session
from fx_deals_common.database_models import FxDeal
from fx_deals_common.monitoring import observe_batch_size, observe_deal_import

from ..core.errors import (
    DealImportError,
    DealStoreError,
    DuplicateDealError,
    InvalidCurrencyError,
    MalformedDealError,
    SameCurrencyError,
)
from ..core.outcome import ImportErrored, ImportOutcome, ImportRejected, ImportSucceeded
from ..DTOs.deal_dto import (
    DealError,
    FxDealBatchResponse,
    FxDealRecord,
    FxDealRequest,
    FxDealResponse,
)
from ..repositories.deal_repository import FxDealRepository, NewFxDeal
from .deal_validator import DealValidator

logger = logging.getLogger(__name__)

IMPORT_SUCCESS_MESSAGE = "Deal imported successfully"
UNEXPECTED_ERROR_PREFIX = "Unexpected error: "

BatchRow = Union[FxDealRequest, Mapping[str, Any]]

_OUTCOME_LABELS = (
    (DuplicateDealError, "duplicate"),
    (InvalidCurrencyError, "invalid_currency"),
    (SameCurrencyError, "same_currency"),
    (MalformedDealError, "malformed"),
)


def _outcome_label(error: DealImportError) -> str:
    for error_type, label in _OUTCOME_LABELS:
        if isinstance(error, error_type):
            return label
    return "rejected"


def _describe_validation_error(exc: ValidationError) -> str:
    issues: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        issues.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(issues)


def _raw_deal_id(row: Any) -> Optional[str]:
    if not isinstance(row, Mapping):
        return None
    value = row.get("dealId", row.get("deal_id"))
    if value is None:
        return None
    return str(value)


def _to_response(deal: FxDeal) -> FxDealResponse:
    return FxDealResponse(
        deal_id=deal.deal_id,
        from_currency=deal.from_currency,
        to_currency=deal.to_currency,
        deal_timestamp=deal.deal_timestamp,
        deal_amount=deal.deal_amount,
        created_at=deal.created_at,
        message=IMPORT_SUCCESS_MESSAGE,
    )


def _to_record(deal: FxDeal) -> FxDealRecord:
    return FxDealRecord(
        deal_id=deal.deal_id,
        from_currency=deal.from_currency,
        to_currency=deal.to_currency,
        deal_timestamp=deal.deal_timestamp,
        deal_amount=deal.deal_amount,
        created_at=deal.created_at,
    )


class DealImportService:
    """
    Drives FX deals from submission to persisted record.

    Each deal is imported in its own unit of work: the existence check, the
    insert and the commit either all take effect or the session is rolled
    back. Failures are returned as outcome values, never raised, so a batch
    can keep going after any individual row fails.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = FxDealRepository(db)
        self.validator = DealValidator(self.repo)

    async def import_deal(self, request: FxDealRequest) -> ImportOutcome:
        """Validates and persists one deal, returning its outcome."""
        logger.info("Processing deal.", extra={"deal_id": request.deal_id})
        try:
            await self.validator.validate(request)
            saved = await self.repo.persist(
                NewFxDeal(
                    deal_id=request.deal_id,
                    from_currency=request.from_currency,
                    to_currency=request.to_currency,
                    deal_timestamp=request.deal_timestamp,
                    deal_amount=request.deal_amount,
                )
            )
            await self.db.commit()
        except DealImportError as exc:
            await self._rollback(request.deal_id)
            observe_deal_import(_outcome_label(exc))
            logger.info(
                "Deal rejected.", extra={"deal_id": request.deal_id, "reason": exc.message}
            )
            return ImportRejected(exc)
        except SQLAlchemyError as exc:
            await self._rollback(request.deal_id)
            observe_deal_import("error")
            logger.error(
                "Deal store failure while importing deal.",
                exc_info=True,
                extra={"deal_id": request.deal_id},
            )
            return ImportErrored(
                DealStoreError(f"Deal store unavailable ({type(exc).__name__})", request.deal_id)
            )
        except Exception as exc:
            await self._rollback(request.deal_id)
            observe_deal_import("error")
            logger.error(
                "Unexpected failure while importing deal.",
                exc_info=True,
                extra={"deal_id": request.deal_id},
            )
            return ImportErrored(exc)

        observe_deal_import("created")
        logger.info("Deal saved.", extra={"deal_id": saved.deal_id})
        return ImportSucceeded(_to_response(saved))

    async def import_batch(self, rows: Sequence[BatchRow]) -> FxDealBatchResponse:
        """
        Imports every row in order, isolating each row's outcome.

        Rows may be FxDealRequest instances or raw mappings; raw rows are
        checked against the request contract first and a failure there is
        recorded as a malformed row. Failed rows carry their 1-based position.
        """
        rows = list(rows)
        observe_batch_size(len(rows))
        logger.info("Processing batch import.", extra={"num_deals": len(rows)})

        successful: List[FxDealResponse] = []
        failed: List[DealError] = []

        for row_number, row in enumerate(rows, start=1):
            deal_id, outcome = await self._import_row(row)

            if isinstance(outcome, ImportSucceeded):
                successful.append(outcome.deal)
                continue

            if isinstance(outcome, ImportRejected):
                message = outcome.message
                logger.warning(
                    f"Deal failed at row {row_number}: {message}",
                    extra={"deal_id": deal_id, "row_number": row_number},
                )
            else:
                message = f"{UNEXPECTED_ERROR_PREFIX}{outcome.message}"
                logger.error(
                    f"Unexpected error at row {row_number}: {outcome.message}",
                    extra={"deal_id": deal_id, "row_number": row_number},
                )
            failed.append(DealError(deal_id=deal_id, error_message=message, row_number=row_number))

        response = FxDealBatchResponse(
            total_requested=len(rows),
            success_count=len(successful),
            failure_count=len(failed),
            successful_deals=successful,
            failed_deals=failed,
        )
        logger.info(
            f"Batch import completed: {response.success_count} successful, "
            f"{response.failure_count} failed",
            extra={
                "total_requested": response.total_requested,
                "success_count": response.success_count,
                "failure_count": response.failure_count,
            },
        )
        return response

    async def list_deals(self) -> List[FxDealRecord]:
        """Returns every persisted deal."""
        deals = await self.repo.list_all()
        return [_to_record(deal) for deal in deals]

    async def _import_row(self, row: BatchRow) -> Tuple[Optional[str], ImportOutcome]:
        if isinstance(row, FxDealRequest):
            return row.deal_id, await self.import_deal(row)

        deal_id = _raw_deal_id(row)
        try:
            request = FxDealRequest.model_validate(row)
        except ValidationError as exc:
            observe_deal_import("malformed")
            return deal_id, ImportRejected(
                MalformedDealError(_describe_validation_error(exc), deal_id)
            )
        return request.deal_id, await self.import_deal(request)

    async def _rollback(self, deal_id: str) -> None:
        try:
            await self.db.rollback()
        except Exception:
            logger.error(
                "Rollback failed after deal import error.",
                exc_info=True,
                extra={"deal_id": deal_id},
            )


def get_deal_import_service(
    db: AsyncSession = Depends(get_async_db_session),
) -> DealImportService:
    return DealImportService(db)
