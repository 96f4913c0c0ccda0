# tests/unit/services/deal_service/routers/test_deals_router.py
import json
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import Response

from src.services.deal_service.app.core.errors import DuplicateDealError, InvalidCurrencyError
from src.services.deal_service.app.core.outcome import ImportErrored, ImportRejected, ImportSucceeded
from src.services.deal_service.app.DTOs.deal_dto import (
    DealError,
    FxDealBatchRequest,
    FxDealBatchResponse,
    FxDealRequest,
    FxDealResponse,
)
from src.services.deal_service.app.routers.deals import import_batch, import_deal, list_deals

pytestmark = pytest.mark.asyncio


def make_request() -> FxDealRequest:
    return FxDealRequest(
        deal_id="DEAL001",
        from_currency="USD",
        to_currency="MAD",
        deal_timestamp=datetime(2025, 1, 15, 10, 30, tzinfo=UTC),
        deal_amount=Decimal("1000.50"),
    )


def make_response() -> FxDealResponse:
    return FxDealResponse(
        deal_id="DEAL001",
        from_currency="USD",
        to_currency="MAD",
        deal_timestamp=datetime(2025, 1, 15, 10, 30, tzinfo=UTC),
        deal_amount=Decimal("1000.50"),
        created_at=datetime.now(UTC),
        message="Deal imported successfully",
    )


async def test_import_deal_returns_created_deal():
    service = MagicMock()
    service.import_deal = AsyncMock(return_value=ImportSucceeded(make_response()))

    result = await import_deal(request=make_request(), service=service)

    assert result.deal_id == "DEAL001"


async def test_import_deal_duplicate_maps_to_conflict():
    service = MagicMock()
    service.import_deal = AsyncMock(return_value=ImportRejected(DuplicateDealError("DEAL001")))

    result = await import_deal(request=make_request(), service=service)

    assert result.status_code == 409
    body = json.loads(result.body)
    assert body["error"] == "Duplicate Deal"
    assert body["message"] == "Deal DEAL001 already exists"


async def test_import_deal_invalid_currency_maps_to_bad_request():
    service = MagicMock()
    service.import_deal = AsyncMock(
        return_value=ImportRejected(InvalidCurrencyError("XYZ", "from", "DEAL001"))
    )

    result = await import_deal(request=make_request(), service=service)

    assert result.status_code == 400
    assert json.loads(result.body)["message"] == "Invalid from currency: XYZ"


async def test_import_deal_unexpected_error_hides_details():
    service = MagicMock()
    service.import_deal = AsyncMock(return_value=ImportErrored(RuntimeError("password=secret")))

    result = await import_deal(request=make_request(), service=service)

    assert result.status_code == 500
    body = json.loads(result.body)
    assert body["message"] == "An unexpected error occurred"
    assert "secret" not in result.body.decode()


@pytest.mark.parametrize("successes, failures, expected", [(2, 0, 201), (1, 1, 207), (0, 2, 400)])
async def test_import_batch_sets_status_from_outcome(successes, failures, expected):
    batch_result = FxDealBatchResponse(
        total_requested=successes + failures,
        success_count=successes,
        failure_count=failures,
        successful_deals=[make_response() for _ in range(successes)],
        failed_deals=[
            DealError(deal_id=f"F{i}", error_message="boom", row_number=i + 1)
            for i in range(failures)
        ],
    )
    service = MagicMock()
    service.import_batch = AsyncMock(return_value=batch_result)
    response = Response()
    request = FxDealBatchRequest(deals=[{"dealId": "X"}])

    result = await import_batch(request=request, response=response, service=service)

    assert result is batch_result
    assert response.status_code == expected
    service.import_batch.assert_awaited_once_with(request.deals)


async def test_list_deals_delegates_to_service():
    service = MagicMock()
    service.list_deals = AsyncMock(return_value=[])

    assert await list_deals(service=service) == []
