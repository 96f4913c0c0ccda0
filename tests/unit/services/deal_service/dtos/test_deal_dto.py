# tests/unit/services/deal_service/dtos/test_deal_dto.py
import pytest
from datetime import UTC, datetime
from decimal import Decimal

from pydantic import ValidationError

from fx_deals_common.database_models import FxDeal

from src.services.deal_service.app.DTOs.deal_dto import (
    DealError,
    FxDealBatchRequest,
    FxDealBatchResponse,
    FxDealRequest,
)


def payload(**overrides) -> dict:
    data = {
        "dealId": "DEAL001",
        "fromCurrency": "USD",
        "toCurrency": "MAD",
        "dealTimestamp": "2025-01-15T10:30:00Z",
        "dealAmount": "1000.50",
    }
    data.update(overrides)
    return data


def test_request_parses_camel_case_payload():
    request = FxDealRequest.model_validate(payload())

    assert request.deal_id == "DEAL001"
    assert request.deal_amount == Decimal("1000.50")
    assert request.deal_timestamp == datetime(2025, 1, 15, 10, 30, tzinfo=UTC)


def test_minimum_amount_is_accepted():
    request = FxDealRequest.model_validate(payload(dealAmount="0.01"))
    assert request.deal_amount == Decimal("0.01")


@pytest.mark.parametrize("amount", ["0.00", "0", "-5", "-0.01"])
def test_zero_or_negative_amount_is_rejected(amount):
    with pytest.raises(ValidationError) as exc_info:
        FxDealRequest.model_validate(payload(dealAmount=amount))
    assert exc_info.value.errors()[0]["loc"] == ("dealAmount",)


@pytest.mark.parametrize("amount", ["1.001", "1000.505", "0.015"])
def test_amount_with_more_than_two_decimals_is_rejected(amount):
    with pytest.raises(ValidationError) as exc_info:
        FxDealRequest.model_validate(payload(dealAmount=amount))
    assert exc_info.value.errors()[0]["loc"] == ("dealAmount",)


@pytest.mark.parametrize("amount", ["12345678901234567890.12", "123456789012345678.12"])
def test_amount_wider_than_the_deal_amount_column_is_rejected(amount):
    with pytest.raises(ValidationError) as exc_info:
        FxDealRequest.model_validate(payload(dealAmount=amount))
    assert exc_info.value.errors()[0]["loc"] == ("dealAmount",)


def test_largest_storable_amount_is_accepted():
    request = FxDealRequest.model_validate(payload(dealAmount="99999999999999999.99"))
    assert request.deal_amount == Decimal("99999999999999999.99")


def test_request_amount_limits_match_the_deal_amount_column():
    column_type = FxDeal.__table__.c.deal_amount.type
    assert (column_type.precision, column_type.scale) == (19, 2)


@pytest.mark.parametrize("deal_id", ["", "   "])
def test_blank_deal_id_is_rejected(deal_id):
    with pytest.raises(ValidationError):
        FxDealRequest.model_validate(payload(dealId=deal_id))


@pytest.mark.parametrize("code", ["usd", "US", "USDX", "12A"])
def test_currency_must_be_three_upper_case_letters(code):
    with pytest.raises(ValidationError):
        FxDealRequest.model_validate(payload(fromCurrency=code))


@pytest.mark.parametrize("missing", ["dealId", "fromCurrency", "toCurrency", "dealTimestamp", "dealAmount"])
def test_every_field_is_required(missing):
    data = payload()
    del data[missing]
    with pytest.raises(ValidationError):
        FxDealRequest.model_validate(data)


def test_naive_timestamp_is_treated_as_utc():
    request = FxDealRequest.model_validate(payload(dealTimestamp="2025-01-15T10:30:00"))
    assert request.deal_timestamp.tzinfo is UTC


def test_past_and_future_timestamps_are_allowed():
    FxDealRequest.model_validate(payload(dealTimestamp="1999-12-31T23:59:59Z"))
    FxDealRequest.model_validate(payload(dealTimestamp="2099-01-01T00:00:00Z"))


def test_batch_request_requires_at_least_one_deal():
    with pytest.raises(ValidationError):
        FxDealBatchRequest.model_validate({"deals": []})
    with pytest.raises(ValidationError):
        FxDealBatchRequest.model_validate({})


def test_batch_response_serializes_with_wire_names():
    response = FxDealBatchResponse(
        total_requested=1,
        success_count=0,
        failure_count=1,
        failed_deals=[DealError(deal_id="D1", error_message="boom", row_number=1)],
    )

    dumped = response.model_dump(by_alias=True)

    assert dumped["totalRequested"] == 1
    assert dumped["successfulDeals"] == []
    assert dumped["failedDeals"][0] == {"dealId": "D1", "errorMessage": "boom", "rowNumber": 1}
