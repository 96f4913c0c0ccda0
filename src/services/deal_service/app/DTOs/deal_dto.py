# src/services/deal_service/app/DTOs/deal_dto.py
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, condecimal, field_validator


class FxDealRequest(BaseModel):
    """
    A single FX deal submission.

    Structural preconditions (presence, ISO-style code shape, minimum amount)
    are enforced here, before the import pipeline runs. Domain rules
    (known currency, distinct pair, unique deal id) belong to DealValidator.
    """

    deal_id: str = Field(..., alias="dealId", json_schema_extra={"example": "DEAL001"})
    from_currency: str = Field(
        ...,
        alias="fromCurrency",
        pattern=r"^[A-Z]{3}$",
        description="The currency sold, as a 3-letter ISO 4217 code.",
        json_schema_extra={"example": "USD"},
    )
    to_currency: str = Field(
        ...,
        alias="toCurrency",
        pattern=r"^[A-Z]{3}$",
        description="The currency bought, as a 3-letter ISO 4217 code.",
        json_schema_extra={"example": "MAD"},
    )
    deal_timestamp: datetime = Field(
        ..., alias="dealTimestamp", json_schema_extra={"example": "2025-01-15T10:30:00Z"}
    )
    deal_amount: condecimal(ge=Decimal("0.01"), max_digits=19, decimal_places=2) = Field(
        ..., alias="dealAmount", json_schema_extra={"example": "1000.50"}
    )

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("deal_id")
    @classmethod
    def _deal_id_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Deal ID is required")
        return value

    @field_validator("deal_timestamp")
    @classmethod
    def _assume_utc_when_naive(cls, value: datetime) -> datetime:
        # Naive timestamps are stored as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class FxDealBatchRequest(BaseModel):
    """
    Envelope for a batch import. Rows are kept raw so that a malformed row
    is reported against its position instead of rejecting the whole batch.
    """

    deals: List[Dict[str, Any]] = Field(
        ...,
        min_length=1,
        description="Deals to import, processed in order.",
        json_schema_extra={
            "example": [
                {
                    "dealId": "DEAL001",
                    "fromCurrency": "USD",
                    "toCurrency": "MAD",
                    "dealTimestamp": "2025-01-15T10:30:00Z",
                    "dealAmount": "1000.50",
                }
            ]
        },
    )


class FxDealResponse(BaseModel):
    deal_id: str = Field(..., alias="dealId")
    from_currency: str = Field(..., alias="fromCurrency")
    to_currency: str = Field(..., alias="toCurrency")
    deal_timestamp: datetime = Field(..., alias="dealTimestamp")
    deal_amount: Decimal = Field(..., alias="dealAmount")
    created_at: datetime = Field(..., alias="createdAt")
    message: str

    model_config = ConfigDict(populate_by_name=True)


class DealError(BaseModel):
    deal_id: Optional[str] = Field(..., alias="dealId")
    error_message: str = Field(..., alias="errorMessage")
    row_number: int = Field(..., alias="rowNumber", description="1-based position in the batch.")

    model_config = ConfigDict(populate_by_name=True)


class FxDealBatchResponse(BaseModel):
    """
    Outcome of a batch import. Counts always agree with the list lengths and
    both lists keep submission order.
    """

    total_requested: int = Field(..., alias="totalRequested")
    success_count: int = Field(..., alias="successCount")
    failure_count: int = Field(..., alias="failureCount")
    successful_deals: List[FxDealResponse] = Field(default_factory=list, alias="successfulDeals")
    failed_deals: List[DealError] = Field(default_factory=list, alias="failedDeals")

    model_config = ConfigDict(populate_by_name=True)


class FxDealRecord(BaseModel):
    """
    Represents a persisted FX deal for read responses.
    """

    deal_id: str = Field(..., alias="dealId")
    from_currency: str = Field(..., alias="fromCurrency")
    to_currency: str = Field(..., alias="toCurrency")
    deal_timestamp: datetime = Field(..., alias="dealTimestamp")
    deal_amount: Decimal = Field(..., alias="dealAmount")
    created_at: datetime = Field(..., alias="createdAt")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
