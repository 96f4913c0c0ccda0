# src/services/deal_service/app/services/deal_validator.py
import logging

from ..core.currency import is_iso_currency
from ..core.errors import DuplicateDealError, InvalidCurrencyError, SameCurrencyError
from ..DTOs.deal_dto import FxDealRequest
from ..repositories.deal_repository import FxDealRepository

logger = logging.getLogger(__name__)


class DealValidator:
    """
    Enforces the domain rules a structurally valid deal must satisfy before
    it can be persisted. Checks run in a fixed order and stop at the first
    violation:

    1. the deal_id is not already in the store,
    2. from_currency is a known ISO 4217 code,
    3. to_currency is a known ISO 4217 code,
    4. the two currencies differ.

    The uniqueness check runs first so a repeated submission is always
    reported as a duplicate, whatever else is wrong with it. The validator
    never writes to the store.
    """

    def __init__(self, repo: FxDealRepository):
        self.repo = repo

    async def validate(self, request: FxDealRequest) -> None:
        if await self.repo.exists(request.deal_id):
            raise DuplicateDealError(request.deal_id)

        if not is_iso_currency(request.from_currency):
            raise InvalidCurrencyError(request.from_currency, "from", request.deal_id)

        if not is_iso_currency(request.to_currency):
            raise InvalidCurrencyError(request.to_currency, "to", request.deal_id)

        if request.from_currency == request.to_currency:
            raise SameCurrencyError(request.deal_id)

        logger.debug("Deal passed validation.", extra={"deal_id": request.deal_id})
