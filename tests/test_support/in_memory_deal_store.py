# tests/test_support/in_memory_deal_store.py
from datetime import UTC, datetime
from typing import Dict, List, Optional, Set

from fx_deals_common.database_models import FxDeal
from src.services.deal_service.app.core.errors import DuplicateDealError
from src.services.deal_service.app.repositories.deal_repository import NewFxDeal


class InMemoryFxDealRepository:
    """
    Stand-in for FxDealRepository with the same three operations.

    `racing_ids` simulates another request persisting a deal between the
    existence check and the insert: exists() reports False but persist()
    hits the key collision. `failing_ids` makes persist() raise the given
    exception.
    """

    def __init__(
        self,
        racing_ids: Optional[Set[str]] = None,
        failing_ids: Optional[Dict[str, Exception]] = None,
    ):
        self.deals: Dict[str, FxDeal] = {}
        self.racing_ids = racing_ids or set()
        self.failing_ids = failing_ids or {}

    async def exists(self, deal_id: str) -> bool:
        return deal_id in self.deals

    async def persist(self, deal: NewFxDeal) -> FxDeal:
        if deal.deal_id in self.failing_ids:
            raise self.failing_ids[deal.deal_id]
        if deal.deal_id in self.deals or deal.deal_id in self.racing_ids:
            raise DuplicateDealError(deal.deal_id)
        row = FxDeal(
            deal_id=deal.deal_id,
            from_currency=deal.from_currency,
            to_currency=deal.to_currency,
            deal_timestamp=deal.deal_timestamp,
            deal_amount=deal.deal_amount,
            created_at=datetime.now(UTC),
        )
        self.deals[deal.deal_id] = row
        return row

    async def list_all(self) -> List[FxDeal]:
        return sorted(self.deals.values(), key=lambda d: (d.created_at, d.deal_id))
