# src/services/deal_service/app/repositories/deal_repository.py
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from typing import List

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fx_deals_common.database_models import FxDeal
from fx_deals_common.utils import async_timed

from ..core.errors import DuplicateDealError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewFxDeal:
    """A deal that passed validation and has not been persisted yet."""
    deal_id: str
    from_currency: str
    to_currency: str
    deal_timestamp: datetime
    deal_amount: Decimal


class FxDealRepository:
    """
    Append-only store for FX deals. Transaction boundaries belong to the
    caller; this repository only stages and flushes.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @async_timed(repository="FxDealRepository", method="exists")
    async def exists(self, deal_id: str) -> bool:
        """Checks if a deal with the given ID has already been persisted."""
        stmt = select(exists().where(FxDeal.deal_id == deal_id))
        result = await self.db.execute(stmt)
        return bool(result.scalar())

    @async_timed(repository="FxDealRepository", method="persist")
    async def persist(self, deal: NewFxDeal) -> FxDeal:
        """
        Stages a new deal row, stamping created_at from the server clock, and
        flushes it so that a primary-key collision surfaces here.

        Raises:
            DuplicateDealError: if another transaction persisted the same
                deal_id after the caller's existence check.
        """
        row = FxDeal(
            deal_id=deal.deal_id,
            from_currency=deal.from_currency,
            to_currency=deal.to_currency,
            deal_timestamp=deal.deal_timestamp,
            deal_amount=deal.deal_amount,
            created_at=datetime.now(UTC),
        )
        self.db.add(row)
        try:
            await self.db.flush()
        except IntegrityError as exc:
            logger.warning(
                "Primary key collision while persisting deal.",
                extra={"deal_id": deal.deal_id},
            )
            raise DuplicateDealError(deal.deal_id) from exc
        logger.info("Deal staged for commit.", extra={"deal_id": deal.deal_id})
        return row

    @async_timed(repository="FxDealRepository", method="list_all")
    async def list_all(self) -> List[FxDeal]:
        """Returns every persisted deal, oldest first."""
        stmt = select(FxDeal).order_by(FxDeal.created_at.asc(), FxDeal.deal_id.asc())
        results = await self.db.execute(stmt)
        deals = results.scalars().all()
        logger.info(f"Found {len(deals)} persisted FX deals.")
        return list(deals)
