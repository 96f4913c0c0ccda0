# tests/unit/services/deal_service/repositories/test_deal_repository.py
import pytest
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from fx_deals_common.database_models import FxDeal
from src.services.deal_service.app.core.errors import DuplicateDealError
from src.services.deal_service.app.repositories.deal_repository import FxDealRepository, NewFxDeal

pytestmark = pytest.mark.asyncio


@pytest.fixture
def mock_db_session() -> AsyncMock:
    """Provides a mock SQLAlchemy AsyncSession."""
    session = AsyncMock(spec=AsyncSession)
    session.add = MagicMock()
    return session


@pytest.fixture
def repository(mock_db_session: AsyncMock) -> FxDealRepository:
    return FxDealRepository(mock_db_session)


def new_deal(deal_id: str = "DEAL001") -> NewFxDeal:
    return NewFxDeal(
        deal_id=deal_id,
        from_currency="USD",
        to_currency="MAD",
        deal_timestamp=datetime(2025, 1, 15, 10, 30, tzinfo=UTC),
        deal_amount=Decimal("1000.50"),
    )


async def test_exists_queries_by_deal_id(repository: FxDealRepository, mock_db_session: AsyncMock):
    mock_result = MagicMock()
    mock_result.scalar.return_value = True
    mock_db_session.execute.return_value = mock_result

    assert await repository.exists("DEAL001") is True

    executed_stmt = mock_db_session.execute.call_args[0][0]
    compiled_query = str(executed_stmt.compile(compile_kwargs={"literal_binds": True}))
    assert "EXISTS" in compiled_query
    assert "fx_deals.deal_id = 'DEAL001'" in compiled_query


async def test_exists_false_when_absent(repository: FxDealRepository, mock_db_session: AsyncMock):
    mock_result = MagicMock()
    mock_result.scalar.return_value = False
    mock_db_session.execute.return_value = mock_result

    assert await repository.exists("NOPE") is False


async def test_persist_stamps_created_at_and_flushes(repository: FxDealRepository, mock_db_session: AsyncMock):
    """
    GIVEN a validated deal
    WHEN persist is called
    THEN it adds an FxDeal with a server-side created_at and flushes the session.
    """
    before = datetime.now(UTC)

    saved = await repository.persist(new_deal())

    mock_db_session.add.assert_called_once()
    mock_db_session.flush.assert_awaited_once()
    added = mock_db_session.add.call_args[0][0]
    assert isinstance(added, FxDeal)
    assert added is saved
    assert saved.deal_id == "DEAL001"
    assert saved.deal_amount == Decimal("1000.50")
    assert before <= saved.created_at <= datetime.now(UTC)
    mock_db_session.commit.assert_not_called()


async def test_persist_maps_key_collision_to_duplicate(repository: FxDealRepository, mock_db_session: AsyncMock):
    mock_db_session.flush.side_effect = IntegrityError(
        "INSERT INTO fx_deals", {}, Exception("duplicate key value violates unique constraint")
    )

    with pytest.raises(DuplicateDealError) as exc_info:
        await repository.persist(new_deal())

    assert exc_info.value.deal_id == "DEAL001"


async def test_persist_propagates_other_database_errors(repository: FxDealRepository, mock_db_session: AsyncMock):
    mock_db_session.flush.side_effect = OperationalError("INSERT", {}, Exception("server closed"))

    with pytest.raises(OperationalError):
        await repository.persist(new_deal())


async def test_list_all_orders_oldest_first(repository: FxDealRepository, mock_db_session: AsyncMock):
    mock_result = MagicMock()
    mock_result.scalars.return_value.all.return_value = ["deal_1", "deal_2"]
    mock_db_session.execute.return_value = mock_result

    deals = await repository.list_all()

    assert deals == ["deal_1", "deal_2"]
    executed_stmt = mock_db_session.execute.call_args[0][0]
    compiled_query = str(executed_stmt.compile(compile_kwargs={"literal_binds": True}))
    assert "FROM fx_deals" in compiled_query
    assert "ORDER BY fx_deals.created_at ASC, fx_deals.deal_id ASC" in compiled_query
    assert "WHERE" not in compiled_query
