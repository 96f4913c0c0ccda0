# src/libs/fx-deals-common/fx_deals_common/database_models.py
from sqlalchemy import Column, String, Numeric, DateTime, Index

from .db_base import Base


class FxDeal(Base):
    """
    A single accepted FX deal. The caller-supplied deal_id is the primary key,
    which is the final guard against two in-flight imports of the same deal.
    Rows are written once and never updated.
    """
    __tablename__ = 'fx_deals'

    deal_id = Column(String, primary_key=True)
    from_currency = Column(String(3), nullable=False)
    to_currency = Column(String(3), nullable=False)
    deal_timestamp = Column(DateTime(timezone=True), nullable=False)
    deal_amount = Column(Numeric(19, 2), nullable=False)
    # Assigned by FxDealRepository.persist from the server clock
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index('ix_fx_deals_created_at', 'created_at'),
    )
