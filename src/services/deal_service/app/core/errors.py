# src/services/deal_service/app/core/errors.py
from typing import Optional


class DealImportError(Exception):
    """
    Base class for classified deal import failures.

    Every subclass carries the offending deal_id and a human-readable
    message that is returned to the caller verbatim.
    """

    def __init__(self, message: str, deal_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.deal_id = deal_id


class DuplicateDealError(DealImportError):
    """A deal with the same deal_id has already been persisted."""

    def __init__(self, deal_id: str):
        super().__init__(f"Deal {deal_id} already exists", deal_id)


class InvalidCurrencyError(DealImportError):
    """One side of the currency pair is not a recognized ISO 4217 code."""

    def __init__(self, currency: str, side: str, deal_id: Optional[str] = None):
        super().__init__(f"Invalid {side} currency: {currency}", deal_id)
        self.currency = currency
        self.side = side


class SameCurrencyError(DealImportError):
    """The from and to currencies of a deal are identical."""

    def __init__(self, deal_id: Optional[str] = None):
        super().__init__("From and To currency cannot be same", deal_id)


class MalformedDealError(DealImportError):
    """A batch row failed the structural checks of the deal request contract."""


class DealStoreError(RuntimeError):
    """
    The deal store failed for a reason other than a key collision, e.g. the
    database is unreachable. Not a DealImportError: callers treat it as an
    unclassified failure.
    """

    def __init__(self, message: str, deal_id: Optional[str] = None):
        super().__init__(message)
        self.deal_id = deal_id
