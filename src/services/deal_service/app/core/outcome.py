# src/services/deal_service/app/core/outcome.py
from dataclasses import dataclass
from typing import Union

from ..DTOs.deal_dto import FxDealResponse
from .errors import DealImportError


@dataclass(frozen=True)
class ImportSucceeded:
    deal: FxDealResponse


@dataclass(frozen=True)
class ImportRejected:
    """A classified failure: the deal broke a known import rule."""
    error: DealImportError

    @property
    def message(self) -> str:
        return self.error.message


@dataclass(frozen=True)
class ImportErrored:
    """An unclassified failure, typically raised by the storage layer."""
    error: Exception

    @property
    def message(self) -> str:
        return str(self.error) or type(self.error).__name__


ImportOutcome = Union[ImportSucceeded, ImportRejected, ImportErrored]
