"""
Sales persistence backend abstract base class.

The checkout orchestrator only ever talks to this interface; each backend
implements storage with its own syntax.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from ..models.sale import SaleItemSnapshot, SaleRecord


@dataclass(frozen=True)
class StoredSale:
    """A persisted sale header with its line items."""

    id: str
    sale: SaleRecord
    items: tuple[SaleItemSnapshot, ...]


class SalesBackend(ABC):
    """
    Abstract base for the Sales collaborator.

    ``create`` must be atomic: the header and every line item are stored
    together or nothing is stored.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name (e.g., 'memory')."""
        pass

    @abstractmethod
    async def create(
        self,
        sale: SaleRecord,
        items: Sequence[SaleItemSnapshot],
    ) -> str:
        """
        Store a sale and its line items.

        Returns:
            The created sale id

        Raises:
            SalePersistenceError: If nothing could be stored
        """
        pass

    @abstractmethod
    async def get(self, sale_id: str) -> StoredSale | None:
        """Get a stored sale by id."""
        pass

    @abstractmethod
    async def list_sales(self, limit: int = 100) -> list[StoredSale]:
        """Most recent sales first."""
        pass
