"""
In-memory sales backend.

Features:
- Atomic create (header and items under one asyncio lock)
- Unique invoice numbers
- Failure injection for exercising the retry path

Good for tests and local register runs.
Data is lost on restart.
"""

import asyncio
import logging
import uuid
from collections import OrderedDict
from collections.abc import Sequence

from ...exceptions import SalePersistenceError
from ...models.sale import SaleItemSnapshot, SaleRecord
from ..base import SalesBackend, StoredSale

logger = logging.getLogger("pharmacy_pos.db.memory")


class MemorySalesBackend(SalesBackend):
    """Sales stored in process memory."""

    def __init__(self):
        self._sales: OrderedDict[str, StoredSale] = OrderedDict()
        self._invoices: set[str] = set()
        self._lock = asyncio.Lock()
        self._failures_pending = 0
        self.create_calls = 0

    @property
    def name(self) -> str:
        return "memory"

    def fail_next(self, times: int = 1) -> None:
        """Make the next ``times`` calls to ``create`` fail without storing anything."""
        self._failures_pending = times

    async def create(
        self,
        sale: SaleRecord,
        items: Sequence[SaleItemSnapshot],
    ) -> str:
        async with self._lock:
            self.create_calls += 1

            if self._failures_pending > 0:
                self._failures_pending -= 1
                logger.error(f"[DB] Injected failure storing sale {sale.invoice_number}")
                raise SalePersistenceError(
                    message="Sales backend unavailable",
                    invoice_number=sale.invoice_number,
                )

            if sale.invoice_number in self._invoices:
                raise SalePersistenceError(
                    message=f"Duplicate invoice number: {sale.invoice_number}",
                    invoice_number=sale.invoice_number,
                )

            if not items:
                raise SalePersistenceError(
                    message="A sale needs at least one line item",
                    invoice_number=sale.invoice_number,
                )

            sale_id = str(uuid.uuid4())
            self._sales[sale_id] = StoredSale(id=sale_id, sale=sale, items=tuple(items))
            self._invoices.add(sale.invoice_number)

            logger.debug(
                f"[DB] Stored sale {sale_id} ({sale.invoice_number}, {len(items)} items)"
            )
            return sale_id

    async def get(self, sale_id: str) -> StoredSale | None:
        async with self._lock:
            return self._sales.get(sale_id)

    async def list_sales(self, limit: int = 100) -> list[StoredSale]:
        async with self._lock:
            return list(reversed(self._sales.values()))[:limit]

    async def count(self) -> int:
        async with self._lock:
            return len(self._sales)
