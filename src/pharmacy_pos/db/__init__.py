"""
Sales persistence.

Usage:
    from pharmacy_pos.db import MemorySalesBackend

    backend = MemorySalesBackend()
    sale_id = await backend.create(sale, items)
"""

from .backends import MemorySalesBackend
from .base import SalesBackend, StoredSale

__all__ = ["SalesBackend", "StoredSale", "MemorySalesBackend"]
