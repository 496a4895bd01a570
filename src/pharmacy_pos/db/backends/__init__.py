"""Sales backend implementations."""

from .memory import MemorySalesBackend

__all__ = ["MemorySalesBackend"]
