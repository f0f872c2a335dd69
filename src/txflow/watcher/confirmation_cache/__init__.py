from .abc import ConfirmationCache
from .db_impl import DbConfirmationCache
from .memory_impl import MemoryConfirmationCache

__all__ = [
    "ConfirmationCache",
    "DbConfirmationCache",
    "MemoryConfirmationCache",
]
