from .confirmation_cache import (ConfirmationCache, DbConfirmationCache,
                                 MemoryConfirmationCache)
from .watcher import ConfirmationReaction, ConfirmationWatcher, wrap_reaction

__all__ = [
    "ConfirmationWatcher",
    "ConfirmationReaction",
    "wrap_reaction",
    "ConfirmationCache",
    "DbConfirmationCache",
    "MemoryConfirmationCache",
]
