"""
Opsman Adapters.

Implementations of protocols for storage backends.
"""

from opsman.adapters.memory import InMemoryBatchStore
from opsman.adapters.orm import DjangoBatchStore, get_batch_store, reset_batch_store

__all__ = [
    "DjangoBatchStore",
    "InMemoryBatchStore",
    "get_batch_store",
    "reset_batch_store",
]
