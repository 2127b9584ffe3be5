"""
Opsman Protocols.

Defines interfaces for storage integration.
"""

from opsman.protocols.store import BatchStore

__all__ = [
    "BatchStore",
]
