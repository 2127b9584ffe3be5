"""
Opsman services — modular organization of operations.

    from opsman.services import BatchAllocations, BatchConsolidation, TimeOff, Uploads
"""

from opsman.services.allocation import BatchAllocations
from opsman.services.consolidation import BatchConsolidation
from opsman.services.timeoff import TimeOff
from opsman.services.uploads import Uploads

__all__ = [
    'BatchAllocations',
    'BatchConsolidation',
    'TimeOff',
    'Uploads',
]
