"""
Opsman configuration.

Usage in settings.py:
    OPSMAN = {
        "BATCH_STORE": "opsman.adapters.orm.DjangoBatchStore",
        "DEFAULT_SELECTION_METHOD": "fefo",
        "UPLOAD_CHUNK_SIZE": 5,
        "SICK_LEAVE_MINIMUM_HOURS": 24,
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class OpsmanSettings:
    """Opsman configuration settings."""

    # Batch storage backend (dotted path)
    BATCH_STORE: str = "opsman.adapters.orm.DjangoBatchStore"

    # fifo | fefo | lifo
    DEFAULT_SELECTION_METHOD: str = "fefo"

    # Upload processing
    UPLOAD_CHUNK_SIZE: int = 5
    UPLOAD_MAX_CONCURRENT: int = 3
    UPLOAD_CHUNK_DELAY_MS: int = 500
    UPLOAD_MAX_FILE_SIZE_MB: int = 50
    UPLOAD_MAX_TOTAL_SIZE_MB: int = 200
    UPLOAD_PATH: str = "uploads"

    # Jurisdiction-mandated sick leave (frontloaded)
    SICK_LEAVE_ANNUAL_HOURS: int = 40
    SICK_LEAVE_MINIMUM_HOURS: int = 24
    SICK_LEAVE_WAITING_DAYS: int = 90
    SICK_LEAVE_MAX_BALANCE: int | None = 80

    PERSONAL_ANNUAL_HOURS: int = 16

    # Bi-weekly payroll
    PAY_PERIODS_PER_YEAR: int = 26

    # (min years of service, annual vacation hours)
    VACATION_TENURE_TIERS: tuple = ((0, 40), (1, 80), (5, 120), (10, 160))


def get_opsman_settings() -> OpsmanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "OPSMAN", {})
    return OpsmanSettings(**{
        k: v for k, v in user_settings.items()
        if k in OpsmanSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_opsman_settings(), name)


opsman_settings = _LazySettings()
