"""
Domain models — Pydantic types for dotsync.

All models are re-exported here for convenient access:

    from dotsync.core.models import Action, Receipt, UpdateReport, Settings
"""

from dotsync.core.models.action import Action, Receipt
from dotsync.core.models.capability import Capability, CapabilitySet
from dotsync.core.models.report import StageResult, StageStatus, UpdateReport
from dotsync.core.models.settings import Settings

__all__ = [
    # action.py
    "Action",
    "Receipt",
    # capability.py
    "Capability",
    "CapabilitySet",
    # report.py
    "StageResult",
    "StageStatus",
    "UpdateReport",
    # settings.py
    "Settings",
]
