"""
Domain models — Pydantic types for tool acquisition.

All models are re-exported here for convenient access:

    from src.core.models import AcquisitionRequest, CarriedState, InstallLayout
"""

from src.core.models.acquisition import (
    AcquisitionRequest,
    AcquisitionResult,
    CacheTier,
    CarriedState,
    InstallLayout,
    TierKind,
)

__all__ = [
    "AcquisitionRequest",
    "AcquisitionResult",
    "CacheTier",
    "CarriedState",
    "InstallLayout",
    "TierKind",
]
