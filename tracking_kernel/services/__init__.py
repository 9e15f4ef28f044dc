"""Services for the tracking kernel."""

from tracking_kernel.services.access_providers import (
    StaticAuthorizationProvider,
    StaticTerritoryProvider,
)
from tracking_kernel.services.base import BaseService
from tracking_kernel.services.status_update_service import StatusUpdateService
from tracking_kernel.services.status_validator import StatusTransitionValidator

__all__ = [
    "BaseService",
    "StaticAuthorizationProvider",
    "StaticTerritoryProvider",
    "StatusTransitionValidator",
    "StatusUpdateService",
]
