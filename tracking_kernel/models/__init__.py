"""Persistence models for the tracking kernel."""

from tracking_kernel.models.lookups import (
    Client,
    Company,
    Product,
    StatusReason,
    StatusType,
)
from tracking_kernel.models.period_status import ClientPeriodStatus, StatusEvent

__all__ = [
    "Company",
    "Product",
    "Client",
    "StatusType",
    "StatusReason",
    "ClientPeriodStatus",
    "StatusEvent",
]
