"""Read-only selectors for the tracking kernel."""

from tracking_kernel.selectors.base import BaseSelector
from tracking_kernel.selectors.lookup_selector import LookupSelector
from tracking_kernel.selectors.status_selector import StatusSelector

__all__ = [
    "BaseSelector",
    "LookupSelector",
    "StatusSelector",
]
