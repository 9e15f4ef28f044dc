"""
Typed Exception Hierarchy for the Tracking Kernel.

===============================================================================
WHEN EXCEPTIONS ARE RAISED
===============================================================================

Business-rule violations discovered while validating a status change are NOT
exceptions: the validator returns a tagged ``ValidationResult`` and the batch
paths collect ``Failure`` outcomes per record.  Exceptions are reserved for
call-level preconditions that stop a whole operation:

  - the caller lacks the capability for the operation (FORBIDDEN)
  - a bulk request is empty or larger than the configured maximum
  - a period key is malformed
  - the single-update path hits a missing client/product or a failed
    validation (the validator's code travels on the exception)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    TrackingKernelError (base)
    |
    +-- AccessError
    |   +-- ForbiddenError
    |
    +-- LookupNotFoundError
    |   +-- ClientNotFoundError
    |   +-- ProductNotFoundError
    |   +-- PendingStatusMissingError
    |
    +-- PeriodKeyError
    |   +-- InvalidPeriodKeyError
    |
    +-- StatusUpdateError
    |   +-- StatusValidationError
    |   +-- BulkUpdateSizeError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Access          | FORBIDDEN                   | Missing capability or out of territory
----------------|-----------------------------|-----------------------------------------
Lookup          | NOT_FOUND                   | Client or product does not exist
                | PENDING_STATUS_MISSING      | No PENDING status type configured
----------------|-----------------------------|-----------------------------------------
Period          | INVALID_PERIOD_KEY          | Bad period type / month / quarter / year
----------------|-----------------------------|-----------------------------------------
Status update   | <validator code>            | StatusValidationError carries the
                |                             | ValidationResult code (e.g.
                |                             | INVALID_TRANSITION, REMARKS_REQUIRED)
                | BULK_UPDATE_SIZE            | Bulk request empty or too large
----------------|-----------------------------|-----------------------------------------
Configuration   | CONFIGURATION_ERROR         | Workflow configuration is invalid
"""

from typing import Any


class TrackingKernelError(Exception):
    """
    Base exception for all tracking kernel errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "TRACKING_KERNEL_ERROR"


# Access exceptions


class AccessError(TrackingKernelError):
    """Base exception for authorization and territory errors."""

    code: str = "ACCESS_ERROR"


class ForbiddenError(AccessError):
    """Caller may not perform the operation or touch the resource."""

    code: str = "FORBIDDEN"

    def __init__(
        self,
        message: str,
        user_id: str | None = None,
        resource: str | None = None,
        action: str | None = None,
    ):
        self.user_id = user_id
        self.resource = resource
        self.action = action
        super().__init__(message)


# Lookup exceptions


class LookupNotFoundError(TrackingKernelError):
    """Base exception for missing lookup rows."""

    code: str = "NOT_FOUND"


class ClientNotFoundError(LookupNotFoundError):
    """Client with given ID was not found."""

    code: str = "NOT_FOUND"

    def __init__(self, client_id: str):
        self.client_id = client_id
        super().__init__("Client not found")


class ProductNotFoundError(LookupNotFoundError):
    """Product referenced by a client was not found."""

    code: str = "NOT_FOUND"

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__("Product not found")


class PendingStatusMissingError(LookupNotFoundError):
    """The initial status type is not present in the lookup tables."""

    code: str = "PENDING_STATUS_MISSING"

    def __init__(self, status_code: str = "PENDING"):
        self.status_code = status_code
        super().__init__(f"{status_code} status type not found")


# Period exceptions


class PeriodKeyError(TrackingKernelError):
    """Base exception for period key errors."""

    code: str = "PERIOD_KEY_ERROR"


class InvalidPeriodKeyError(PeriodKeyError):
    """Period type, year, month and quarter do not form a valid key."""

    code: str = "INVALID_PERIOD_KEY"

    def __init__(
        self,
        reason: str,
        period_type: str | None = None,
        period_year: int | None = None,
        period_month: int | None = None,
        period_quarter: int | None = None,
    ):
        self.reason = reason
        self.period_type = period_type
        self.period_year = period_year
        self.period_month = period_month
        self.period_quarter = period_quarter
        super().__init__(f"Invalid period key: {reason}")


# Status update exceptions


class StatusUpdateError(TrackingKernelError):
    """Base exception for status update errors."""

    code: str = "STATUS_UPDATE_ERROR"


class StatusValidationError(StatusUpdateError):
    """
    A single status update failed validation.

    The ``code`` is overridden per instance with the validator's error code
    so callers can map it without parsing the message.
    """

    code: str = "VALIDATION_ERROR"

    def __init__(
        self,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        self.code = code
        self.details = details or {}
        super().__init__(message)


class BulkUpdateSizeError(StatusUpdateError):
    """Bulk request has no entries or exceeds the configured maximum."""

    code: str = "BULK_UPDATE_SIZE"

    def __init__(self, count: int, max_updates: int):
        self.count = count
        self.max_updates = max_updates
        if count == 0:
            message = "At least one update is required"
        else:
            message = (
                f"Maximum {max_updates} updates per request, got {count}"
            )
        super().__init__(message)


# Configuration exceptions


class ConfigurationError(TrackingKernelError):
    """Workflow or batch configuration failed structural validation."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, errors: list[str] | tuple[str, ...]):
        self.errors = tuple(errors)
        super().__init__(
            f"Invalid tracking configuration: {len(self.errors)} error(s): "
            + "; ".join(self.errors)
        )
