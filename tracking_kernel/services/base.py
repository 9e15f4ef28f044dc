"""
BaseService -- abstract base for kernel services that write.

Responsibility:
    Common constructor and session contract.  Services receive a SQLAlchemy
    ``Session`` and use ``flush()``, never ``commit()``; the caller's
    ``session_scope()`` owns the outer transaction.

Architecture position:
    Kernel > Services.  Extended by StatusUpdateService and by the batch
    services in ``tracking_batch``.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from tracking_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for all services.

    Guarantees:
        - The service never calls ``session.commit()`` or
          ``session.rollback()`` on the outer transaction.  SAVEPOINTs
          opened with ``begin_nested()`` are the only nested boundary.
    """

    def __init__(self, session: Session):
        self.session = session
