"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Common constructor and session-handling contract for every write-side
    service.  Services receive a SQLAlchemy ``Session`` (the store handle)
    and an optional ``Clock`` explicitly; nothing reaches for a global
    client.

Invariants enforced:
    Services flush within the caller's transaction and never commit or
    roll back the outer transaction themselves.  Nested SAVEPOINTs are
    allowed for units that must apply all-or-nothing.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from workorder_kernel.db.base import Base
from workorder_kernel.domain.clock import Clock, SystemClock

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for all kernel services.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Does NOT provide read models -- those belong in ``selectors/``.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        """
        Args:
            session: SQLAlchemy session for database operations.
            clock: Time source for kernel-assigned timestamps.
        """
        self.session = session
        self.clock = clock or SystemClock()
