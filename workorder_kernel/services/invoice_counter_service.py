"""
InvoiceCounterService -- administration of the legacy counter cache.

The ``invoice_counters`` rows are a display cache keyed by invoice prefix.
Nothing in the allocation path reads them; they exist so an operator can
see (and correct) the per-class counters.  NumberingAuditService.resync_counter
re-anchors them to the true maximum.
"""

from __future__ import annotations

from collections import Counter
from uuid import UUID

from sqlalchemy import select

from workorder_kernel.domain.numbering import CustomerClass
from workorder_kernel.logging_config import get_logger
from workorder_kernel.models.invoice_counter import InvoiceCounter
from workorder_kernel.models.work_order import WorkOrder
from workorder_kernel.services.base import BaseService

logger = get_logger("services.invoice_counter")


class InvoiceCounterService(BaseService[InvoiceCounter]):
    """Service for the per-prefix counter cache."""

    def _row(self, customer_class: CustomerClass) -> InvoiceCounter | None:
        return self.session.execute(
            select(InvoiceCounter).where(InvoiceCounter.prefix == customer_class.prefix)
        ).scalar_one_or_none()

    def get_counter(self, customer_class: CustomerClass | str) -> int:
        """Cached count for the class; 0 when no row exists."""
        row = self._row(CustomerClass(customer_class))
        return row.current_count if row else 0

    def set_counter(
        self,
        customer_class: CustomerClass | str,
        value: int,
        actor_id: UUID | None = None,
    ) -> int:
        """Overwrite the cached count, creating the row if needed."""
        if value < 0:
            raise ValueError(f"counter value must be >= 0, got {value}")

        customer_class = CustomerClass(customer_class)
        row = self._row(customer_class)
        previous = row.current_count if row else None
        if row is None:
            row = InvoiceCounter(prefix=customer_class.prefix, current_count=value)
            self.session.add(row)
        else:
            row.current_count = value
        self.session.flush()

        logger.info(
            "invoice_counter_set",
            extra={
                "customer_class": customer_class.value,
                "previous_count": previous,
                "current_count": value,
                "actor_id": str(actor_id) if actor_id else None,
            },
        )
        return value

    def reset_counter(
        self,
        customer_class: CustomerClass | str,
        actor_id: UUID | None = None,
    ) -> int:
        return self.set_counter(customer_class, 0, actor_id)

    def current_counts(self) -> dict[str, int]:
        """Number of work orders per class, keyed by invoice prefix."""
        counts = Counter(
            self.session.execute(select(WorkOrder.customer_class)).scalars()
        )
        return {
            customer_class.prefix: counts.get(customer_class.value, 0)
            for customer_class in CustomerClass
        }
