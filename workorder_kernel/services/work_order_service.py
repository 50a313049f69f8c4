"""
WorkOrderService -- creation and direct maintenance of work orders.

Responsibility:
    Persist a new work order (allocating its invoice number first), and the
    direct status writes an operator can make outside the progression rule:
    set a status, cancel, archive.

Architecture position:
    Kernel > Services.  Uses SequenceService for numbers and
    StatusLedgerService for the ledger; never commits.

Invariants enforced:
    - A work order is never persisted without an invoice number.  If
      allocation fails the AllocationError propagates and nothing is added
      to the session.
    - invoice_number is written once, at creation.
    - Cancellation always lands on a canceled-kind ledger status and sets
      is_canceled.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any
from uuid import UUID

from workorder_kernel.domain.dtos import LineItemSpec, WorkOrderInfo
from workorder_kernel.domain.lifecycle import FALLBACK_INITIAL_STATUS
from workorder_kernel.domain.numbering import CustomerClass
from workorder_kernel.exceptions import (
    InvalidStatusError,
    WorkOrderClosedError,
    WorkOrderNotFoundError,
)
from workorder_kernel.logging_config import get_logger
from workorder_kernel.models.work_order import LineItemKind, WorkOrder, WorkOrderLine
from workorder_kernel.selectors.work_order_selector import to_work_order_info
from workorder_kernel.services.base import BaseService
from workorder_kernel.services.sequence_service import SequenceService
from workorder_kernel.services.status_ledger_service import StatusLedgerService

logger = get_logger("services.work_order")


class WorkOrderService(BaseService[WorkOrder]):
    """
    Service for work order writes.

    Usage:
        with session_scope() as session:
            service = WorkOrderService(session, clock)
            info = service.create_work_order(
                CustomerClass.CORPORATE,
                [LineItemSpec("service", Decimal("80.00"), description="Oil change")],
                actor_id=user_id,
            )
    """

    def _get(self, work_order_id: UUID) -> WorkOrder:
        work_order = self.session.get(WorkOrder, work_order_id)
        if work_order is None:
            raise WorkOrderNotFoundError(str(work_order_id))
        return work_order

    def get(self, work_order_id: UUID) -> WorkOrderInfo:
        return to_work_order_info(self._get(work_order_id))

    def create_work_order(
        self,
        customer_class: CustomerClass | str,
        lines: list[LineItemSpec],
        actor_id: UUID,
        status: str | None = None,
        customer_ref: str | None = None,
        customer_name: str | None = None,
        vehicle_ref: str | None = None,
        vehicle_details: dict[str, Any] | None = None,
        invoice_number: str | None = None,
    ) -> WorkOrderInfo:
        """
        Create and flush a work order.

        Args:
            customer_class: Corporate or individual; selects the number prefix.
            lines: Services and bundles, in display order.
            actor_id: Who is creating it.
            status: Initial ledger status.  Defaults to the ledger's first
                non-canceled status ("Pending" for an empty ledger).
            invoice_number: A number computed earlier (e.g. when the review
                screen was opened).  Allocated here when None.

        Raises:
            AllocationError: No number could be computed.
        """
        customer_class = CustomerClass(customer_class)
        if invoice_number is None:
            invoice_number = SequenceService(self.session, self.clock).allocate(
                customer_class
            )

        if status is None:
            status = StatusLedgerService(self.session, self.clock).load_ledger().initial_status()

        work_order = WorkOrder(
            customer_class=customer_class.value,
            invoice_number=invoice_number,
            status=status or FALLBACK_INITIAL_STATUS,
            is_archived=False,
            is_canceled=False,
            customer_ref=customer_ref,
            customer_name=customer_name,
            vehicle_ref=vehicle_ref,
            vehicle_details=vehicle_details,
            created_by_id=actor_id,
            created_at=self.clock.now(),
        )
        for seq, item in enumerate(lines, start=1):
            work_order.lines.append(
                WorkOrderLine(
                    item_kind=LineItemKind(item.item_kind).value,
                    item_ref=item.item_ref,
                    description=item.description,
                    price=Decimal(item.price),
                    notes=item.notes,
                    line_seq=seq,
                )
            )

        self.session.add(work_order)
        self.session.flush()

        logger.info(
            "work_order_created",
            extra={
                "work_order_id": str(work_order.id),
                "invoice_number": invoice_number,
                "customer_class": customer_class.value,
                "status": work_order.status,
                "line_count": len(work_order.lines),
            },
        )
        return to_work_order_info(work_order)

    def set_status(
        self,
        work_order_id: UUID,
        status: str,
        actor_id: UUID,
    ) -> WorkOrderInfo:
        """
        Write ``status`` directly, bypassing the progression rule.

        A canceled-kind name cancels the work order as well.  The end
        status is never written here: it is reached through
        ``StatusTransitionService.request_progression`` and
        ``InvoiceService.issue``.

        Raises:
            WorkOrderNotFoundError: Unknown id.
            WorkOrderClosedError: Already completed (an invoice was issued).
            InvalidStatusError: ``status`` is the ledger's end status.
        """
        work_order = self._get(work_order_id)
        if work_order.is_completed:
            raise WorkOrderClosedError(
                str(work_order.id), work_order.status, "an invoice has been issued"
            )

        ledger = StatusLedgerService(self.session, self.clock).load_ledger()
        end = ledger.end_status
        if end is not None and end.name == status:
            raise InvalidStatusError(
                status, "the end status is reached by issuing the invoice"
            )

        previous = work_order.status
        work_order.status = status
        if ledger.is_canceled(status):
            work_order.is_canceled = True
        work_order.updated_by_id = actor_id
        self.session.flush()

        logger.info(
            "work_order_status_set",
            extra={
                "work_order_id": str(work_order.id),
                "from_status": previous,
                "to_status": status,
                "is_canceled": work_order.is_canceled,
            },
        )
        return to_work_order_info(work_order)

    def cancel(
        self,
        work_order_id: UUID,
        actor_id: UUID,
        status_name: str | None = None,
    ) -> WorkOrderInfo:
        """
        Cancel a work order.

        ``status_name`` must be a canceled-kind ledger status; the ledger's
        first canceled status is used when it is None.

        Raises:
            WorkOrderNotFoundError: Unknown id.
            WorkOrderClosedError: Already completed.
            InvalidStatusError: ``status_name`` is not a canceled status, or
                the ledger has none.
        """
        work_order = self._get(work_order_id)
        if work_order.is_completed:
            raise WorkOrderClosedError(
                str(work_order.id), work_order.status, "an invoice has been issued"
            )

        ledger = StatusLedgerService(self.session, self.clock).load_ledger()
        if status_name is None:
            canceled = ledger.canceled_statuses
            if not canceled:
                raise InvalidStatusError("", "the ledger has no canceled status")
            status_name = canceled[0].name
        elif not ledger.is_canceled(status_name):
            raise InvalidStatusError(status_name, "not a canceled status")

        work_order.status = status_name
        work_order.is_canceled = True
        work_order.updated_by_id = actor_id
        self.session.flush()

        logger.info(
            "work_order_canceled",
            extra={"work_order_id": str(work_order.id), "status": status_name},
        )
        return to_work_order_info(work_order)

    def archive(self, work_order_id: UUID, actor_id: UUID) -> WorkOrderInfo:
        """Hide a work order from the active dashboard.  Idempotent."""
        work_order = self._get(work_order_id)
        if not work_order.is_archived:
            work_order.is_archived = True
            work_order.updated_by_id = actor_id
            self.session.flush()
            logger.info(
                "work_order_archived",
                extra={"work_order_id": str(work_order.id)},
            )
        return to_work_order_info(work_order)
