"""
InvoiceService -- materialize an issued invoice from a work order.

Responsibility:
    When a work order reaches the end status, write its invoice and seal the
    work order as completed.

Architecture position:
    Kernel > Services -- called after the operator confirms invoice review
    (StatusTransitionService returned INVOICE_REVIEW).

Invariants enforced:
    - Preconditions are checked before anything is written: payment method
      given, existing and active; work order existing and not yet invoiced.
    - The invoice insert and the work order completion apply as ONE unit
      (a SAVEPOINT).  A failure in either half rolls both back, so no
      invoice is left behind for a work order that did not complete.
    - Invoices are append-only from creation (see db/immutability.py).

Failure modes:
    - ValidationError subclasses: a precondition failed; nothing written.
    - WorkOrderNotFoundError / WorkOrderAlreadyInvoicedError.
    - InvoiceWriteError: the invoice insert failed.
    - WorkOrderCompletionError: the invoice was written but sealing the
      work order failed; both were rolled back and the failure is logged
      at ERROR.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from workorder_kernel.domain.dtos import InvoiceInfo
from workorder_kernel.domain.lifecycle import COMPLETED_STATUS
from workorder_kernel.domain.numbering import CustomerClass
from workorder_kernel.exceptions import (
    ImmutabilityViolationError,
    InvoiceWriteError,
    WorkOrderAlreadyInvoicedError,
    WorkOrderCompletionError,
    WorkOrderNotFoundError,
)
from workorder_kernel.logging_config import LogContext, get_logger
from workorder_kernel.models.invoice import Invoice, InvoiceLine
from workorder_kernel.models.work_order import WorkOrder
from workorder_kernel.selectors.work_order_selector import to_invoice_info
from workorder_kernel.services.base import BaseService
from workorder_kernel.services.payment_method_service import PaymentMethodService

logger = get_logger("services.invoice")

_WRITE_ERRORS = (SQLAlchemyError, ImmutabilityViolationError)


class InvoiceService(BaseService[Invoice]):
    """
    Service for issuing invoices.

    Usage:
        with session_scope() as session:
            result = StatusTransitionService(session).request_progression(wo_id, user_id)
            if result.requires_invoice_review:
                invoice = InvoiceService(session).issue(
                    wo_id, payment_method_id, notes="Paid at counter", actor_id=user_id
                )
    """

    def issue(
        self,
        work_order_id: UUID,
        payment_method_id: UUID | None,
        notes: str | None,
        actor_id: UUID,
    ) -> InvoiceInfo:
        """
        Write the invoice for ``work_order_id`` and complete the work order.

        Returns:
            The issued invoice.

        Raises:
            PaymentMethodRequiredError, PaymentMethodNotFoundError,
            PaymentMethodInactiveError: Payment precondition failed.
            WorkOrderNotFoundError: Unknown work order.
            WorkOrderAlreadyInvoicedError: An invoice already exists.
            InvoiceWriteError, WorkOrderCompletionError: The write failed.
        """
        PaymentMethodService(self.session, self.clock).validate_usable(
            payment_method_id, work_order_id
        )

        work_order = self.session.get(WorkOrder, work_order_id)
        if work_order is None:
            raise WorkOrderNotFoundError(str(work_order_id))

        existing = self.session.execute(
            select(Invoice.invoice_number).where(Invoice.work_order_id == work_order.id)
        ).scalar_one_or_none()
        if existing is not None:
            raise WorkOrderAlreadyInvoicedError(str(work_order.id), existing)

        with LogContext.bind(
            work_order_id=str(work_order.id),
            invoice_number=work_order.invoice_number,
        ):
            return self._materialize(work_order, payment_method_id, notes, actor_id)

    def _materialize(
        self,
        work_order: WorkOrder,
        payment_method_id: UUID,
        notes: str | None,
        actor_id: UUID,
    ) -> InvoiceInfo:
        work_order_id = str(work_order.id)
        invoice_number = work_order.invoice_number
        now = self.clock.now()
        invoice = None

        try:
            with self.session.begin_nested():
                try:
                    invoice = self._write_invoice(
                        work_order, payment_method_id, notes, actor_id, now
                    )
                except _WRITE_ERRORS as exc:
                    logger.error(
                        "invoice_write_failed",
                        extra={"stage": InvoiceWriteError.stage},
                        exc_info=True,
                    )
                    raise InvoiceWriteError(work_order_id, str(exc)) from exc

                try:
                    self._complete_work_order(work_order, actor_id, now)
                except _WRITE_ERRORS as exc:
                    logger.error(
                        "work_order_completion_failed",
                        extra={
                            "stage": WorkOrderCompletionError.stage,
                            "invoice_id": str(invoice.id),
                        },
                        exc_info=True,
                    )
                    raise WorkOrderCompletionError(
                        work_order_id, str(invoice.id), str(exc)
                    ) from exc
        except WorkOrderCompletionError:
            # The savepoint rollback discarded the invoice row as well
            logger.error(
                "invoice_materialization_rolled_back",
                extra={"invoice_number": invoice_number},
            )
            raise

        logger.info(
            "invoice_issued",
            extra={
                "invoice_id": str(invoice.id),
                "customer_class": CustomerClass(invoice.customer_class).value,
                "total": invoice.total,
                "payment_method_id": str(payment_method_id),
            },
        )
        return to_invoice_info(invoice)

    def _write_invoice(
        self,
        work_order: WorkOrder,
        payment_method_id: UUID,
        notes: str | None,
        actor_id: UUID,
        issued_at: datetime,
    ) -> Invoice:
        invoice = Invoice(
            work_order_id=work_order.id,
            customer_class=CustomerClass(work_order.customer_class).value,
            invoice_number=work_order.invoice_number,
            customer_ref=work_order.customer_ref,
            customer_name=work_order.customer_name,
            vehicle_ref=work_order.vehicle_ref,
            vehicle_details=work_order.vehicle_details,
            subtotal=work_order.subtotal,
            total=work_order.total,
            payment_method_id=payment_method_id,
            notes=notes,
            issued_at=issued_at,
            created_by_id=actor_id,
        )
        for line in work_order.lines:
            invoice.lines.append(
                InvoiceLine(
                    item_kind=line.item_kind,
                    item_ref=line.item_ref,
                    description=line.description,
                    price=line.price,
                    notes=line.notes,
                    line_seq=line.line_seq,
                )
            )
        self.session.add(invoice)
        self.session.flush()
        return invoice

    def _complete_work_order(
        self,
        work_order: WorkOrder,
        actor_id: UUID,
        completed_at: datetime,
    ) -> None:
        work_order.status = COMPLETED_STATUS
        work_order.completed_at = completed_at
        work_order.updated_by_id = actor_id
        self.session.flush()
