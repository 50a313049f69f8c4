"""
NumberingAuditService -- detect and report invoice-numbering drift.

Responsibility:
    Reconcile the numbers work orders actually hold against the contiguous
    sequence each class should have, log every finding, and re-anchor the
    counter cache on request.

Architecture position:
    Kernel > Services.  Reads through WorkOrderSelector, applies the pure
    rules in domain/numbering_audit.py.

Invariants enforced:
    - Findings are ConsistencyWarning values.  They are logged at WARNING,
      returned, and never raised.
    - Nothing is auto-repaired: no number is reassigned and no gap filled.
      resync_counter only overwrites the counter cache with the true maximum.
"""

from __future__ import annotations

from uuid import UUID

from workorder_kernel.domain.dtos import WorkOrderInfo
from workorder_kernel.domain.numbering import CustomerClass
from workorder_kernel.domain.numbering_audit import (
    ClassNumberingAudit,
    ConsistencyIssue,
    NumberingAuditReport,
    audit_class,
)
from workorder_kernel.logging_config import get_logger
from workorder_kernel.models.work_order import WorkOrder
from workorder_kernel.selectors.work_order_selector import WorkOrderSelector
from workorder_kernel.services.base import BaseService
from workorder_kernel.services.invoice_counter_service import InvoiceCounterService
from workorder_kernel.services.sequence_service import SequenceService

logger = get_logger("services.numbering_audit")


class NumberingAuditService(BaseService[WorkOrder]):
    """
    Service for the numbering consistency audit.

    Usage:
        with session_scope() as session:
            report = NumberingAuditService(session).audit()
            for warning in report.warnings:
                print(warning.code, warning.invoice_number, warning.work_order_ids)
    """

    def audit(self) -> NumberingAuditReport:
        """Audit both customer classes."""
        per_class = {
            customer_class: self.audit_class(customer_class)
            for customer_class in CustomerClass
        }
        report = NumberingAuditReport(per_class=per_class)

        logger.info(
            "numbering_audit_completed",
            extra={
                "consistent": report.is_consistent,
                "warning_count": len(report.warnings),
            },
        )
        return report

    def audit_class(self, customer_class: CustomerClass | str) -> ClassNumberingAudit:
        customer_class = CustomerClass(customer_class)
        entries = WorkOrderSelector(self.session).numbered_work_orders(customer_class)
        result = audit_class(customer_class, entries)

        for warning in result.warnings():
            if warning.issue is ConsistencyIssue.DUPLICATE_NUMBER:
                logger.warning(
                    "numbering_duplicate_detected",
                    extra={
                        "customer_class": customer_class.value,
                        "invoice_number": warning.invoice_number,
                        "work_order_ids": [str(i) for i in warning.work_order_ids],
                    },
                )
            elif warning.issue is ConsistencyIssue.NUMBER_OUT_OF_RANGE:
                logger.warning(
                    "numbering_out_of_range_detected",
                    extra={
                        "customer_class": customer_class.value,
                        "invoice_number": warning.invoice_number,
                        "work_order_ids": [str(i) for i in warning.work_order_ids],
                    },
                )
            else:
                logger.warning(
                    "numbering_gap_detected",
                    extra={
                        "customer_class": customer_class.value,
                        "invoice_number": warning.invoice_number,
                    },
                )
        return result

    def resync_counter(
        self,
        customer_class: CustomerClass | str,
        actor_id: UUID | None = None,
    ) -> int:
        """
        Overwrite the class's counter cache with the highest assigned number.

        Returns:
            The new counter value (0 when the class has no work orders).
        """
        customer_class = CustomerClass(customer_class)
        highest = SequenceService(self.session, self.clock).highest_assigned(customer_class)
        InvoiceCounterService(self.session, self.clock).set_counter(
            customer_class, highest, actor_id
        )

        logger.info(
            "invoice_counter_resynced",
            extra={"customer_class": customer_class.value, "current_count": highest},
        )
        return highest

    def find_by_number(self, invoice_number: str) -> list[WorkOrderInfo]:
        """Every work order holding ``invoice_number``."""
        return WorkOrderSelector(self.session).find_by_number(invoice_number)
