"""
Kernel services (write side).

Every service takes a SQLAlchemy Session (and optionally a Clock) in its
constructor, flushes within the caller's transaction, and never commits.
"""

from workorder_kernel.services.invoice_counter_service import InvoiceCounterService
from workorder_kernel.services.invoice_service import InvoiceService
from workorder_kernel.services.numbering_audit_service import NumberingAuditService
from workorder_kernel.services.payment_method_service import PaymentMethodService
from workorder_kernel.services.sequence_service import SequenceService
from workorder_kernel.services.status_ledger_service import StatusLedgerService
from workorder_kernel.services.transition_service import (
    ProgressionResult,
    StatusTransitionService,
)
from workorder_kernel.services.work_order_service import WorkOrderService

__all__ = [
    "InvoiceCounterService",
    "InvoiceService",
    "NumberingAuditService",
    "PaymentMethodService",
    "ProgressionResult",
    "SequenceService",
    "StatusLedgerService",
    "StatusTransitionService",
    "WorkOrderService",
]
