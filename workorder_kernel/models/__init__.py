"""ORM models for the work order kernel."""

from workorder_kernel.models.invoice import Invoice, InvoiceLine
from workorder_kernel.models.invoice_counter import InvoiceCounter
from workorder_kernel.models.payment_method import PaymentMethod, PaymentType
from workorder_kernel.models.status_definition import StatusDefinition
from workorder_kernel.models.work_order import LineItemKind, WorkOrder, WorkOrderLine

__all__ = [
    "Invoice",
    "InvoiceCounter",
    "InvoiceLine",
    "LineItemKind",
    "PaymentMethod",
    "PaymentType",
    "StatusDefinition",
    "WorkOrder",
    "WorkOrderLine",
]
