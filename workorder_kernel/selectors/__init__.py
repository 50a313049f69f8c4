"""Selectors for the work order kernel (read side)."""

from workorder_kernel.selectors.work_order_selector import (
    WorkOrderSelector,
    to_invoice_info,
    to_work_order_info,
)

__all__ = [
    "WorkOrderSelector",
    "to_invoice_info",
    "to_work_order_info",
]
