"""
Data transfer objects shared by services and selectors.

Frozen, ORM-free records.  Public service and selector methods return these
instead of ORM instances.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from workorder_kernel.domain.numbering import CustomerClass


@dataclass(frozen=True)
class LineItemSpec:
    """Input for one work order line (service or bundle)."""

    item_kind: str
    price: Decimal
    item_ref: str | None = None
    description: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class LineItemInfo:
    item_kind: str
    item_ref: str | None
    description: str | None
    price: Decimal
    notes: str | None
    line_seq: int


@dataclass(frozen=True)
class WorkOrderInfo:
    id: UUID
    customer_class: CustomerClass
    invoice_number: str
    status: str
    is_archived: bool
    is_canceled: bool
    customer_ref: str | None
    customer_name: str | None
    vehicle_ref: str | None
    vehicle_details: dict[str, Any] | None
    lines: tuple[LineItemInfo, ...]
    created_at: datetime | None
    updated_at: datetime | None
    completed_at: datetime | None

    @property
    def subtotal(self) -> Decimal:
        return sum((line.price for line in self.lines), Decimal("0"))

    @property
    def total(self) -> Decimal:
        return self.subtotal

    @property
    def is_active(self) -> bool:
        return not (self.is_archived or self.is_canceled)


@dataclass(frozen=True)
class InvoiceInfo:
    id: UUID
    work_order_id: UUID
    customer_class: CustomerClass
    invoice_number: str
    customer_ref: str | None
    customer_name: str | None
    vehicle_ref: str | None
    vehicle_details: dict[str, Any] | None
    lines: tuple[LineItemInfo, ...]
    subtotal: Decimal
    total: Decimal
    payment_method_id: UUID
    notes: str | None
    issued_at: datetime


@dataclass(frozen=True)
class PaymentMethodInfo:
    id: UUID
    name: str
    payment_type: str
    days_allowed: int | None
    description: str | None
    is_active: bool


@dataclass(frozen=True)
class LifecycleSummary:
    """Read-side aggregation: every work order counted once per dimension."""

    total: int
    by_status: dict[str, int] = field(default_factory=dict)
    by_customer_class: dict[str, int] = field(default_factory=dict)
    by_month: dict[str, int] = field(default_factory=dict)
    recent_activity: tuple[WorkOrderInfo, ...] = ()
