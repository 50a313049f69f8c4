"""
Module: workorder_kernel.selectors.work_order_selector
Responsibility: Read-only access to work orders and issued invoices: the
    active dashboard view, issued-invoice listing, number lookup, the
    audit's numbered view, and the lifecycle summary.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Active dashboard: a work order with is_canceled or is_archived set is
      never returned, whatever other filters are given.
    - Lifecycle summary: every work order is counted exactly once in each
      breakdown (status, customer class, month).
    - Listings are newest first (created_at descending).

Failure modes:
    - Returns None or empty collections when nothing matches; only
      ``get`` raises (WorkOrderNotFoundError).
"""

from __future__ import annotations

from collections import Counter
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from workorder_kernel.domain.dtos import (
    InvoiceInfo,
    LifecycleSummary,
    LineItemInfo,
    WorkOrderInfo,
)
from workorder_kernel.domain.numbering import CustomerClass, parse_invoice_number
from workorder_kernel.domain.numbering_audit import NumberedWorkOrder
from workorder_kernel.exceptions import WorkOrderNotFoundError
from workorder_kernel.models.invoice import Invoice
from workorder_kernel.models.work_order import LineItemKind, WorkOrder
from workorder_kernel.selectors.base import BaseSelector

DEFAULT_RECENT_ACTIVITY_LIMIT = 10


def _line_info(line) -> LineItemInfo:
    return LineItemInfo(
        item_kind=LineItemKind(line.item_kind).value,
        item_ref=line.item_ref,
        description=line.description,
        price=line.price,
        notes=line.notes,
        line_seq=line.line_seq,
    )


def to_work_order_info(work_order: WorkOrder) -> WorkOrderInfo:
    """Convert ORM WorkOrder to WorkOrderInfo DTO."""
    return WorkOrderInfo(
        id=work_order.id,
        customer_class=CustomerClass(work_order.customer_class),
        invoice_number=work_order.invoice_number,
        status=work_order.status,
        is_archived=work_order.is_archived,
        is_canceled=work_order.is_canceled,
        customer_ref=work_order.customer_ref,
        customer_name=work_order.customer_name,
        vehicle_ref=work_order.vehicle_ref,
        vehicle_details=work_order.vehicle_details,
        lines=tuple(_line_info(line) for line in work_order.lines),
        created_at=work_order.created_at,
        updated_at=work_order.updated_at,
        completed_at=work_order.completed_at,
    )


def to_invoice_info(invoice: Invoice) -> InvoiceInfo:
    """Convert ORM Invoice to InvoiceInfo DTO."""
    return InvoiceInfo(
        id=invoice.id,
        work_order_id=invoice.work_order_id,
        customer_class=CustomerClass(invoice.customer_class),
        invoice_number=invoice.invoice_number,
        customer_ref=invoice.customer_ref,
        customer_name=invoice.customer_name,
        vehicle_ref=invoice.vehicle_ref,
        vehicle_details=invoice.vehicle_details,
        lines=tuple(_line_info(line) for line in invoice.lines),
        subtotal=invoice.subtotal,
        total=invoice.total,
        payment_method_id=invoice.payment_method_id,
        notes=invoice.notes,
        issued_at=invoice.issued_at,
    )


def _vehicle_text(vehicle_details: dict | None) -> str:
    if not vehicle_details:
        return ""
    return " ".join(str(v) for v in vehicle_details.values() if v not in (None, ""))


def _matches_search(record, search: str | None) -> bool:
    if not search:
        return True
    needle = search.lower()
    haystacks = (
        record.invoice_number or "",
        record.customer_name or "",
        _vehicle_text(record.vehicle_details),
    )
    return any(needle in h.lower() for h in haystacks)


class WorkOrderSelector(BaseSelector[WorkOrder]):
    """Selector for work order and invoice queries."""

    def __init__(
        self,
        session: Session,
        recent_activity_limit: int = DEFAULT_RECENT_ACTIVITY_LIMIT,
    ):
        super().__init__(session)
        self.recent_activity_limit = recent_activity_limit

    def get(self, work_order_id: UUID) -> WorkOrderInfo:
        work_order = self.session.get(WorkOrder, work_order_id)
        if work_order is None:
            raise WorkOrderNotFoundError(str(work_order_id))
        return to_work_order_info(work_order)

    def find_by_number(self, invoice_number: str) -> list[WorkOrderInfo]:
        """
        Every work order holding ``invoice_number``.

        More than one result means the number was duplicated.
        """
        rows = self.session.execute(
            select(WorkOrder)
            .where(WorkOrder.invoice_number == invoice_number)
            .order_by(WorkOrder.created_at)
        ).scalars().all()
        return [to_work_order_info(w) for w in rows]

    def active_work_orders(
        self,
        status: str | None = None,
        customer_class: CustomerClass | str | None = None,
        search: str | None = None,
    ) -> list[WorkOrderInfo]:
        """
        The operator dashboard: live work orders, newest first.

        Args:
            status: Exact ledger status name, or None for all.
            customer_class: Restrict to one class, or None for both.
            search: Case-insensitive substring over invoice number,
                customer name and vehicle details.
        """
        stmt = (
            select(WorkOrder)
            .where(WorkOrder.is_archived == False)  # noqa: E712
            .where(WorkOrder.is_canceled == False)  # noqa: E712
        )
        if status is not None:
            stmt = stmt.where(WorkOrder.status == status)
        if customer_class is not None:
            stmt = stmt.where(WorkOrder.customer_class == CustomerClass(customer_class).value)
        stmt = stmt.order_by(WorkOrder.created_at.desc())

        rows = self.session.execute(stmt).scalars().all()
        return [
            to_work_order_info(w)
            for w in rows
            if w.is_active and _matches_search(w, search)
        ]

    def list_invoices(
        self,
        customer_class: CustomerClass | str | None = None,
        search: str | None = None,
    ) -> list[InvoiceInfo]:
        """Issued invoices, newest first."""
        stmt = select(Invoice)
        if customer_class is not None:
            stmt = stmt.where(Invoice.customer_class == CustomerClass(customer_class).value)
        stmt = stmt.order_by(Invoice.issued_at.desc())

        rows = self.session.execute(stmt).scalars().all()
        return [to_invoice_info(i) for i in rows if _matches_search(i, search)]

    def invoice_for_work_order(self, work_order_id: UUID) -> InvoiceInfo | None:
        invoice = self.session.execute(
            select(Invoice).where(Invoice.work_order_id == work_order_id)
        ).scalar_one_or_none()
        return to_invoice_info(invoice) if invoice else None

    def numbered_work_orders(
        self,
        customer_class: CustomerClass | str,
    ) -> list[NumberedWorkOrder]:
        """Work orders of the class carrying a well-formed number of that class."""
        customer_class = CustomerClass(customer_class)
        rows = self.session.execute(
            select(
                WorkOrder.id,
                WorkOrder.invoice_number,
                WorkOrder.status,
                WorkOrder.created_at,
            )
            .where(WorkOrder.customer_class == customer_class.value)
            .order_by(WorkOrder.created_at)
        ).all()

        entries = []
        for work_order_id, invoice_number, status, created_at in rows:
            number = parse_invoice_number(invoice_number, customer_class)
            if number is None:
                continue
            entries.append(
                NumberedWorkOrder(
                    work_order_id=work_order_id,
                    number=number,
                    invoice_number=invoice_number,
                    status=status,
                    created_at=created_at,
                )
            )
        return entries

    def count_by_class(self) -> dict[CustomerClass, int]:
        counts = Counter(
            CustomerClass(c)
            for c in self.session.execute(select(WorkOrder.customer_class)).scalars()
        )
        return {customer_class: counts.get(customer_class, 0) for customer_class in CustomerClass}

    def lifecycle_summary(
        self,
        recent_limit: int | None = None,
    ) -> LifecycleSummary:
        """
        Counts by status, by customer class and by creation month.

        Month keys are ``YYYY-MM``.  ``recent_activity`` holds the newest
        ``recent_limit`` work orders, the selector's
        ``recent_activity_limit`` when None.
        """
        rows = self.session.execute(
            select(WorkOrder).order_by(WorkOrder.created_at.desc())
        ).scalars().all()
        if recent_limit is None:
            recent_limit = self.recent_activity_limit

        by_status: Counter[str] = Counter()
        by_class: Counter[str] = Counter()
        by_month: Counter[str] = Counter()
        for work_order in rows:
            by_status[work_order.status] += 1
            by_class[CustomerClass(work_order.customer_class).value] += 1
            created = work_order.created_at
            by_month[f"{created.year:04d}-{created.month:02d}"] += 1

        return LifecycleSummary(
            total=len(rows),
            by_status=dict(by_status),
            by_customer_class={
                c.value: by_class.get(c.value, 0) for c in CustomerClass
            },
            by_month=dict(sorted(by_month.items())),
            recent_activity=tuple(to_work_order_info(w) for w in rows[:recent_limit]),
        )
