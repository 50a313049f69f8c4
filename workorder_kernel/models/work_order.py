"""
Module: workorder_kernel.models.work_order
Responsibility: ORM persistence for work orders and their line items.
Architecture position: Kernel > Models.  May import from db/base.py and pure
    domain value objects.

Invariants enforced:
    - invoice_number is assigned before the first INSERT and never changes
      afterwards (ORM listener in db/immutability.py).
    - (customer_class, invoice_number) SHOULD be unique but is deliberately
      not constrained: the allocator does not serialize concurrent callers,
      and duplicates are surfaced by the numbering audit instead.
    - status joins to StatusDefinition.name by string equality.

Failure modes:
    - ImmutabilityViolationError when an UPDATE touches invoice_number.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workorder_kernel.db.base import Base, TrackedBase, UUIDString
from workorder_kernel.domain.numbering import CustomerClass


class LineItemKind(str, Enum):
    """What a work order line refers to in the (external) catalog."""

    SERVICE = "service"
    BUNDLE = "bundle"


class WorkOrder(TrackedBase):
    """
    A service-shop work order.

    Guarantees:
        - lines are returned in line_seq order.
        - subtotal/total are derived from line prices.
    """

    __tablename__ = "work_orders"

    __table_args__ = (
        Index("idx_work_order_class_created", "customer_class", "created_at"),
        Index("idx_work_order_invoice_number", "invoice_number"),
        Index("idx_work_order_status", "status"),
    )

    customer_class: Mapped[CustomerClass] = mapped_column(
        String(20),
        nullable=False,
    )

    # <Prefix><5-digit zero-padded integer>, e.g. "C00007"
    invoice_number: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        active_history=True,
    )

    status: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    is_archived: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    is_canceled: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    # Denormalized customer / vehicle snapshot from the creation flow
    customer_ref: Mapped[str | None] = mapped_column(String(100), nullable=True)
    customer_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    vehicle_ref: Mapped[str | None] = mapped_column(String(100), nullable=True)
    vehicle_details: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    lines: Mapped[list["WorkOrderLine"]] = relationship(
        back_populates="work_order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="WorkOrderLine.line_seq",
    )

    def __repr__(self) -> str:
        return f"<WorkOrder {self.invoice_number} status={self.status!r}>"

    @property
    def subtotal(self) -> Decimal:
        return sum((line.price for line in self.lines), Decimal("0"))

    @property
    def total(self) -> Decimal:
        # Taxes are applied outside the kernel
        return self.subtotal

    @property
    def is_completed(self) -> bool:
        # Set only by invoice issue, together with the "completed" status
        return self.completed_at is not None

    @property
    def is_active(self) -> bool:
        return not (self.is_archived or self.is_canceled)


class WorkOrderLine(Base):
    """One service or bundle on a work order."""

    __tablename__ = "work_order_lines"

    __table_args__ = (
        Index("idx_work_order_line_parent", "work_order_id"),
    )

    work_order_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("work_orders.id"),
        nullable=False,
    )

    item_kind: Mapped[LineItemKind] = mapped_column(
        String(10),
        nullable=False,
    )

    item_ref: Mapped[str | None] = mapped_column(String(100), nullable=True)

    description: Mapped[str | None] = mapped_column(String(200), nullable=True)

    price: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    line_seq: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    work_order: Mapped[WorkOrder] = relationship(back_populates="lines")
