"""
Module: workorder_kernel.models.invoice
Responsibility: ORM persistence for issued invoices -- append-only copies of a
    work order taken when it reaches the end status.
Architecture position: Kernel > Models.  May import from db/base.py only
    (plus pure domain enums).

Invariants enforced:
    - Invoices and their lines are immutable from creation (ORM listeners in
      db/immutability.py block UPDATE and DELETE).
    - work_order_id is a non-owning back reference; no foreign key ties the
      invoice's lifetime to the work order.
    - Exactly one invoice per work order (checked by InvoiceService before
      writing; unique index as a backstop).
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workorder_kernel.db.base import Base, TrackedBase, UUIDString
from workorder_kernel.domain.numbering import CustomerClass
from workorder_kernel.models.work_order import LineItemKind


class Invoice(TrackedBase):
    """An issued invoice."""

    __tablename__ = "invoices"

    __table_args__ = (
        Index("uq_invoice_work_order", "work_order_id", unique=True),
        Index("idx_invoice_number", "invoice_number"),
    )

    work_order_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        nullable=False,
    )

    customer_class: Mapped[CustomerClass] = mapped_column(String(20), nullable=False)

    invoice_number: Mapped[str] = mapped_column(String(20), nullable=False)

    customer_ref: Mapped[str | None] = mapped_column(String(100), nullable=True)
    customer_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    vehicle_ref: Mapped[str | None] = mapped_column(String(100), nullable=True)
    vehicle_details: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    subtotal: Mapped[Decimal] = mapped_column(nullable=False)
    total: Mapped[Decimal] = mapped_column(nullable=False)

    payment_method_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("payment_methods.id"),
        nullable=False,
    )

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    issued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    lines: Mapped[list["InvoiceLine"]] = relationship(
        back_populates="invoice",
        cascade="all",
        lazy="selectin",
        order_by="InvoiceLine.line_seq",
    )

    def __repr__(self) -> str:
        return f"<Invoice {self.invoice_number} work_order={self.work_order_id}>"


class InvoiceLine(Base):
    """Copy of one work order line on an issued invoice."""

    __tablename__ = "invoice_lines"

    __table_args__ = (
        Index("idx_invoice_line_parent", "invoice_id"),
    )

    invoice_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("invoices.id"),
        nullable=False,
    )

    item_kind: Mapped[LineItemKind] = mapped_column(String(10), nullable=False)
    item_ref: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(String(200), nullable=True)
    price: Mapped[Decimal] = mapped_column(nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    line_seq: Mapped[int] = mapped_column(Integer, nullable=False)

    invoice: Mapped[Invoice] = relationship(back_populates="lines")
