"""
Module: workorder_kernel.models.payment_method
Responsibility: ORM persistence for payment methods an invoice can be issued
    against.
Architecture position: Kernel > Models.

Invariants enforced:
    - Only active payment methods may be referenced by a new invoice
      (checked by InvoiceService).
    - days_allowed is meaningful only for credit-style terms.
"""

from enum import Enum

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from workorder_kernel.db.base import TrackedBase


class PaymentType(str, Enum):
    IMMEDIATE_CASH = "immediate_cash"
    IMMEDIATE_DIGITAL = "immediate_digital"
    ADVANCE = "advance"
    STANDARD_CREDIT = "standard_credit"
    END_OF_MONTH = "end_of_month"

    @property
    def has_terms(self) -> bool:
        """Credit-style terms carry a number of days."""
        return self in (PaymentType.STANDARD_CREDIT, PaymentType.END_OF_MONTH)


class PaymentMethod(TrackedBase):
    """A way a customer settles an invoice."""

    __tablename__ = "payment_methods"

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    payment_type: Mapped[PaymentType] = mapped_column(String(30), nullable=False)

    days_allowed: Mapped[int | None] = mapped_column(Integer, nullable=True)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<PaymentMethod {self.name!r} active={self.is_active}>"
