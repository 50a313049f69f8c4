"""
Module: workorder_kernel.models.invoice_counter
Responsibility: Legacy per-class counter cache, keyed by invoice prefix.
Architecture position: Kernel > Models.

Invariants enforced:
    - NOT authoritative.  The allocator never reads it; the next number is
      always inferred from the work orders themselves.  The numbering audit
      re-anchors it to the true maximum on resync.
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from workorder_kernel.db.base import Base


class InvoiceCounter(Base):
    """Cached display counter for one customer class."""

    __tablename__ = "invoice_counters"

    # Invoice prefix ("C" / "D")
    prefix: Mapped[str] = mapped_column(
        String(5),
        nullable=False,
        unique=True,
    )

    current_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    def __repr__(self) -> str:
        return f"<InvoiceCounter {self.prefix}={self.current_count}>"
