"""
Module: workorder_kernel.models.status_definition
Responsibility: ORM persistence for the lifecycle ledger -- the admin-ordered
    list of statuses work orders traverse.
Architecture position: Kernel > Models.  May import from db/base.py and the
    pure domain value objects it converts into.

Invariants enforced:
    - kind is exactly one of normal / end / canceled (StatusKind).
    - At most one END entry -- checked by StatusLedgerService at write time,
      NOT by the schema.
    - name is unique by convention only; WorkOrder.status joins on it by
      string equality (no foreign key).
"""

from sqlalchemy import Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from workorder_kernel.db.base import TrackedBase
from workorder_kernel.domain.lifecycle import StatusDefinitionData, StatusKind


class StatusDefinition(TrackedBase):
    """
    One entry of the lifecycle ledger.

    Non-goals:
        - Does not reference work orders; work orders reference it by name.
    """

    __tablename__ = "work_order_statuses"

    __table_args__ = (
        Index("idx_status_order", "sort_order"),
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    # Traversal position; ties are not defined behavior
    order: Mapped[int] = mapped_column(
        "sort_order",
        Integer,
        nullable=False,
        default=0,
    )

    kind: Mapped[StatusKind] = mapped_column(
        String(10),
        default=StatusKind.NORMAL,
        nullable=False,
    )

    # Display only
    color: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<StatusDefinition {self.name!r} order={self.order} kind={self.kind}>"

    @property
    def is_end_status(self) -> bool:
        return StatusKind(self.kind) is StatusKind.END

    @property
    def is_canceled_status(self) -> bool:
        return StatusKind(self.kind) is StatusKind.CANCELED

    def to_data(self) -> StatusDefinitionData:
        return StatusDefinitionData(
            name=self.name,
            order=self.order,
            kind=StatusKind(self.kind),
            color=self.color,
            id=self.id,
        )
