"""
Lifecycle ledger and status transition rules (``workorder_kernel.domain.lifecycle``).

Responsibility
--------------
Pure value objects for the single, flat, admin-ordered status workflow that
work orders traverse, and the transition function over it.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  The ORM model
(``models/status_definition.py``) converts to ``StatusDefinitionData`` before
any rule here is applied.

Invariants enforced
-------------------
* A status is exactly one of NORMAL, END or CANCELED (``StatusKind``).  The
  end+canceled combination cannot be represented; raw flag pairs go through
  ``StatusKind.from_flags``.
* Statuses are traversed by ascending ``order``.  Ties keep insertion order.
* ``next_status`` never moves past an END status.

Transition function
-------------------
``next_status(current)``:

1. Sort by ``order``.
2. Unknown ``current`` -> first entry (start over).
3. ``current`` is last or END -> None.
4. Otherwise the following entry.

A computed END target is not written to the work order.  It opens invoice
review instead (``ProgressionOutcome.INVOICE_REVIEW``); the status write
happens when the invoice is issued.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from workorder_kernel.exceptions import ConflictingStatusFlagsError

FALLBACK_INITIAL_STATUS = "Pending"
COMPLETED_STATUS = "completed"


class StatusKind(str, Enum):
    """What reaching a status means for a work order."""

    NORMAL = "normal"
    END = "end"
    CANCELED = "canceled"

    @classmethod
    def from_flags(
        cls,
        is_end_status: bool,
        is_canceled_status: bool,
        name: str | None = None,
    ) -> StatusKind:
        """Map the legacy boolean pair onto a kind, rejecting end+canceled."""
        if is_end_status and is_canceled_status:
            raise ConflictingStatusFlagsError(name)
        if is_end_status:
            return cls.END
        if is_canceled_status:
            return cls.CANCELED
        return cls.NORMAL


@dataclass(frozen=True)
class StatusDefinitionData:
    """One ledger entry.

    Contract: frozen.  ``color`` is display metadata only.
    """

    name: str
    order: int
    kind: StatusKind = StatusKind.NORMAL
    color: str | None = None
    id: object | None = None

    @property
    def is_end_status(self) -> bool:
        return self.kind is StatusKind.END

    @property
    def is_canceled_status(self) -> bool:
        return self.kind is StatusKind.CANCELED


DEFAULT_STATUSES: tuple[StatusDefinitionData, ...] = (
    StatusDefinitionData("Pending", 1, StatusKind.NORMAL, "#FFD600"),
    StatusDefinitionData("In Progress", 2, StatusKind.NORMAL, "#2196F3"),
    StatusDefinitionData("Review", 3, StatusKind.NORMAL, "#FF9800"),
    StatusDefinitionData("Completed", 4, StatusKind.END, "#4CAF50"),
    StatusDefinitionData("Cancelled", 5, StatusKind.CANCELED, "#F44336"),
)


class ProgressionOutcome(str, Enum):
    """What an operator's "next status" request resolves to."""

    ADVANCE = "advance"
    INVOICE_REVIEW = "invoice_review"
    NONE = "none"


@dataclass(frozen=True)
class ProgressionDecision:
    outcome: ProgressionOutcome
    current_status: str
    target: StatusDefinitionData | None = None


@dataclass(frozen=True)
class LifecycleLedger:
    """The ordered status catalog.

    Contract: frozen; ``statuses`` is kept sorted by ``order`` ascending.
    Guarantees: lookups are by exact name equality.
    Non-goals: does not enforce name uniqueness (first match wins).
    """

    statuses: tuple[StatusDefinitionData, ...]

    @classmethod
    def of(cls, statuses) -> LifecycleLedger:
        return cls(tuple(sorted(statuses, key=lambda s: s.order)))

    @classmethod
    def default(cls) -> LifecycleLedger:
        return cls.of(DEFAULT_STATUSES)

    def __len__(self) -> int:
        return len(self.statuses)

    @property
    def is_empty(self) -> bool:
        return not self.statuses

    @property
    def end_status(self) -> StatusDefinitionData | None:
        for status in self.statuses:
            if status.is_end_status:
                return status
        return None

    @property
    def canceled_statuses(self) -> tuple[StatusDefinitionData, ...]:
        return tuple(s for s in self.statuses if s.is_canceled_status)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(s.name for s in self.statuses)

    def find(self, name: str | None) -> StatusDefinitionData | None:
        for status in self.statuses:
            if status.name == name:
                return status
        return None

    def index_of(self, name: str | None) -> int:
        for index, status in enumerate(self.statuses):
            if status.name == name:
                return index
        return -1

    def is_canceled(self, name: str | None) -> bool:
        status = self.find(name)
        return status is not None and status.is_canceled_status

    def initial_status(self) -> str:
        """First non-canceled status by order, or ``"Pending"`` for an empty ledger."""
        for status in self.statuses:
            if not status.is_canceled_status:
                return status.name
        return FALLBACK_INITIAL_STATUS

    def next_status(self, current: str | None) -> StatusDefinitionData | None:
        if not self.statuses:
            return None

        index = self.index_of(current)
        if index == -1:
            return self.statuses[0]

        if index == len(self.statuses) - 1 or self.statuses[index].is_end_status:
            return None

        return self.statuses[index + 1]

    def decide_progression(self, current: str | None) -> ProgressionDecision:
        target = self.next_status(current)
        if target is None:
            return ProgressionDecision(ProgressionOutcome.NONE, current or "")
        if target.is_end_status:
            return ProgressionDecision(
                ProgressionOutcome.INVOICE_REVIEW, current or "", target
            )
        return ProgressionDecision(ProgressionOutcome.ADVANCE, current or "", target)
