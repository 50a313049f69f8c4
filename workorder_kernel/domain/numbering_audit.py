"""
Numbering audit rules (``workorder_kernel.domain.numbering_audit``).

Responsibility
--------------
Pure reconciliation of the invoice numbers actually held by work orders
against the contiguous range ``[1, expected_count]`` for one customer class.

Rules
-----
* Only work orders of the class whose number carries the class prefix and a
  numeric suffix take part.
* ``expected_count`` is the highest number observed (0 when none).  This
  under-reports gaps when the highest-numbered work order itself is lost;
  the rule is kept as-is and documented rather than changed.
* ``missing_numbers`` are the integers in ``[1, expected_count]`` that no
  work order holds.
* ``actual_count`` counts every carrying work order, so duplicates can push
  it above ``expected_count``.  That is surfaced, not corrected.
* Numbers above ``MAX_AUDITED_NUMBER`` are reported as out of range and
  left out of ``expected_count`` and the gap range.

Findings are ``ConsistencyWarning`` values: informational, never raised,
never auto-repaired.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID

from workorder_kernel.domain.numbering import CustomerClass, format_invoice_number

MAX_AUDITED_NUMBER = 9_999_999


class ConsistencyIssue(str, Enum):
    DUPLICATE_NUMBER = "duplicate_number"
    SEQUENCE_GAP = "sequence_gap"
    NUMBER_OUT_OF_RANGE = "number_out_of_range"


@dataclass(frozen=True)
class ConsistencyWarning:
    """A non-fatal numbering integrity finding.

    ``work_order_ids`` lists the holders of a duplicate or out-of-range number
    and is empty for a gap.
    """

    issue: ConsistencyIssue
    customer_class: CustomerClass
    number: int
    invoice_number: str
    work_order_ids: tuple[UUID, ...] = ()

    @property
    def code(self) -> str:
        return self.issue.value.upper()


@dataclass(frozen=True)
class NumberedWorkOrder:
    """The audit's view of one work order holding a number."""

    work_order_id: UUID
    number: int
    invoice_number: str
    status: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class ClassNumberingAudit:
    customer_class: CustomerClass
    entries: tuple[NumberedWorkOrder, ...]
    assigned_numbers: tuple[int, ...]
    missing_numbers: tuple[int, ...]
    expected_count: int
    actual_count: int
    duplicates: dict[int, tuple[UUID, ...]] = field(default_factory=dict)
    out_of_range: dict[int, tuple[UUID, ...]] = field(default_factory=dict)

    @property
    def is_consistent(self) -> bool:
        return not (self.missing_numbers or self.duplicates or self.out_of_range)

    def warnings(self) -> tuple[ConsistencyWarning, ...]:
        found: list[ConsistencyWarning] = []
        for number, holders in sorted(self.duplicates.items()):
            found.append(
                ConsistencyWarning(
                    issue=ConsistencyIssue.DUPLICATE_NUMBER,
                    customer_class=self.customer_class,
                    number=number,
                    invoice_number=format_invoice_number(self.customer_class, number),
                    work_order_ids=holders,
                )
            )
        for number in self.missing_numbers:
            found.append(
                ConsistencyWarning(
                    issue=ConsistencyIssue.SEQUENCE_GAP,
                    customer_class=self.customer_class,
                    number=number,
                    invoice_number=format_invoice_number(self.customer_class, number),
                )
            )
        for number, holders in sorted(self.out_of_range.items()):
            held_as = next(
                (e.invoice_number for e in self.entries if e.number == number),
                format_invoice_number(self.customer_class, number),
            )
            found.append(
                ConsistencyWarning(
                    issue=ConsistencyIssue.NUMBER_OUT_OF_RANGE,
                    customer_class=self.customer_class,
                    number=number,
                    invoice_number=held_as,
                    work_order_ids=holders,
                )
            )
        return tuple(found)


@dataclass(frozen=True)
class NumberingAuditReport:
    per_class: dict[CustomerClass, ClassNumberingAudit]

    @property
    def warnings(self) -> tuple[ConsistencyWarning, ...]:
        return tuple(
            warning
            for customer_class in CustomerClass
            if customer_class in self.per_class
            for warning in self.per_class[customer_class].warnings()
        )

    @property
    def is_consistent(self) -> bool:
        return all(audit.is_consistent for audit in self.per_class.values())


def find_missing_numbers(numbers, limit: int = MAX_AUDITED_NUMBER) -> list[int]:
    """Integers in ``[1, max(numbers)]`` absent from ``numbers``.

    Numbers above ``limit`` are ignored, so the range never exceeds it.
    """
    present = {n for n in numbers if n <= limit}
    if not present:
        return []
    return [n for n in range(1, max(present) + 1) if n not in present]


def audit_class(
    customer_class: CustomerClass,
    entries,
) -> ClassNumberingAudit:
    """Reconcile one class's numbered work orders."""
    ordered = tuple(sorted(entries, key=lambda e: (e.number, str(e.work_order_id))))
    numbers = tuple(e.number for e in ordered)

    holders: dict[int, list[UUID]] = defaultdict(list)
    for entry in ordered:
        holders[entry.number].append(entry.work_order_id)
    duplicates = {
        number: tuple(ids)
        for number, ids in holders.items()
        if len(ids) > 1 and number <= MAX_AUDITED_NUMBER
    }
    out_of_range = {
        number: tuple(ids)
        for number, ids in holders.items()
        if number > MAX_AUDITED_NUMBER
    }
    in_range = [n for n in numbers if n <= MAX_AUDITED_NUMBER]

    return ClassNumberingAudit(
        customer_class=customer_class,
        entries=ordered,
        assigned_numbers=numbers,
        missing_numbers=tuple(find_missing_numbers(in_range)),
        expected_count=max(in_range, default=0),
        actual_count=len(ordered),
        duplicates=duplicates,
        out_of_range=out_of_range,
    )
