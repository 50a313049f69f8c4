"""
StatusTransitionService -- the operator's "next status" action.

Responsibility:
    Resolve a progression request against the current ledger and apply it.

    ADVANCE         The next status is normal: write it immediately.
    INVOICE_REVIEW  The next status is the END status: write nothing and
                    hand the target back so the caller opens invoice review.
                    The status becomes the end status only when
                    InvoiceService.issue succeeds.
    NONE            Already at the last or END entry, or the ledger is
                    empty: write nothing.

Invariants enforced:
    - A completed, canceled or archived work order never progresses; the
      request raises WorkOrderClosedError and writes nothing.
    - A work order whose status is missing from the ledger (renamed or
      deleted) starts over at the first ledger entry.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from workorder_kernel.domain.dtos import WorkOrderInfo
from workorder_kernel.domain.lifecycle import (
    LifecycleLedger,
    ProgressionOutcome,
    StatusDefinitionData,
)
from workorder_kernel.exceptions import WorkOrderClosedError, WorkOrderNotFoundError
from workorder_kernel.logging_config import get_logger
from workorder_kernel.models.work_order import WorkOrder
from workorder_kernel.selectors.work_order_selector import to_work_order_info
from workorder_kernel.services.base import BaseService
from workorder_kernel.services.status_ledger_service import StatusLedgerService

logger = get_logger("services.transition")


@dataclass(frozen=True)
class ProgressionResult:
    outcome: ProgressionOutcome
    work_order: WorkOrderInfo
    target: StatusDefinitionData | None = None

    @property
    def requires_invoice_review(self) -> bool:
        return self.outcome is ProgressionOutcome.INVOICE_REVIEW


class StatusTransitionService(BaseService[WorkOrder]):
    """Service applying the lifecycle progression rule to work orders."""

    def next_status(self, current: str | None) -> StatusDefinitionData | None:
        """Ledger successor of ``current`` (no work order involved)."""
        return self._ledger().next_status(current)

    def request_progression(
        self,
        work_order_id: UUID,
        actor_id: UUID,
    ) -> ProgressionResult:
        """
        Advance a work order one step along the ledger.

        Raises:
            WorkOrderNotFoundError: Unknown id.
            WorkOrderClosedError: Completed, canceled or archived.
        """
        work_order = self.session.get(WorkOrder, work_order_id)
        if work_order is None:
            raise WorkOrderNotFoundError(str(work_order_id))

        ledger = self._ledger()
        self._check_open(work_order, ledger)

        decision = ledger.decide_progression(work_order.status)

        if decision.outcome is ProgressionOutcome.ADVANCE:
            work_order.status = decision.target.name
            work_order.updated_by_id = actor_id
            self.session.flush()
            logger.info(
                "work_order_status_advanced",
                extra={
                    "work_order_id": str(work_order.id),
                    "from_status": decision.current_status,
                    "to_status": decision.target.name,
                },
            )
        elif decision.outcome is ProgressionOutcome.INVOICE_REVIEW:
            logger.info(
                "work_order_invoice_review_required",
                extra={
                    "work_order_id": str(work_order.id),
                    "from_status": decision.current_status,
                    "end_status": decision.target.name,
                },
            )
        else:
            logger.debug(
                "work_order_progression_noop",
                extra={"work_order_id": str(work_order.id), "status": work_order.status},
            )

        return ProgressionResult(
            outcome=decision.outcome,
            work_order=to_work_order_info(work_order),
            target=decision.target,
        )

    def _ledger(self) -> LifecycleLedger:
        return StatusLedgerService(self.session, self.clock).load_ledger()

    def _check_open(self, work_order: WorkOrder, ledger: LifecycleLedger) -> None:
        reason = None
        if work_order.is_completed:
            reason = "completed"
        elif work_order.is_canceled or ledger.is_canceled(work_order.status):
            reason = "canceled"
        elif work_order.is_archived:
            reason = "archived"

        if reason is not None:
            logger.warning(
                "work_order_progression_rejected",
                extra={"work_order_id": str(work_order.id), "reason": reason},
            )
            raise WorkOrderClosedError(str(work_order.id), work_order.status, reason)
