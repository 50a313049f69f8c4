"""
SequenceService -- per-customer-class invoice number allocation.

Responsibility:
    Computes the next ``<Prefix><5-digit>`` invoice number for a customer
    class by inspecting the work orders themselves.  No counter row is
    authoritative; the ``invoice_counters`` cache is neither read nor
    written here.

Architecture position:
    Kernel > Services -- called by WorkOrderService when a work order reaches
    the review stage, before it is first persisted.

Algorithm:
    1. Latest work order of the class by created_at (descending, limit 1).
       Its number, if it carries the class prefix, is the last-used value;
       otherwise last-used is 0.
    2. If that ordered lookup fails at the database, scan every work order
       of the class and take the maximum parsed number.
    3. next = last-used + 1.
    4. Both lookups failed -> AllocationError.

Known race:
    The read here and the caller's INSERT are not serialized.  Two callers
    that allocate with no committed write in between receive the SAME
    number.  This is accepted: NumberingAuditService reports the duplicate
    afterwards with both work order ids.  Do not "fix" it by locking here
    without keeping the number format and the audit contract unchanged.

Failure modes:
    - AllocationError: both lookups raised.  The creation flow must abort;
      a work order is never persisted without a number.
"""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from workorder_kernel.domain.numbering import (
    CustomerClass,
    format_invoice_number,
    parse_invoice_number,
)
from workorder_kernel.exceptions import AllocationError
from workorder_kernel.logging_config import get_logger
from workorder_kernel.models.work_order import WorkOrder
from workorder_kernel.services.base import BaseService

logger = get_logger("services.sequence")


class SequenceService(BaseService[WorkOrder]):
    """
    Service for allocating invoice numbers.

    Usage:
        with session_scope() as session:
            number = SequenceService(session).allocate(CustomerClass.CORPORATE)
            # "C00008" if the latest corporate work order holds C00007
    """

    def allocate(self, customer_class: CustomerClass | str) -> str:
        """
        Compute the next invoice number for ``customer_class``.

        Returns:
            The formatted number, e.g. ``"D00012"``.

        Raises:
            AllocationError: If both the ordered lookup and the scan fail.
        """
        customer_class = CustomerClass(customer_class)
        last_used = self.peek_last_used(customer_class)
        invoice_number = format_invoice_number(customer_class, last_used + 1)

        logger.info(
            "invoice_number_allocated",
            extra={
                "customer_class": customer_class.value,
                "invoice_number": invoice_number,
                "last_used": last_used,
            },
        )
        return invoice_number

    def peek_last_used(self, customer_class: CustomerClass | str) -> int:
        """
        The number the next allocation will increment.

        Raises:
            AllocationError: If both the ordered lookup and the scan fail.
        """
        customer_class = CustomerClass(customer_class)
        try:
            return self._last_used_from_latest(customer_class)
        except SQLAlchemyError:
            logger.warning(
                "invoice_number_fallback_scan",
                extra={"customer_class": customer_class.value},
                exc_info=True,
            )

        try:
            return self.highest_assigned(customer_class)
        except SQLAlchemyError as exc:
            logger.error(
                "invoice_number_allocation_failed",
                extra={"customer_class": customer_class.value},
                exc_info=True,
            )
            raise AllocationError(customer_class.value, str(exc)) from exc

    def highest_assigned(self, customer_class: CustomerClass | str) -> int:
        """
        Scan every work order of the class and return the highest number.

        Unparseable or foreign-prefix numbers count as 0.  Returns 0 when the
        class has no work orders.
        """
        customer_class = CustomerClass(customer_class)
        with self.session.begin_nested():
            numbers = self.session.execute(
                select(WorkOrder.invoice_number)
                .where(WorkOrder.customer_class == customer_class.value)
            ).scalars().all()

        return max(
            (parse_invoice_number(n, customer_class) or 0 for n in numbers),
            default=0,
        )

    def _last_used_from_latest(self, customer_class: CustomerClass) -> int:
        # SAVEPOINT so a failed ordered query leaves the caller's transaction usable
        with self.session.begin_nested():
            latest = self.session.execute(
                select(WorkOrder.invoice_number)
                .where(WorkOrder.customer_class == customer_class.value)
                # invoice_number breaks created_at ties deterministically
                .order_by(WorkOrder.created_at.desc(), WorkOrder.invoice_number.desc())
                .limit(1)
            ).scalar_one_or_none()

        return parse_invoice_number(latest, customer_class) or 0
