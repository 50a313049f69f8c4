"""
Typed exception hierarchy for the work order kernel.

Every error carries a ``code`` class attribute (machine-readable, stable
across message wording changes) and keeps its context as attributes so it
survives logging and serialization intact.

    WorkOrderKernelError (base)
    |
    +-- AllocationError
    |
    +-- ValidationError
    |   +-- MultipleEndStatusError
    |   +-- ConflictingStatusFlagsError
    |   +-- InvalidStatusError
    |   +-- PaymentMethodRequiredError
    |   +-- PaymentMethodNotFoundError
    |   +-- PaymentMethodInactiveError
    |
    +-- WorkOrderError
    |   +-- WorkOrderNotFoundError
    |   +-- WorkOrderClosedError
    |   +-- WorkOrderAlreadyInvoicedError
    |
    +-- StatusNotFoundError
    |
    +-- MaterializationError
    |   +-- InvoiceWriteError
    |   +-- WorkOrderCompletionError
    |
    +-- ImmutabilityViolationError

Handling patterns:

    try:
        number = sequence_service.allocate(CustomerClass.CORPORATE)
    except AllocationError as e:
        # Fatal to the creation flow. Never create a work order without a number.
        notify_operator(e.code, e.customer_class)

    try:
        invoice_service.issue(work_order_id, payment_method_id, notes, actor_id)
    except ValidationError as e:
        # Nothing was written; the operator can correct and retry.
        ...
    except MaterializationError as e:
        # e.stage tells which half of the write failed.
        ...

Numbering gaps and duplicates are NOT exceptions: the audit reports them as
``ConsistencyWarning`` findings (see ``domain/numbering_audit.py``).
"""


class WorkOrderKernelError(Exception):
    """
    Base exception for all work order kernel errors.

    All subclasses must define a ``code`` class attribute.
    """

    code: str = "WORK_ORDER_KERNEL_ERROR"


# Allocation


class AllocationError(WorkOrderKernelError):
    """Both the ordered lookup and the fallback scan failed."""

    code: str = "ALLOCATION_FAILED"

    def __init__(self, customer_class: str, reason: str):
        self.customer_class = customer_class
        self.reason = reason
        super().__init__(
            f"Failed to allocate invoice number for {customer_class}: {reason}"
        )


# Validation


class ValidationError(WorkOrderKernelError):
    """Base exception for recoverable, nothing-written validation failures."""

    code: str = "VALIDATION_FAILED"


class MultipleEndStatusError(ValidationError):
    """A second end status was written while one already exists."""

    code: str = "MULTIPLE_END_STATUS"

    def __init__(self, name: str, existing_end_status: str):
        self.name = name
        self.existing_end_status = existing_end_status
        super().__init__(
            f"Cannot mark '{name}' as end status: "
            f"'{existing_end_status}' is already the end status"
        )


class ConflictingStatusFlagsError(ValidationError):
    """A status was flagged both end and canceled."""

    code: str = "CONFLICTING_STATUS_FLAGS"

    def __init__(self, name: str | None = None):
        self.name = name
        label = f"'{name}'" if name else "A status"
        super().__init__(
            f"{label} cannot be both an end status and a canceled status"
        )


class InvalidStatusError(ValidationError):
    """A status name is not valid for the requested operation."""

    code: str = "INVALID_STATUS"

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid status '{name}': {reason}")


class PaymentMethodRequiredError(ValidationError):
    """Invoice issuance was requested without a payment method."""

    code: str = "PAYMENT_METHOD_REQUIRED"

    def __init__(self, work_order_id: str):
        self.work_order_id = work_order_id
        super().__init__(
            f"A payment method is required to issue an invoice for work order {work_order_id}"
        )


class PaymentMethodNotFoundError(ValidationError):
    """Referenced payment method does not exist."""

    code: str = "PAYMENT_METHOD_NOT_FOUND"

    def __init__(self, payment_method_id: str):
        self.payment_method_id = payment_method_id
        super().__init__(f"Payment method not found: {payment_method_id}")


class PaymentMethodInactiveError(ValidationError):
    """Referenced payment method has been deactivated."""

    code: str = "PAYMENT_METHOD_INACTIVE"

    def __init__(self, payment_method_id: str, name: str):
        self.payment_method_id = payment_method_id
        self.name = name
        super().__init__(f"Payment method '{name}' ({payment_method_id}) is not active")


# Work orders


class WorkOrderError(WorkOrderKernelError):
    """Base exception for work order errors."""

    code: str = "WORK_ORDER_ERROR"


class WorkOrderNotFoundError(WorkOrderError):
    """Work order with given ID was not found."""

    code: str = "WORK_ORDER_NOT_FOUND"

    def __init__(self, work_order_id: str):
        self.work_order_id = work_order_id
        super().__init__(f"Work order not found: {work_order_id}")


class WorkOrderClosedError(WorkOrderError):
    """Work order is completed, canceled or archived and cannot progress."""

    code: str = "WORK_ORDER_CLOSED"

    def __init__(self, work_order_id: str, status: str, reason: str):
        self.work_order_id = work_order_id
        self.status = status
        self.reason = reason
        super().__init__(
            f"Work order {work_order_id} (status '{status}') is closed: {reason}"
        )


class WorkOrderAlreadyInvoicedError(WorkOrderError):
    """An invoice has already been issued for this work order."""

    code: str = "WORK_ORDER_ALREADY_INVOICED"

    def __init__(self, work_order_id: str, invoice_number: str):
        self.work_order_id = work_order_id
        self.invoice_number = invoice_number
        super().__init__(
            f"Work order {work_order_id} already has issued invoice {invoice_number}"
        )


# Ledger


class StatusNotFoundError(WorkOrderKernelError):
    """Status definition with given ID was not found."""

    code: str = "STATUS_NOT_FOUND"

    def __init__(self, status_id: str):
        self.status_id = status_id
        super().__init__(f"Status definition not found: {status_id}")


# Materialization


class MaterializationError(WorkOrderKernelError):
    """
    Base exception for invoice materialization failures.

    ``stage`` names the half that failed ("invoice" or "work_order") so an
    operator can tell which side of the unit was attempted.
    """

    code: str = "MATERIALIZATION_FAILED"
    stage: str = "unknown"

    def __init__(self, work_order_id: str, reason: str):
        self.work_order_id = work_order_id
        self.reason = reason
        super().__init__(
            f"Invoice materialization failed at stage '{self.stage}' "
            f"for work order {work_order_id}: {reason}"
        )


class InvoiceWriteError(MaterializationError):
    """Creating the invoice record failed. Nothing was written."""

    code: str = "INVOICE_WRITE_FAILED"
    stage: str = "invoice"


class WorkOrderCompletionError(MaterializationError):
    """
    Sealing the work order failed after the invoice was written.

    The invoice write was rolled back with it.
    """

    code: str = "WORK_ORDER_COMPLETION_FAILED"
    stage: str = "work_order"

    def __init__(self, work_order_id: str, invoice_id: str, reason: str):
        self.invoice_id = invoice_id
        super().__init__(work_order_id, reason)


# Immutability


class ImmutabilityViolationError(WorkOrderKernelError):
    """Attempted to modify or delete an immutable record or field."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
