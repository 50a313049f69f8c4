"""
ORM-level immutability enforcement.

SQLAlchemy fires mapper events before UPDATE/DELETE statements reach the
database.  The listeners registered here check the kernel's append-only
rules and raise ImmutabilityViolationError, aborting the flush:

    session.flush()
         |
         v
    [before_update] --> _check_*() --> ImmutabilityViolationError
         |
         v
    SQL sent to database (only if checks pass)

Protected entities:

Entity          | When immutable           | Why
----------------|--------------------------|----------------------------------------
Invoice         | ALWAYS (from creation)   | Issued invoices are append-only
InvoiceLine     | ALWAYS (from creation)   | Lines are part of the invoice
WorkOrder       | invoice_number only      | Numbers are assigned once, pre-insert

updated_at / updated_by_id are audit metadata and may always change.

Usage:

    from workorder_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()  # once at startup

To temporarily disable (TESTS ONLY):

    unregister_immutability_listeners()
"""

from sqlalchemy import event, inspect

from workorder_kernel.exceptions import ImmutabilityViolationError
from workorder_kernel.logging_config import get_logger

logger = get_logger("db.immutability")

_AUDIT_FIELDS = frozenset({"updated_at", "updated_by_id"})


def _block(entity_type: str, target, operation: str, reason: str, field: str | None = None):
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": str(target.id),
            "operation": operation,
            "field": field,
        },
    )
    raise ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(target.id),
        reason=reason,
    )


def _check_append_only_update(mapper, connection, target):
    """Block any non-audit field change on an append-only record."""
    entity_type = type(target).__name__
    for attr in inspect(target).attrs:
        if attr.key in _AUDIT_FIELDS:
            continue
        if attr.history.has_changes():
            _block(
                entity_type,
                target,
                "UPDATE",
                f"Cannot modify field '{attr.key}' on issued {entity_type}",
                field=attr.key,
            )


def _check_append_only_delete(mapper, connection, target):
    entity_type = type(target).__name__
    _block(entity_type, target, "DELETE", f"Issued {entity_type} records cannot be deleted")


def _check_invoice_number_immutability(mapper, connection, target):
    """A work order keeps the invoice number it was inserted with."""
    history = inspect(target).attrs.invoice_number.history
    if history.has_changes():
        previous = history.deleted[0] if history.deleted else "<unloaded>"
        _block(
            "WorkOrder",
            target,
            "UPDATE",
            f"Cannot change invoice_number from '{previous}' "
            f"to '{target.invoice_number}'",
            field="invoice_number",
        )


def register_immutability_listeners():
    """
    Register all immutability enforcement event listeners.

    Call once after models are imported and before any database work.
    Safe to call again: already-registered listeners are skipped.
    """
    from workorder_kernel.models.invoice import Invoice, InvoiceLine
    from workorder_kernel.models.work_order import WorkOrder

    for target, event_name, listener_fn in _listeners(Invoice, InvoiceLine, WorkOrder):
        if not event.contains(target, event_name, listener_fn):
            event.listen(target, event_name, listener_fn)


def unregister_immutability_listeners():
    """
    Remove immutability enforcement event listeners.

    WARNING: Only use this in tests that intentionally violate the rules.
    """
    from workorder_kernel.models.invoice import Invoice, InvoiceLine
    from workorder_kernel.models.work_order import WorkOrder

    for target, event_name, listener_fn in _listeners(Invoice, InvoiceLine, WorkOrder):
        if event.contains(target, event_name, listener_fn):
            event.remove(target, event_name, listener_fn)


def _listeners(invoice_cls, invoice_line_cls, work_order_cls):
    return (
        (invoice_cls, "before_update", _check_append_only_update),
        (invoice_cls, "before_delete", _check_append_only_delete),
        (invoice_line_cls, "before_update", _check_append_only_update),
        (invoice_line_cls, "before_delete", _check_append_only_delete),
        (work_order_cls, "before_update", _check_invoice_number_immutability),
    )
