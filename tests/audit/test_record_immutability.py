"""
Tests for the ORM immutability listeners.

Covers:
- Issued invoices and their lines reject UPDATE and DELETE
- A work order's invoice_number cannot change once persisted
- Other work order fields stay writable
"""

import pytest

from workorder_kernel.exceptions import ImmutabilityViolationError
from workorder_kernel.models.invoice import Invoice
from workorder_kernel.models.work_order import WorkOrder


@pytest.fixture
def issued(session, seeded_ledger, create_work_order, invoice_service, payment_method, test_actor_id):
    wo = create_work_order()
    info = invoice_service.issue(wo.id, payment_method.id, None, test_actor_id)
    return session.get(Invoice, info.id)


class TestInvoiceImmutability:
    def test_update_rejected(self, session, issued):
        issued.notes = "changed"

        with pytest.raises(ImmutabilityViolationError) as exc_info:
            session.flush()

        assert exc_info.value.entity_type == "Invoice"
        session.rollback()

    def test_delete_rejected(self, session, issued):
        session.delete(issued)

        with pytest.raises(ImmutabilityViolationError):
            session.flush()
        session.rollback()

    def test_line_update_rejected(self, session, issued):
        issued.lines[0].price = issued.lines[0].price + 1

        with pytest.raises(ImmutabilityViolationError):
            session.flush()
        session.rollback()


class TestInvoiceNumberImmutability:
    def test_invoice_number_change_rejected(self, session, create_work_order):
        wo = session.get(WorkOrder, create_work_order().id)
        wo.invoice_number = "C09999"

        with pytest.raises(ImmutabilityViolationError) as exc_info:
            session.flush()

        assert exc_info.value.code == "IMMUTABILITY_VIOLATION"
        session.rollback()

    def test_other_fields_writable(self, session, create_work_order):
        wo = session.get(WorkOrder, create_work_order().id)
        wo.customer_name = "Renamed"

        session.flush()

        assert session.get(WorkOrder, wo.id).customer_name == "Renamed"
