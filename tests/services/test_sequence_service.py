"""
Tests for SequenceService -- invoice number allocation.

Covers:
- Sequential allocation yields 1..N with prefix and padding
- Classes are independent namespaces
- Latest-by-creation drives the next number
- Fallback scan when the ordered lookup fails
- AllocationError when both lookups fail
- Logging of allocation and fallback
"""

import pytest
from sqlalchemy.exc import OperationalError

from workorder_kernel.domain.numbering import CustomerClass
from workorder_kernel.exceptions import AllocationError
from workorder_kernel.services.sequence_service import SequenceService


def _db_failure(*args, **kwargs):
    raise OperationalError("SELECT invoice_number FROM work_orders", {}, Exception("database is locked"))


class TestAllocate:
    def test_first_number(self, sequence_service):
        assert sequence_service.allocate(CustomerClass.CORPORATE) == "C00001"
        assert sequence_service.allocate(CustomerClass.INDIVIDUAL) == "D00001"

    def test_sequential_allocations_are_contiguous(self, create_work_order, work_order_selector):
        for _ in range(7):
            create_work_order(CustomerClass.CORPORATE)

        numbers = sorted(
            wo.invoice_number
            for wo in work_order_selector.active_work_orders(customer_class=CustomerClass.CORPORATE)
        )
        assert numbers == [f"C{n:05d}" for n in range(1, 8)]
        assert numbers[-1] == "C00007"

    def test_classes_do_not_share_a_sequence(self, create_work_order, sequence_service):
        create_work_order(CustomerClass.CORPORATE)
        create_work_order(CustomerClass.CORPORATE)
        create_work_order(CustomerClass.INDIVIDUAL)

        assert sequence_service.allocate(CustomerClass.CORPORATE) == "C00003"
        assert sequence_service.allocate(CustomerClass.INDIVIDUAL) == "D00002"

    def test_accepts_plain_string_class(self, sequence_service):
        assert sequence_service.allocate("individual") == "D00001"

    def test_latest_created_work_order_drives_next_number(self, create_work_order, sequence_service):
        create_work_order(invoice_number="C00009")
        create_work_order(invoice_number="C00003")

        assert sequence_service.peek_last_used(CustomerClass.CORPORATE) == 3
        assert sequence_service.allocate(CustomerClass.CORPORATE) == "C00004"

    def test_unparseable_latest_counts_as_zero(self, create_work_order, sequence_service):
        create_work_order(invoice_number="C00005")
        create_work_order(invoice_number="LEGACY-1")

        assert sequence_service.allocate(CustomerClass.CORPORATE) == "C00001"

    def test_allocation_is_logged(self, sequence_service, captured_logs):
        sequence_service.allocate(CustomerClass.CORPORATE)

        records = [r for r in captured_logs() if r["message"] == "invoice_number_allocated"]
        assert len(records) == 1
        assert records[0]["level"] == "INFO"
        assert records[0]["customer_class"] == "corporate"
        assert records[0]["last_used"] == 0


class TestHighestAssigned:
    def test_scan_takes_maximum(self, create_work_order, sequence_service):
        create_work_order(invoice_number="C00009")
        create_work_order(invoice_number="C00003")
        create_work_order(CustomerClass.INDIVIDUAL, invoice_number="D00042")

        assert sequence_service.highest_assigned(CustomerClass.CORPORATE) == 9

    def test_empty_class(self, sequence_service):
        assert sequence_service.highest_assigned(CustomerClass.INDIVIDUAL) == 0


class TestFallback:
    def test_ordered_lookup_failure_falls_back_to_scan(
        self, create_work_order, sequence_service, monkeypatch, captured_logs
    ):
        create_work_order(invoice_number="C00009")
        create_work_order(invoice_number="C00003")
        monkeypatch.setattr(SequenceService, "_last_used_from_latest", _db_failure)

        assert sequence_service.allocate(CustomerClass.CORPORATE) == "C00010"

        fallback = [r for r in captured_logs() if r["message"] == "invoice_number_fallback_scan"]
        assert len(fallback) == 1
        assert fallback[0]["level"] == "WARNING"

    def test_both_lookups_failing_raises(self, sequence_service, monkeypatch, captured_logs):
        monkeypatch.setattr(SequenceService, "_last_used_from_latest", _db_failure)
        monkeypatch.setattr(SequenceService, "highest_assigned", _db_failure)

        with pytest.raises(AllocationError) as exc_info:
            sequence_service.allocate(CustomerClass.INDIVIDUAL)

        assert exc_info.value.code == "ALLOCATION_FAILED"
        assert exc_info.value.customer_class == "individual"
        assert isinstance(exc_info.value.__cause__, OperationalError)
        assert any(
            r["message"] == "invoice_number_allocation_failed" and r["level"] == "ERROR"
            for r in captured_logs()
        )

    def test_failed_allocation_creates_no_work_order(
        self, work_order_service, work_order_selector, test_actor_id, monkeypatch
    ):
        monkeypatch.setattr(SequenceService, "_last_used_from_latest", _db_failure)
        monkeypatch.setattr(SequenceService, "highest_assigned", _db_failure)

        with pytest.raises(AllocationError):
            work_order_service.create_work_order(CustomerClass.CORPORATE, [], test_actor_id)

        assert work_order_selector.active_work_orders() == []
