"""
Tests for WorkOrderSelector -- dashboard, invoice listing and summary.

Covers:
- active_work_orders(): canceled and archived never appear, filters, search
- list_invoices(): class filter and search
- lifecycle_summary(): each work order counted once per dimension
- find_by_number()
"""

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from workorder_kernel.domain.numbering import CustomerClass
from workorder_kernel.exceptions import WorkOrderNotFoundError


@pytest.fixture
def dashboard(seeded_ledger, create_work_order, work_order_service, test_actor_id):
    live_corporate = create_work_order(customer_name="Fleet Co", vehicle_details={"plate": "XYZ-900"})
    live_individual = create_work_order(CustomerClass.INDIVIDUAL, customer_name="Ana Ruiz")
    canceled = create_work_order(customer_name="Gone Ltd")
    archived = create_work_order(CustomerClass.INDIVIDUAL, customer_name="Old Timer")

    work_order_service.cancel(canceled.id, test_actor_id)
    work_order_service.archive(archived.id, test_actor_id)
    work_order_service.set_status(live_individual.id, "Review", test_actor_id)

    return {
        "live_corporate": live_corporate,
        "live_individual": live_individual,
        "canceled": canceled,
        "archived": archived,
    }


class TestActiveWorkOrders:
    def test_excludes_canceled_and_archived(self, work_order_selector, dashboard):
        ids = {wo.id for wo in work_order_selector.active_work_orders()}

        assert ids == {dashboard["live_corporate"].id, dashboard["live_individual"].id}

    def test_excluded_whatever_the_filters(self, work_order_selector, dashboard):
        assert work_order_selector.active_work_orders(status="Cancelled") == []
        assert work_order_selector.active_work_orders(search="Old Timer") == []

    def test_direct_write_of_canceled_status_hides_work_order(
        self, work_order_selector, work_order_service, dashboard, test_actor_id
    ):
        target = dashboard["live_corporate"]

        work_order_service.set_status(target.id, "Cancelled", test_actor_id)

        ids = {wo.id for wo in work_order_selector.active_work_orders()}
        assert target.id not in ids
        assert ids == {dashboard["live_individual"].id}

    def test_newest_first(self, work_order_selector, dashboard):
        ids = [wo.id for wo in work_order_selector.active_work_orders()]

        assert ids == [dashboard["live_individual"].id, dashboard["live_corporate"].id]

    def test_status_filter(self, work_order_selector, dashboard):
        result = work_order_selector.active_work_orders(status="Review")

        assert [wo.id for wo in result] == [dashboard["live_individual"].id]

    def test_customer_class_filter(self, work_order_selector, dashboard):
        result = work_order_selector.active_work_orders(customer_class="corporate")

        assert [wo.id for wo in result] == [dashboard["live_corporate"].id]

    @pytest.mark.parametrize("term", ["fleet", "xyz-9", "c00001"])
    def test_search_is_case_insensitive(self, work_order_selector, dashboard, term):
        result = work_order_selector.active_work_orders(search=term)

        assert [wo.id for wo in result] == [dashboard["live_corporate"].id]


class TestListInvoices:
    def test_filters_and_search(
        self, work_order_selector, invoice_service, payment_method, test_actor_id, dashboard
    ):
        invoice_service.issue(dashboard["live_corporate"].id, payment_method.id, None, test_actor_id)
        invoice_service.issue(dashboard["live_individual"].id, payment_method.id, None, test_actor_id)

        assert len(work_order_selector.list_invoices()) == 2
        assert [i.invoice_number for i in work_order_selector.list_invoices(customer_class="individual")] == ["D00001"]
        assert [i.customer_name for i in work_order_selector.list_invoices(search="ANA")] == ["Ana Ruiz"]

    def test_invoice_for_work_order(
        self, work_order_selector, invoice_service, payment_method, test_actor_id, dashboard
    ):
        wo = dashboard["live_corporate"]
        assert work_order_selector.invoice_for_work_order(wo.id) is None

        invoice_service.issue(wo.id, payment_method.id, None, test_actor_id)

        assert work_order_selector.invoice_for_work_order(wo.id).invoice_number == wo.invoice_number


class TestLifecycleSummary:
    def test_counts_each_work_order_once(self, work_order_selector, dashboard):
        summary = work_order_selector.lifecycle_summary()

        assert summary.total == 4
        assert sum(summary.by_status.values()) == 4
        assert sum(summary.by_customer_class.values()) == 4
        assert sum(summary.by_month.values()) == 4
        assert summary.by_status == {"Pending": 2, "Review": 1, "Cancelled": 1}
        assert summary.by_customer_class == {"corporate": 2, "individual": 2}
        assert summary.by_month == {"2024-01": 4}

    def test_month_buckets(self, work_order_selector, create_work_order, deterministic_clock):
        create_work_order()
        deterministic_clock.set_time(datetime(2024, 3, 15, tzinfo=timezone.utc))
        create_work_order()

        assert work_order_selector.lifecycle_summary().by_month == {"2024-01": 1, "2024-03": 1}

    def test_recent_activity_limit(self, work_order_selector, dashboard):
        summary = work_order_selector.lifecycle_summary(recent_limit=2)

        assert [wo.id for wo in summary.recent_activity] == [
            dashboard["archived"].id,
            dashboard["canceled"].id,
        ]

    def test_empty(self, work_order_selector):
        summary = work_order_selector.lifecycle_summary()

        assert summary.total == 0
        assert summary.by_customer_class == {"corporate": 0, "individual": 0}
        assert summary.recent_activity == ()


class TestLookups:
    def test_find_by_number(self, work_order_selector, dashboard):
        found = work_order_selector.find_by_number("D00001")

        assert [wo.id for wo in found] == [dashboard["live_individual"].id]
        assert work_order_selector.find_by_number("C09999") == []

    def test_get_unknown(self, work_order_selector):
        with pytest.raises(WorkOrderNotFoundError):
            work_order_selector.get(uuid4())
