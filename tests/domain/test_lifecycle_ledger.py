"""
Tests for the pure lifecycle ledger.

Covers:
- Default ledger traversal: Pending -> In Progress -> Review -> Completed
- Progression decisions (advance, invoice review, none)
- Unknown current status restarts at the first entry
- Empty ledger behaviour
- StatusKind from the legacy flag pair
"""

import pytest

from workorder_kernel.domain.lifecycle import (
    DEFAULT_STATUSES,
    FALLBACK_INITIAL_STATUS,
    LifecycleLedger,
    ProgressionOutcome,
    StatusDefinitionData,
    StatusKind,
)
from workorder_kernel.exceptions import ConflictingStatusFlagsError, ValidationError


@pytest.fixture
def ledger():
    return LifecycleLedger.default()


class TestDefaultLedger:
    def test_five_statuses_in_order(self, ledger):
        assert ledger.names == ("Pending", "In Progress", "Review", "Completed", "Cancelled")

    def test_single_end_status(self, ledger):
        assert ledger.end_status.name == "Completed"

    def test_canceled_statuses(self, ledger):
        assert [s.name for s in ledger.canceled_statuses] == ["Cancelled"]
        assert ledger.is_canceled("Cancelled")
        assert not ledger.is_canceled("Pending")

    def test_initial_status(self, ledger):
        assert ledger.initial_status() == "Pending"

    def test_sorted_by_order_regardless_of_input(self):
        shuffled = LifecycleLedger.of(reversed(DEFAULT_STATUSES))
        assert shuffled.names == LifecycleLedger.default().names


class TestNextStatus:
    def test_pending_to_in_progress(self, ledger):
        assert ledger.next_status("Pending").name == "In Progress"

    def test_review_to_completed(self, ledger):
        target = ledger.next_status("Review")
        assert target.name == "Completed"
        assert target.is_end_status

    def test_end_status_has_no_successor(self, ledger):
        assert ledger.next_status("Completed") is None

    def test_last_entry_has_no_successor(self, ledger):
        assert ledger.next_status("Cancelled") is None

    def test_unknown_status_starts_over(self, ledger):
        assert ledger.next_status("Waiting for parts").name == "Pending"
        assert ledger.next_status(None).name == "Pending"

    def test_empty_ledger(self):
        empty = LifecycleLedger.of([])
        assert empty.is_empty
        assert empty.next_status("Pending") is None
        assert empty.initial_status() == FALLBACK_INITIAL_STATUS

    def test_end_status_in_the_middle_stops_progression(self):
        ledger = LifecycleLedger.of([
            StatusDefinitionData("Open", 1),
            StatusDefinitionData("Done", 2, StatusKind.END),
            StatusDefinitionData("Follow-up", 3),
        ])
        assert ledger.next_status("Done") is None


class TestDecideProgression:
    def test_advance(self, ledger):
        decision = ledger.decide_progression("Pending")
        assert decision.outcome is ProgressionOutcome.ADVANCE
        assert decision.target.name == "In Progress"

    def test_invoice_review_before_end(self, ledger):
        decision = ledger.decide_progression("Review")
        assert decision.outcome is ProgressionOutcome.INVOICE_REVIEW
        assert decision.target.name == "Completed"

    def test_none_at_end(self, ledger):
        decision = ledger.decide_progression("Completed")
        assert decision.outcome is ProgressionOutcome.NONE
        assert decision.target is None

    def test_initial_status_skips_canceled_entries(self):
        ledger = LifecycleLedger.of([
            StatusDefinitionData("Void", 1, StatusKind.CANCELED),
            StatusDefinitionData("Open", 2),
        ])
        assert ledger.initial_status() == "Open"


class TestStatusKindFromFlags:
    def test_end(self):
        assert StatusKind.from_flags(True, False) is StatusKind.END

    def test_canceled(self):
        assert StatusKind.from_flags(False, True) is StatusKind.CANCELED

    def test_normal(self):
        assert StatusKind.from_flags(False, False) is StatusKind.NORMAL

    def test_both_rejected(self):
        with pytest.raises(ConflictingStatusFlagsError) as exc_info:
            StatusKind.from_flags(True, True, "Closed")
        assert isinstance(exc_info.value, ValidationError)
        assert exc_info.value.code == "CONFLICTING_STATUS_FLAGS"
        assert exc_info.value.name == "Closed"
