import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from amount import Amount
from dispute_window import DEFAULT_WINDOW_SIZE, DisputeWindowTracker, OpenDispute, settlement_for
from models import ClientAccount, DisputeStatus


class TestDisputeWindowTracker:
    def test_default_window_size(self):
        assert DisputeWindowTracker().window_size == DEFAULT_WINDOW_SIZE == 1000

    @pytest.mark.parametrize("size", [0, -1])
    def test_window_size_must_be_positive(self, size):
        with pytest.raises(ValueError):
            DisputeWindowTracker(size)

    def test_open_and_close(self):
        tracker = DisputeWindowTracker(3)
        dispute = tracker.open(transaction_id=10, client_id=1, sequence=5, client_count=2)

        assert dispute == OpenDispute(transaction_id=10, client_id=1, opened_at_seq=5, client_count_at_open=2)
        assert tracker.is_open(10)
        assert len(tracker) == 1

        assert tracker.close(10) == dispute
        assert not tracker.is_open(10)
        assert tracker.open_for_client(1) == []
        assert len(tracker) == 0

    def test_close_unknown_is_none(self):
        assert DisputeWindowTracker(3).close(10) is None

    def test_open_twice_is_an_error(self):
        tracker = DisputeWindowTracker(3)
        tracker.open(10, 1, 1, 1)
        with pytest.raises(ValueError):
            tracker.open(10, 1, 2, 2)

    def test_open_for_client_oldest_first(self):
        tracker = DisputeWindowTracker(3)
        tracker.open(20, 1, 1, 1)
        tracker.open(10, 1, 2, 2)
        tracker.open(30, 2, 3, 1)

        assert [d.transaction_id for d in tracker.open_for_client(1)] == [20, 10]
        assert [d.transaction_id for d in tracker.open_for_client(2)] == [30]

    def test_expires_after_exactly_window_size_client_transactions(self):
        tracker = DisputeWindowTracker(3)
        tracker.open(10, 1, sequence=7, client_count=4)

        assert tracker.expired(1, client_count=4) == []
        assert tracker.expired(1, client_count=6) == []
        assert [d.transaction_id for d in tracker.expired(1, client_count=7)] == [10]

    def test_expiry_is_per_client(self):
        tracker = DisputeWindowTracker(2)
        tracker.open(10, 1, 1, 1)
        tracker.open(20, 2, 2, 5)

        assert [d.transaction_id for d in tracker.expired(1, client_count=3)] == [10]
        assert tracker.expired(2, client_count=6) == []


class TestSettlementFor:
    def test_non_negative_total_resolves(self):
        account = ClientAccount(client_id=1, available=Amount.parse("-100"), held=Amount.parse("100"))
        assert settlement_for(account) == DisputeStatus.RESOLVED

    def test_negative_total_charges_back(self):
        account = ClientAccount(client_id=1, available=Amount.parse("-150"), held=Amount.parse("100"))
        assert settlement_for(account) == DisputeStatus.CHARGED_BACK
