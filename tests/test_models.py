import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from amount import Amount
from exceptions import AccountLockedError, InsufficientFundsError, TransactionNotFoundError
from models import (
    AccountSnapshot,
    ClientAccount,
    DisputeStatus,
    ProcessingResult,
    ProcessingStats,
    Rejection,
    Transaction,
    TransactionType,
)


def amt(text: str) -> Amount:
    return Amount.parse(text)


class TestTransaction:
    def test_create_deposit(self):
        transaction = Transaction(
            transaction_type=TransactionType.DEPOSIT,
            client_id=1,
            transaction_id=1,
            amount=amt("100.0"),
        )
        assert transaction.transaction_type == TransactionType.DEPOSIT
        assert transaction.client_id == 1
        assert transaction.transaction_id == 1
        assert transaction.amount == amt("100")

    def test_create_dispute_no_amount(self):
        transaction = Transaction(
            transaction_type=TransactionType.DISPUTE,
            client_id=1,
            transaction_id=1,
        )
        assert transaction.amount is None

    def test_requires_amount(self):
        assert TransactionType.DEPOSIT.requires_amount
        assert TransactionType.WITHDRAWAL.requires_amount
        assert not TransactionType.DISPUTE.requires_amount
        assert not TransactionType.RESOLVE.requires_amount
        assert not TransactionType.CHARGEBACK.requires_amount


class TestDisputeStatus:
    def test_legal_transitions(self):
        assert DisputeStatus.NORMAL.can_transition_to(DisputeStatus.DISPUTED)
        assert DisputeStatus.DISPUTED.can_transition_to(DisputeStatus.RESOLVED)
        assert DisputeStatus.DISPUTED.can_transition_to(DisputeStatus.CHARGED_BACK)

    @pytest.mark.parametrize(
        "current, requested",
        [
            (DisputeStatus.NORMAL, DisputeStatus.RESOLVED),
            (DisputeStatus.NORMAL, DisputeStatus.CHARGED_BACK),
            (DisputeStatus.DISPUTED, DisputeStatus.DISPUTED),
            (DisputeStatus.RESOLVED, DisputeStatus.DISPUTED),
            (DisputeStatus.CHARGED_BACK, DisputeStatus.DISPUTED),
            (DisputeStatus.RESOLVED, DisputeStatus.CHARGED_BACK),
        ],
    )
    def test_illegal_transitions(self, current, requested):
        assert not current.can_transition_to(requested)

    @pytest.mark.parametrize("terminal", [DisputeStatus.RESOLVED, DisputeStatus.CHARGED_BACK])
    def test_terminal_states_allow_no_moves(self, terminal):
        assert not any(terminal.can_transition_to(status) for status in DisputeStatus)


class TestClientAccount:
    def test_default_values(self):
        account = ClientAccount(client_id=1)
        assert account.available == Amount.zero()
        assert account.held == Amount.zero()
        assert account.locked is False

    def test_total_property(self):
        account = ClientAccount(client_id=1, available=amt("100"), held=amt("50"))
        assert account.total == amt("150")

    def test_debit_insufficient_funds(self):
        account = ClientAccount(client_id=1, available=amt("10"))
        with pytest.raises(InsufficientFundsError):
            account.debit(amt("10.0001"))
        assert account.available == amt("10")

    def test_debit_locked_account(self):
        account = ClientAccount(client_id=1, available=amt("10"), locked=True)
        with pytest.raises(AccountLockedError):
            account.debit(amt("1"))

    def test_hold_can_drive_available_negative(self):
        account = ClientAccount(client_id=1, available=amt("30"))
        account.hold(amt("100"))
        assert account.available == amt("-70")
        assert account.held == amt("100")
        assert account.total == amt("30")

    def test_release_returns_held_funds(self):
        account = ClientAccount(client_id=1, available=amt("-70"), held=amt("100"))
        account.release(amt("100"))
        assert account.available == amt("30")
        assert account.held == Amount.zero()

    def test_forfeit_removes_held_and_locks(self):
        account = ClientAccount(client_id=1, available=amt("0"), held=amt("100"))
        account.forfeit(amt("100"))
        assert account.held == Amount.zero()
        assert account.total == Amount.zero()
        assert account.locked is True

    def test_snapshot_row(self):
        account = ClientAccount(client_id=7, available=amt("1.5"), held=amt("0.25"))
        snapshot = account.snapshot()
        assert snapshot == AccountSnapshot(7, amt("1.5"), amt("0.25"), amt("1.75"), False)
        assert snapshot.as_row() == ["7", "1.5000", "0.2500", "1.7500", "false"]


class TestRejection:
    def test_for_transaction(self):
        transaction = Transaction(TransactionType.DISPUTE, client_id=3, transaction_id=42)
        rejection = Rejection.for_transaction(transaction, TransactionNotFoundError(42))

        assert rejection.code == "NOT_FOUND"
        assert rejection.transaction_type == "dispute"
        assert rejection.client_id == 3
        assert rejection.transaction_id == 42
        assert str(rejection) == "NOT_FOUND dispute client=3 tx=42: Transaction 42 not found"

    def test_parse_failure_str(self):
        rejection = Rejection(code="PARSE_ERROR", reason="bad amount", line_number=4)
        assert str(rejection) == "PARSE_ERROR line=4: bad amount"


class TestProcessingStats:
    def test_summary(self):
        stats = ProcessingStats()
        stats.record_success()
        stats.record_success()
        stats.record_rejection()
        stats.record_forced_chargeback()
        assert stats.summary() == (
            "Processed: 2, Rejected: 1, Parse failures: 0, Forced resolves: 0, Forced chargebacks: 1"
        )


class TestProcessingResult:
    def test_enum_values(self):
        assert ProcessingResult.SUCCESS.value == "success"
        assert ProcessingResult.REJECTED.value == "rejected"
