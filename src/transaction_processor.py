import logging
from typing import Callable, Optional

from dispute_window import settlement_for
from exceptions import (
    AccountLockedError,
    ClientMismatchError,
    DuplicateTransactionError,
    InvalidAmountError,
    TransactionRejectedError,
)
from models import (
    ClientAccount,
    DisputeStatus,
    LedgerEntry,
    ProcessingResult,
    ProcessingStats,
    Rejection,
    Transaction,
    TransactionType,
)
from state_manager import StateManager

logger = logging.getLogger(__name__)

RejectionHandler = Callable[[Rejection], None]


class TransactionProcessor:
    """
    Applies transactions to state, one at a time, in input order.
    Returns ProcessingResult to indicate whether the record was applied.
    Rejected records are reported through ``on_reject`` and leave state untouched.
    """

    def __init__(
        self,
        state: StateManager,
        stats: Optional[ProcessingStats] = None,
        on_reject: Optional[RejectionHandler] = None,
    ):
        self._state = state
        self._stats = stats if stats is not None else ProcessingStats()
        self._on_reject = on_reject

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction, then force-settle any of the client's
        disputes whose window has run out.

        Returns:
            SUCCESS: Applied to the account and ledger
            REJECTED: Not applied (unknown tx, wrong client, wrong status, locked account, ...)
        """
        sequence = self._state.advance(transaction.client_id)
        account = self._state.get_or_create_account(transaction.client_id)
        account.last_seq = sequence

        try:
            self._dispatch(account, transaction, sequence)
        except TransactionRejectedError as error:
            self._reject(transaction, error)
            result = ProcessingResult.REJECTED
        else:
            self._stats.record_success()
            result = ProcessingResult.SUCCESS

        self.settle_expired_disputes(transaction.client_id)
        return result

    def settle_expired_disputes(self, client_id: int) -> None:
        """Force-settle every open dispute of ``client_id`` that has outlived the window."""
        client_count = self._state.client_transaction_count(client_id)
        for dispute in self._state.disputes.expired(client_id, client_count):
            account = self._state.get_or_create_account(dispute.client_id)
            entry = self._state.ledger.lookup(dispute.transaction_id)
            outcome = settlement_for(account)
            self._settle(account, entry, outcome)

            if outcome is DisputeStatus.RESOLVED:
                self._stats.record_forced_resolve()
            else:
                self._stats.record_forced_chargeback()
            logger.info(
                f"Dispute for tx {dispute.transaction_id} expired after "
                f"{client_count - dispute.client_count_at_open} client transactions: {outcome.value}"
            )

    def _dispatch(self, account: ClientAccount, transaction: Transaction, sequence: int) -> None:
        if account.locked:
            raise AccountLockedError(account.client_id)

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                self._handle_deposit(account, transaction, sequence)
            case TransactionType.WITHDRAWAL:
                self._handle_withdrawal(account, transaction, sequence)
            case TransactionType.DISPUTE:
                self._handle_dispute(account, transaction, sequence)
            case TransactionType.RESOLVE:
                self._handle_resolve(account, transaction)
            case TransactionType.CHARGEBACK:
                self._handle_chargeback(account, transaction)

    def _handle_deposit(self, account: ClientAccount, transaction: Transaction, sequence: int) -> None:
        self._check_new_funds_movement(transaction)
        account.credit(transaction.amount)
        self._state.ledger.record(self._ledger_entry(transaction, sequence))

    def _handle_withdrawal(self, account: ClientAccount, transaction: Transaction, sequence: int) -> None:
        self._check_new_funds_movement(transaction)
        account.debit(transaction.amount)
        self._state.ledger.record(self._ledger_entry(transaction, sequence))

    def _handle_dispute(self, account: ClientAccount, transaction: Transaction, sequence: int) -> None:
        entry = self._lookup_own_entry(transaction)
        self._state.ledger.check_transition(entry.transaction_id, DisputeStatus.DISPUTED)
        account.hold(entry.amount)
        self._state.ledger.transition(entry.transaction_id, DisputeStatus.DISPUTED)
        self._state.disputes.open(
            entry.transaction_id,
            account.client_id,
            sequence,
            self._state.client_transaction_count(account.client_id),
        )

    def _handle_resolve(self, account: ClientAccount, transaction: Transaction) -> None:
        entry = self._lookup_own_entry(transaction)
        self._settle(account, entry, DisputeStatus.RESOLVED)

    def _handle_chargeback(self, account: ClientAccount, transaction: Transaction) -> None:
        entry = self._lookup_own_entry(transaction)
        self._settle(account, entry, DisputeStatus.CHARGED_BACK)

    def _settle(self, account: ClientAccount, entry: LedgerEntry, outcome: DisputeStatus) -> None:
        self._state.ledger.check_transition(entry.transaction_id, outcome)
        if outcome is DisputeStatus.RESOLVED:
            account.release(entry.amount)
        else:
            account.forfeit(entry.amount)
        self._state.ledger.transition(entry.transaction_id, outcome)
        self._state.disputes.close(entry.transaction_id)

    def _check_new_funds_movement(self, transaction: Transaction) -> None:
        if transaction.amount is None or not transaction.amount.is_positive:
            raise InvalidAmountError(transaction.transaction_id, transaction.amount)
        if self._state.ledger.contains(transaction.transaction_id):
            raise DuplicateTransactionError(transaction.transaction_id)

    def _lookup_own_entry(self, transaction: Transaction) -> LedgerEntry:
        entry = self._state.ledger.lookup(transaction.transaction_id)
        if entry.client_id != transaction.client_id:
            raise ClientMismatchError(entry.transaction_id, entry.client_id, transaction.client_id)
        return entry

    @staticmethod
    def _ledger_entry(transaction: Transaction, sequence: int) -> LedgerEntry:
        return LedgerEntry(
            transaction_id=transaction.transaction_id,
            client_id=transaction.client_id,
            transaction_type=transaction.transaction_type,
            amount=transaction.amount,
            opened_at_seq=sequence,
        )

    def _reject(self, transaction: Transaction, error: TransactionRejectedError) -> None:
        self._stats.record_rejection()
        rejection = Rejection.for_transaction(transaction, error)
        logger.warning(f"Rejected {transaction}: {error}")
        if self._on_reject is not None:
            self._on_reject(rejection)
