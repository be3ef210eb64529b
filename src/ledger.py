from typing import Dict

from exceptions import DuplicateTransactionError, InvalidTransitionError, TransactionNotFoundError
from models import DisputeStatus, LedgerEntry


class TransactionLedger:
    """
    Append-only record of accepted deposits and withdrawals, keyed by transaction id.
    The transaction id namespace is shared by all clients.
    """

    def __init__(self):
        self._entries: Dict[int, LedgerEntry] = {}

    def record(self, entry: LedgerEntry) -> None:
        if entry.transaction_id in self._entries:
            raise DuplicateTransactionError(entry.transaction_id)
        self._entries[entry.transaction_id] = entry

    def contains(self, transaction_id: int) -> bool:
        return transaction_id in self._entries

    def lookup(self, transaction_id: int) -> LedgerEntry:
        entry = self._entries.get(transaction_id)
        if entry is None:
            raise TransactionNotFoundError(transaction_id)
        return entry

    def check_transition(self, transaction_id: int, new_status: DisputeStatus) -> LedgerEntry:
        """Raise unless the entry may move to ``new_status``. Changes nothing."""
        entry = self.lookup(transaction_id)
        if not entry.status.can_transition_to(new_status):
            raise InvalidTransitionError(transaction_id, entry.status, new_status)
        return entry

    def transition(self, transaction_id: int, new_status: DisputeStatus) -> LedgerEntry:
        """Move an entry to ``new_status``, rejecting anything but NORMAL -> DISPUTED -> terminal."""
        entry = self.check_transition(transaction_id, new_status)
        entry.status = new_status
        return entry

    def __len__(self) -> int:
        return len(self._entries)
