from typing import Dict

from dispute_window import DEFAULT_WINDOW_SIZE, DisputeWindowTracker
from ledger import TransactionLedger
from models import ClientAccount


class StateManager:
    """
    All mutable state for one run: client accounts, the transaction ledger,
    open dispute windows, and the sequence counters that drive window expiry.
    Owned by a single engine and never shared, so no locking.
    """

    def __init__(self, window_size: int = DEFAULT_WINDOW_SIZE):
        self._accounts: Dict[int, ClientAccount] = {}
        self.ledger = TransactionLedger()
        self.disputes = DisputeWindowTracker(window_size)

        # Global position in the input, and how many records each client has sent.
        self._sequence = 0
        self._client_counts: Dict[int, int] = {}

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def advance(self, client_id: int) -> int:
        """Count one more record for ``client_id`` and return its global sequence number."""
        self._sequence += 1
        self._client_counts[client_id] = self._client_counts.get(client_id, 0) + 1
        return self._sequence

    @property
    def sequence(self) -> int:
        return self._sequence

    def client_transaction_count(self, client_id: int) -> int:
        return self._client_counts.get(client_id, 0)

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)
