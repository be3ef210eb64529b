from dataclasses import dataclass
from typing import Dict, List, Optional

from models import ClientAccount, DisputeStatus

DEFAULT_WINDOW_SIZE = 1000


@dataclass(frozen=True)
class OpenDispute:
    transaction_id: int
    client_id: int
    opened_at_seq: int
    client_count_at_open: int


def settlement_for(account: ClientAccount) -> DisputeStatus:
    """
    Outcome for a dispute whose window expired without an explicit resolve or chargeback.
    A non-negative total resolves it, a negative total charges it back.
    """
    if account.total.is_negative:
        return DisputeStatus.CHARGED_BACK
    return DisputeStatus.RESOLVED


class DisputeWindowTracker:
    """
    Remembers when each open dispute was opened, measured in the disputing
    client's own transaction count. A dispute expires once that client has
    processed ``window_size`` further records.
    """

    def __init__(self, window_size: int = DEFAULT_WINDOW_SIZE):
        if window_size < 1:
            raise ValueError(f"window_size must be positive, got {window_size}")
        self._window_size = window_size
        self._by_transaction: Dict[int, OpenDispute] = {}
        self._by_client: Dict[int, Dict[int, OpenDispute]] = {}

    @property
    def window_size(self) -> int:
        return self._window_size

    def open(self, transaction_id: int, client_id: int, sequence: int, client_count: int) -> OpenDispute:
        if transaction_id in self._by_transaction:
            raise ValueError(f"Dispute window for tx {transaction_id} is already open")
        dispute = OpenDispute(
            transaction_id=transaction_id,
            client_id=client_id,
            opened_at_seq=sequence,
            client_count_at_open=client_count,
        )
        self._by_transaction[transaction_id] = dispute
        self._by_client.setdefault(client_id, {})[transaction_id] = dispute
        return dispute

    def close(self, transaction_id: int) -> Optional[OpenDispute]:
        dispute = self._by_transaction.pop(transaction_id, None)
        if dispute is not None:
            client_disputes = self._by_client[dispute.client_id]
            del client_disputes[transaction_id]
            if not client_disputes:
                del self._by_client[dispute.client_id]
        return dispute

    def is_open(self, transaction_id: int) -> bool:
        return transaction_id in self._by_transaction

    def open_for_client(self, client_id: int) -> List[OpenDispute]:
        """Open disputes for a client, oldest first."""
        return list(self._by_client.get(client_id, {}).values())

    def expired(self, client_id: int, client_count: int) -> List[OpenDispute]:
        return [
            dispute
            for dispute in self.open_for_client(client_id)
            if client_count - dispute.client_count_at_open >= self._window_size
        ]

    def __len__(self) -> int:
        return len(self._by_transaction)
