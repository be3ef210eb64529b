from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from amount import Amount
from exceptions import AccountLockedError, InsufficientFundsError, TransactionRejectedError


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def requires_amount(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class DisputeStatus(Enum):
    NORMAL = "normal"
    DISPUTED = "disputed"
    RESOLVED = "resolved"
    CHARGED_BACK = "charged_back"

    def can_transition_to(self, new_status: "DisputeStatus") -> bool:
        return new_status in _LEGAL_TRANSITIONS.get(self, ())


_LEGAL_TRANSITIONS = {
    DisputeStatus.NORMAL: (DisputeStatus.DISPUTED,),
    DisputeStatus.DISPUTED: (DisputeStatus.RESOLVED, DisputeStatus.CHARGED_BACK),
}


class ProcessingResult(Enum):
    SUCCESS = "success"
    REJECTED = "rejected"


@dataclass
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Amount] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class LedgerEntry:
    """An accepted deposit or withdrawal. Only ``status`` changes after creation."""

    transaction_id: int
    client_id: int
    transaction_type: TransactionType
    amount: Amount
    opened_at_seq: int
    status: DisputeStatus = DisputeStatus.NORMAL


@dataclass(frozen=True)
class AccountSnapshot:
    client_id: int
    available: Amount
    held: Amount
    total: Amount
    locked: bool

    def as_row(self) -> List[str]:
        return [
            str(self.client_id),
            str(self.available),
            str(self.held),
            str(self.total),
            str(self.locked).lower(),
        ]


@dataclass
class ClientAccount:
    client_id: int
    available: Amount = Amount.zero()
    held: Amount = Amount.zero()
    locked: bool = False
    last_seq: int = 0

    @property
    def total(self) -> Amount:
        return self.available + self.held

    def credit(self, amount: Amount) -> None:
        self.available += amount

    def debit(self, amount: Amount) -> None:
        if self.locked:
            raise AccountLockedError(self.client_id)
        if self.available < amount:
            raise InsufficientFundsError(self.client_id, self.available, amount)
        self.available -= amount

    def hold(self, amount: Amount) -> None:
        # available may go negative, e.g. when the deposit was already withdrawn
        available = self.available - amount
        self.held += amount
        self.available = available

    def release(self, amount: Amount) -> None:
        held = self.held - amount
        self.available += amount
        self.held = held

    def forfeit(self, amount: Amount) -> None:
        self.held -= amount
        self.locked = True

    def snapshot(self) -> AccountSnapshot:
        return AccountSnapshot(
            client_id=self.client_id,
            available=self.available,
            held=self.held,
            total=self.total,
            locked=self.locked,
        )


@dataclass(frozen=True)
class Rejection:
    """Side-channel notice for a record that was not applied."""

    code: str
    reason: str
    transaction_type: Optional[str] = None
    client_id: Optional[int] = None
    transaction_id: Optional[int] = None
    line_number: Optional[int] = None

    @classmethod
    def for_transaction(cls, transaction: Transaction, error: TransactionRejectedError) -> "Rejection":
        return cls(
            code=error.code,
            reason=str(error),
            transaction_type=transaction.transaction_type.value,
            client_id=transaction.client_id,
            transaction_id=transaction.transaction_id,
        )

    def __str__(self) -> str:
        parts = [self.code]
        if self.transaction_type is not None:
            parts.append(self.transaction_type)
        if self.client_id is not None:
            parts.append(f"client={self.client_id}")
        if self.transaction_id is not None:
            parts.append(f"tx={self.transaction_id}")
        if self.line_number is not None:
            parts.append(f"line={self.line_number}")
        return f"{' '.join(parts)}: {self.reason}"


class ProcessingStats:
    """Counters for the end-of-run summary."""

    def __init__(self):
        self.processed = 0
        self.rejected = 0
        self.parse_failures = 0
        self.forced_resolves = 0
        self.forced_chargebacks = 0

    def record_success(self):
        self.processed += 1

    def record_rejection(self):
        self.rejected += 1

    def record_parse_failure(self):
        self.parse_failures += 1

    def record_forced_resolve(self):
        self.forced_resolves += 1

    def record_forced_chargeback(self):
        self.forced_chargebacks += 1

    def summary(self) -> str:
        return (
            f"Processed: {self.processed}, "
            f"Rejected: {self.rejected}, "
            f"Parse failures: {self.parse_failures}, "
            f"Forced resolves: {self.forced_resolves}, "
            f"Forced chargebacks: {self.forced_chargebacks}"
        )
