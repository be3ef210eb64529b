"""
Typed exceptions for the payments engine.

Every exception carries a class-level ``code`` and keeps its context as
attributes so rejections can be reported without parsing messages.

    PaymentsEngineError
    +-- TransactionRejectedError       (record rejected, processing continues)
    |   +-- ParseError
    |   +-- InvalidAmountError
    |   +-- DuplicateTransactionError
    |   +-- TransactionNotFoundError
    |   +-- ClientMismatchError
    |   +-- InvalidTransitionError
    |   +-- InsufficientFundsError
    |   +-- AccountLockedError
    +-- AmountOverflowError            (fatal, stops the run)
"""

from typing import Optional


class PaymentsEngineError(Exception):
    """Base exception for all payments engine errors."""

    code: str = "PAYMENTS_ENGINE_ERROR"


class TransactionRejectedError(PaymentsEngineError):
    """A single record could not be applied. Never aborts the run."""

    code: str = "TRANSACTION_REJECTED"


class ParseError(TransactionRejectedError):
    """Input row is malformed and never reaches the state machine."""

    code: str = "PARSE_ERROR"

    def __init__(self, reason: str, line_number: Optional[int] = None):
        self.reason = reason
        self.line_number = line_number
        location = f" (line {line_number})" if line_number is not None else ""
        super().__init__(f"Malformed record{location}: {reason}")


class InvalidAmountError(TransactionRejectedError):
    code: str = "INVALID_AMOUNT"

    def __init__(self, transaction_id: int, amount):
        self.transaction_id = transaction_id
        self.amount = amount
        super().__init__(f"Transaction {transaction_id}: invalid amount {amount}")


class DuplicateTransactionError(TransactionRejectedError):
    """A deposit/withdrawal reused an id already in the ledger."""

    code: str = "DUPLICATE_TRANSACTION"

    def __init__(self, transaction_id: int):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} already recorded")


class TransactionNotFoundError(TransactionRejectedError):
    code: str = "NOT_FOUND"

    def __init__(self, transaction_id: int):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} not found")


class ClientMismatchError(TransactionRejectedError):
    """Referenced transaction belongs to a different client."""

    code: str = "CLIENT_MISMATCH"

    def __init__(self, transaction_id: int, expected_client_id: int, actual_client_id: int):
        self.transaction_id = transaction_id
        self.expected_client_id = expected_client_id
        self.actual_client_id = actual_client_id
        super().__init__(
            f"Transaction {transaction_id} belongs to client {expected_client_id}, "
            f"not client {actual_client_id}"
        )


class InvalidTransitionError(TransactionRejectedError):
    """Ledger entry status does not permit the requested move."""

    code: str = "INVALID_TRANSITION"

    def __init__(self, transaction_id: int, current_status, requested_status):
        self.transaction_id = transaction_id
        self.current_status = current_status
        self.requested_status = requested_status
        super().__init__(
            f"Transaction {transaction_id}: cannot move from "
            f"{current_status.value} to {requested_status.value}"
        )


class InsufficientFundsError(TransactionRejectedError):
    code: str = "INSUFFICIENT_FUNDS"

    def __init__(self, client_id: int, available, requested):
        self.client_id = client_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Client {client_id}: insufficient funds (available {available}, requested {requested})"
        )


class AccountLockedError(TransactionRejectedError):
    code: str = "ACCOUNT_LOCKED"

    def __init__(self, client_id: int):
        self.client_id = client_id
        super().__init__(f"Client {client_id}: account is locked")


class AmountOverflowError(PaymentsEngineError, ArithmeticError):
    """Fixed-point value left the representable range."""

    code: str = "AMOUNT_OVERFLOW"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Amount out of range: {detail}")
