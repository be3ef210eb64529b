import csv
import logging
from typing import Dict, Iterable, Iterator, List, Optional

from amount import Amount
from dispute_window import DEFAULT_WINDOW_SIZE
from exceptions import AmountOverflowError, ParseError
from models import AccountSnapshot, ClientAccount, ProcessingStats, Rejection, Transaction, TransactionType
from state_manager import StateManager
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 2 ** 16 - 1
MAX_TRANSACTION_ID = 2 ** 32 - 1


class PaymentsEngine:
    """
    Runs an ordered stream of transactions through the ledger state machine.
    Single pass, single thread: input order is the processing order.
    """

    def __init__(self, window_size: int = DEFAULT_WINDOW_SIZE):
        self._state = StateManager(window_size)
        self._stats = ProcessingStats()
        self._rejections: List[Rejection] = []
        self._processor = TransactionProcessor(self._state, self._stats, on_reject=self._rejections.append)
        self._halted = False

    @property
    def rejections(self) -> List[Rejection]:
        return list(self._rejections)

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    @property
    def halted(self) -> bool:
        """True if an amount overflow stopped the run early."""
        return self._halted

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        with open(filepath, "r", newline="") as f:
            return self.process_csv(f)

    def process_csv(self, lines: Iterable[str]) -> Dict[int, ClientAccount]:
        return self.process(self._read_transactions(lines))

    def process(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        """
        Apply transactions in order. Rejected records are reported and skipped.
        An amount overflow stops processing; accounts built so far are still returned.
        """
        logger.info("Starting processing")
        try:
            for transaction in transactions:
                self._processor.process_transaction(transaction)
        except AmountOverflowError as e:
            self._halted = True
            logger.error(f"Stopping after {self._state.sequence} transactions: {e}")

        logger.info(self._stats.summary())
        return self._state.get_all_accounts()

    def snapshots(self) -> List[AccountSnapshot]:
        """Final account states in ascending client id order."""
        accounts = self._state.get_all_accounts()
        return [accounts[client_id].snapshot() for client_id in sorted(accounts)]

    def _read_transactions(self, lines: Iterable[str]) -> Iterator[Transaction]:
        """Parse CSV rows into transactions, reporting malformed rows instead of yielding them."""
        reader = csv.DictReader(lines)
        for row in reader:
            if not any((value or "").strip() for key, value in row.items() if key is not None):
                continue
            try:
                yield parse_csv_row(row, reader.line_num)
            except ParseError as e:
                self._record_parse_failure(e, row)

    def _record_parse_failure(self, error: ParseError, row: Dict[str, str]) -> None:
        self._stats.record_parse_failure()
        rejection = Rejection(code=error.code, reason=error.reason, line_number=error.line_number)
        self._rejections.append(rejection)
        logger.warning(f"Failed to parse row {row}: {error}")


def parse_csv_row(row: Dict[str, str], line_number: Optional[int] = None) -> Transaction:
    """Parse CSV row into Transaction. Raises ParseError for malformed rows."""
    try:
        normalized = {k.strip().lower(): (v or "").strip() for k, v in row.items() if k is not None}

        transaction_type = TransactionType(normalized["type"].lower())
        client_id = int(normalized["client"])
        transaction_id = int(normalized["tx"])

        amount = None
        amount_str = normalized.get("amount", "")
        if amount_str:
            amount = Amount.parse(amount_str)
    except KeyError as e:
        raise ParseError(f"missing field {e}", line_number) from e
    except (ValueError, AmountOverflowError) as e:
        raise ParseError(str(e), line_number) from e

    if not 0 <= client_id <= MAX_CLIENT_ID:
        raise ParseError(f"client id {client_id} out of range", line_number)
    if not 0 <= transaction_id <= MAX_TRANSACTION_ID:
        raise ParseError(f"transaction id {transaction_id} out of range", line_number)

    if transaction_type.requires_amount:
        if amount is None:
            raise ParseError(f"{transaction_type.value} requires an amount", line_number)
        if not amount.is_positive:
            raise ParseError(f"{transaction_type.value} amount must be positive, got {amount}", line_number)
    elif amount is not None:
        raise ParseError(f"{transaction_type.value} must not carry an amount", line_number)

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )
