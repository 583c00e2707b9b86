import logging
from decimal import Decimal, localcontext
from typing import Dict, Optional

from errors import ClientMismatchError, MissingAmountError
from models import (
    AMOUNT_CONTEXT,
    ZERO,
    AccountSnapshot,
    DisputePhase,
    ExecutionOutcome,
    LedgerEntry,
    ProcessingResult,
    Transaction,
    TransactionType,
    normalize_amount,
)

logger = logging.getLogger(__name__)


class Account:
    """
    One client's balances and the deposits/withdrawals submitted to it.

    All mutation goes through apply(). Disputes, resolves and chargebacks
    that reference an ineligible transaction are ignored rather than
    raised, since they are ordinary noise in a replayed log. A locked
    account accepts every later transaction and changes nothing.

    A deposit or withdrawal reusing a transaction id already recorded on
    this account is skipped, so a repeated row is applied once rather than
    re-applied over the earlier entry.
    """

    def __init__(self, client_id: int):
        self._client_id = client_id
        self._available = ZERO
        self._held = ZERO
        self._total = ZERO
        self._locked = False
        self._entries: Dict[int, LedgerEntry] = {}

    @property
    def client_id(self) -> int:
        return self._client_id

    @property
    def available(self) -> Decimal:
        return self._available

    @property
    def held(self) -> Decimal:
        return self._held

    @property
    def total(self) -> Decimal:
        return self._total

    @property
    def locked(self) -> bool:
        return self._locked

    @property
    def entry_count(self) -> int:
        return len(self._entries)

    def get_entry(self, transaction_id: int) -> Optional[LedgerEntry]:
        return self._entries.get(transaction_id)

    def snapshot(self) -> AccountSnapshot:
        return AccountSnapshot(
            client_id=self._client_id,
            available=normalize_amount(self._available),
            held=normalize_amount(self._held),
            total=normalize_amount(self._total),
            locked=self._locked,
        )

    def apply(self, transaction: Transaction) -> ProcessingResult:
        """
        Apply a single transaction to this account.

        Returns:
            APPLIED: Balances or dispute phase changed
            FAILED: Withdrawal recorded without effect (insufficient funds)
            IGNORED: Nothing changed (locked account, duplicate, ineligible reference)

        Raises:
            ClientMismatchError: transaction belongs to another client
            MissingAmountError: deposit or withdrawal without an amount
        """
        if transaction.client_id != self._client_id:
            raise ClientMismatchError(
                f"{transaction!r} routed to account for client {self._client_id}"
            )

        if self._locked:
            logger.debug(f"Client {self._client_id} is locked, ignoring {transaction!r}")
            return ProcessingResult.IGNORED

        with localcontext(AMOUNT_CONTEXT):
            match transaction.transaction_type:
                case TransactionType.DEPOSIT:
                    return self._handle_deposit(transaction)
                case TransactionType.WITHDRAWAL:
                    return self._handle_withdrawal(transaction)
                case TransactionType.DISPUTE:
                    return self._handle_dispute(transaction)
                case TransactionType.RESOLVE:
                    return self._handle_resolve(transaction)
                case TransactionType.CHARGEBACK:
                    return self._handle_chargeback(transaction)
                case _:
                    raise ValueError(f"Unknown transaction type {transaction.transaction_type!r}")

    def _is_duplicate(self, transaction: Transaction) -> bool:
        if transaction.transaction_id in self._entries:
            logger.debug(f"{transaction!r}: transaction id already recorded, skipping")
            return True
        return False

    def _handle_deposit(self, transaction: Transaction) -> ProcessingResult:
        if transaction.amount is None:
            raise MissingAmountError(f"Deposit requires amount: {transaction!r}")
        if self._is_duplicate(transaction):
            return ProcessingResult.IGNORED

        self._available += transaction.amount
        self._total += transaction.amount
        self._entries[transaction.transaction_id] = LedgerEntry(transaction, ExecutionOutcome.EXECUTED)
        return ProcessingResult.APPLIED

    def _handle_withdrawal(self, transaction: Transaction) -> ProcessingResult:
        if transaction.amount is None:
            raise MissingAmountError(f"Withdrawal requires amount: {transaction!r}")
        if self._is_duplicate(transaction):
            return ProcessingResult.IGNORED

        if self._available >= transaction.amount:
            self._available -= transaction.amount
            self._total -= transaction.amount
            self._entries[transaction.transaction_id] = LedgerEntry(transaction, ExecutionOutcome.EXECUTED)
            return ProcessingResult.APPLIED

        logger.info(
            f"Withdrawal tx {transaction.transaction_id}: insufficient funds "
            f"(available {self._available}, requested {transaction.amount})"
        )
        self._entries[transaction.transaction_id] = LedgerEntry(transaction, ExecutionOutcome.FAILED)
        return ProcessingResult.FAILED

    def _handle_dispute(self, transaction: Transaction) -> ProcessingResult:
        entry = self._entries.get(transaction.transaction_id)
        if entry is None or not entry.is_disputable:
            logger.debug(f"{transaction!r}: no disputable deposit, ignoring")
            return ProcessingResult.IGNORED

        entry.phase = DisputePhase.DISPUTED
        self._available -= entry.amount
        self._held += entry.amount
        return ProcessingResult.APPLIED

    def _handle_resolve(self, transaction: Transaction) -> ProcessingResult:
        entry = self._entries.get(transaction.transaction_id)
        if entry is None or not entry.is_under_dispute:
            logger.debug(f"{transaction!r}: no deposit under dispute, ignoring")
            return ProcessingResult.IGNORED

        entry.phase = DisputePhase.RESOLVED
        self._available += entry.amount
        self._held -= entry.amount
        return ProcessingResult.APPLIED

    def _handle_chargeback(self, transaction: Transaction) -> ProcessingResult:
        entry = self._entries.get(transaction.transaction_id)
        if entry is None or not entry.is_under_dispute:
            logger.debug(f"{transaction!r}: no deposit under dispute, ignoring")
            return ProcessingResult.IGNORED

        entry.phase = DisputePhase.CHARGED_BACK
        self._held -= entry.amount
        self._total -= entry.amount
        self._locked = True
        logger.info(f"Client {self._client_id} locked after chargeback of tx {transaction.transaction_id}")
        return ProcessingResult.APPLIED
