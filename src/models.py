from dataclasses import dataclass
from decimal import MAX_EMAX, MAX_PREC, MIN_EMIN, Context, Decimal, Inexact, InvalidOperation, Overflow, localcontext
from enum import Enum
from typing import List, Optional

from errors import MalformedInputError

ZERO = Decimal("0")

# Unbounded precision, so balance additions and subtractions are exact.
AMOUNT_CONTEXT = Context(
    prec=MAX_PREC,
    Emax=MAX_EMAX,
    Emin=MIN_EMIN,
    traps=[InvalidOperation, Inexact, Overflow],
)

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1


def parse_amount(text: str) -> Decimal:
    """Parse an exact decimal amount from its textual form."""
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise MalformedInputError(f"invalid amount {text!r}") from None
    if not amount.is_finite():
        raise MalformedInputError(f"invalid amount {text!r}")
    return amount


def normalize_amount(value: Decimal) -> Decimal:
    """Strip trailing zeros without changing the value. -0 becomes 0."""
    with localcontext(AMOUNT_CONTEXT):
        normalized = value.normalize()
    if not normalized:
        return ZERO
    return normalized


def format_amount(value: Decimal) -> str:
    """Format decimal in plain notation, removing trailing zeros."""
    return f"{normalize_amount(value):f}"


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def carries_amount(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class ExecutionOutcome(Enum):
    EXECUTED = "executed"
    FAILED = "failed"


class DisputePhase(Enum):
    UNDISPUTED = "undisputed"
    DISPUTED = "disputed"
    RESOLVED = "resolved"
    CHARGED_BACK = "charged_back"


class ProcessingResult(Enum):
    APPLIED = "applied"
    FAILED = "failed"
    IGNORED = "ignored"


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class LedgerEntry:
    """
    A submitted deposit or withdrawal as the account recorded it.
    The phase only ever moves for executed deposits.
    """

    transaction: Transaction
    outcome: ExecutionOutcome
    phase: DisputePhase = DisputePhase.UNDISPUTED

    @property
    def amount(self) -> Decimal:
        return self.transaction.amount

    @property
    def is_executed_deposit(self) -> bool:
        return (
            self.outcome == ExecutionOutcome.EXECUTED
            and self.transaction.transaction_type == TransactionType.DEPOSIT
        )

    @property
    def is_disputable(self) -> bool:
        return self.is_executed_deposit and self.phase in (DisputePhase.UNDISPUTED, DisputePhase.RESOLVED)

    @property
    def is_under_dispute(self) -> bool:
        return self.is_executed_deposit and self.phase == DisputePhase.DISPUTED


@dataclass(frozen=True)
class AccountSnapshot:
    client_id: int
    available: Decimal
    held: Decimal
    total: Decimal
    locked: bool

    def as_row(self) -> List[str]:
        return [
            str(self.client_id),
            format_amount(self.available),
            format_amount(self.held),
            format_amount(self.total),
            str(self.locked).lower(),
        ]


class ProcessingStats:
    """Counters for tracking how each transaction was handled."""

    def __init__(self):
        self.applied = 0
        self.failed = 0
        self.ignored = 0

    def record(self, result: ProcessingResult) -> None:
        if result == ProcessingResult.APPLIED:
            self.applied += 1
        elif result == ProcessingResult.FAILED:
            self.failed += 1
        else:
            self.ignored += 1

    @property
    def total(self) -> int:
        return self.applied + self.failed + self.ignored
