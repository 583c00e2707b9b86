import sys
import os
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from errors import MissingAmountError
from ledger import Ledger
from models import ProcessingResult, Transaction, TransactionType


class TestLedger:
    def setup_method(self):
        self.ledger = Ledger()

    def test_empty(self):
        assert len(self.ledger) == 0
        assert self.ledger.snapshot_all() == []
        assert self.ledger.get_account(1) is None

    def test_account_created_on_first_reference(self):
        dispute = Transaction(TransactionType.DISPUTE, client_id=5, transaction_id=1)
        result = self.ledger.route(dispute)

        assert result == ProcessingResult.IGNORED
        assert 5 in self.ledger
        account = self.ledger.get_account(5)
        assert account.available == Decimal("0")
        assert account.locked is False

    def test_get_or_create_returns_same_account(self):
        first = self.ledger.get_or_create_account(1)
        second = self.ledger.get_or_create_account(1)
        assert first is second
        assert len(self.ledger) == 1

    def test_route_to_client_account(self):
        self.ledger.route(Transaction(TransactionType.DEPOSIT, client_id=1, transaction_id=1, amount=Decimal("10")))
        self.ledger.route(Transaction(TransactionType.DEPOSIT, client_id=2, transaction_id=2, amount=Decimal("20")))

        assert self.ledger.get_account(1).total == Decimal("10")
        assert self.ledger.get_account(2).total == Decimal("20")

    def test_cross_client_reference_not_found(self):
        self.ledger.route(Transaction(TransactionType.DEPOSIT, client_id=1, transaction_id=1, amount=Decimal("100")))
        result = self.ledger.route(Transaction(TransactionType.DISPUTE, client_id=2, transaction_id=1))

        assert result == ProcessingResult.IGNORED
        assert self.ledger.get_account(1).held == Decimal("0")
        assert self.ledger.get_account(2).held == Decimal("0")

    def test_fatal_error_propagates(self):
        with pytest.raises(MissingAmountError):
            self.ledger.route(Transaction(TransactionType.WITHDRAWAL, client_id=1, transaction_id=1))

    def test_snapshots_ordered_by_client(self):
        for client_id in [30, 2, 17, 1]:
            self.ledger.route(
                Transaction(TransactionType.DEPOSIT, client_id=client_id, transaction_id=client_id, amount=Decimal("1.0"))
            )

        snapshots = self.ledger.snapshot_all()
        assert [s.client_id for s in snapshots] == [1, 2, 17, 30]
        assert all(str(s.total) == "1" for s in snapshots)
