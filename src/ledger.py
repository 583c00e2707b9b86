from typing import Dict, List, Optional

from account import Account
from models import AccountSnapshot, ProcessingResult, Transaction


class Ledger:
    """
    Registry of client accounts for a single replay.
    Accounts are created the first time a transaction names their client.
    """

    def __init__(self):
        self._accounts: Dict[int, Account] = {}

    def __len__(self) -> int:
        return len(self._accounts)

    def __contains__(self, client_id: int) -> bool:
        return client_id in self._accounts

    def get_or_create_account(self, client_id: int) -> Account:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = Account(client_id)
        return self._accounts[client_id]

    def get_account(self, client_id: int) -> Optional[Account]:
        return self._accounts.get(client_id)

    def route(self, transaction: Transaction) -> ProcessingResult:
        """Apply transaction to its client's account. Fatal errors propagate."""
        account = self.get_or_create_account(transaction.client_id)
        return account.apply(transaction)

    def snapshot_all(self) -> List[AccountSnapshot]:
        """Return one snapshot per account, ordered by client id."""
        return [self._accounts[client_id].snapshot() for client_id in sorted(self._accounts)]
