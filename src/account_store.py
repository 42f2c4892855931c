import threading
from typing import Dict

from models import Account


class AccountStore:
    """
    Thread-safe collection of finished accounts keyed by client id.
    Each account is written once by the worker that replayed it.
    """

    def __init__(self):
        self._accounts: Dict[int, Account] = {}
        self._lock = threading.Lock()

    def store_account(self, account: Account) -> None:
        with self._lock:
            if account.client_id in self._accounts:
                raise ValueError(f"Client {account.client_id} was replayed twice")
            self._accounts[account.client_id] = account

    def get_all_accounts(self) -> Dict[int, Account]:
        """Return all accounts in ascending client id (for final output)."""
        with self._lock:
            return {client_id: self._accounts[client_id] for client_id in sorted(self._accounts)}
