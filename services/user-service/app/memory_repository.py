"""In-memory account store guarded by a single lock."""

from __future__ import annotations

from threading import Lock

from .domain.account import Account
from .domain.errors import ConflictError, DomainError, NotFoundError
from .domain.values import Email, Username


class InMemoryAccountStore:
    """Thread-safe account store keeping email and username indexes in step.

    One lock guards the id map and both uniqueness indexes, so readers never
    see an account under one key but not the other. Colliding inserts are
    rejected with ``ConflictError`` and leave every map untouched.
    """

    def __init__(self) -> None:
        """Initialise the id map, both uniqueness indexes, and their lock."""
        self._by_id: dict[str, Account] = {}
        self._by_email: dict[str, Account] = {}
        self._by_username: dict[str, Account] = {}
        self._lock = Lock()

    def is_email_unique(self, email: Email) -> bool:
        with self._lock:
            return email.value not in self._by_email

    def is_username_unique(self, username: Username) -> bool:
        with self._lock:
            return username.value not in self._by_username

    def add(self, account: Account) -> Account:
        """Insert ``account`` atomically across all indexes and return it."""
        email_key = account.email.value
        username_key = account.username.value
        with self._lock:
            if email_key in self._by_email:
                raise ConflictError("email already registered")
            if username_key in self._by_username:
                raise ConflictError("username already taken")
            if account.account_id in self._by_id:
                raise ConflictError("account already stored")
            self._by_id[account.account_id] = account
            self._by_email[email_key] = account
            self._by_username[username_key] = account
        return account

    def get_by_id(self, account_id: str) -> Account | None:
        with self._lock:
            return self._by_id.get(account_id)

    def get_by_email(self, email: Email) -> Account | None:
        with self._lock:
            return self._by_email.get(email.value)

    def get_by_username(self, username: Username) -> Account | None:
        with self._lock:
            return self._by_username.get(username.value)

    def update(self, account: Account) -> Account:
        """Replace the stored copy of an existing account."""
        with self._lock:
            current = self._by_id.get(account.account_id)
            if current is None:
                raise NotFoundError("account not found")
            if current.email != account.email or current.username != account.username:
                raise DomainError("identity keys cannot change")
            self._by_id[account.account_id] = account
            self._by_email[account.email.value] = account
            self._by_username[account.username.value] = account
        return account

    def list_active(self) -> list[Account]:
        """Return accounts that are active and not soft-deleted, oldest first."""
        with self._lock:
            accounts = list(self._by_id.values())
        accounts = [a for a in accounts if a.is_active and not a.is_deleted]
        accounts.sort(key=lambda a: a.created_at)
        return accounts

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_id)
