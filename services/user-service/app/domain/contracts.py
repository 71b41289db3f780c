"""Domain-level request/response contracts and the ports the core consumes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from .account import Account
from .values import Email, Username


@dataclass(slots=True)
class RegistrationRequest:
    """Raw, untrusted registration fields as received from a transport."""

    email: str
    username: str
    first_name: str
    last_name: str
    password: str = field(repr=False)


@dataclass(frozen=True, slots=True)
class RegistrationResult:
    """Projection of a freshly persisted account returned to callers."""

    account_id: str
    email: str
    username: str
    full_name: str
    created_at: datetime

    @classmethod
    def from_account(cls, account: Account) -> "RegistrationResult":
        return cls(
            account_id=account.account_id,
            email=account.email.value,
            username=account.username.value,
            full_name=account.full_name,
            created_at=account.created_at,
        )


class PasswordHasher(Protocol):
    def hash(self, plaintext: str) -> str:
        ...

    def verify(self, plaintext: str, hashed: str) -> bool:
        ...


class AccountStore(Protocol):
    """Authoritative account storage with email/username uniqueness."""

    def is_email_unique(self, email: Email) -> bool:
        ...

    def is_username_unique(self, username: Username) -> bool:
        ...

    def add(self, account: Account) -> Account:
        ...

    def get_by_id(self, account_id: str) -> Account | None:
        ...

    def get_by_email(self, email: Email) -> Account | None:
        ...

    def get_by_username(self, username: Username) -> Account | None:
        ...

    def update(self, account: Account) -> Account:
        ...

    def list_active(self) -> list[Account]:
        ...
