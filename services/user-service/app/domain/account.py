from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from .errors import DomainError
from .values import Email, PersonName, Username

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _require_hash(password_hash: str | None) -> str:
    if password_hash is None or not password_hash.strip():
        raise DomainError("password hash empty")
    return password_hash


@dataclass(slots=True, init=False, eq=False)
class Account:
    """Aggregate root for a registered user.

    Obtain instances through :meth:`create` (new registrations) or
    :meth:`rehydrate` (rows read back from a backing store); there is no
    field-by-field constructor.
    """

    account_id: str
    email: Email
    username: Username
    first_name: PersonName
    last_name: PersonName
    password_hash: str = field(repr=False)
    created_at: datetime
    updated_at: datetime
    is_active: bool
    is_deleted: bool
    deleted_at: datetime | None
    _clock: Clock = field(repr=False)

    @classmethod
    def create(
        cls,
        email: Email,
        username: Username,
        first_name: PersonName,
        last_name: PersonName,
        password_hash: str,
        *,
        clock: Clock = utc_now,
    ) -> "Account":
        """Register a brand-new account with a fresh identifier."""
        password_hash = _require_hash(password_hash)
        now = clock()
        return cls._build(
            account_id=str(uuid.uuid4()),
            email=email,
            username=username,
            first_name=first_name,
            last_name=last_name,
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
            is_active=True,
            is_deleted=False,
            deleted_at=None,
            clock=clock,
        )

    @classmethod
    def rehydrate(
        cls,
        *,
        account_id: str,
        email: Email,
        username: Username,
        first_name: PersonName,
        last_name: PersonName,
        password_hash: str,
        created_at: datetime,
        updated_at: datetime,
        is_active: bool,
        is_deleted: bool,
        deleted_at: datetime | None,
        clock: Clock = utc_now,
    ) -> "Account":
        """Rebuild an account previously persisted by a store."""
        return cls._build(
            account_id=account_id,
            email=email,
            username=username,
            first_name=first_name,
            last_name=last_name,
            password_hash=_require_hash(password_hash),
            created_at=created_at,
            updated_at=max(updated_at, created_at),
            is_active=is_active,
            is_deleted=is_deleted,
            deleted_at=deleted_at,
            clock=clock,
        )

    @classmethod
    def _build(cls, *, clock: Clock, **values) -> "Account":
        account = cls.__new__(cls)
        for name, value in values.items():
            setattr(account, name, value)
        account._clock = clock
        return account

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def update_profile(self, first_name: PersonName, last_name: PersonName) -> None:
        self.first_name = first_name
        self.last_name = last_name
        self._touch()

    def update_password(self, new_hash: str) -> None:
        self.password_hash = _require_hash(new_hash)
        self._touch()

    def activate(self) -> None:
        self.is_active = True
        self._touch()

    def deactivate(self) -> None:
        self.is_active = False
        self._touch()

    def soft_delete(self) -> None:
        now = self._touch()
        self.is_deleted = True
        self.deleted_at = now

    def restore(self) -> None:
        self.is_deleted = False
        self.deleted_at = None
        self._touch()

    def _touch(self) -> datetime:
        # updated_at never goes backwards, even if the wall clock does;
        # soft_delete reuses this clamped value for deleted_at
        self.updated_at = max(self._clock(), self.updated_at)
        return self.updated_at

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Account):
            return NotImplemented
        return self.account_id == other.account_id

    def __hash__(self) -> int:
        return hash(self.account_id)
