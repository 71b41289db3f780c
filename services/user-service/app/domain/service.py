"""Registration service orchestrating validation, uniqueness, hashing, and persistence."""

from __future__ import annotations

import logging

from .account import Account, Clock, utc_now
from .contracts import AccountStore, PasswordHasher, RegistrationRequest, RegistrationResult
from .errors import ConflictError
from .values import Email, PersonName, Username

logger = logging.getLogger(__name__)


class RegistrationService:
    """User registration workflows backed by an ``AccountStore``."""

    def __init__(
        self,
        store: AccountStore,
        hasher: PasswordHasher,
        *,
        clock: Clock = utc_now,
    ) -> None:
        """Store the collaborators used to validate, hash, and persist accounts."""
        self._store = store
        self._hasher = hasher
        self._clock = clock

    def register(self, request: RegistrationRequest) -> RegistrationResult:
        """Register a new account and return its public projection.

        Each step gates the next: field validation (email, username, first
        name, last name), email uniqueness, username uniqueness, password
        hashing, then persistence. The first failure propagates unchanged, so
        no password is hashed for a request that would be rejected anyway.

        Raises
        ------
        ValidationError
            A raw field is malformed, or the hasher rejected the password.
        ConflictError
            The email or username is already held by another account, either
            found by the up-front checks or by the store on insert.
        DomainError
            The hasher returned an empty hash.
        StoreError
            The backing store failed.
        """
        email = Email(request.email)
        username = Username(request.username)
        first_name = PersonName(request.first_name)
        last_name = PersonName(request.last_name)

        if not self._store.is_email_unique(email):
            logger.info("registration rejected: email %s already registered", email)
            raise ConflictError("email already registered")
        if not self._store.is_username_unique(username):
            logger.info("registration rejected: username %s already taken", username)
            raise ConflictError("username already taken")

        password_hash = self._hasher.hash(request.password)
        account = Account.create(
            email,
            username,
            first_name,
            last_name,
            password_hash,
            clock=self._clock,
        )

        try:
            stored = self._store.add(account)
        except ConflictError as exc:
            # lost a race against a concurrent registration for the same key
            logger.warning("registration for %s lost insert race: %s", username, exc)
            raise

        logger.info("registered account %s (%s)", stored.account_id, stored.username)
        return RegistrationResult.from_account(stored)

    def get_account(self, account_id: str) -> Account | None:
        """Return the stored account with ``account_id`` or ``None``."""
        return self._store.get_by_id(account_id)
