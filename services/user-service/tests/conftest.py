from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.domain.errors import ValidationError
from app.domain.service import RegistrationService
from app.memory_repository import InMemoryAccountStore


class FakePasswordHasher:
    """Deterministic hasher: ``hash:<password>``. Records every call."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def hash(self, plaintext: str) -> str:
        self.calls.append(plaintext)
        if not plaintext:
            raise ValidationError("password empty")
        return f"hash:{plaintext}"

    def verify(self, plaintext: str, hashed: str) -> bool:
        return bool(plaintext) and hashed == f"hash:{plaintext}"


class SteppingClock:
    """Clock that advances by one second on every read."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + timedelta(seconds=1)
        return current


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def hasher() -> FakePasswordHasher:
    return FakePasswordHasher()


@pytest.fixture
def store() -> InMemoryAccountStore:
    return InMemoryAccountStore()


@pytest.fixture
def service(store, hasher, clock) -> RegistrationService:
    return RegistrationService(store, hasher, clock=clock)
