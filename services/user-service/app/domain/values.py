"""Self-validating value objects used as account identity keys."""

from __future__ import annotations

import re
from dataclasses import dataclass

from email_validator import EmailNotValidError, validate_email

from .errors import ValidationError

_USERNAME_PATTERN = re.compile(r"[A-Za-z0-9_]{3,20}")
_MAX_NAME_LENGTH = 50


def _require(raw: str | None, reason: str) -> str:
    """Return ``raw`` trimmed, raising ``ValidationError`` when nothing is left."""
    if raw is None or not raw.strip():
        raise ValidationError(reason)
    return raw.strip()


@dataclass(frozen=True, slots=True)
class Email:
    """Lowercased, syntactically valid mailbox address."""

    value: str

    def __post_init__(self) -> None:
        trimmed = _require(self.value, "email empty")
        try:
            # syntax only: registration must not depend on DNS
            result = validate_email(trimmed, check_deliverability=False)
        except EmailNotValidError as exc:
            raise ValidationError("invalid email format") from exc
        # normalized form is NFC, so composed and decomposed spellings share a key
        object.__setattr__(self, "value", result.normalized.lower())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Username:
    """Lowercased handle of 3-20 letters, digits or underscores."""

    value: str

    def __post_init__(self) -> None:
        trimmed = _require(self.value, "username empty")
        if not _USERNAME_PATTERN.fullmatch(trimmed):
            raise ValidationError("invalid username format")
        object.__setattr__(self, "value", trimmed.lower())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class PersonName:
    """Trimmed first or last name, at most 50 characters."""

    value: str

    def __post_init__(self) -> None:
        trimmed = _require(self.value, "name empty")
        if len(trimmed) > _MAX_NAME_LENGTH:
            raise ValidationError("name too long")
        object.__setattr__(self, "value", trimmed)

    def __str__(self) -> str:
        return self.value
