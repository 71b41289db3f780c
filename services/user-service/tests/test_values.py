from __future__ import annotations

import dataclasses
import unicodedata

import pytest

from app.domain.errors import ValidationError
from app.domain.values import Email, PersonName, Username


def test_email_normalises_case_and_whitespace():
    assert Email("  USER@EXAMPLE.COM  ") == Email("user@example.com")
    assert Email("  USER@EXAMPLE.COM  ").value == "user@example.com"
    assert str(Email("John@Example.com")) == "john@example.com"


def test_email_normalisation_is_idempotent():
    once = Email("Mixed.Case@Example.com")
    assert Email(once.value) == once
    assert hash(Email(once.value)) == hash(once)


@pytest.mark.parametrize("raw", ["", "   ", "\t\n"])
def test_email_rejects_blank(raw):
    with pytest.raises(ValidationError) as excinfo:
        Email(raw)
    assert excinfo.value.reason == "email empty"


@pytest.mark.parametrize(
    "raw",
    ["invalid-email", "user@", "@example.com", "user@@example.com", "John <john@example.com>", "a b@example.com"],
)
def test_email_rejects_malformed(raw):
    with pytest.raises(ValidationError) as excinfo:
        Email(raw)
    assert excinfo.value.reason == "invalid email format"


def test_email_is_immutable():
    email = Email("user@example.com")
    with pytest.raises(dataclasses.FrozenInstanceError):
        email.value = "other@example.com"  # type: ignore[misc]


@pytest.mark.parametrize("raw", ["abc", "a" * 20, "John_Doe99", "___"])
def test_username_accepts_boundaries(raw):
    assert Username(raw).value == raw.lower()


@pytest.mark.parametrize("raw", ["ab", "a" * 21, "john-doe", "john.doe", "jöhn", "john doe"])
def test_username_rejects_bad_format(raw):
    with pytest.raises(ValidationError) as excinfo:
        Username(raw)
    assert excinfo.value.reason == "invalid username format"


def test_username_trims_and_lowercases():
    assert Username("  JohnDoe  ") == Username("johndoe")


def test_username_rejects_embedded_newline():
    with pytest.raises(ValidationError):
        Username("abc\ndef")


@pytest.mark.parametrize("raw", ["", "    "])
def test_username_rejects_blank(raw):
    with pytest.raises(ValidationError) as excinfo:
        Username(raw)
    assert excinfo.value.reason == "username empty"


def test_person_name_trims_but_keeps_case():
    name = PersonName("  McDonald ")
    assert name.value == "McDonald"
    assert str(name) == "McDonald"


def test_person_name_length_limit_applies_after_trim():
    assert PersonName("  " + "x" * 50 + "  ").value == "x" * 50
    with pytest.raises(ValidationError) as excinfo:
        PersonName("x" * 51)
    assert excinfo.value.reason == "name too long"


def test_person_name_rejects_blank():
    with pytest.raises(ValidationError) as excinfo:
        PersonName("   ")
    assert excinfo.value.reason == "name empty"


def test_email_composed_and_decomposed_forms_share_a_key():
    composed = unicodedata.normalize("NFC", "José@example.com")
    decomposed = unicodedata.normalize("NFD", "José@example.com")
    assert composed != decomposed
    assert Email(composed) == Email(decomposed)
    assert Email(decomposed).value == unicodedata.normalize("NFC", "josé@example.com")
