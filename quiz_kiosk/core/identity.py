"""Participant identity normalization and registration validation."""

from __future__ import annotations

from dataclasses import dataclass
import re

from quiz_kiosk.constants.kiosk_constants import PHONE_DIGIT_COUNT

_NON_DIGITS = re.compile(r"\D")


class RegistrationError(ValueError):
    """Raised when registration details are incomplete or malformed."""


@dataclass(frozen=True, slots=True)
class RegistrationForm:
    """Details a participant enters before starting a quiz."""

    name: str
    phone: str
    class_name: str


def normalize_phone(phone: str) -> str:
    return _NON_DIGITS.sub("", phone)


def normalize_name(name: str) -> str:
    return name.strip().lower()


def build_identity_key(name: str, phone: str) -> str:
    """Key used to track allocation history independently of participant ids."""
    return f"{normalize_name(name)}:{normalize_phone(phone)}"


def validate_registration(form: RegistrationForm) -> RegistrationForm:
    """Return a trimmed copy of ``form`` or raise ``RegistrationError``."""
    name = form.name.strip()
    class_name = form.class_name.strip()
    phone = normalize_phone(form.phone)
    if not name:
        raise RegistrationError("Name must not be empty.")
    if not class_name:
        raise RegistrationError("Class / section must not be empty.")
    if len(phone) != PHONE_DIGIT_COUNT:
        raise RegistrationError(f"Phone number must have exactly {PHONE_DIGIT_COUNT} digits.")
    return RegistrationForm(name=name, phone=phone, class_name=class_name)
