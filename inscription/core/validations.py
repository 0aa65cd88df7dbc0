"""
Field rules of the registration form.

Each check returns the first error message for a value, or None when the
value is valid. Messages are shown to the member as-is.
"""

import re
from typing import Dict, Optional

from email_validator import EmailNotValidError, validate_email

# ASCII digits only; patterns are applied with fullmatch
BIRTHDATE_PATTERN = re.compile(r"([0-9]{2})/([0-9]{2})/([0-9]{4})")
DIGITS_PATTERN = re.compile(r"[0-9]+")
HAS_DIGIT_PATTERN = re.compile(r"[0-9]")

GENDER_CHOICES = ("homme", "femme")
PHONE_LENGTH = 10
# Widths of the members columns
NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 255


def check_first_name(value: str) -> Optional[str]:
    if len(value or "") < 2:
        return "Le prénom doit contenir au moins 2 caractères"
    if len(value) > NAME_MAX_LENGTH:
        return f"Le prénom ne doit pas dépasser {NAME_MAX_LENGTH} caractères"
    if HAS_DIGIT_PATTERN.search(value):
        return "Le prénom ne doit pas contenir de chiffres"
    return None


def check_last_name(value: str) -> Optional[str]:
    if len(value or "") < 2:
        return "Le nom doit contenir au moins 2 caractères"
    if len(value) > NAME_MAX_LENGTH:
        return f"Le nom ne doit pas dépasser {NAME_MAX_LENGTH} caractères"
    if HAS_DIGIT_PATTERN.search(value):
        return "Le nom ne doit pas contenir de chiffres"
    return None


def check_birthdate(value: str) -> Optional[str]:
    if not value:
        return "La date de naissance est requise"
    if not BIRTHDATE_PATTERN.fullmatch(value):
        return "Format de date invalide (JJ/MM/AAAA)"
    return None


def check_gender(value: str) -> Optional[str]:
    if value not in GENDER_CHOICES:
        return "Veuillez sélectionner un genre"
    return None


def _check_phone(value: str, length_message: str) -> Optional[str]:
    value = value or ""
    if len(value) != PHONE_LENGTH:
        return length_message
    if not DIGITS_PATTERN.fullmatch(value):
        return "Le numéro doit contenir uniquement des chiffres"
    return None


def check_phone(value: str) -> Optional[str]:
    return _check_phone(value, "Le numéro de téléphone doit contenir 10 chiffres")


def check_emergency_phone(value: str) -> Optional[str]:
    return _check_phone(value, "Le numéro d'urgence doit contenir 10 chiffres")


def check_email(value: str) -> Optional[str]:
    if len(value or "") > EMAIL_MAX_LENGTH:
        return "Adresse email invalide"
    try:
        validate_email(value or "", check_deliverability=False)
    except EmailNotValidError:
        return "Adresse email invalide"
    return None


def _is_identifier(value) -> bool:
    return value is not None and DIGITS_PATTERN.fullmatch(str(value)) is not None


def check_discipline(value) -> Optional[str]:
    if not _is_identifier(value):
        return "Veuillez sélectionner une discipline"
    return None


def check_plan(value) -> Optional[str]:
    if not _is_identifier(value):
        return "Veuillez sélectionner une formule d'abonnement"
    return None


FIELD_CHECKS = {
    "first_name": check_first_name,
    "last_name": check_last_name,
    "birthday": check_birthdate,
    "gender": check_gender,
    "phone": check_phone,
    "emergency_phone": check_emergency_phone,
    "email": check_email,
    "discipline_id": check_discipline,
    "plan_id": check_plan,
}


def validate_field(name: str, value) -> Optional[str]:
    """First error message for one form field, None when valid"""
    check = FIELD_CHECKS.get(name)
    if check is None:
        raise KeyError(f"Unknown form field: {name}")
    if check in (check_discipline, check_plan):
        return check(value)
    return check("" if value is None else str(value))


def validate_form(values: dict) -> Dict[str, str]:
    """Error messages of every failing field, keyed by field name"""
    errors = {}
    for name in FIELD_CHECKS:
        message = validate_field(name, values.get(name))
        if message:
            errors[name] = message
    return errors
